import logging

from distributor.errors import (
    InvalidRoot,
    NotEnoughTokensToDistribute,
    StillDistributing,
)
from distributor.models import (
    EthereumAddress,
    Hash32,
    NewDistribution,
    Swept,
    ZERO_ROOT,
    checksum,
    to_hash32,
)
from distributor.store import Store
from distributor.transfers import TransferService

logger = logging.getLogger(__name__)


def create_distribution(
    store: Store,
    transfers: TransferService,
    caller: EthereumAddress,
    token: EthereumAddress,
    root: Hash32,
    amount: int,
) -> NewDistribution:
    """
    Open the next batch for `token` under `root` and pull `amount` from the caller.
    The previous batch must be fully claimed first, so only one root is ever live per token.
    """
    token = checksum(token)

    if amount <= 0:
        raise NotEnoughTokensToDistribute(f"Cannot distribute {amount} of {token}")

    try:
        root = to_hash32(root)
    except ValueError as e:
        raise InvalidRoot(str(e)) from e
    if root == ZERO_ROOT:
        raise InvalidRoot(f"Zero root passed for {token}")

    distribution = store.distribution(token)
    if distribution.distributing:
        raise StillDistributing(
            f"{token} still has {distribution.remaining} left to claim"
        )

    batch_number = distribution.next_batch_number
    distribution.remaining = amount
    distribution.roots[batch_number] = root
    distribution.next_batch_number += 1

    transfers.transfer_in(token, caller, amount)

    logger.info(
        "Funded batch %d of %s with %d under root %s", batch_number, token, amount, root
    )
    return NewDistribution(
        token=token, batchNumber=batch_number, root=root, amount=amount
    )


def sweep(
    store: Store,
    transfers: TransferService,
    tokens: list[EthereumAddress],
    operator: EthereumAddress,
) -> list[Swept]:
    """
    Send whatever custody still holds of each exhausted token to the operator.
    Tokens with a live distribution are skipped.
    """
    swept = []
    for token in map(checksum, tokens):
        if store.distribution(token).distributing:
            logger.info("Skipping sweep of %s, still distributing", token)
            continue

        balance = transfers.balance_of(token, transfers.custody)
        if balance == 0:
            continue

        transfers.transfer_out(token, operator, balance)
        swept.append(Swept(token=token, recipient=checksum(operator), amount=balance))
    return swept


def get_remaining(store: Store, token: EthereumAddress) -> int:
    return store.distribution(token).remaining


def get_next_batch_number(store: Store, token: EthereumAddress) -> int:
    return store.distribution(token).next_batch_number


def get_root(store: Store, token: EthereumAddress, batch_number: int) -> Hash32:
    return store.distribution(token).root(batch_number)
