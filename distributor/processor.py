"""
Batched claiming.

A caller submits many claims at once, across batches and tokens. Every claim is
proven and paid individually, but the bit-vector writes are grouped: claims are
folded into an open group while they keep hitting the same token (and the same
bit-vector word), and the group is committed to the tracker when the run ends.

With `CommitPolicy.PER_RUN` a batch repeated inside one run is folded into a bit
that is already part of the group's mask, so the tracker only tests it once and
the claim pays out twice. `CommitPolicy.PER_REQUEST` commits every claim on its
own and rejects the repeat instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from distributor.errors import AlreadyClaimed, InvalidProof, InvalidTokenIndex
from distributor.merkle import leaf_hash, verify
from distributor.models import (
    ClaimReceipt,
    ClaimRequest,
    Commit,
    CommitPolicy,
    EthereumAddress,
    Payout,
    checksum,
)
from distributor.store import Store
from distributor.tracker import try_commit, word_and_bit
from distributor.transfers import TransferService

logger = logging.getLogger(__name__)


@dataclass
class OpenGroup:
    token: EthereumAddress
    word_index: int
    bits: int
    amount: int

    def accepts(self, token: EthereumAddress, word_index: int) -> bool:
        return self.token == token and self.word_index == word_index


class ClaimGroup:
    """
    States: no open group (`open is None`) or `OpenGroup(token, word, bits, amount)`.

    - fold into no open group: open one
    - fold matching the open group: OR the bit in, add the amount
    - fold not matching: commit the open group, then open a new one
    - close: commit the open group, if any
    """

    def __init__(self, store: Store, claimer: EthereumAddress, policy: CommitPolicy):
        self.store = store
        self.claimer = claimer
        self.policy = policy
        self.open: Optional[OpenGroup] = None
        self.commits: list[Commit] = []

    def fold(self, token: EthereumAddress, word_index: int, bit: int, amount: int):
        mask = 1 << bit

        if self.policy == CommitPolicy.PER_REQUEST:
            self._commit(OpenGroup(token, word_index, mask, amount))
            return

        if self.open is not None and self.open.accepts(token, word_index):
            self.open.bits |= mask
            self.open.amount += amount
            return

        self.close()
        self.open = OpenGroup(token, word_index, mask, amount)

    def close(self) -> None:
        if self.open is None:
            return
        group, self.open = self.open, None
        self._commit(group)

    def _commit(self, group: OpenGroup) -> None:
        committed = try_commit(
            self.store,
            group.token,
            self.claimer,
            group.amount,
            group.word_index,
            group.bits,
        )
        if not committed:
            raise AlreadyClaimed(
                f"{self.claimer} already claimed from word {group.word_index} "
                f"(bits {bin(group.bits)}) of {group.token}"
            )
        self.commits.append(
            Commit(
                token=group.token,
                claimer=self.claimer,
                wordIndex=group.word_index,
                bits=group.bits,
                amount=group.amount,
            )
        )


def resolve_token(tokens: list[EthereumAddress], index: int) -> EthereumAddress:
    if index >= len(tokens):
        raise InvalidTokenIndex(
            f"Token index {index} out of range for {len(tokens)} tokens"
        )
    return tokens[index]


def claim_multiple(
    store: Store,
    transfers: TransferService,
    caller: EthereumAddress,
    claims: list[ClaimRequest],
    tokens: list[EthereumAddress],
    bits_per_word: int = 256,
    policy: CommitPolicy = CommitPolicy.PER_RUN,
) -> ClaimReceipt:
    """
    Prove, account for and pay out every claim in order.
    Any failure leaves it to the enclosing transaction to undo earlier payouts.
    """
    caller = checksum(caller)
    tokens = [checksum(t) for t in tokens]
    group = ClaimGroup(store, caller, policy)
    receipt = ClaimReceipt()

    for claim in claims:
        token = resolve_token(tokens, claim.tokenIndex)
        word_index, bit = word_and_bit(claim.batchNumber, bits_per_word)
        # a group boundary commits the previous group before this claim is proven
        group.fold(token, word_index, bit, claim.amount)

        root = store.distribution(token).root(claim.batchNumber)
        if not verify(claim.proof, root, leaf_hash(caller, claim.amount)):
            raise InvalidProof(
                f"Invalid proof for {caller} claiming {claim.amount} "
                f"from batch {claim.batchNumber} of {token}"
            )

        transfers.transfer_out(token, caller, claim.amount)
        receipt.payouts.append(
            Payout(
                token=token,
                claimer=caller,
                batchNumber=claim.batchNumber,
                amount=claim.amount,
            )
        )

    group.close()
    receipt.commits = group.commits

    logger.info(
        "%s claimed %d times across %d commits",
        caller,
        len(receipt.payouts),
        len(receipt.commits),
    )
    return receipt
