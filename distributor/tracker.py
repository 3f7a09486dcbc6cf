import logging

from distributor.errors import InsufficientRemaining
from distributor.models import EthereumAddress, checksum
from distributor.store import Store

logger = logging.getLogger(__name__)


def word_and_bit(batch_number: int, bits_per_word: int) -> tuple[int, int]:
    """Location of a batch in a claimer's bit-vector: (word index, bit position)"""
    return divmod(batch_number, bits_per_word)


def is_claimed(
    store: Store,
    token: EthereumAddress,
    claimer: EthereumAddress,
    batch_number: int,
    bits_per_word: int,
) -> bool:
    word_index, bit = word_and_bit(batch_number, bits_per_word)
    word = store.distribution(token).word(checksum(claimer), word_index)
    return (word >> bit) & 1 == 1


def try_commit(
    store: Store,
    token: EthereumAddress,
    claimer: EthereumAddress,
    amount: int,
    word_index: int,
    new_bits: int,
) -> bool:
    """
    Set `new_bits` in the claimer's word and debit `amount` from the token's distribution.
    Returns False, changing nothing, if any of the bits is already set.

    `amount` is taken on trust: matching it to the bits is the caller's job.
    """
    distribution = store.distribution(token)
    current = distribution.word(claimer, word_index)

    if current & new_bits != 0:
        logger.debug(
            "Bits %s already set in word %d for %s on %s",
            bin(current & new_bits),
            word_index,
            claimer,
            token,
        )
        return False

    if amount > distribution.remaining:
        raise InsufficientRemaining(
            f"Cannot debit {amount} from {token}, only {distribution.remaining} remaining"
        )

    distribution.claims.setdefault(claimer, {})[word_index] = current | new_bits
    distribution.remaining -= amount
    return True
