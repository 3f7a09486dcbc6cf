from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from distributor.errors import BadConfigException
from distributor.models.types import EthereumAddress, checksum


class CommitPolicy(str, Enum):
    """
    When the claim processor writes to the bit-vector
    :policy PER_RUN: once per contiguous run of same-token claims. A batch repeated
    inside a single run is only checked once, so it pays out twice.
    :policy PER_REQUEST: after every claim. Repeats inside a run raise `AlreadyClaimed`.
    """

    PER_RUN = "per_run"
    PER_REQUEST = "per_request"


class Config(BaseModel):
    """
    :param `operator`: receives balances swept from exhausted distributions
    :param `custody`: address holding funded tokens until they are claimed
    :param `bits_per_word`: width of each claim bit-vector word
    :param `commit_policy`: see `CommitPolicy`
    :param `db_path`: where to persist state, in memory only if unset
    """

    operator: EthereumAddress
    custody: EthereumAddress
    bits_per_word: int = 256
    commit_policy: CommitPolicy = CommitPolicy.PER_RUN
    db_path: Optional[str] = None

    @field_validator("operator", "custody")
    @classmethod
    def checksum_address(cls, addr: str):
        try:
            return checksum(addr)
        except ValueError:
            raise BadConfigException(f"Invalid address {addr}")

    @field_validator("bits_per_word")
    @classmethod
    def validate_bits_per_word(cls, bits: int):
        if bits <= 0:
            raise BadConfigException(f"Bits per word must be positive, got {bits}")
        return bits
