from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from distributor.models.types import EthereumAddress, Hash32, ZERO_ROOT, checksum


class Distribution(BaseModel):
    """
    Per-token bookkeeping for the distributor
    :param `remaining`: funded tokens not yet claimed from the current batch
    :param `next_batch_number`: batch number the next funding will be assigned
    :param `roots`: batch number -> merkle root, written once per batch
    :param `claims`: claimer -> word index -> bit-vector of credited batch numbers
    """

    remaining: int = Field(default=0, ge=0)
    next_batch_number: int = Field(default=0, ge=0)
    roots: dict[int, Hash32] = {}
    claims: dict[EthereumAddress, dict[int, int]] = {}

    @field_validator("claims")
    @classmethod
    def checksum_claimers(cls, claims: dict[str, dict[int, int]]):
        return {checksum(claimer): words for claimer, words in claims.items()}

    @property
    def distributing(self) -> bool:
        return self.remaining > 0

    def root(self, batch_number: int) -> Hash32:
        """Unset batches resolve to the zero root, which no proof can reach"""
        return self.roots.get(batch_number, ZERO_ROOT)

    def word(self, claimer: EthereumAddress, word_index: int) -> int:
        return self.claims.get(claimer, {}).get(word_index, 0)
