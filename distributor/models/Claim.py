from pydantic import BaseModel, Field, field_validator

from distributor.models.types import (
    BigNumber,
    EthereumAddress,
    Hash32,
    checksum,
    to_hash32,
)


class ClaimRequest(BaseModel):
    """
    A single claim submitted as part of a batched call
    :param `batchNumber`: batch the claim was committed in
    :param `amount`: amount committed for the caller in that batch
    :param `tokenIndex`: index into the token list passed alongside the claims
    :param `proof`: sibling hashes from the leaf up to the root, in any left/right order
    """

    batchNumber: int = Field(ge=0)
    amount: int = Field(ge=0, lt=2**256)
    tokenIndex: int = Field(ge=0)
    proof: list[Hash32] = []

    @field_validator("proof")
    @classmethod
    def normalise_proof(cls, proof: list[str]):
        return [to_hash32(p) for p in proof]


class Commit(BaseModel):
    """A successful write to a claimer's bit-vector, with the amount debited alongside it"""

    token: EthereumAddress
    claimer: EthereumAddress
    wordIndex: int
    bits: int
    amount: int


class Payout(BaseModel):
    """Tokens sent to a claimer for one request"""

    token: EthereumAddress
    claimer: EthereumAddress
    batchNumber: int
    amount: int


class ClaimReceipt(BaseModel):
    """Everything a batched claim did, in the order it happened"""

    commits: list[Commit] = []
    payouts: list[Payout] = []

    def total(self, token: EthereumAddress) -> int:
        return sum(p.amount for p in self.payouts if p.token == token)


class MerkleClaim(BaseModel):
    """
    Proof material served to a single claimer for one batch.
    Produced off-system by `distributor.builder` from the full list of recipients.
    """

    amount: BigNumber
    proof: list[Hash32]


class MerkleDistribution(BaseModel):
    """
    The full tree data for one batch. `root` and `total` are what the operator
    funds with, `claims` is what gets served to claimers.
    """

    token: EthereumAddress
    root: Hash32
    total: BigNumber
    claims: dict[EthereumAddress, MerkleClaim]

    @field_validator("token")
    @classmethod
    def checksum_token(cls, addr: EthereumAddress):
        return checksum(addr)

    @field_validator("root")
    @classmethod
    def normalise_root(cls, root: str):
        return to_hash32(root)

    def request(
        self, claimer: EthereumAddress, batch_number: int, token_index: int = 0
    ) -> ClaimRequest:
        """Build the claim request a recipient would submit for this batch"""
        claim = self.claims[checksum(claimer)]
        return ClaimRequest(
            batchNumber=batch_number,
            amount=int(claim.amount),
            tokenIndex=token_index,
            proof=claim.proof,
        )
