"""
Merkle leaves and proofs compatible with the usual solidity airdrop distributors:
leaves are `keccak256(abi.encodePacked(address, uint256))` and pairs are sorted
before hashing, so a proof is just a list of siblings with no left/right flags.
"""

from itertools import zip_longest
from typing import Optional, Sequence, Union

from eth_abi.packed import encode_packed
from eth_utils import decode_hex, encode_hex, keccak

from distributor.models import EthereumAddress, Hash32, checksum

HashLike = Union[bytes, Hash32]

ZERO_HASH = bytes(32)


def to_bytes32(value: HashLike) -> bytes:
    raw = value if isinstance(value, bytes) else decode_hex(value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(raw)}")
    return raw


def leaf_hash(claimer: EthereumAddress, amount: int) -> bytes:
    return keccak(encode_packed(["address", "uint256"], [checksum(claimer), amount]))


def combined_hash(a: bytes, b: bytes) -> bytes:
    return keccak(b"".join(sorted([a, b])))


def verify(proof: Sequence[HashLike], root: HashLike, leaf: HashLike) -> bool:
    """
    Rebuild the root from `leaf` and its siblings and compare.
    Malformed input counts as a failed proof rather than an error.
    """
    try:
        computed = to_bytes32(leaf)
        expected = to_bytes32(root)
        siblings = [to_bytes32(p) for p in proof]
    except (ValueError, TypeError):
        return False

    if expected == ZERO_HASH:
        return False

    for sibling in siblings:
        computed = combined_hash(computed, sibling)
    return computed == expected


class MerkleTree:
    """
    Builds the tree off-system so proofs can be served to claimers.
    Duplicate leaves collapse into one and an unpaired node is promoted as is.
    """

    def __init__(self, leaves: Sequence[bytes]):
        if not leaves:
            raise ValueError("No leaves to build tree")
        self.elements = sorted(set(leaves))
        self.layers = MerkleTree.get_layers(self.elements)

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    @property
    def hex_root(self) -> Hash32:
        return encode_hex(self.root)

    def get_proof(self, leaf: bytes) -> list[Hash32]:
        idx = self.elements.index(leaf)
        proof = []
        for layer in self.layers:
            pair_idx = idx + 1 if idx % 2 == 0 else idx - 1
            if pair_idx < len(layer):
                proof.append(encode_hex(layer[pair_idx]))
            idx //= 2
        return proof

    @staticmethod
    def get_layers(elements: list[bytes]) -> list[list[bytes]]:
        layers = [elements]
        while len(layers[-1]) > 1:
            layers.append(MerkleTree.get_next_layer(layers[-1]))
        return layers

    @staticmethod
    def get_next_layer(elements: list[bytes]) -> list[bytes]:
        return [
            MerkleTree.pair_hash(a, b)
            for a, b in zip_longest(elements[::2], elements[1::2])
        ]

    @staticmethod
    def pair_hash(a: bytes, b: Optional[bytes]) -> bytes:
        if b is None:
            return a
        return combined_hash(a, b)
