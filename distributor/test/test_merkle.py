import pytest
from eth_utils import decode_hex, encode_hex, keccak

from distributor.merkle import MerkleTree, combined_hash, leaf_hash, verify
from distributor.models import ZERO_ROOT
from distributor.test.conftest import ALICE, BOB, CAROL


def flip_byte(value: str, idx: int = 0) -> str:
    raw = bytearray(decode_hex(value))
    raw[idx] ^= 0xFF
    return encode_hex(bytes(raw))


@pytest.fixture
def tree():
    leaves = [leaf_hash(ALICE, 100), leaf_hash(BOB, 250), leaf_hash(CAROL, 7)]
    return MerkleTree(leaves)


def test_leaf_is_packed_address_and_uint256():
    expected = keccak(decode_hex(ALICE) + (100).to_bytes(32, "big"))
    assert leaf_hash(ALICE, 100) == expected
    # lowercase and checksummed addresses hash the same
    assert leaf_hash(ALICE.lower(), 100) == expected


def test_combined_hash_is_commutative():
    a, b = leaf_hash(ALICE, 1), leaf_hash(BOB, 2)
    assert combined_hash(a, b) == combined_hash(b, a)


@pytest.mark.parametrize("claimer, amount", [(ALICE, 100), (BOB, 250), (CAROL, 7)])
def test_every_leaf_verifies(tree, claimer, amount):
    leaf = leaf_hash(claimer, amount)
    assert verify(tree.get_proof(leaf), tree.hex_root, leaf)
    assert verify(tree.get_proof(leaf), tree.root, leaf)


def test_wrong_amount_fails(tree):
    proof = tree.get_proof(leaf_hash(ALICE, 100))
    assert not verify(proof, tree.root, leaf_hash(ALICE, 101))


def test_wrong_claimer_fails(tree):
    proof = tree.get_proof(leaf_hash(ALICE, 100))
    assert not verify(proof, tree.root, leaf_hash(BOB, 100))


def test_mutating_any_proof_byte_fails(tree):
    leaf = leaf_hash(BOB, 250)
    proof = tree.get_proof(leaf)

    for i, sibling in enumerate(proof):
        for idx in (0, 15, 31):
            mutated = proof.copy()
            mutated[i] = flip_byte(sibling, idx)
            assert not verify(mutated, tree.root, leaf)


def test_single_leaf_tree_has_empty_proof():
    leaf = leaf_hash(ALICE, 5)
    tree = MerkleTree([leaf])

    assert tree.root == leaf
    assert tree.get_proof(leaf) == []
    assert verify([], tree.root, leaf)


def test_empty_proof_fails_on_larger_tree(tree):
    assert not verify([], tree.root, leaf_hash(ALICE, 100))


def test_zero_root_never_verifies():
    assert not verify([], ZERO_ROOT, bytes(32))
    assert not verify([encode_hex(bytes(32))], ZERO_ROOT, leaf_hash(ALICE, 1))


@pytest.mark.parametrize(
    "proof, root",
    [
        (["0x1234"], "0x" + "ab" * 32),
        (["not hex"], "0x" + "ab" * 32),
        ([], "0xabc"),
        ([None], "0x" + "ab" * 32),
    ],
)
def test_malformed_input_returns_false(proof, root):
    assert verify(proof, root, leaf_hash(ALICE, 1)) is False


def test_duplicate_leaves_collapse():
    leaf = leaf_hash(ALICE, 5)
    tree = MerkleTree([leaf, leaf, leaf_hash(BOB, 5)])
    assert len(tree.elements) == 2
    assert verify(tree.get_proof(leaf), tree.root, leaf)


def test_odd_tree_sizes():
    for n in range(1, 10):
        leaves = [leaf_hash(ALICE, amount) for amount in range(1, n + 1)]
        tree = MerkleTree(leaves)
        assert all(verify(tree.get_proof(l), tree.root, l) for l in leaves)


def test_empty_tree_raises():
    with pytest.raises(ValueError, match="No leaves"):
        MerkleTree([])
