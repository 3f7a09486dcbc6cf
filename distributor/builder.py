from pathlib import Path
from typing import Mapping, Union

from pydantic import TypeAdapter

from distributor.merkle import MerkleTree, leaf_hash
from distributor.models import (
    EthereumAddress,
    MerkleClaim,
    MerkleDistribution,
    checksum,
)

Rewards = dict[EthereumAddress, int]


def load_rewards(path: str) -> Rewards:
    """Parse a JSON file of `{address: amount}`, amounts as ints or decimal strings"""
    rewards = TypeAdapter(dict[str, int]).validate_json(Path(path).read_text())
    return aggregate_rewards(rewards)


def aggregate_rewards(rewards: Mapping[str, Union[int, str]]) -> Rewards:
    """
    Checksum the addresses and merge any that only differed by case.
    Zero amounts are dropped, there is nothing to claim.
    """
    out: Rewards = {}
    for address, amount in rewards.items():
        amount = int(amount)
        if amount < 0:
            raise ValueError(f"Negative reward {amount} for {address}")
        if amount == 0:
            continue
        key = checksum(address)
        out[key] = out.get(key, 0) + amount
    return out


def build_distribution(token: EthereumAddress, rewards: Rewards) -> MerkleDistribution:
    """
    Build the tree for one batch: the root and total the operator funds with,
    and the amount and proof each claimer submits.
    """
    rewards = aggregate_rewards(rewards)
    leaves = {address: leaf_hash(address, amount) for address, amount in rewards.items()}
    tree = MerkleTree(list(leaves.values()))

    return MerkleDistribution(
        token=token,
        root=tree.hex_root,
        total=str(sum(rewards.values())),
        claims={
            address: MerkleClaim(amount=str(amount), proof=tree.get_proof(leaves[address]))
            for address, amount in rewards.items()
        },
    )
