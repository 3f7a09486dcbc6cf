from typing import Callable

import pytest

from distributor.builder import build_distribution
from distributor.models import CommitPolicy, Config, MerkleDistribution
from distributor.service import MerkleDistributor
from distributor.store import Store
from distributor.transfers import Ledger

# all digit addresses are already checksummed
OPERATOR = "0x0000000000000000000000000000000000000001"
CUSTODY = "0x0000000000000000000000000000000000000002"
FUNDER = "0x0000000000000000000000000000000000000003"

ALICE = "0x1000000000000000000000000000000000000001"
BOB = "0x1000000000000000000000000000000000000002"
CAROL = "0x1000000000000000000000000000000000000003"

TOKEN_A = "0x2000000000000000000000000000000000000001"
TOKEN_B = "0x2000000000000000000000000000000000000002"

ROOT = "0x" + "ab" * 32

FUNDS = 10**24


@pytest.fixture
def config() -> Config:
    return Config(operator=OPERATOR, custody=CUSTODY)


@pytest.fixture
def per_request_config(config: Config) -> Config:
    return config.model_copy(update={"commit_policy": CommitPolicy.PER_REQUEST})


@pytest.fixture
def ledger() -> Ledger:
    ledger = Ledger(CUSTODY)
    for token in (TOKEN_A, TOKEN_B):
        ledger.mint(token, FUNDER, FUNDS)
    return ledger


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def service(config: Config, ledger: Ledger, store: Store) -> MerkleDistributor:
    return MerkleDistributor(config, ledger, store=store)


@pytest.fixture
def make_tree() -> Callable[..., MerkleDistribution]:
    def _make(token: str, **rewards: int) -> MerkleDistribution:
        by_address = {globals()[name.upper()]: amount for name, amount in rewards.items()}
        return build_distribution(token, by_address)

    return _make


def open_batch(
    store: Store, ledger: Ledger, token: str, tree: MerkleDistribution, remaining: int
) -> int:
    """Write a root straight into the store, bypassing funding, and back it in custody"""
    distribution = store.distribution(token)
    batch_number = distribution.next_batch_number
    distribution.roots[batch_number] = tree.root
    distribution.next_batch_number += 1
    distribution.remaining += remaining
    ledger.mint(token, CUSTODY, remaining)
    return batch_number
