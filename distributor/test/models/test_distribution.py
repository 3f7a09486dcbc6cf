import pytest
from pydantic import ValidationError

from distributor.models import Distribution, NewDistribution, ZERO_ROOT, checksum, to_hash32
from distributor.store import Store
from distributor.test.conftest import ALICE, ROOT, TOKEN_A

LOWER = "0x000000000000000000000000000000000000abcd"


def test_empty_distribution():
    distribution = Distribution()

    assert distribution.remaining == 0
    assert distribution.next_batch_number == 0
    assert not distribution.distributing
    assert distribution.root(0) == ZERO_ROOT
    assert distribution.word(ALICE, 0) == 0


def test_remaining_cannot_be_negative():
    with pytest.raises(ValidationError):
        Distribution(remaining=-1)


def test_claims_are_keyed_by_checksum_address():
    distribution = Distribution(claims={LOWER: {0: 1}})
    assert distribution.word(checksum(LOWER), 0) == 1


def test_deserialises_string_keys():
    # JSON storage turns int keys into strings
    distribution = Distribution.model_validate(
        {"remaining": 5, "roots": {"3": ROOT}, "claims": {ALICE: {"1": 8}}}
    )
    assert distribution.root(3) == ROOT
    assert distribution.word(ALICE, 1) == 8


@pytest.mark.parametrize(
    "value, expected",
    [
        (ROOT, ROOT),
        (ROOT.replace("0x", ""), ROOT),
        ("0x" + "AB" * 32, ROOT),
    ],
)
def test_to_hash32(value, expected):
    assert to_hash32(value) == expected


@pytest.mark.parametrize("value", ["0x", "0x" + "ab" * 31, "0x" + "zz" * 32, 5])
def test_to_hash32_rejects(value):
    with pytest.raises(ValueError):
        to_hash32(value)


def test_event_name():
    event = NewDistribution(token=TOKEN_A, batchNumber=0, root=ROOT, amount=1)
    assert event.name == "NewDistribution"


def test_store_snapshot_is_independent():
    store = Store()
    store.distribution(TOKEN_A).remaining = 10
    snapshot = store.snapshot()

    store.distribution(TOKEN_A).remaining = 0
    store.distribution(TOKEN_A).claims[ALICE] = {0: 1}
    assert snapshot.distribution(TOKEN_A).remaining == 10

    store.restore(snapshot)
    assert store.distribution(TOKEN_A).remaining == 10
    assert store.distribution(TOKEN_A).word(ALICE, 0) == 0

    # restoring twice from the same snapshot still works
    store.distribution(TOKEN_A).remaining = 3
    store.restore(snapshot)
    assert store.distribution(TOKEN_A).remaining == 10
