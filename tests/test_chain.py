# tests/test_chain.py
import pytest
from dataclasses import replace

from starledger.chain.ledger import Ledger
from starledger.core.types import Block, GenesisMarker, StarClaim, GENESIS_PREVIOUS_HASH
from starledger.core.errors import ChainCorruption, NotFound
from starledger.crypto.hashing import block_hash

from conftest import T0


def star(owner, n):
    return Block.from_payload(StarClaim(owner=owner, star={"story": f"star #{n}"}))


@pytest.fixture
def filled(ledger, clock):
    """Genesis + 4 claims, alternating owners, one second apart."""
    for n in range(4):
        clock.advance(1)
        ledger.append_block(star("alice" if n % 2 == 0 else "bob", n))
    return ledger


def test_genesis_invariant(ledger):
    assert ledger.current_height() == 0
    assert ledger.length == 1
    genesis = ledger.get_chain()[0]
    assert genesis.height == 0
    assert genesis.previous_hash == GENESIS_PREVIOUS_HASH
    assert genesis.get_data() == GenesisMarker()
    assert genesis.timestamp == T0
    assert genesis.validate()


def test_initialize_is_idempotent(ledger):
    genesis = ledger.get_chain()[0]
    ledger.initialize()
    ledger.initialize()
    assert ledger.length == 1
    assert ledger.get_chain()[0] is genesis


def test_default_clock_and_verifier():
    ledger = Ledger()
    assert ledger.current_height() == 0
    assert ledger.get_chain()[0].timestamp > 1_700_000_000


def test_append_seals_block(ledger, clock):
    clock.advance(42)
    sealed = ledger.append_block(star("alice", 0))
    assert sealed.height == 1
    assert sealed.timestamp == T0 + 42
    assert sealed.previous_hash == ledger.get_chain()[0].hash
    assert sealed.hash == block_hash(sealed)
    assert ledger.current_height() == 1


def test_append_rejects_sealed_block(filled):
    already = filled.get_chain()[2]
    with pytest.raises(ValueError, match="sealed"):
        filled.append_block(already)
    assert filled.current_height() == 4


def test_monotonic_height():
    ledger = Ledger(clock=lambda: T0)
    for n in range(9):
        assert ledger.append_block(star("carol", n)).height == n + 1
    assert ledger.current_height() == 9
    assert [b.height for b in ledger.get_chain()] == list(range(10))


def test_hash_continuity(filled):
    chain = filled.get_chain()
    for i in range(1, len(chain)):
        assert chain[i].previous_hash == chain[i - 1].hash
    assert all(b.validate() for b in chain)
    assert filled.validate_chain() == []


def test_get_chain_is_snapshot(filled):
    snapshot = filled.get_chain()
    filled.append_block(star("alice", 99))
    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 5
    assert filled.length == 6


def test_lookup_by_height(filled):
    assert filled.get_block_by_height(0).get_data() == GenesisMarker()
    assert filled.get_block_by_height(3).height == 3
    with pytest.raises(NotFound):
        filled.get_block_by_height(5)
    with pytest.raises(NotFound):
        filled.get_block_by_height(-1)


def test_lookup_by_hash(filled):
    target = filled.get_chain()[2]
    assert filled.get_block_by_hash(target.hash) == target
    with pytest.raises(NotFound, match="deadbeef"):
        filled.get_block_by_hash("deadbeef" * 8)


def test_not_found_is_lookup_error(ledger):
    with pytest.raises(LookupError):
        ledger.get_block_by_hash("nope")


def test_stars_by_owner(filled):
    alice = filled.get_stars_by_owner("alice")
    assert [s.star["story"] for s in alice] == ["star #0", "star #2"]
    assert all(s.owner == "alice" for s in alice)
    assert [s.star["story"] for s in filled.get_stars_by_owner("bob")] == ["star #1", "star #3"]
    assert filled.get_stars_by_owner("nobody") == []


def test_append_refused_on_corrupted_chain(filled):
    chain = list(filled.get_chain())
    chain[2] = replace(chain[2], timestamp=chain[2].timestamp + 1)
    filled._chain = tuple(chain)

    with pytest.raises(ChainCorruption) as excinfo:
        filled.append_block(star("alice", 5))

    assert excinfo.value.errors
    assert excinfo.value.errors[0].height == 2
    assert filled.length == 5
    assert filled.current_height() == 4
