"""
Tests for cart storage backends

Both backends honour the same load/save/remove contract, round-trip
through JSON and discard snapshots older than the maximum age.
"""

import sqlite3
from pathlib import Path

import pytest

from tests.helpers import make_item, opposing
from vote_cart.cart.models import Cart, Curve, Direction, NewClaimData
from vote_cart.cart.storage import InMemoryCartStorage, SQLiteCartStorage, decode_cart
from vote_cart.kernel.errors import PersistenceFailure
from vote_cart.kernel.time import TestTimeProvider


@pytest.fixture
def sample_cart() -> Cart:
    return Cart(
        scope_id="founder-1",
        scope_label="Ada Lovelace",
        items=(
            make_item("vote-1", 10**15, "A", curve=Curve.PROGRESSIVE),
            make_item(
                "vote-2",
                2 * 10**15,
                None,
                subject_label="Curiosity",
                is_new_claim=True,
                pending_creation=NewClaimData(name="Curiosity", category="Trait"),
            ),
            make_item(
                "vote-3",
                5,
                "B",
                direction=Direction.OPPOSE,
                existing_position=opposing(Direction.SUPPORT, 3),
                redeem_confirmed=True,
            ),
        ),
    )


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, temp_db: Path, test_time: TestTimeProvider):
    """Run contract tests against both backends"""
    if request.param == "memory":
        return InMemoryCartStorage(test_time)
    return SQLiteCartStorage(temp_db, test_time)


# =============================================================================
# Contract
# =============================================================================


def test_load_missing_scope_returns_none(backend) -> None:
    """Test loading an unknown scope"""
    assert backend.load("nobody") is None


def test_save_then_load_round_trips(backend, sample_cart: Cart) -> None:
    """Test the restored cart equals the saved one"""
    backend.save(sample_cart)

    assert backend.load("founder-1") == sample_cart


def test_save_overwrites_previous_snapshot(backend, sample_cart: Cart) -> None:
    """Test one snapshot per scope"""
    backend.save(sample_cart)
    backend.save(sample_cart.with_items(sample_cart.items[:1]))

    assert backend.load("founder-1").item_count == 1


def test_remove_discards_snapshot(backend, sample_cart: Cart) -> None:
    """Test remove, including removing twice"""
    backend.save(sample_cart)
    backend.remove("founder-1")
    backend.remove("founder-1")

    assert backend.load("founder-1") is None


def test_scopes_are_independent(backend, sample_cart: Cart) -> None:
    """Test carts are keyed by scope"""
    backend.save(sample_cart)
    backend.save(Cart(scope_id="founder-2", scope_label="Grace", items=sample_cart.items[:1]))

    assert backend.load("founder-1").item_count == 3
    assert backend.load("founder-2").item_count == 1


# =============================================================================
# Expiry
# =============================================================================


def test_snapshot_within_max_age_is_kept(backend, sample_cart: Cart, test_time) -> None:
    """Test a cart saved 23 hours ago still loads"""
    backend.save(sample_cart)
    test_time.advance_hours(23)

    assert backend.load("founder-1") == sample_cart


def test_expired_snapshot_is_discarded(backend, sample_cart: Cart, test_time) -> None:
    """Test a cart older than 24 hours is dropped and removed"""
    backend.save(sample_cart)
    test_time.advance_hours(25)

    assert backend.load("founder-1") is None
    test_time.advance_hours(-25)
    assert backend.load("founder-1") is None


# =============================================================================
# Failure modes
# =============================================================================


def test_decode_rejects_corrupt_json() -> None:
    """Test corrupt payloads become PersistenceFailure"""
    with pytest.raises(PersistenceFailure) as exc_info:
        decode_cart("founder-1", "{not json")
    assert exc_info.value.operation == "load"


def test_decode_rejects_schema_mismatch() -> None:
    """Test payloads with the wrong shape become PersistenceFailure"""
    with pytest.raises(PersistenceFailure):
        decode_cart("founder-1", '{"cart": {"scope_id": "x"}, "saved_at": "2025-01-15T12:00:00Z"}')


def test_old_snapshot_without_curve_loads_as_linear(storage: InMemoryCartStorage) -> None:
    """Test snapshots from before curves existed"""
    storage.snapshots["founder-1"] = (
        '{"cart": {"scope_id": "founder-1", "scope_label": "Ada", "items": ['
        '{"id": "vote-1", "subject_key": "A", "subject_label": "A", "relation_id": "r",'
        ' "direction": "support", "amount": 5}]},'
        ' "saved_at": "2025-01-15T11:00:00Z"}'
    )

    cart = storage.load("founder-1")

    assert cart.items[0].curve is Curve.LINEAR


def test_sqlite_schema_created(sqlite_storage: SQLiteCartStorage, temp_db: Path) -> None:
    """Test the carts table exists after construction"""
    with sqlite3.connect(temp_db) as conn:
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='carts'"
        ).fetchone()
    assert row is not None


def test_sqlite_lists_scopes_and_raw_snapshot(
    sqlite_storage: SQLiteCartStorage, sample_cart: Cart
) -> None:
    """Test debugging helpers"""
    sqlite_storage.save(sample_cart)

    assert sqlite_storage.list_scopes() == ["founder-1"]
    raw = sqlite_storage.raw_snapshot("founder-1")
    assert raw["cart"]["scope_label"] == "Ada Lovelace"
    assert raw["cart"]["items"][0]["curve"] == "progressive"


def test_sqlite_survives_new_instance(temp_db: Path, test_time, sample_cart: Cart) -> None:
    """Test snapshots persist across storage instances"""
    SQLiteCartStorage(temp_db, test_time).save(sample_cart)

    assert SQLiteCartStorage(temp_db, test_time).load("founder-1") == sample_cart


def test_sqlite_unreadable_database_raises_persistence_failure(tmp_path: Path, test_time) -> None:
    """Test I/O errors are wrapped"""
    storage = SQLiteCartStorage(tmp_path / "carts.db", test_time)
    storage.db_path = tmp_path / "missing-dir" / "carts.db"

    with pytest.raises(PersistenceFailure) as exc_info:
        storage.load("founder-1")
    assert exc_info.value.operation == "load"
