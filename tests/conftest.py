"""
Pytest configuration and shared fixtures

Fun fact: The name "conftest" comes from pytest's configuration testing
framework. Files named conftest.py are automatically discovered and their
fixtures are available to all tests in the same directory and subdirectories!
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from vote_cart.cart.storage import InMemoryCartStorage, SQLiteCartStorage
from vote_cart.cart.store import VoteCartStore
from vote_cart.kernel.ids import SequentialIdFactory
from vote_cart.kernel.protocol import FeeRatio, ProtocolConfig, StaticConfigProvider
from vote_cart.kernel.settings import EngineSettings
from vote_cart.kernel.time import TestTimeProvider


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Provide a database path inside pytest's per-test temp directory"""
    return tmp_path / "carts.db"


@pytest.fixture
def test_time() -> TestTimeProvider:
    """
    Provide a controllable time provider for deterministic tests

    Default time: 2025-01-15 12:00:00 UTC
    """
    return TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def id_factory() -> SequentialIdFactory:
    """Deterministic item IDs: vote-1, vote-2, ..."""
    return SequentialIdFactory()


@pytest.fixture
def protocol_config() -> ProtocolConfig:
    """
    Realistic protocol constants (18-decimal token)

    - min_deposit: 0.001
    - claim_creation_cost: 0.001000000002 (non-round, as on chain)
    - subject_creation_cost: 0.0005
    - entry fee 5%, exit fee 7% (basis points of 10000)
    """
    return ProtocolConfig(
        min_deposit=10**15,
        claim_creation_cost=1_000_000_002_000_000,
        subject_creation_cost=5 * 10**14,
        entry_fee=FeeRatio(numerator=500, denominator=10_000),
        exit_fee=FeeRatio(numerator=700, denominator=10_000),
    )


@pytest.fixture
def small_config() -> ProtocolConfig:
    """Small round numbers for arithmetic you can check by hand"""
    return ProtocolConfig(
        min_deposit=100,
        claim_creation_cost=50,
        entry_fee=FeeRatio(numerator=5, denominator=100),
    )


@pytest.fixture
def config_provider(protocol_config: ProtocolConfig) -> StaticConfigProvider:
    return StaticConfigProvider(protocol_config)


@pytest.fixture
def storage(test_time: TestTimeProvider) -> InMemoryCartStorage:
    """Provide fresh in-memory cart storage for each test"""
    return InMemoryCartStorage(test_time)


@pytest.fixture
def sqlite_storage(temp_db: Path, test_time: TestTimeProvider) -> SQLiteCartStorage:
    """Provide fresh SQLite cart storage for each test"""
    return SQLiteCartStorage(temp_db, test_time)


@pytest.fixture
def store(
    storage: InMemoryCartStorage,
    config_provider: StaticConfigProvider,
    id_factory: SequentialIdFactory,
) -> VoteCartStore:
    """Provide an initialized store for scope founder-1"""
    store = VoteCartStore(storage, config_provider, id_factory=id_factory)
    store.init("founder-1", "Ada Lovelace")
    return store
