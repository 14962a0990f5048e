"""
Cart Storage - the persistence contract and two backends

The store only knows load/save/remove keyed by scope. Where snapshots
live is the backend's business:

- InMemoryCartStorage: per-process, still round-trips through JSON so
  serialization bugs surface in tests
- SQLiteCartStorage: one row per scope, survives restarts (used by the CLI)

Both discard snapshots older than the configured maximum age: a cart
left overnight is stale, and fees or positions may have moved.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, Protocol

from pydantic import BaseModel, ValidationError

from vote_cart.cart.models import Cart
from vote_cart.kernel.errors import PersistenceFailure
from vote_cart.kernel.logging import get_logger
from vote_cart.kernel.retry import retry_on_sqlite_lock
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings
from vote_cart.kernel.time import RealTimeProvider, TimeProvider

logger = get_logger(__name__)


class CartStorage(Protocol):
    """
    Persistence contract consumed by the cart store

    Implementations raise PersistenceFailure on I/O or decoding problems;
    the store absorbs it.
    """

    def load(self, scope_id: str) -> Cart | None:
        ...

    def save(self, cart: Cart) -> None:
        ...

    def remove(self, scope_id: str) -> None:
        ...


class StoredCart(BaseModel):
    """Serialized envelope: the cart plus when it was saved"""

    cart: Cart
    saved_at: datetime


def encode_cart(cart: Cart, saved_at: datetime) -> str:
    return StoredCart(cart=cart, saved_at=saved_at).model_dump_json()


def decode_cart(scope_id: str, payload: str) -> StoredCart:
    try:
        return StoredCart.model_validate_json(payload)
    except ValidationError as e:
        raise PersistenceFailure("load", scope_id, f"corrupt snapshot: {e.error_count()} errors") from e


def is_expired(stored: StoredCart, now: datetime, max_age_hours: int) -> bool:
    return now - stored.saved_at > timedelta(hours=max_age_hours)


class InMemoryCartStorage:
    """Dictionary-backed storage holding JSON snapshots"""

    def __init__(
        self,
        time_provider: TimeProvider | None = None,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.time_provider = time_provider or RealTimeProvider()
        self.settings = settings
        self.snapshots: dict[str, str] = {}

    def load(self, scope_id: str) -> Cart | None:
        payload = self.snapshots.get(scope_id)
        if payload is None:
            return None

        stored = decode_cart(scope_id, payload)
        if is_expired(stored, self.time_provider.now(), self.settings.cart_max_age_hours):
            logger.info("Discarding expired cart snapshot", scope_id=scope_id)
            del self.snapshots[scope_id]
            return None
        return stored.cart

    def save(self, cart: Cart) -> None:
        self.snapshots[cart.scope_id] = encode_cart(cart, self.time_provider.now())

    def remove(self, scope_id: str) -> None:
        self.snapshots.pop(scope_id, None)


class SQLiteCartStorage:
    """
    SQLite-backed cart storage

    Schema:
    - carts table: scope_id (primary key), cart_json, saved_at
    """

    def __init__(
        self,
        db_path: str | Path,
        time_provider: TimeProvider | None = None,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.db_path = Path(db_path)
        self.time_provider = time_provider or RealTimeProvider()
        self.settings = settings
        self._initialize_schema()

    def _initialize_schema(self) -> None:
        """Create tables if they don't exist"""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS carts (
                    scope_id TEXT PRIMARY KEY,
                    cart_json TEXT NOT NULL,
                    saved_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections"""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @retry_on_sqlite_lock()
    def _read(self, scope_id: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT cart_json FROM carts WHERE scope_id = ?", (scope_id,)
            ).fetchone()
            return row["cart_json"] if row else None

    @retry_on_sqlite_lock()
    def _write(self, scope_id: str, payload: str, saved_at: datetime) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO carts (scope_id, cart_json, saved_at)
                VALUES (?, ?, ?)
                ON CONFLICT(scope_id) DO UPDATE SET
                    cart_json = excluded.cart_json,
                    saved_at = excluded.saved_at
            """,
                (scope_id, payload, saved_at.isoformat()),
            )
            conn.commit()

    @retry_on_sqlite_lock()
    def _delete(self, scope_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM carts WHERE scope_id = ?", (scope_id,))
            conn.commit()

    def load(self, scope_id: str) -> Cart | None:
        try:
            payload = self._read(scope_id)
        except sqlite3.Error as e:
            raise PersistenceFailure("load", scope_id, str(e)) from e

        if payload is None:
            return None

        stored = decode_cart(scope_id, payload)
        if is_expired(stored, self.time_provider.now(), self.settings.cart_max_age_hours):
            logger.info("Discarding expired cart snapshot", scope_id=scope_id)
            self.remove(scope_id)
            return None
        return stored.cart

    def save(self, cart: Cart) -> None:
        now = self.time_provider.now()
        try:
            self._write(cart.scope_id, encode_cart(cart, now), now)
        except sqlite3.Error as e:
            raise PersistenceFailure("save", cart.scope_id, str(e)) from e

    def remove(self, scope_id: str) -> None:
        try:
            self._delete(scope_id)
        except sqlite3.Error as e:
            raise PersistenceFailure("remove", scope_id, str(e)) from e

    def list_scopes(self) -> list[str]:
        """Scope IDs with a stored snapshot, expired or not"""
        with self._connect() as conn:
            rows = conn.execute("SELECT scope_id FROM carts ORDER BY scope_id").fetchall()
            return [row["scope_id"] for row in rows]

    def raw_snapshot(self, scope_id: str) -> dict | None:
        """Decoded JSON of a stored snapshot (debugging and tests)"""
        payload = self._read(scope_id)
        return json.loads(payload) if payload is not None else None
