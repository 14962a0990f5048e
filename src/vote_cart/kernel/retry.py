"""
Retry logic with exponential backoff for cart snapshot I/O.

SQLite uses file-level locking, so a second process (another CLI call,
a test runner) can briefly hold the database. Those failures are
transient and worth a few retries before giving up.
"""

import sqlite3
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vote_cart.kernel.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry_on_sqlite_lock(
    max_attempts: int = 3,
    min_wait_ms: int = 50,
    max_wait_ms: int = 500,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retry decorator for SQLite lock contention (OperationalError).

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        min_wait_ms: Minimum wait time in milliseconds (default: 50)
        max_wait_ms: Maximum wait time in milliseconds (default: 500)

    Returns:
        Decorated function that retries on sqlite3.OperationalError and
        re-raises the last error once attempts are exhausted

    Example:
        @retry_on_sqlite_lock()
        def _write(self, scope_id, payload):
            conn.execute("INSERT ...")
    """
    return retry(
        retry=retry_if_exception_type(sqlite3.OperationalError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=min_wait_ms / 1000.0,
            max=max_wait_ms / 1000.0,
        ),
        before_sleep=lambda retry_state: logger.warning(
            "SQLite lock detected, retrying cart I/O",
            attempt=retry_state.attempt_number,
            exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        ),
        reraise=True,
    )
