"""
Cart item ID generation

Item IDs are opaque, assigned once at creation and never reused. They are
time-ordered (UUIDv7-like) so that a cart dumped to a log reads in the
order the user staged the votes.
"""

import itertools
import secrets
import time
from typing import Protocol

ITEM_ID_PREFIX = "vote-"


class IdFactory(Protocol):
    """Protocol for item ID generation strategies"""

    def generate(self) -> str:
        """Generate a new unique ID"""
        ...


def generate_id() -> str:
    """
    Generate a UUIDv7-like identifier prefixed with ``vote-``

    First 48 bits: Unix timestamp in milliseconds, then version 7,
    then 74 random bits with the RFC 4122 variant.

    Returns:
        e.g. "vote-01908e9a-3b87-7abc-8def-123456789abc"
    """
    timestamp_48 = int(time.time() * 1000) & 0xFFFFFFFFFFFF
    rand_a = secrets.randbits(12)
    rand_b = secrets.randbits(62)

    hex_ts = f"{timestamp_48:012x}"
    version_and_rand = 0x7000 | rand_a
    variant_and_rand = 0x8000 | ((rand_b >> 48) & 0x3FFF)
    node = rand_b & 0xFFFFFFFFFFFF

    return (
        f"{ITEM_ID_PREFIX}{hex_ts[:8]}-{hex_ts[8:]}-"
        f"{version_and_rand:04x}-{variant_and_rand:04x}-{node:012x}"
    )


class DefaultIdFactory:
    """Default ID factory using UUIDv7-like generation"""

    def generate(self) -> str:
        return generate_id()


class SequentialIdFactory:
    """
    Deterministic ID factory for tests and replays

    Produces vote-1, vote-2, ... and never repeats within one factory.
    """

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def generate(self) -> str:
        return f"{ITEM_ID_PREFIX}{next(self._counter)}"


default_id_factory = DefaultIdFactory()
