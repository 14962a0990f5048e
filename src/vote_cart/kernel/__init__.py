"""
Kernel - shared infrastructure for the vote cart engine

Errors, configuration, logging, metrics, IDs and time. Nothing in here
knows what a vote is; the domain packages build on it.
"""

from vote_cart.kernel.errors import (
    CartItemNotFound,
    CartNotInitialized,
    ConfigUnavailable,
    CurveNotSelectable,
    DirectionChangeError,
    InvariantViolation,
    OppositeDirectionInCart,
    OppositePositionHeld,
    ParseError,
    PersistenceFailure,
    VoteCartError,
)
from vote_cart.kernel.ids import IdFactory, SequentialIdFactory, generate_id
from vote_cart.kernel.protocol import (
    BalanceProvider,
    FeeRatio,
    ProtocolConfig,
    ProtocolConfigProvider,
    StaticBalanceProvider,
    StaticConfigProvider,
)
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings
from vote_cart.kernel.time import RealTimeProvider, TestTimeProvider, TimeProvider

__all__ = [
    # IDs
    "IdFactory",
    "SequentialIdFactory",
    "generate_id",
    # Time
    "TimeProvider",
    "RealTimeProvider",
    "TestTimeProvider",
    # Configuration
    "EngineSettings",
    "DEFAULT_SETTINGS",
    "FeeRatio",
    "ProtocolConfig",
    "ProtocolConfigProvider",
    "BalanceProvider",
    "StaticConfigProvider",
    "StaticBalanceProvider",
    # Errors
    "VoteCartError",
    "ParseError",
    "ConfigUnavailable",
    "InvariantViolation",
    "OppositePositionHeld",
    "OppositeDirectionInCart",
    "CurveNotSelectable",
    "DirectionChangeError",
    "PersistenceFailure",
    "CartNotInitialized",
    "CartItemNotFound",
]
