"""
Curves Module - direction exclusivity and the direction-change flow

Two pricing curves, one direction per claim. This module answers "which
curves can I pick?" and walks the user through redeeming the other side
when the answer is "neither".

Fun fact: Bonding curves were popularised for token pricing around 2017,
but the idea of price rising with supply is as old as auction houses!
"""

from vote_cart.curves.availability import (
    CurveAvailability,
    PositionSnapshot,
    assert_curve_selectable,
    compute_curve_availability,
)
from vote_cart.curves.direction_change import (
    CurvePosition,
    DirectionChangeFlow,
    DirectionChangeInfo,
    DirectionChangeState,
    RedeemChoice,
)

__all__ = [
    "CurveAvailability",
    "PositionSnapshot",
    "assert_curve_selectable",
    "compute_curve_availability",
    "CurvePosition",
    "DirectionChangeFlow",
    "DirectionChangeInfo",
    "DirectionChangeState",
    "RedeemChoice",
]
