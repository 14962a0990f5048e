"""
Cart Module - staged votes, their persistence and the store that owns them

This module holds the heart of the engine:
- Exact amount parsing and truncated display
- Immutable cart snapshots (replaced, never mutated)
- The single store every view subscribes to
- Load/save/remove persistence with expiry

Fun fact: "Shopping cart" interfaces date back to 1994 web shops, but
the physical shopping cart was invented in 1937 by Sylvan Goldman, who
had to hire models to push them around before shoppers would use them!
"""

from vote_cart.cart.commands import AddVoteIntent
from vote_cart.cart.models import (
    Cart,
    Curve,
    Direction,
    ExistingPosition,
    NewClaimData,
    VoteIntent,
)

__all__ = [
    "AddVoteIntent",
    "Cart",
    "Curve",
    "Direction",
    "ExistingPosition",
    "NewClaimData",
    "VoteIntent",
]
