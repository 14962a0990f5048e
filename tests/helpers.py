"""
Test Helper Functions - Builders for cart test data

Keeps tests readable: each test names only the fields it cares about and
the builders fill in the rest.

Fun fact: The Builder pattern was formalized by the Gang of Four in 1994 -
here it saves us from spelling out relation IDs a hundred times!
"""

from typing import Any

from vote_cart.cart.commands import AddVoteIntent
from vote_cart.cart.models import Curve, Direction, ExistingPosition, VoteIntent

TOKEN = 10**18


def tokens(text: str) -> int:
    """Whole-token decimal string to minor units, e.g. tokens("0.5")"""
    whole, _, fraction = text.partition(".")
    return int(whole or "0") * TOKEN + int(fraction.ljust(18, "0") or "0")


def make_intent(
    subject_key: str | None = "subject-a",
    direction: Direction = Direction.SUPPORT,
    curve: Curve = Curve.LINEAR,
    amount: int = 10,
    **overrides: Any,
) -> AddVoteIntent:
    """
    Builder for AddVoteIntent commands

    Example:
        >>> make_intent("A", amount=10)
        >>> make_intent(None, pending_creation=NewClaimData(name="X", category="Y"))
    """
    data: dict[str, Any] = {
        "subject_key": subject_key,
        "relation_id": "has-quality",
        "direction": direction,
        "curve": curve,
        "amount": amount,
    }
    data.update(overrides)
    return AddVoteIntent(**data)


def make_item(
    item_id: str,
    amount: int,
    subject_key: str | None = "subject-a",
    direction: Direction = Direction.SUPPORT,
    curve: Curve = Curve.LINEAR,
    **overrides: Any,
) -> VoteIntent:
    """Builder for cart items used directly by the pure calculators"""
    data: dict[str, Any] = {
        "id": item_id,
        "subject_key": subject_key,
        "subject_label": overrides.pop("subject_label", subject_key or "New subject"),
        "relation_id": "has-quality",
        "direction": direction,
        "curve": curve,
        "amount": amount,
    }
    data.update(overrides)
    return VoteIntent(**data)


def opposing(direction: Direction, shares: int, curve: Curve = Curve.LINEAR) -> ExistingPosition:
    """Held position in ``direction`` (to be redeemed by a vote the other way)"""
    return ExistingPosition(direction=direction, curve=curve, shares=shares)
