"""
Curve availability - the direction exclusivity rule

The protocol lets a user hold both curves on one claim only in the same
direction:
- support linear + support progressive: fine
- support (any curve) + oppose (any curve): never

So when the user picks a direction and holds (or has staged) the other
direction anywhere on the subject, BOTH curves are unavailable. Swapping
curves does not help; the only remedy is redeeming the opposing shares
through the direction-change flow.

Checked on every direction or curve selection, not just at submission.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from vote_cart.cart.models import Curve, Direction, VoteIntent
from vote_cart.kernel.errors import CurveNotSelectable
from vote_cart.kernel.metrics import invariant_rejections_total


class PositionSnapshot(BaseModel):
    """
    Shares the user holds on one claim, per direction and curve

    Read from chain by an external collaborator; zero means no position.
    """

    model_config = ConfigDict(frozen=True)

    support_linear: int = Field(default=0, ge=0)
    support_progressive: int = Field(default=0, ge=0)
    oppose_linear: int = Field(default=0, ge=0)
    oppose_progressive: int = Field(default=0, ge=0)

    def shares(self, direction: Direction, curve: Curve) -> int:
        return getattr(self, f"{direction.value}_{curve.value}")

    def has(self, direction: Direction, curve: Curve) -> bool:
        return self.shares(direction, curve) > 0

    def curves_holding(self, direction: Direction) -> list[Curve]:
        """Curves with a position in ``direction``, linear first"""
        return [curve for curve in Curve if self.has(direction, curve)]

    def holds_any(self, direction: Direction) -> bool:
        return bool(self.curves_holding(direction))


class CurveAvailability(BaseModel):
    """
    Which curves the user may pick for the selected direction

    Attributes:
        linear: Linear curve selectable
        progressive: Progressive curve selectable
        blocked: Both curves blocked by the exclusivity rule
        blocked_by_position: An opposing on-chain position is the cause
        blocked_by_cart: An opposing staged cart item is the cause
        blocking_curves: Curves holding the opposing on-chain position
        reason: Explanation for the UI, None when nothing is blocked
    """

    model_config = ConfigDict(frozen=True)

    direction: Direction | None = None
    linear: bool = True
    progressive: bool = True
    blocked: bool = False
    blocked_by_position: bool = False
    blocked_by_cart: bool = False
    blocking_curves: tuple[Curve, ...] = ()
    reason: str | None = None

    def is_available(self, curve: Curve) -> bool:
        return self.linear if curve is Curve.LINEAR else self.progressive

    def available_curves(self) -> frozenset[Curve]:
        return frozenset(curve for curve in Curve if self.is_available(curve))


def compute_curve_availability(
    direction: Direction | None,
    positions: PositionSnapshot,
    cart_items: Iterable[VoteIntent],
    subject_key: str | None,
    subject_label: str | None = None,
) -> CurveAvailability:
    """
    Apply the exclusivity rule for a direction on one subject

    Args:
        direction: Direction the user selected, None if none yet
        positions: On-chain shares on the subject's claim
        cart_items: Items currently staged in the cart
        subject_key: Subject being voted on, None while it is pending creation
        subject_label: Label matching a pending subject's staged items

    Returns:
        CurveAvailability with both curves blocked or both open

    Example:
        Holding support on linear and selecting oppose gives
        linear=False, progressive=False and the reason
        "Existing Support position (Linear). Redeem it first to Oppose."
    """
    if direction is None:
        return CurveAvailability()

    opposite = direction.opposite()
    blocking_curves = tuple(positions.curves_holding(opposite))
    blocked_by_position = bool(blocking_curves)
    blocked_by_cart = any(
        item.is_for_subject(subject_key, subject_label) and item.direction == opposite
        for item in cart_items
    )

    blocked = blocked_by_position or blocked_by_cart
    if not blocked:
        return CurveAvailability(direction=direction)

    if blocking_curves:
        curves = " + ".join(curve.label() for curve in blocking_curves)
        source = " (cart included)" if blocked_by_cart else ""
        reason = (
            f"Existing {opposite.label()} position ({curves}){source}. "
            f"Redeem it first to {direction.label()}."
        )
    else:
        reason = (
            f"{opposite.label()} vote in the cart. "
            f"{direction.label()} is not possible on the same subject."
        )

    return CurveAvailability(
        direction=direction,
        linear=False,
        progressive=False,
        blocked=True,
        blocked_by_position=blocked_by_position,
        blocked_by_cart=blocked_by_cart,
        blocking_curves=blocking_curves,
        reason=reason,
    )


def assert_curve_selectable(availability: CurveAvailability, curve: Curve) -> None:
    """
    Raise if ``curve`` cannot be selected

    Raises:
        CurveNotSelectable: If the exclusivity rule blocks the curve
    """
    if not availability.is_available(curve):
        invariant_rejections_total.labels(rule="curve_blocked").inc()
        raise CurveNotSelectable(curve.value, availability.reason)
