"""
Direction-Change Flow - switching sides on a claim you already hold

State machine:
    NONE -> CHOOSING_CURVE -> PENDING_REDEEM -> (item added) -> NONE

- NONE: no opposing position blocks the selected direction
- CHOOSING_CURVE: an opposing on-chain position blocks both curves; the
  user picks which opposing shares to redeem (one curve, or both)
- PENDING_REDEEM: the chosen curve(s) are selectable again for the new
  direction, and the staged item will carry the shares to redeem

Changing or clearing the direction always returns to NONE and forgets
the pending choice. Nothing here redeems anything: the submission
collaborator sequences "redeem, then deposit" from the annotations.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from vote_cart.cart.amounts import truncate_amount
from vote_cart.cart.commands import AddVoteIntent
from vote_cart.cart.models import Curve, Direction, ExistingPosition
from vote_cart.curves.availability import CurveAvailability, PositionSnapshot
from vote_cart.kernel.errors import CurveNotSelectable, DirectionChangeError
from vote_cart.kernel.logging import get_logger
from vote_cart.kernel.metrics import invariant_rejections_total
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings

logger = get_logger(__name__)


class DirectionChangeState(str, Enum):
    """Where the user is in the direction change"""

    NONE = "none"
    CHOOSING_CURVE = "choosing_curve"
    PENDING_REDEEM = "pending_redeem"


class RedeemChoice(str, Enum):
    """Which opposing shares to redeem"""

    LINEAR = "linear"
    PROGRESSIVE = "progressive"
    BOTH = "both"

    def curves(self) -> tuple[Curve, ...]:
        if self is RedeemChoice.BOTH:
            return (Curve.LINEAR, Curve.PROGRESSIVE)
        return (Curve(self.value),)


class CurvePosition(BaseModel):
    """Opposing shares on one curve, as shown in the change prompt"""

    model_config = ConfigDict(frozen=True)

    curve: Curve
    shares: int
    display: str
    has_position: bool


class DirectionChangeInfo(BaseModel):
    """What the user is asked to redeem before switching direction"""

    model_config = ConfigDict(frozen=True)

    linear: CurvePosition
    progressive: CurvePosition
    current_direction_label: str
    target_direction_label: str

    def for_curve(self, curve: Curve) -> CurvePosition:
        return self.linear if curve is Curve.LINEAR else self.progressive


class DirectionChangeFlow:
    """
    Walks one subject's direction change from blocked to annotated intent

    One flow per subject panel; feed it the availability computed for
    every direction selection.
    """

    def __init__(
        self,
        positions: PositionSnapshot,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.positions = positions
        self.settings = settings
        self.state = DirectionChangeState.NONE
        self.direction: Direction | None = None
        self.availability: CurveAvailability | None = None
        self.choice: RedeemChoice | None = None

    def select_direction(self, direction: Direction, availability: CurveAvailability) -> None:
        """
        Record a direction selection and its availability

        Enters CHOOSING_CURVE only when the block comes from on-chain
        positions alone; a conflicting cart item cannot be redeemed away.
        """
        if availability.direction is not None and availability.direction != direction:
            raise DirectionChangeError(
                self.state.value,
                f"availability was computed for {availability.direction.value}, not {direction.value}",
            )

        self.direction = direction
        self.availability = availability
        self.choice = None

        if availability.blocked_by_position and not availability.blocked_by_cart:
            self.state = DirectionChangeState.CHOOSING_CURVE
            logger.info(
                "Direction change required",
                direction=direction.value,
                blocking_curves=[c.value for c in availability.blocking_curves],
            )
        else:
            self.state = DirectionChangeState.NONE

    def clear_direction(self) -> None:
        self.state = DirectionChangeState.NONE
        self.direction = None
        self.availability = None
        self.choice = None

    def change_info(self) -> DirectionChangeInfo | None:
        """Opposing shares per curve, None outside a direction change"""
        if self.state is DirectionChangeState.NONE or self.direction is None:
            return None

        held = self.direction.opposite()
        return DirectionChangeInfo(
            linear=self._curve_position(held, Curve.LINEAR),
            progressive=self._curve_position(held, Curve.PROGRESSIVE),
            current_direction_label=held.label(),
            target_direction_label=self.direction.label(),
        )

    def _curve_position(self, direction: Direction, curve: Curve) -> CurvePosition:
        shares = self.positions.shares(direction, curve)
        return CurvePosition(
            curve=curve,
            shares=shares,
            display=truncate_amount(
                shares, self.settings.display_decimals, self.settings.token_decimals
            ),
            has_position=shares > 0,
        )

    def choose(self, choice: RedeemChoice) -> None:
        """
        Mark opposing shares for redemption

        Raises:
            DirectionChangeError: Outside CHOOSING_CURVE, or if a chosen
                curve holds no opposing position
        """
        if self.state is not DirectionChangeState.CHOOSING_CURVE or self.direction is None:
            raise DirectionChangeError(self.state.value, "no curve choice is pending")

        held = self.direction.opposite()
        missing = [c for c in choice.curves() if not self.positions.has(held, c)]
        if missing:
            raise DirectionChangeError(
                self.state.value,
                f"no {held.value} position on {' + '.join(c.value for c in missing)}",
            )

        self.choice = choice
        self.state = DirectionChangeState.PENDING_REDEEM
        logger.info(
            "Marked opposing position for redemption",
            direction=self.direction.value,
            choice=choice.value,
        )

    def selectable_curves(self) -> frozenset[Curve]:
        if self.state is DirectionChangeState.CHOOSING_CURVE:
            return frozenset()
        if self.state is DirectionChangeState.PENDING_REDEEM and self.choice is not None:
            return frozenset(self.choice.curves())
        if self.availability is None:
            return frozenset(Curve)
        return self.availability.available_curves()

    def pending_redeem(self) -> list[ExistingPosition]:
        """Opposing positions the submission must redeem first"""
        if self.state is not DirectionChangeState.PENDING_REDEEM or self.direction is None:
            return []
        held = self.direction.opposite()
        return [
            ExistingPosition(direction=held, curve=curve, shares=self.positions.shares(held, curve))
            for curve in self.choice.curves()
        ]

    def annotate(self, command: AddVoteIntent) -> AddVoteIntent:
        """
        Attach the pending redemption to an intent

        The position on the intent's own curve goes first; with BOTH the
        other curve's position goes to extra_redemptions.

        Raises:
            CurveNotSelectable: If the intent's curve is not selectable now
            DirectionChangeError: If the intent's direction is not the one
                being switched to
        """
        if command.curve not in self.selectable_curves():
            invariant_rejections_total.labels(rule="curve_blocked").inc()
            reason = self.availability.reason if self.availability else None
            if self.state is DirectionChangeState.CHOOSING_CURVE:
                reason = "choose which opposing position to redeem first"
            raise CurveNotSelectable(command.curve.value, reason)

        if self.state is not DirectionChangeState.PENDING_REDEEM:
            return command

        if command.direction != self.direction:
            raise DirectionChangeError(
                self.state.value,
                f"intent votes {command.direction.value}, flow switches to {self.direction.value}",
            )

        redemptions = sorted(self.pending_redeem(), key=lambda p: p.curve != command.curve)
        return command.model_copy(
            update={
                "existing_position": redemptions[0],
                "extra_redemptions": tuple(redemptions[1:]),
                "redeem_confirmed": True,
            }
        )

    def complete(self) -> None:
        """Reset once the annotated intent has been added to the cart"""
        if self.state is DirectionChangeState.PENDING_REDEEM:
            logger.info("Direction change staged", direction=self.direction.value if self.direction else None)
        self.state = DirectionChangeState.NONE
        self.availability = None
        self.choice = None
