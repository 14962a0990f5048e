"""
Custom exceptions for the vote cart engine

A small, explicit hierarchy so callers can tell a rejected keystroke
(ParseError) from a rejected vote (InvariantViolation) from a storage
hiccup (PersistenceFailure) without string matching.

Fun fact: The smallest unit of ether is named the "wei" after Wei Dai,
who described the b-money proposal in 1998 - we count in wei so we never
have to apologise for a rounding error.
"""


class VoteCartError(Exception):
    """Base exception for all vote cart errors"""

    pass


class ParseError(VoteCartError):
    """
    Raised when a human-entered amount is not a valid decimal string

    Recovered locally: the store keeps the previous amount and the
    error never reaches the cart level.
    """

    def __init__(self, raw: object, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid amount {raw!r}: {reason}")


class ConfigUnavailable(VoteCartError):
    """
    Raised when an operation strictly requires protocol configuration

    Derived outputs (cost summary, affordability) do not raise this; they
    return None so the UI can show a loading state instead.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Protocol configuration is not available yet - cannot {operation}"
        )


class InvariantViolation(VoteCartError):
    """
    Raised when a protocol rule would be violated

    The item is not inserted; callers must re-check curve availability
    before retrying.
    """

    pass


class OppositePositionHeld(InvariantViolation):
    """Raised when an on-chain opposing position has not been marked for redemption"""

    def __init__(self, subject: str, direction: str, held_direction: str, curve: str) -> None:
        self.subject = subject
        self.direction = direction
        self.held_direction = held_direction
        self.curve = curve
        super().__init__(
            f"Cannot stage {direction} on {subject}: a {held_direction} position is held "
            f"on the {curve} curve - redeem it through a direction change first"
        )


class OppositeDirectionInCart(InvariantViolation):
    """Raised when the cart already stages the opposite direction for the same subject"""

    def __init__(self, subject: str, direction: str, conflicting_item_id: str) -> None:
        self.subject = subject
        self.direction = direction
        self.conflicting_item_id = conflicting_item_id
        super().__init__(
            f"Cannot stage {direction} on {subject}: cart item {conflicting_item_id} "
            "already votes the opposite direction on the same subject"
        )


class CurveNotSelectable(InvariantViolation):
    """Raised when a curve is selected while the exclusivity rule blocks it"""

    def __init__(self, curve: str, reason: str | None) -> None:
        self.curve = curve
        self.reason = reason
        super().__init__(
            f"Curve {curve} is not selectable" + (f": {reason}" if reason else "")
        )


class DirectionChangeError(VoteCartError):
    """Raised on an invalid direction-change transition"""

    def __init__(self, state: str, message: str) -> None:
        self.state = state
        super().__init__(f"Direction change ({state}): {message}")


class PersistenceFailure(VoteCartError):
    """
    Raised by storage backends when a cart snapshot cannot be read or written

    The store catches this at its boundary: a failed load becomes an
    empty cart, a failed save is logged and otherwise ignored.
    """

    def __init__(self, operation: str, scope_id: str, detail: str) -> None:
        self.operation = operation
        self.scope_id = scope_id
        self.detail = detail
        super().__init__(f"Cart {operation} failed for scope {scope_id}: {detail}")


class CartNotInitialized(VoteCartError):
    """Raised when the cart is mutated before init()"""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: cart not initialized - call init() first")


class CartItemNotFound(VoteCartError):
    """Raised when a cart item id does not exist"""

    def __init__(self, scope_id: str, item_id: str) -> None:
        self.scope_id = scope_id
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found in cart {scope_id}")
