"""
Tests for curve availability (direction exclusivity rule)

Fun fact: The rule mirrors how the protocol's vaults work - a claim has a
support vault and an oppose vault, and each vault has two curves. You may
fill both curves of one vault, never both vaults.
"""

import pytest

from tests.helpers import make_item
from vote_cart.cart.models import Curve, Direction
from vote_cart.curves.availability import (
    PositionSnapshot,
    assert_curve_selectable,
    compute_curve_availability,
)
from vote_cart.kernel.errors import CurveNotSelectable, InvariantViolation


def test_no_direction_blocks_nothing() -> None:
    availability = compute_curve_availability(
        None, PositionSnapshot(support_linear=5, oppose_linear=5), [], "A"
    )

    assert availability.linear and availability.progressive
    assert not availability.blocked
    assert availability.reason is None


def test_same_direction_on_both_curves_is_allowed() -> None:
    """Test holding support linear does not block support progressive"""
    availability = compute_curve_availability(
        Direction.SUPPORT, PositionSnapshot(support_linear=5), [], "A"
    )

    assert availability.available_curves() == {Curve.LINEAR, Curve.PROGRESSIVE}


def test_opposing_position_blocks_both_curves() -> None:
    """Test support held on linear blocks oppose on BOTH curves"""
    availability = compute_curve_availability(
        Direction.OPPOSE, PositionSnapshot(support_linear=5), [], "A"
    )

    assert availability.blocked
    assert not availability.linear
    assert not availability.progressive
    assert availability.blocked_by_position
    assert not availability.blocked_by_cart
    assert availability.blocking_curves == (Curve.LINEAR,)
    assert availability.reason == "Existing Support position (Linear). Redeem it first to Oppose."


def test_reason_lists_every_blocking_curve_and_cart() -> None:
    """Test the reason names both curves and marks the cart as a source"""
    availability = compute_curve_availability(
        Direction.SUPPORT,
        PositionSnapshot(oppose_linear=1, oppose_progressive=2),
        [make_item("vote-1", 10, "A", direction=Direction.OPPOSE)],
        "A",
    )

    assert availability.blocking_curves == (Curve.LINEAR, Curve.PROGRESSIVE)
    assert availability.blocked_by_cart
    assert availability.reason == (
        "Existing Oppose position (Linear + Progressive) (cart included). "
        "Redeem it first to Support."
    )


def test_cart_item_alone_blocks() -> None:
    """Test a staged opposite vote on the same subject blocks"""
    availability = compute_curve_availability(
        Direction.SUPPORT,
        PositionSnapshot(),
        [make_item("vote-1", 10, "A", direction=Direction.OPPOSE, curve=Curve.PROGRESSIVE)],
        "A",
    )

    assert availability.blocked
    assert availability.blocked_by_cart
    assert not availability.blocked_by_position
    assert availability.reason == "Oppose vote in the cart. Support is not possible on the same subject."


def test_pending_subject_matches_cart_by_label() -> None:
    """Test a subject without a key is blocked by its staged opposite vote"""
    staged = make_item("vote-1", 10, None, subject_label="Curiosity")

    blocked = compute_curve_availability(
        Direction.OPPOSE, PositionSnapshot(), [staged], None, "Curiosity"
    )
    other = compute_curve_availability(
        Direction.OPPOSE, PositionSnapshot(), [staged], None, "Patience"
    )

    assert blocked.blocked_by_cart
    assert blocked.available_curves() == frozenset()
    assert not other.blocked


def test_cart_items_for_other_subjects_do_not_block() -> None:
    availability = compute_curve_availability(
        Direction.SUPPORT,
        PositionSnapshot(),
        [make_item("vote-1", 10, "B", direction=Direction.OPPOSE)],
        "A",
    )

    assert not availability.blocked


def test_position_snapshot_helpers() -> None:
    positions = PositionSnapshot(support_progressive=7, oppose_linear=3)

    assert positions.shares(Direction.SUPPORT, Curve.PROGRESSIVE) == 7
    assert positions.has(Direction.OPPOSE, Curve.LINEAR)
    assert not positions.has(Direction.OPPOSE, Curve.PROGRESSIVE)
    assert positions.curves_holding(Direction.SUPPORT) == [Curve.PROGRESSIVE]
    assert not PositionSnapshot().holds_any(Direction.SUPPORT)


def test_assert_curve_selectable() -> None:
    blocked = compute_curve_availability(
        Direction.OPPOSE, PositionSnapshot(support_linear=5), [], "A"
    )
    open_ = compute_curve_availability(Direction.SUPPORT, PositionSnapshot(), [], "A")

    assert_curve_selectable(open_, Curve.PROGRESSIVE)
    with pytest.raises(CurveNotSelectable) as exc_info:
        assert_curve_selectable(blocked, Curve.PROGRESSIVE)
    assert isinstance(exc_info.value, InvariantViolation)
    assert "Redeem it first" in str(exc_info.value)
