"""
Tests for minimum deposit requirements
"""

import pytest

from vote_cart.cart.amounts import parse_amount
from vote_cart.cart.models import NewClaimData
from vote_cart.costs.minimums import (
    NEW_SUBJECT_CLAIM_UNITS,
    NEW_SUBJECT_NEW_CATEGORY_CLAIM_UNITS,
    claim_units,
    min_required_amount,
    min_required_exact,
)
from vote_cart.kernel.protocol import ProtocolConfig
from vote_cart.kernel.settings import EngineSettings


@pytest.mark.parametrize(
    "is_new_claim,pending,expected",
    [
        (False, None, 0),
        (True, None, 1),
        (True, NewClaimData(name="X", category="Y", category_key="0xy"), NEW_SUBJECT_CLAIM_UNITS),
        (True, NewClaimData(name="X", category="Y", is_new_category=True), NEW_SUBJECT_NEW_CATEGORY_CLAIM_UNITS),
    ],
)
def test_claim_units(is_new_claim: bool, pending: NewClaimData | None, expected: int) -> None:
    assert claim_units(is_new_claim, pending) == expected


def test_existing_claim_needs_min_deposit(protocol_config: ProtocolConfig) -> None:
    assert min_required_exact(protocol_config, False) == protocol_config.min_deposit


def test_new_claim_minimum_exact_and_display(protocol_config: ProtocolConfig) -> None:
    """Test the non-round chain constant shows as a clean truncated value"""
    minimum = min_required_amount(protocol_config, is_new_claim=True)

    assert minimum.exact == 2_000_000_002_000_000
    assert minimum.exact_text == "0.002000000002"
    assert minimum.display == "0.002"
    assert parse_amount(minimum.display) <= minimum.exact


def test_new_subject_in_new_category(protocol_config: ProtocolConfig) -> None:
    pending = NewClaimData(name="Curiosity", category="Trait", is_new_category=True)

    exact = min_required_exact(protocol_config, True, pending)

    assert exact == 3 * protocol_config.claim_creation_cost + protocol_config.min_deposit


def test_display_follows_settings(protocol_config: ProtocolConfig) -> None:
    """Test fewer display decimals truncate further"""
    minimum = min_required_amount(
        protocol_config, True, settings=EngineSettings(display_decimals=2)
    )

    assert minimum.display == "0"
    assert minimum.exact_text == "0.002000000002"
