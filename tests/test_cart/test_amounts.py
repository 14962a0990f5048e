"""
Tests for exact amount parsing and truncated display

The two representations must never disagree in the user's disfavour:
the displayed value is always <= the exact value.
"""

import pytest

from vote_cart.cart.amounts import (
    MinRequiredAmount,
    format_amount,
    parse_amount,
    truncate_amount,
    truncate_minor,
)
from vote_cart.kernel.errors import ParseError


# =============================================================================
# Parsing
# =============================================================================


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1", 10**18),
        ("0.5", 5 * 10**17),
        (".25", 25 * 10**16),
        ("3.", 3 * 10**18),
        ("  0.002  ", 2 * 10**15),
        ("0.000000000000000001", 1),
        ("0", 0),
    ],
)
def test_parse_amount_accepts_plain_decimals(text: str, expected: int) -> None:
    """Test plain decimal strings convert exactly to minor units"""
    assert parse_amount(text) == expected


def test_parse_amount_is_exact_where_float_is_not() -> None:
    """Test 0.1 + 0.2 is exactly 0.3 in minor units"""
    assert parse_amount("0.1") + parse_amount("0.2") == parse_amount("0.3")


@pytest.mark.parametrize(
    "text",
    ["", "   ", ".", "-1", "+1", "1e18", "1,5", "1.2.3", "abc", "0x10", "١"],
)
def test_parse_amount_rejects_invalid_text(text: str) -> None:
    """Test invalid text raises ParseError instead of becoming zero"""
    with pytest.raises(ParseError) as exc_info:
        parse_amount(text)
    assert exc_info.value.raw == text


def test_parse_amount_rejects_excess_precision() -> None:
    """Test more fractional digits than the token supports is rejected"""
    with pytest.raises(ParseError, match="decimal places"):
        parse_amount("0.0000000000000000001")


def test_parse_amount_respects_custom_decimals() -> None:
    """Test a 6-decimal token"""
    assert parse_amount("1.5", decimals=6) == 1_500_000
    with pytest.raises(ParseError):
        parse_amount("1.0000001", decimals=6)


def test_parse_amount_rejects_non_string() -> None:
    """Test non-string input is a ParseError"""
    with pytest.raises(ParseError):
        parse_amount(1.5)  # type: ignore[arg-type]


# =============================================================================
# Formatting
# =============================================================================


def test_format_amount_strips_trailing_zeros() -> None:
    """Test exact rendering drops trailing zeros"""
    assert format_amount(2_000_000_002_000_000) == "0.002000000002"
    assert format_amount(10**18) == "1"
    assert format_amount(15 * 10**17) == "1.5"
    assert format_amount(0) == "0"


def test_truncate_amount_rounds_down_only() -> None:
    """Test display truncates, never rounds up"""
    assert truncate_amount(2_969_999_998_000_000) == "0.00296"
    assert truncate_amount(999_999_999_999_999_999) == "0.99999"
    assert truncate_amount(2_000_000_002_000_000) == "0.002"


def test_truncate_amount_zero_and_dust() -> None:
    """Test zero and sub-display amounts show as 0"""
    assert truncate_amount(0) == "0"
    assert truncate_amount(9_999_999_999_999) == "0"


def test_truncate_amount_negative_truncates_toward_zero() -> None:
    """Test negative magnitudes never grow"""
    assert truncate_amount(-2_969_999_998_000_000) == "-0.00296"
    assert truncate_minor(-2_969_999_998_000_000) == -2_960_000_000_000_000


def test_display_never_exceeds_exact() -> None:
    """Test re-parsing the display value never exceeds the exact value"""
    for text in ["0.002000000002", "1.999999999999999999", "12.3456789", "0.00001", "7"]:
        exact = parse_amount(text)
        shown = parse_amount(truncate_amount(exact))
        assert shown <= exact
        assert shown == truncate_minor(exact)


# =============================================================================
# Min required
# =============================================================================


def test_min_required_amount_has_both_representations() -> None:
    """Test exact and display forms of a non-round minimum"""
    minimum = MinRequiredAmount.from_exact(2_000_000_002_000_000)

    assert minimum.exact == 2_000_000_002_000_000
    assert minimum.exact_text == "0.002000000002"
    assert minimum.display == "0.002"
    assert parse_amount(minimum.display) <= minimum.exact
