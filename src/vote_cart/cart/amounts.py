"""
Monetary Arithmetic Helpers - exact amounts, truncated display

Amounts live as integer minor units (wei). Text only exists at the edges:
parse_amount turns what the user typed into an exact integer, and
format_amount / truncate_amount turn integers back into text.

Two rules keep the money honest:
- The exact path never touches float. 0.1 + 0.2 stays 0.3.
- Display values only ever round DOWN, so the minimum we show a user is
  never stricter than the minimum we enforce.
"""

import re

from pydantic import BaseModel, ConfigDict

from vote_cart.kernel.errors import ParseError

DEFAULT_TOKEN_DECIMALS = 18
DEFAULT_DISPLAY_DECIMALS = 5

# ASCII digits only: int() would happily accept Arabic-Indic digits
_AMOUNT_PATTERN = re.compile(r"^([0-9]*)(?:\.([0-9]*))?$")


def parse_amount(text: str, decimals: int = DEFAULT_TOKEN_DECIMALS) -> int:
    """
    Convert a human-entered decimal string to exact minor units

    Args:
        text: Decimal string such as "0.5", "12", ".25" or "3."
        decimals: Token decimals (minor units per token = 10**decimals)

    Returns:
        Exact amount in minor units

    Raises:
        ParseError: If text is empty, signed, uses exponents or separators,
            or has more fractional digits than the token supports

    Example:
        >>> parse_amount("0.002")
        2000000000000000
    """
    if not isinstance(text, str):
        raise ParseError(text, "expected a decimal string")

    match = _AMOUNT_PATTERN.match(text.strip())
    if match is None:
        raise ParseError(text, "not a plain decimal number")

    whole, fraction = match.group(1), match.group(2) or ""
    if not whole and not fraction:
        raise ParseError(text, "no digits")
    if len(fraction) > decimals:
        raise ParseError(text, f"more than {decimals} decimal places")

    scale = 10**decimals
    fraction_units = int(fraction.ljust(decimals, "0")) if decimals else 0
    return int(whole or "0") * scale + fraction_units


def format_amount(minor: int, decimals: int = DEFAULT_TOKEN_DECIMALS) -> str:
    """
    Render minor units as an exact decimal string without trailing zeros

    Example:
        >>> format_amount(2000000002000000)
        '0.002000000002'
    """
    sign = "-" if minor < 0 else ""
    whole, fraction = divmod(abs(minor), 10**decimals)
    if decimals == 0 or fraction == 0:
        return f"{sign}{whole}"
    fraction_text = f"{fraction:0{decimals}d}".rstrip("0")
    return f"{sign}{whole}.{fraction_text}"


def truncate_amount(
    minor: int,
    places: int = DEFAULT_DISPLAY_DECIMALS,
    decimals: int = DEFAULT_TOKEN_DECIMALS,
) -> str:
    """
    Render minor units truncated (never rounded) to ``places`` decimals

    Negative values truncate toward zero, so the magnitude shown is never
    larger than the real one.

    Example:
        >>> truncate_amount(2969999998000000)
        '0.00296'
    """
    if places >= decimals:
        return format_amount(minor, decimals)

    step = 10 ** (decimals - places)
    magnitude = (abs(minor) // step) * step
    if magnitude == 0:
        return "0"
    return format_amount(-magnitude if minor < 0 else magnitude, decimals)


def truncate_minor(
    minor: int,
    places: int = DEFAULT_DISPLAY_DECIMALS,
    decimals: int = DEFAULT_TOKEN_DECIMALS,
) -> int:
    """The exact value a truncated display string stands for"""
    if places >= decimals:
        return minor
    step = 10 ** (decimals - places)
    magnitude = (abs(minor) // step) * step
    return -magnitude if minor < 0 else magnitude


class MinRequiredAmount(BaseModel):
    """
    A minimum in both of its representations

    Attributes:
        exact: Minor units used for every comparison and contract call
        exact_text: Exact decimal rendering (e.g. "0.002000000002")
        display: Truncated rendering shown and pre-filled (e.g. "0.002")
    """

    model_config = ConfigDict(frozen=True)

    exact: int
    exact_text: str
    display: str

    @classmethod
    def from_exact(
        cls,
        exact: int,
        decimals: int = DEFAULT_TOKEN_DECIMALS,
        places: int = DEFAULT_DISPLAY_DECIMALS,
    ) -> "MinRequiredAmount":
        return cls(
            exact=exact,
            exact_text=format_amount(exact, decimals),
            display=truncate_amount(exact, places, decimals),
        )
