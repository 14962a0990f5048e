"""
Cart validation - is the staged cart submittable?

Pure function of (cart, config). Produces human-readable messages rather
than raising: the UI shows every problem at once and disables submit.
"""

from pydantic import BaseModel, ConfigDict

from vote_cart.cart.amounts import truncate_amount
from vote_cart.cart.models import Cart
from vote_cart.costs.minimums import min_required_exact
from vote_cart.kernel.protocol import ProtocolConfig
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings

# Shortfalls below this many display units are shown as "minimum required"
SMALL_SHORTFALL_DIGITS = 4


class CartValidation(BaseModel):
    """Validation outcome with every error found"""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: tuple[str, ...] = ()


def validate_cart(
    cart: Cart | None,
    config: ProtocolConfig | None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> CartValidation:
    """
    Check every item against the protocol minimums

    An item passes when amount + tolerance >= its minimum. The tolerance
    absorbs non-round creation costs: "0.002" passes against an exact
    minimum of 0.002000000002.

    Returns:
        CartValidation with is_valid=False and the messages to show
    """
    if cart is None:
        return CartValidation(is_valid=False, errors=("Cart not initialized",))
    if cart.is_empty():
        return CartValidation(is_valid=False, errors=("Cart is empty",))
    if config is None:
        return CartValidation(is_valid=False, errors=("Protocol configuration not loaded",))

    decimals = settings.token_decimals
    places = settings.display_decimals
    symbol = settings.token_symbol
    small_shortfall = 10 ** max(decimals - SMALL_SHORTFALL_DIGITS, 0)

    errors: list[str] = []
    for item in cart.items:
        minimum = min_required_exact(config, item.is_new_claim)

        if item.amount + settings.validation_tolerance < minimum:
            missing = minimum - item.amount
            if missing < small_shortfall:
                errors.append(
                    f'"{item.subject_label}": minimum required '
                    f"{truncate_amount(minimum, places, decimals)} {symbol}"
                )
            else:
                errors.append(
                    f'"{item.subject_label}": missing '
                    f"{truncate_amount(missing, places, decimals)} {symbol}"
                )

        if item.amount <= 0:
            errors.append(f"{item.subject_label}: invalid amount")

    return CartValidation(is_valid=not errors, errors=tuple(errors))
