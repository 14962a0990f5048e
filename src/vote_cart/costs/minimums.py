"""
Minimum deposit requirements

Creating things on chain is paid out of the deposit, so the minimum an
intent must carry depends on how much it creates:

- Existing claim: min_deposit
- New claim on an existing subject: 1 claim + min_deposit
- Brand-new subject: 2 claims (3 if its category is new too) + min_deposit

All arithmetic is integer; the display value is derived last and
truncated.
"""

from vote_cart.cart.amounts import MinRequiredAmount
from vote_cart.cart.models import NewClaimData
from vote_cart.kernel.protocol import ProtocolConfig
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings

# Claims created alongside a new subject: subject->category link plus the vote claim
NEW_SUBJECT_CLAIM_UNITS = 2
# ...plus the category's own classification claim when the category is new
NEW_SUBJECT_NEW_CATEGORY_CLAIM_UNITS = 3


def claim_units(is_new_claim: bool, pending_creation: NewClaimData | None) -> int:
    """Number of claim-creation costs an intent draws from its deposit"""
    if pending_creation is not None:
        if pending_creation.is_new_category:
            return NEW_SUBJECT_NEW_CATEGORY_CLAIM_UNITS
        return NEW_SUBJECT_CLAIM_UNITS
    return 1 if is_new_claim else 0


def min_required_exact(
    config: ProtocolConfig,
    is_new_claim: bool,
    pending_creation: NewClaimData | None = None,
) -> int:
    """Exact minimum deposit in minor units"""
    units = claim_units(is_new_claim, pending_creation)
    return config.claim_creation_cost * units + config.min_deposit


def min_required_amount(
    config: ProtocolConfig,
    is_new_claim: bool,
    pending_creation: NewClaimData | None = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> MinRequiredAmount:
    """
    Minimum deposit in exact and display form

    Example:
        With claim_creation_cost = 1000000002000000 and min_deposit = 10**15,
        a new claim needs exact "0.002000000002" and displays "0.002".
    """
    exact = min_required_exact(config, is_new_claim, pending_creation)
    return MinRequiredAmount.from_exact(
        exact,
        decimals=settings.token_decimals,
        places=settings.display_decimals,
    )
