"""
Cost Summary Calculator - what the staged cart costs overall

Key concepts:
- Creation costs are drawn FROM the deposits, never added on top
- Entry fees are charged on the effective deposit (deposits - claim creation)
- Redemptions of opposing shares come back net of the exit fee and
  reduce the net cost

Recomputed from scratch on every read; nothing here is cached.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from vote_cart.cart.amounts import truncate_amount
from vote_cart.cart.models import VoteIntent
from vote_cart.kernel.protocol import ProtocolConfig
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings


class CostSummaryDisplay(BaseModel):
    """Truncated strings for the summary panel"""

    model_config = ConfigDict(frozen=True)

    net_cost: str
    total_deposits: str
    claim_creation_costs: str
    effective_deposits: str
    estimated_entry_fees: str
    total_withdrawable: str


class CostSummary(BaseModel):
    """
    Aggregate cost of a cart in exact minor units

    Invariant: net_cost == total_deposits + estimated_entry_fees - total_withdrawable
    """

    model_config = ConfigDict(frozen=True)

    total_deposits: int = 0
    claim_creation_costs: int = 0
    subject_creation_costs: int = 0
    effective_deposits: int = 0
    estimated_entry_fees: int = 0
    total_withdrawable: int = 0
    net_cost: int = 0
    withdraw_count: int = 0
    new_claim_count: int = 0
    new_subject_count: int = 0

    def display(self, settings: EngineSettings = DEFAULT_SETTINGS) -> CostSummaryDisplay:
        decimals = settings.token_decimals
        places = settings.display_decimals
        return CostSummaryDisplay(
            net_cost=truncate_amount(self.net_cost, places, decimals),
            total_deposits=truncate_amount(self.total_deposits, places, decimals),
            claim_creation_costs=truncate_amount(self.claim_creation_costs, places, decimals),
            effective_deposits=truncate_amount(self.effective_deposits, places, decimals),
            estimated_entry_fees=truncate_amount(self.estimated_entry_fees, places, decimals),
            total_withdrawable=truncate_amount(self.total_withdrawable, places, decimals),
        )


def compute_cost_summary(
    items: Iterable[VoteIntent],
    config: ProtocolConfig | None,
) -> CostSummary | None:
    """
    Compute the cart's aggregate costs

    Args:
        items: Cart items in cart order
        config: Protocol configuration, None while it is still loading

    Returns:
        CostSummary, or None when config is unavailable (never a zeroed
        placeholder)

    Example:
        min_deposit=100, claim_creation_cost=50, entry fee 5/100 and one
        new-claim item of 200: claim costs 50, effective deposit 150,
        entry fees 7, net cost 207.
    """
    if config is None:
        return None

    total_deposits = 0
    claim_costs = 0
    subject_costs = 0
    withdrawable = 0
    withdraw_count = 0
    new_claims = 0
    new_subjects = 0

    for item in items:
        total_deposits += item.amount

        if item.is_new_claim:
            claim_costs += config.claim_creation_cost
            new_claims += 1
            if item.creates_subject:
                subject_costs += config.subject_creation_cost
                new_subjects += 1

        # Per item, before any merge: each redeemed position pays its own exit fee
        redemptions = item.redemptions()
        if redemptions:
            withdraw_count += 1
            for position in redemptions:
                withdrawable += position.shares - config.exit_fee.fee_on(position.shares)

    effective = max(0, total_deposits - claim_costs)
    entry_fees = config.entry_fee.fee_on(effective)

    return CostSummary(
        total_deposits=total_deposits,
        claim_creation_costs=claim_costs,
        subject_creation_costs=subject_costs,
        effective_deposits=effective,
        estimated_entry_fees=entry_fees,
        total_withdrawable=withdrawable,
        net_cost=total_deposits + entry_fees - withdrawable,
        withdraw_count=withdraw_count,
        new_claim_count=new_claims,
        new_subject_count=new_subjects,
    )
