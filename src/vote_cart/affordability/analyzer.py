"""
Affordability Analyzer - which staged votes the balance can actually pay for

Two questions per item:
- can_afford: does this row get a green badge or an "insufficient" one?
- max_affordable_amount: what the row's MAX button fills in

When the whole cart fits the balance, everything is affordable and we
stop there. Otherwise rows are walked in cart order (the order the user
edited them in; never sorted) and each row that fits what earlier rows
left over is committed. The MAX value is deliberately simpler: the room
left for a row if every other row keeps its amount.

This is not a knapsack solver and must not become one.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from vote_cart.cart.models import VoteIntent
from vote_cart.kernel.protocol import FeeRatio, ProtocolConfig


class ItemAffordability(BaseModel):
    """Affordability of one cart row"""

    model_config = ConfigDict(frozen=True)

    item_id: str
    cost_with_fees: int
    can_afford: bool
    max_affordable_amount: int


class AffordabilityReport(BaseModel):
    """
    Affordability of the whole cart against one balance reading

    Attributes:
        items: Per-item results keyed by item id, in cart order
        total_cost_with_fees: Sum of every row's cost including entry fees
        global_can_afford: Whether the whole cart fits the balance
        total_affordable: Rows reporting can_afford
        total_blocked: Rows reporting not can_afford
        shortfall: How much the total exceeds the balance (0 if it fits)
    """

    model_config = ConfigDict(frozen=True)

    user_balance: int
    items: dict[str, ItemAffordability]
    total_cost_with_fees: int
    global_can_afford: bool
    total_affordable: int
    total_blocked: int
    shortfall: int

    def for_item(self, item_id: str) -> ItemAffordability | None:
        return self.items.get(item_id)

    def blocked_ids(self) -> list[str]:
        return [item_id for item_id, a in self.items.items() if not a.can_afford]


def cost_with_fees(amount: int, multiplier: FeeRatio) -> int:
    """Deposit plus entry fee, e.g. 100 at 105/100 -> 105"""
    return multiplier.apply(amount)


def max_deposit_for_budget(budget: int, multiplier: FeeRatio) -> int:
    """Largest pre-fee deposit whose cost with fees fits ``budget``"""
    if budget <= 0 or multiplier.numerator == 0:
        return 0
    return multiplier.invert(budget)


def analyze_affordability(
    items: Iterable[VoteIntent],
    user_balance: int | None,
    multiplier: FeeRatio,
) -> AffordabilityReport | None:
    """
    Decide per-item and aggregate affordability

    Args:
        items: Cart items in cart order
        user_balance: Current balance in minor units, None if unknown
        multiplier: Entry fee multiplier, e.g. 105/100 for a 5% fee

    Returns:
        AffordabilityReport, or None when the balance is unknown

    Example:
        Balance 250 at 1/1 with three rows of 100: the total (300) does not
        fit, the first two rows are committed, the third is blocked with a
        max of 50.
    """
    if user_balance is None:
        return None

    rows = list(items)
    costs = [cost_with_fees(item.amount, multiplier) for item in rows]
    total = sum(costs)
    global_can_afford = total <= user_balance

    results: dict[str, ItemAffordability] = {}
    committed = 0
    for item, cost in zip(rows, costs):
        others = total - cost
        max_amount = max_deposit_for_budget(max(0, user_balance - others), multiplier)

        if global_can_afford:
            can_afford = True
        else:
            can_afford = committed + cost <= user_balance
            if can_afford:
                committed += cost

        results[item.id] = ItemAffordability(
            item_id=item.id,
            cost_with_fees=cost,
            can_afford=can_afford,
            max_affordable_amount=max_amount,
        )

    affordable = sum(1 for r in results.values() if r.can_afford)
    return AffordabilityReport(
        user_balance=user_balance,
        items=results,
        total_cost_with_fees=total,
        global_can_afford=global_can_afford,
        total_affordable=affordable,
        total_blocked=len(results) - affordable,
        shortfall=max(0, total - user_balance),
    )


def affordability_for_config(
    items: Iterable[VoteIntent],
    user_balance: int | None,
    config: ProtocolConfig | None,
) -> AffordabilityReport | None:
    """Affordability using the protocol's entry fee; None if config or balance is missing"""
    if config is None:
        return None
    return analyze_affordability(items, user_balance, config.entry_fee.multiplier())
