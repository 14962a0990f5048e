"""
Affordability - per-row badges and MAX buttons against the user's balance
"""

from vote_cart.affordability.analyzer import (
    AffordabilityReport,
    ItemAffordability,
    affordability_for_config,
    analyze_affordability,
    cost_with_fees,
    max_deposit_for_budget,
)

__all__ = [
    "AffordabilityReport",
    "ItemAffordability",
    "affordability_for_config",
    "analyze_affordability",
    "cost_with_fees",
    "max_deposit_for_budget",
]
