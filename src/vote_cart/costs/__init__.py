"""
Costs - minimum deposits and the aggregate cost of a cart
"""

from vote_cart.costs.minimums import (
    NEW_SUBJECT_CLAIM_UNITS,
    NEW_SUBJECT_NEW_CATEGORY_CLAIM_UNITS,
    claim_units,
    min_required_amount,
    min_required_exact,
)
from vote_cart.costs.summary import CostSummary, CostSummaryDisplay, compute_cost_summary

__all__ = [
    "NEW_SUBJECT_CLAIM_UNITS",
    "NEW_SUBJECT_NEW_CATEGORY_CLAIM_UNITS",
    "claim_units",
    "min_required_amount",
    "min_required_exact",
    "CostSummary",
    "CostSummaryDisplay",
    "compute_cost_summary",
]
