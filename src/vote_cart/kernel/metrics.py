"""
Prometheus metrics for the vote cart engine.

Counts what matters for product health: how often carts are mutated,
how often the exclusivity rule turns a vote away, and how often the
persistence layer lets us down.
"""

from prometheus_client import Counter

# ============================================================================
# Cart Mutation Metrics
# ============================================================================

cart_mutations_total = Counter(
    "votecart_mutations_total",
    "Total number of cart mutations",
    ["operation", "status"],  # status: success, rejected
)

amount_parse_failures_total = Counter(
    "votecart_amount_parse_failures_total",
    "Total number of rejected amount inputs",
)

items_repaired_total = Counter(
    "votecart_items_repaired_total",
    "Total number of restored items raised to the protocol minimum",
)

# ============================================================================
# Invariant Metrics
# ============================================================================

invariant_rejections_total = Counter(
    "votecart_invariant_rejections_total",
    "Total number of intents rejected by the direction exclusivity rule",
    ["rule"],  # rule: opposite_position, opposite_in_cart, curve_blocked
)

# ============================================================================
# Persistence Metrics
# ============================================================================

persistence_failures_total = Counter(
    "votecart_persistence_failures_total",
    "Total number of cart snapshot load/save/remove failures",
    ["operation"],
)


def record_mutation(operation: str, status: str = "success") -> None:
    """Increment the mutation counter for one store operation."""
    cart_mutations_total.labels(operation=operation, status=status).inc()
