"""
VoteSession - Main façade

Wires one cart store to the protocol configuration and balance providers
and exposes every derived view (costs, affordability, validation, curve
availability). Nothing derived is cached: each call reads the current
cart, config and balance, so a new balance reading is reflected
immediately.

Example:
    >>> from vote_cart import VoteSession
    >>> session = VoteSession.open("carts.db", config=config, balance=10**18)
    >>> session.store.init("founder-1", "Ada Lovelace")
    >>> session.store.add_item(AddVoteIntent(subject_key="0xabc", ...))
    >>> session.cost_summary().net_cost
    >>> session.affordability().global_can_afford
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from vote_cart.affordability.analyzer import AffordabilityReport, affordability_for_config
from vote_cart.cart.amounts import MinRequiredAmount
from vote_cart.cart.models import Cart, Direction, NewClaimData, VoteIntent
from vote_cart.cart.storage import InMemoryCartStorage, SQLiteCartStorage
from vote_cart.cart.store import VoteCartStore
from vote_cart.cart.validation import CartValidation, validate_cart
from vote_cart.costs.minimums import min_required_amount
from vote_cart.costs.summary import CostSummary, compute_cost_summary
from vote_cart.curves.availability import (
    CurveAvailability,
    PositionSnapshot,
    compute_curve_availability,
)
from vote_cart.curves.direction_change import DirectionChangeFlow
from vote_cart.kernel.errors import CartNotInitialized, ConfigUnavailable
from vote_cart.kernel.ids import IdFactory, default_id_factory
from vote_cart.kernel.logging import get_logger
from vote_cart.kernel.protocol import (
    BalanceProvider,
    ProtocolConfig,
    ProtocolConfigProvider,
    StaticBalanceProvider,
    StaticConfigProvider,
)
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings
from vote_cart.kernel.time import TimeProvider

logger = get_logger(__name__)


class CartSnapshot(BaseModel):
    """What the submission collaborator consumes: the cart and its costs"""

    model_config = ConfigDict(frozen=True)

    cart: Cart
    cost_summary: CostSummary | None


class VoteSession:
    """
    Vote cart session façade

    Provides one entry point for:
    - Cart mutations (through ``store``)
    - Cost summary and affordability
    - Validation before submission
    - Curve availability and direction changes
    """

    def __init__(
        self,
        store: VoteCartStore,
        config_provider: ProtocolConfigProvider | None = None,
        balance_provider: BalanceProvider | None = None,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.store = store
        self.config_provider = config_provider or store.config_provider
        self.balance_provider = balance_provider or StaticBalanceProvider()
        self.settings = settings

    @classmethod
    def open(
        cls,
        sqlite_path: str | Path | None = None,
        *,
        config: ProtocolConfig | None = None,
        balance: int | None = None,
        settings: EngineSettings = DEFAULT_SETTINGS,
        id_factory: IdFactory = default_id_factory,
        time_provider: TimeProvider | None = None,
    ) -> "VoteSession":
        """
        Build a session with static providers

        Args:
            sqlite_path: SQLite database for cart snapshots, in-memory if None
            config: Protocol configuration, None while loading
            balance: User balance in minor units, None if unknown
        """
        if sqlite_path is None:
            storage = InMemoryCartStorage(time_provider, settings)
        else:
            storage = SQLiteCartStorage(sqlite_path, time_provider, settings)

        config_provider = StaticConfigProvider(config)
        store = VoteCartStore(
            storage, config_provider, id_factory=id_factory, settings=settings
        )
        return cls(store, config_provider, StaticBalanceProvider(balance), settings)

    @property
    def cart(self) -> Cart | None:
        return self.store.cart

    def _items(self) -> tuple[VoteIntent, ...]:
        cart = self.store.cart
        return cart.items if cart is not None else ()

    # ==========================================================================
    # Derived views
    # ==========================================================================

    def cost_summary(self) -> CostSummary | None:
        """Cart costs, None while the protocol configuration is loading"""
        return compute_cost_summary(self._items(), self.config_provider.get())

    def affordability(self) -> AffordabilityReport | None:
        """Affordability against the current balance, None if config or balance is unknown"""
        return affordability_for_config(
            self._items(),
            self.balance_provider.get_balance(),
            self.config_provider.get(),
        )

    def validation(self) -> CartValidation:
        return validate_cart(self.store.cart, self.config_provider.get(), self.settings)

    def curve_availability(
        self,
        direction: Direction | None,
        positions: PositionSnapshot,
        subject_key: str | None,
        subject_label: str | None = None,
    ) -> CurveAvailability:
        return compute_curve_availability(
            direction, positions, self._items(), subject_key, subject_label
        )

    def direction_change(self, positions: PositionSnapshot) -> DirectionChangeFlow:
        return DirectionChangeFlow(positions, self.settings)

    def min_required(
        self,
        is_new_claim: bool,
        pending_creation: NewClaimData | None = None,
    ) -> MinRequiredAmount | None:
        """Minimum deposit for an intent, None while the configuration is loading"""
        config = self.config_provider.get()
        if config is None:
            return None
        return min_required_amount(config, is_new_claim, pending_creation, self.settings)

    def require_config(self) -> ProtocolConfig:
        """
        Get the protocol configuration or fail

        Raises:
            ConfigUnavailable: If the configuration has not loaded yet
        """
        config = self.config_provider.get()
        if config is None:
            raise ConfigUnavailable("compute costs")
        return config

    # ==========================================================================
    # Submission hand-off
    # ==========================================================================

    def snapshot(self) -> CartSnapshot:
        """
        Freeze the cart and its costs for the submission collaborator

        Raises:
            CartNotInitialized: If no cart is open
        """
        cart = self.store.cart
        if cart is None:
            raise CartNotInitialized("snapshot cart")
        return CartSnapshot(cart=cart, cost_summary=compute_cost_summary(cart.items, self.config_provider.get()))

    def complete_submission(self) -> None:
        """Clear the cart after the batch was submitted successfully"""
        cart = self.store.cart
        if cart is None:
            raise CartNotInitialized("complete submission")
        logger.info("Batch submitted, clearing cart", scope_id=cart.scope_id, item_count=cart.item_count)
        self.store.clear_cart()
