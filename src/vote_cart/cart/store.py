"""
Vote Cart Store - owns the staged votes for one subject scope

The store is the only place a cart changes. Every mutation:
1. Validates (exclusivity rule, item exists, amount parses)
2. Builds a new immutable Cart
3. Persists it (save when non-empty, remove when empty)
4. Notifies subscribers

Derived values (costs, affordability) are never kept here; they are
pure functions of the cart snapshot the caller reads.
"""

from collections.abc import Callable

from vote_cart.cart.amounts import parse_amount
from vote_cart.cart.commands import AddVoteIntent
from vote_cart.cart.models import Cart, Curve, Direction, VoteIntent
from vote_cart.cart.storage import CartStorage
from vote_cart.costs.minimums import min_required_exact
from vote_cart.kernel.errors import (
    CartItemNotFound,
    CartNotInitialized,
    OppositeDirectionInCart,
    OppositePositionHeld,
    ParseError,
)
from vote_cart.kernel.ids import IdFactory, default_id_factory
from vote_cart.kernel.logging import LogOperation, get_logger
from vote_cart.kernel.metrics import (
    amount_parse_failures_total,
    invariant_rejections_total,
    items_repaired_total,
    persistence_failures_total,
    record_mutation,
)
from vote_cart.kernel.protocol import ProtocolConfigProvider, StaticConfigProvider
from vote_cart.kernel.settings import DEFAULT_SETTINGS, EngineSettings

logger = get_logger(__name__)

CartListener = Callable[[Cart], None]


class VoteCartStore:
    """
    Single owned cart with subscribe/notify semantics

    One store per UI session (or per test). Sibling views share it by
    subscribing rather than through global state.
    """

    def __init__(
        self,
        storage: CartStorage,
        config_provider: ProtocolConfigProvider | None = None,
        *,
        id_factory: IdFactory = default_id_factory,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        """
        Initialize the store with its collaborators

        Args:
            storage: Persistence backend (load/save/remove by scope)
            config_provider: Protocol configuration, used to repair restored carts
            id_factory: Item ID generation (injectable for testing)
            settings: Engine settings (token decimals)
        """
        self.storage = storage
        self.config_provider = config_provider or StaticConfigProvider()
        self.id_factory = id_factory
        self.settings = settings
        self._cart: Cart | None = None
        self._listeners: list[CartListener] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def cart(self) -> Cart | None:
        """Current cart snapshot (None before init)"""
        return self._cart

    @property
    def item_count(self) -> int:
        return self._cart.item_count if self._cart else 0

    def has_item(
        self,
        subject_key: str,
        direction: Direction | None = None,
        curve: Curve | None = None,
    ) -> bool:
        return self._cart is not None and self._cart.has_item(subject_key, direction, curve)

    def get_item(
        self,
        subject_key: str,
        direction: Direction | None = None,
        curve: Curve | None = None,
    ) -> VoteIntent | None:
        if self._cart is None:
            return None
        return self._cart.get_item(subject_key, direction, curve)

    def items_for_subject(self, subject_key: str) -> list[VoteIntent]:
        if self._cart is None:
            return []
        return self._cart.items_for_subject(subject_key)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """
        Register a listener called with the new cart after every change

        Returns:
            Callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, cart: Cart) -> None:
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception as e:
                # Remaining listeners still run
                logger.error(
                    "Cart listener failed",
                    scope_id=cart.scope_id,
                    error=str(e),
                    exc_info=True,
                )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, scope_id: str, scope_label: str) -> Cart:
        """
        Enter a voting context for a scope

        Restores the persisted cart if there is one, raising any item below
        the current protocol minimum up to it. Never raises: a failed load
        starts an empty cart.
        """
        with LogOperation(logger, "init_cart", scope_id=scope_id):
            restored = self._load(scope_id)
            if restored is None:
                self._cart = Cart(scope_id=scope_id, scope_label=scope_label)
                self._notify(self._cart)
                return self._cart

            logger.info(
                "Restored cart from storage",
                scope_id=scope_id,
                item_count=restored.item_count,
            )
            repaired, changed = self._repair(restored)
            self._cart = repaired
            if changed:
                self._save(repaired)
            self._notify(repaired)
            return repaired

    def _repair(self, cart: Cart) -> tuple[Cart, bool]:
        config = self.config_provider.get()
        if config is None:
            return cart, False

        items: list[VoteIntent] = []
        changed = False
        for item in cart.items:
            minimum = min_required_exact(config, item.is_new_claim)
            if item.amount < minimum:
                logger.warning(
                    "Raising restored item to protocol minimum",
                    scope_id=cart.scope_id,
                    item_id=item.id,
                    subject=item.subject_label,
                    previous=item.amount,
                    minimum=minimum,
                )
                items_repaired_total.inc()
                item = item.model_copy(update={"amount": minimum})
                changed = True
            items.append(item)
        return cart.with_items(items), changed

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, command: AddVoteIntent) -> VoteIntent:
        """
        Stage a vote, accumulating into an existing slot if one matches

        Slots are (subject, direction, curve); a subject without a key
        matches by label.

        Returns:
            The new or accumulated cart item

        Raises:
            CartNotInitialized: If init() was not called
            OppositeDirectionInCart: If the cart stages the other direction
                for the same subject
            OppositePositionHeld: If an opposing position is held and was not
                marked for redemption through the direction-change flow
        """
        cart = self._require_cart("add item")
        self._check_cart_conflict(
            cart,
            subject_key=command.subject_key,
            subject_label=command.subject_label,
            direction=command.direction,
        )
        if command.needs_withdraw and not command.redeem_confirmed:
            invariant_rejections_total.labels(rule="opposite_position").inc()
            record_mutation("add_item", status="rejected")
            raise OppositePositionHeld(
                subject=command.subject_label,
                direction=command.direction.value,
                held_direction=command.existing_position.direction.value,
                curve=command.existing_position.curve.value,
            )

        existing = cart.find(
            command.subject_key, command.subject_label, command.direction, command.curve
        )
        if existing is not None:
            updated = existing.model_copy(
                update={
                    "amount": existing.amount + command.amount,
                    "existing_position": command.existing_position,
                    "extra_redemptions": command.extra_redemptions,
                    "redeem_confirmed": command.redeem_confirmed,
                }
            )
            items = [updated if i.id == existing.id else i for i in cart.items]
            logger.info(
                "Accumulated amount into existing cart item",
                scope_id=cart.scope_id,
                item_id=existing.id,
                subject=command.subject_label,
                direction=command.direction.value,
                curve=command.curve.value,
            )
        else:
            updated = VoteIntent(
                id=self.id_factory.generate(),
                **command.model_dump(),
            )
            items = [*cart.items, updated]
            logger.info(
                "Added item to cart",
                scope_id=cart.scope_id,
                item_id=updated.id,
                subject=command.subject_label,
                direction=command.direction.value,
                curve=command.curve.value,
                item_count=len(items),
            )

        self._commit(cart.with_items(items))
        record_mutation("add_item")
        return updated

    def remove_item(self, item_id: str) -> None:
        cart = self._require_cart("remove item")
        self._require_item(cart, item_id)
        self._commit(cart.with_items([i for i in cart.items if i.id != item_id]))
        record_mutation("remove_item")
        logger.info("Removed item from cart", scope_id=cart.scope_id, item_id=item_id)

    def clear_cart(self) -> None:
        """Remove every item and discard the persisted snapshot"""
        cart = self._require_cart("clear cart")
        self._commit(cart.with_items([]))
        record_mutation("clear_cart")
        logger.info("Cleared cart", scope_id=cart.scope_id)

    def update_amount(self, item_id: str, amount_text: str) -> bool:
        """
        Replace one item's amount from user text

        Invalid text is a no-op: the previous amount is kept.

        Returns:
            True if the amount was replaced, False if the text was rejected
        """
        cart = self._require_cart("update amount")
        item = self._require_item(cart, item_id)

        try:
            amount = parse_amount(amount_text, self.settings.token_decimals)
        except ParseError as e:
            amount_parse_failures_total.inc()
            record_mutation("update_amount", status="rejected")
            logger.info(
                "Rejected amount input, keeping previous amount",
                scope_id=cart.scope_id,
                item_id=item_id,
                reason=e.reason,
            )
            return False

        updated = item.model_copy(update={"amount": amount})
        self._commit(cart.with_items([updated if i.id == item_id else i for i in cart.items]))
        record_mutation("update_amount")
        return True

    def update_direction(self, item_id: str, direction: Direction) -> VoteIntent:
        """
        Flip one item's direction, recomputing whether it needs a withdrawal

        Raises:
            OppositeDirectionInCart: If another item stages the new direction's
                opposite on the same subject
        """
        cart = self._require_cart("update direction")
        item = self._require_item(cart, item_id)
        if item.direction == direction:
            return item

        updated = item.model_copy(update={"direction": direction})
        self._check_cart_conflict(
            cart,
            subject_key=item.subject_key,
            subject_label=item.subject_label,
            direction=direction,
            ignore_item_id=item_id,
            operation="update_direction",
        )

        self._commit(cart.with_items([updated if i.id == item_id else i for i in cart.items]))
        record_mutation("update_direction")
        logger.info(
            "Changed item direction",
            scope_id=cart.scope_id,
            item_id=item_id,
            direction=direction.value,
            needs_withdraw=updated.needs_withdraw,
        )
        return updated

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_cart_conflict(
        self,
        cart: Cart,
        *,
        subject_key: str | None,
        subject_label: str,
        direction: Direction,
        ignore_item_id: str | None = None,
        operation: str = "add_item",
    ) -> None:
        for other in cart.items_for_subject(subject_key, subject_label):
            if other.id != ignore_item_id and other.direction == direction.opposite():
                invariant_rejections_total.labels(rule="opposite_in_cart").inc()
                record_mutation(operation, status="rejected")
                raise OppositeDirectionInCart(
                    subject=subject_label,
                    direction=direction.value,
                    conflicting_item_id=other.id,
                )

    def _require_cart(self, operation: str) -> Cart:
        if self._cart is None:
            raise CartNotInitialized(operation)
        return self._cart

    def _require_item(self, cart: Cart, item_id: str) -> VoteIntent:
        item = cart.get(item_id)
        if item is None:
            raise CartItemNotFound(scope_id=cart.scope_id, item_id=item_id)
        return item

    def _commit(self, cart: Cart) -> None:
        self._cart = cart
        if cart.is_empty():
            self._remove(cart.scope_id)
        else:
            self._save(cart)
        self._notify(cart)

    # Persistence boundary: nothing below raises past the store

    def _load(self, scope_id: str) -> Cart | None:
        try:
            return self.storage.load(scope_id)
        except Exception as e:
            persistence_failures_total.labels(operation="load").inc()
            logger.warning(
                "Failed to load cart snapshot, starting empty",
                scope_id=scope_id,
                error=str(e),
            )
            return None

    def _save(self, cart: Cart) -> None:
        try:
            self.storage.save(cart)
        except Exception as e:
            persistence_failures_total.labels(operation="save").inc()
            logger.warning("Failed to save cart snapshot", scope_id=cart.scope_id, error=str(e))

    def _remove(self, scope_id: str) -> None:
        try:
            self.storage.remove(scope_id)
        except Exception as e:
            persistence_failures_total.labels(operation="remove").inc()
            logger.warning("Failed to remove cart snapshot", scope_id=scope_id, error=str(e))
