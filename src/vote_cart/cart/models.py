"""
Vote Cart Domain Models - staged votes and the cart that holds them

Every model is frozen: the store replaces the cart wholesale on each
mutation, so any snapshot a caller holds stays exactly as it was read.

Key concepts:
- Direction: support or oppose one claim (its two vaults)
- Curve: one of two independent pricing curves a position can sit on
- VoteIntent: one staged deposit, possibly preceded by a redemption
- Cart: the ordered intents staged for one subject scope
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    """Vote direction on a claim"""

    SUPPORT = "support"  # deposit into the claim's forward vault
    OPPOSE = "oppose"  # deposit into the claim's reverse vault

    def opposite(self) -> "Direction":
        return Direction.OPPOSE if self is Direction.SUPPORT else Direction.SUPPORT

    def label(self) -> str:
        return self.value.capitalize()


class Curve(str, Enum):
    """
    Pricing curve of a position

    A user may hold both curves at once, but only in the same direction.
    """

    LINEAR = "linear"
    PROGRESSIVE = "progressive"

    def other(self) -> "Curve":
        return Curve.PROGRESSIVE if self is Curve.LINEAR else Curve.LINEAR

    def label(self) -> str:
        return self.value.capitalize()


class NewClaimData(BaseModel):
    """
    Data for a subject that does not exist on chain yet

    Attributes:
        name: Label of the subject to create
        category: Category the subject is filed under
        category_key: On-chain id of the category, None if it is new too
        is_new_category: Whether the category must also be created
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    category_key: str | None = None
    is_new_category: bool = False


class ExistingPosition(BaseModel):
    """
    Snapshot of a position the user already holds on the same claim

    Old snapshots stored before curves existed load as linear.
    """

    model_config = ConfigDict(frozen=True)

    direction: Direction
    curve: Curve = Curve.LINEAR
    shares: int = Field(ge=0)


class VoteIntent(BaseModel):
    """
    A single staged vote

    ``subject_key`` is None when the subject is pending creation; the
    intent is then identified by ``subject_label`` and carries
    ``pending_creation``.

    Attributes:
        id: Opaque item ID, never reused
        subject_key: On-chain subject id, or None in new-claim mode
        subject_label: Human-readable subject name
        relation_id: Relation (predicate) id, immutable once added
        forward_claim_id: Support vault id, None if the claim is new
        reverse_claim_id: Oppose vault id, None if the claim is new
        direction: Vote direction
        curve: Pricing curve
        amount: Deposit in minor units
        existing_position: Position already held on this claim
        extra_redemptions: Further positions to redeem (both-curve redemption)
        redeem_confirmed: Set by the direction-change flow once the user
            has chosen which opposing shares to redeem
        is_new_claim: Whether submission must create the claim first
        pending_creation: Creation data when the subject itself is new
    """

    model_config = ConfigDict(frozen=True)

    id: str
    subject_key: str | None = None
    subject_label: str = Field(min_length=1)
    relation_id: str
    forward_claim_id: str | None = None
    reverse_claim_id: str | None = None
    direction: Direction
    curve: Curve = Curve.LINEAR
    amount: int = Field(ge=0)
    existing_position: ExistingPosition | None = None
    extra_redemptions: tuple[ExistingPosition, ...] = ()
    redeem_confirmed: bool = False
    is_new_claim: bool = False
    pending_creation: NewClaimData | None = None

    @property
    def needs_withdraw(self) -> bool:
        """Whether an opposing position must be redeemed before the deposit"""
        return (
            self.existing_position is not None
            and self.existing_position.direction != self.direction
        )

    @property
    def creates_subject(self) -> bool:
        return self.pending_creation is not None

    def redemptions(self) -> list[ExistingPosition]:
        """Opposing positions the submission must redeem first"""
        if not self.needs_withdraw:
            return []
        positions = [self.existing_position, *self.extra_redemptions]
        return [p for p in positions if p is not None and p.direction != self.direction]

    def is_for_subject(self, subject_key: str | None, subject_label: str | None = None) -> bool:
        """Match by key, or by label when the subject has no key yet"""
        if subject_key is None:
            return self.subject_key is None and self.subject_label == subject_label
        return self.subject_key == subject_key

    def match_key(self) -> tuple[tuple[str, str], Direction, Curve]:
        """Identity under which additions accumulate"""
        subject = (
            ("key", self.subject_key)
            if self.subject_key is not None
            else ("label", self.subject_label)
        )
        return (subject, self.direction, self.curve)


class Cart(BaseModel):
    """
    All intents staged for one subject scope

    Insertion order is kept: it drives display and the affordability
    evaluation order.

    Invariant: at most one intent per (subject, direction, curve).
    """

    model_config = ConfigDict(frozen=True)

    scope_id: str
    scope_label: str
    items: tuple[VoteIntent, ...] = ()

    @property
    def item_count(self) -> int:
        return len(self.items)

    def is_empty(self) -> bool:
        return not self.items

    def get(self, item_id: str) -> VoteIntent | None:
        """Get item by ID"""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def find(
        self,
        subject_key: str | None,
        subject_label: str | None,
        direction: Direction,
        curve: Curve,
    ) -> VoteIntent | None:
        """Find the item holding a (subject, direction, curve) slot"""
        for item in self.items:
            if (
                item.is_for_subject(subject_key, subject_label)
                and item.direction == direction
                and item.curve == curve
            ):
                return item
        return None

    def get_item(
        self,
        subject_key: str,
        direction: Direction | None = None,
        curve: Curve | None = None,
    ) -> VoteIntent | None:
        """First item for a subject, optionally narrowed by direction and curve"""
        for item in self.items:
            if item.subject_key != subject_key:
                continue
            if direction is not None and item.direction != direction:
                continue
            if curve is not None and item.curve != curve:
                continue
            return item
        return None

    def has_item(
        self,
        subject_key: str,
        direction: Direction | None = None,
        curve: Curve | None = None,
    ) -> bool:
        return self.get_item(subject_key, direction, curve) is not None

    def items_for_subject(
        self, subject_key: str | None, subject_label: str | None = None
    ) -> list[VoteIntent]:
        """All items (up to four: two directions x two curves) for one subject"""
        return [i for i in self.items if i.is_for_subject(subject_key, subject_label)]

    def total_amount(self) -> int:
        return sum(item.amount for item in self.items)

    def with_items(self, items: list[VoteIntent] | tuple[VoteIntent, ...]) -> "Cart":
        """New cart with the same scope and the given items"""
        return self.model_copy(update={"items": tuple(items)})
