"""
Vote Cart Commands - what the UI asks the store to do

AddVoteIntent is the only structured input: everything else (remove,
edit amount, flip direction) is a plain call with an item id.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vote_cart.cart.models import Curve, Direction, ExistingPosition, NewClaimData


class AddVoteIntent(BaseModel):
    """
    Stage a vote on one subject

    Requirements:
    - A subject key, or a label plus pending_creation in new-claim mode
    - amount > 0 in minor units (parse user text with parse_amount first)
    - An opposing existing_position is only accepted with
      redeem_confirmed, which the direction-change flow sets
    """

    model_config = ConfigDict(frozen=True)

    subject_key: str | None = None
    subject_label: str = Field(default="", max_length=200)
    relation_id: str = Field(..., min_length=1)
    forward_claim_id: str | None = None
    reverse_claim_id: str | None = None
    direction: Direction
    curve: Curve = Curve.LINEAR
    amount: int = Field(..., gt=0)
    existing_position: ExistingPosition | None = None
    extra_redemptions: tuple[ExistingPosition, ...] = ()
    redeem_confirmed: bool = False
    is_new_claim: bool = False
    pending_creation: NewClaimData | None = None

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # A subject that does not exist cannot have an existing claim
        pending = data.get("pending_creation")
        if pending is not None:
            data["is_new_claim"] = True
        if not data.get("subject_label"):
            if data.get("subject_key"):
                data["subject_label"] = data["subject_key"]
            elif isinstance(pending, NewClaimData):
                data["subject_label"] = pending.name
            elif isinstance(pending, dict) and pending.get("name"):
                data["subject_label"] = pending["name"]
        return data

    @model_validator(mode="after")
    def _subject_is_identified(self) -> "AddVoteIntent":
        if self.subject_key is None and self.pending_creation is None:
            raise ValueError(
                "subject_key is required unless the subject is pending creation"
            )
        if not self.subject_label:
            raise ValueError("subject_label must not be empty")
        return self

    @property
    def needs_withdraw(self) -> bool:
        return (
            self.existing_position is not None
            and self.existing_position.direction != self.direction
        )
