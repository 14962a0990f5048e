"""
Protocol configuration and the providers that supply it

The protocol's fees and creation costs are read from chain by an external
collaborator. The engine only ever sees the exact integers, and must
cope with them being temporarily unavailable.
"""

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class FeeRatio(BaseModel):
    """
    A fee expressed as an exact integer ratio

    ``FeeRatio(numerator=5, denominator=100)`` is a 5% fee. Fees always
    round down, so the engine never over-charges in its estimates.
    """

    model_config = ConfigDict(frozen=True)

    numerator: int = Field(ge=0)
    denominator: int = Field(gt=0)

    def fee_on(self, amount: int) -> int:
        """Fee charged on ``amount``, rounded down"""
        return amount * self.numerator // self.denominator

    def apply(self, amount: int) -> int:
        """``amount`` scaled by this ratio, rounded down"""
        return amount * self.numerator // self.denominator

    def invert(self, amount: int) -> int:
        """Largest x with apply(x) <= amount (for amount >= 0)"""
        if self.numerator == 0:
            raise ValueError("cannot invert a zero ratio")
        return amount * self.denominator // self.numerator

    def multiplier(self) -> "FeeRatio":
        """Cost multiplier including the fee, e.g. 5/100 -> 105/100"""
        return FeeRatio(
            numerator=self.denominator + self.numerator,
            denominator=self.denominator,
        )


class ProtocolConfig(BaseModel):
    """
    Protocol constants in exact minor units

    Attributes:
        min_deposit: Smallest deposit accepted into a vault
        claim_creation_cost: Cost of creating one claim, drawn from the deposit
        subject_creation_cost: Cost of creating a brand-new subject
        entry_fee: Fee on the effective deposit
        exit_fee: Fee on redeemed shares
    """

    model_config = ConfigDict(frozen=True)

    min_deposit: int = Field(ge=0)
    claim_creation_cost: int = Field(ge=0)
    subject_creation_cost: int = Field(default=0, ge=0)
    entry_fee: FeeRatio
    exit_fee: FeeRatio = FeeRatio(numerator=0, denominator=1)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ProtocolConfig":
        """
        Build from either the snake_case shape or the on-chain reader's shape

        The chain reader reports ``minDeposit``, ``tripleCost``, ``atomCost``,
        ``entryFee``, ``exitFee`` and ``feeDenominator`` as integer strings
        (fees in basis points of ``feeDenominator``).
        """
        if "entry_fee" in data:
            return cls.model_validate(data)

        denominator = int(data["feeDenominator"])
        return cls(
            min_deposit=int(data["minDeposit"]),
            claim_creation_cost=int(data["tripleCost"]),
            subject_creation_cost=int(data.get("atomCost", 0)),
            entry_fee=FeeRatio(numerator=int(data["entryFee"]), denominator=denominator),
            exit_fee=FeeRatio(numerator=int(data.get("exitFee", 0)), denominator=denominator),
        )


class ProtocolConfigProvider(Protocol):
    """Supplies the current protocol configuration, or None while loading"""

    def get(self) -> ProtocolConfig | None:
        ...


class BalanceProvider(Protocol):
    """Supplies the user's current balance in minor units, or None if unknown"""

    def get_balance(self) -> int | None:
        ...


class StaticConfigProvider:
    """Config provider holding a value set by the caller"""

    def __init__(self, config: ProtocolConfig | None = None) -> None:
        self.config = config

    def get(self) -> ProtocolConfig | None:
        return self.config


class StaticBalanceProvider:
    """Balance provider holding a value set by the caller"""

    def __init__(self, balance: int | None = None) -> None:
        self.balance = balance

    def get_balance(self) -> int | None:
        return self.balance
