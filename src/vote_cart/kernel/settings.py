"""
Engine Settings - tunables that are ours, not the protocol's

Protocol constants (fees, minimum deposit) come from the chain through
ProtocolConfig. Everything here is a product decision: how many decimals
the UI shows, how long a staged cart survives a closed tab, and how much
rounding dust validation forgives.
"""

from pydantic import BaseModel, ConfigDict, Field


class EngineSettings(BaseModel):
    """
    Engine-wide settings with conservative defaults

    Defaults match the production web app: an 18-decimal token, five
    display decimals, and carts that expire after a day.
    """

    model_config = ConfigDict(frozen=True)

    token_decimals: int = Field(
        default=18,
        ge=0,
        le=36,
        description="Decimals of the protocol token (minor units per whole token = 10**decimals)",
    )

    display_decimals: int = Field(
        default=5,
        ge=0,
        le=18,
        description="Decimal places shown to the user; display values are always truncated",
    )

    token_symbol: str = Field(
        default="TRUST",
        min_length=1,
        max_length=12,
        description="Symbol appended to amounts in user-facing messages",
    )

    cart_max_age_hours: int = Field(
        default=24,
        ge=1,
        le=24 * 30,
        description="Persisted carts older than this are discarded on load",
    )

    validation_tolerance: int = Field(
        default=10**11,
        ge=0,
        description=(
            "Minor units of slack when checking minimums, covering non-round "
            "creation costs such as 0.001000000002"
        ),
    )

    def one_token(self) -> int:
        """Minor units in one whole token"""
        return 10**self.token_decimals


DEFAULT_SETTINGS = EngineSettings()
