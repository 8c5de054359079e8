"""
Engine configuration.

Every tunable of the accounting and sync engine lives here, with defaults
taken from core.constants. Any field can be overridden from the environment
as ``PORTFOLIO_<FIELD>``.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict, SettingsError

from portfolio_engine.core import constants
from portfolio_engine.core.exceptions.engine import ConfigurationError

ENV_PREFIX = "PORTFOLIO_"


class EngineConfig(BaseSettings):
    """Validated engine settings."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    sync_interval_seconds: float = Field(
        default=constants.SYNC_INTERVAL_SECONDS, gt=0, description="Market poll interval"
    )
    signal_ttl_seconds: float = Field(
        default=constants.SIGNAL_TTL_SECONDS, gt=0, description="Direction signal window"
    )
    allocation_threshold_percent: Decimal = Field(
        default=constants.ALLOCATION_THRESHOLD_PERCENT,
        ge=0,
        le=100,
        description="Slices below this percentage merge into the other slice",
    )
    dust_min_value: Decimal = Field(default=constants.MIN_DISPLAY_VALUE, ge=0)
    dust_min_quantity: Decimal = Field(default=constants.MIN_DISPLAY_QUANTITY, ge=0)
    close_epsilon: Decimal = Field(
        default=constants.CLOSE_POSITION_EPSILON,
        ge=0,
        description="Held quantity at or below this closes a position",
    )
    max_transaction_amount: Decimal = Field(default=constants.MAX_TRANSACTION_AMOUNT, gt=0)
    api_base_url: str = Field(default=constants.DEFAULT_API_BASE_URL)
    feed_base_url: str = Field(default=constants.DEFAULT_FEED_BASE_URL)
    request_timeout_seconds: float = Field(default=constants.REQUEST_TIMEOUT_SECONDS, gt=0)
    cash_label: str = Field(default=constants.CASH_SLICE_LABEL, min_length=1)
    cash_name: str = Field(default=constants.CASH_SLICE_NAME, min_length=1)
    other_label: str = Field(default=constants.OTHER_SLICE_LABEL, min_length=1)
    other_name: str = Field(default=constants.OTHER_SLICE_NAME, min_length=1)
    market_symbols: Annotated[tuple[str, ...], NoDecode] = Field(
        default=constants.DEFAULT_MARKET_SYMBOLS,
        min_length=1,
        description="Instruments polled for the market view",
    )

    @field_validator("market_symbols", mode="before")
    @classmethod
    def validate_market_symbols(cls, v: object) -> object:
        """Accept a comma-separated string and normalize symbols to upper case."""
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, list | tuple):
            symbols = [str(s).strip().upper() for s in v]
            return tuple(dict.fromkeys(s for s in symbols if s))
        return v

    @field_validator("api_base_url", "feed_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate that base URLs are http(s) and strip the trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Base URL must start with http:// or https://, got {v}")
        return v.rstrip("/")

    @field_validator("signal_ttl_seconds")
    @classmethod
    def validate_signal_ttl(cls, v: float, info) -> float:
        """Validate that a signal expires before the next poll."""
        interval = info.data.get("sync_interval_seconds")
        if interval is not None and v >= interval:
            raise ValueError(
                f"signal_ttl_seconds ({v}) must be shorter than sync_interval_seconds ({interval})"
            )
        return v


def load_config(**overrides: object) -> EngineConfig:
    """Build a config from the environment plus explicit overrides.

    Keyword overrides win over ``PORTFOLIO_*`` variables, which win over the
    defaults.

    Raises:
        ConfigurationError: If any value is invalid
    """
    try:
        return EngineConfig(**overrides)  # type: ignore[arg-type]
    except (ValidationError, SettingsError) as e:
        raise ConfigurationError(f"Invalid engine configuration: {e}") from e
