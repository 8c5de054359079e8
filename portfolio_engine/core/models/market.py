"""
Market data models.

PriceTick and DirectionSignal are ephemeral: the engine only keeps the
current and previous tick per symbol, and a signal only lives for its window.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from portfolio_engine.core.enums import Direction
from portfolio_engine.core.types.financial import parse_decimal_or_zero
from portfolio_engine.core.utils.validation import (
    validate_decimal,
    validate_positive,
    validate_symbol,
)


@dataclass(frozen=True)
class PriceTick:
    """One observed price for one symbol."""

    symbol: str
    price: Decimal
    observed_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", validate_symbol(self.symbol))
        object.__setattr__(self, "price", validate_decimal(self.price, "price"))


@dataclass(frozen=True)
class MarketQuote:
    """A row of the market list as reported by the price feed.

    ``change_rate`` keeps the feed's raw 24h change text; it is only ever used
    for display and sorting, where unparsable values count as zero.
    """

    symbol: str
    name: str
    price: Decimal
    change_rate: str = "0"

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", validate_symbol(self.symbol))
        price = validate_positive(validate_decimal(self.price, "price"), "price")
        object.__setattr__(self, "price", price)
        if not self.name:
            object.__setattr__(self, "name", self.symbol)

    @property
    def change_percent(self) -> Decimal:
        """24h change as a number, zero when the feed text is unparsable."""
        return parse_decimal_or_zero(self.change_rate)

    def to_tick(self, observed_at: datetime) -> PriceTick:
        """Convert the quote into a price tick."""
        return PriceTick(symbol=self.symbol, price=self.price, observed_at=observed_at)


@dataclass(frozen=True)
class DirectionSignal:
    """Transient up/down flag raised when a symbol's price changes between polls.

    ``expires_at`` is expressed on the monotonic clock of the signal board that
    issued it, not wall-clock time.
    """

    symbol: str
    direction: Direction
    expires_at: float

    def is_active(self, now: float) -> bool:
        """Check if the signal is still inside its window."""
        return self.direction != Direction.NONE and now < self.expires_at

    def direction_at(self, now: float) -> Direction:
        """Get the direction as seen at ``now``, reverting to NONE after expiry."""
        return self.direction if self.is_active(now) else Direction.NONE
