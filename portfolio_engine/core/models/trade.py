"""
Trade domain model.

A Trade is one immutable row of the backend ledger.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from portfolio_engine.core.enums import TradeKind
from portfolio_engine.core.exceptions.engine import ValidationError
from portfolio_engine.core.utils.validation import (
    validate_decimal,
    validate_non_negative,
    validate_positive,
    validate_symbol,
)


@dataclass(frozen=True)
class Trade:
    """Represents an executed ledger trade."""

    kind: TradeKind
    symbol: str
    quantity: Decimal
    unit_price: Decimal
    occurred_at: datetime
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        """Validate and normalize trade data after initialization."""
        if not isinstance(self.kind, TradeKind):
            raise ValidationError(f"Trade kind must be TradeKind, got {self.kind!r}")
        if not isinstance(self.occurred_at, datetime):
            raise ValidationError(f"occurred_at must be a datetime, got {self.occurred_at!r}")
        if self.occurred_at.tzinfo is None:
            # Naive ledger timestamps are UTC; mixing naive and aware breaks ordering
            object.__setattr__(self, "occurred_at", self.occurred_at.replace(tzinfo=UTC))

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "symbol", validate_symbol(self.symbol))
        quantity = validate_decimal(self.quantity, "quantity")
        unit_price = validate_decimal(self.unit_price, "unit_price")
        object.__setattr__(self, "quantity", validate_positive(quantity, "quantity"))
        object.__setattr__(self, "unit_price", validate_non_negative(unit_price, "unit_price"))

    def notional_value(self) -> Decimal:
        """Calculate the notional value of the trade."""
        return self.quantity * self.unit_price
