"""
Position domain model.

Positions are derived values: they are rebuilt from the ledger, the account
quantities and the latest prices on every refresh and never edited in place.
"""

from dataclasses import dataclass
from decimal import Decimal

from portfolio_engine.core.types.financial import (
    ZERO,
    calculate_notional_value,
    calculate_percentage,
)
from portfolio_engine.core.utils.validation import (
    validate_decimal,
    validate_non_negative,
    validate_symbol,
)


@dataclass(frozen=True)
class Position:
    """Represents a held instrument valued at the latest known price."""

    symbol: str
    display_name: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal

    def __post_init__(self) -> None:
        """Validate and normalize position data after initialization."""
        object.__setattr__(self, "symbol", validate_symbol(self.symbol))
        if not self.display_name:
            object.__setattr__(self, "display_name", self.symbol)

        for attr in ("quantity", "average_cost", "current_price"):
            value = validate_non_negative(validate_decimal(getattr(self, attr), attr), attr)
            object.__setattr__(self, attr, value)

        # A closed position carries no cost basis
        if self.quantity == ZERO:
            object.__setattr__(self, "average_cost", ZERO)

    @property
    def evaluated_value(self) -> Decimal:
        """Market value of the held quantity."""
        return calculate_notional_value(self.quantity, self.current_price)

    @property
    def cost_value(self) -> Decimal:
        """Acquisition cost of the held quantity."""
        return calculate_notional_value(self.quantity, self.average_cost)

    @property
    def unrealized_pnl(self) -> Decimal:
        """Market value minus acquisition cost."""
        return self.evaluated_value - self.cost_value

    @property
    def pnl_percent(self) -> Decimal:
        """Unrealized PnL relative to cost, zero when there is no cost basis."""
        return calculate_percentage(self.unrealized_pnl, self.cost_value)

    def is_dust(self, min_value: Decimal, min_quantity: Decimal) -> bool:
        """Check if the holding is too small to display or count.

        Args:
            min_value: Smallest market value worth displaying
            min_quantity: Smallest quantity worth displaying

        Returns:
            True if either threshold is not met
        """
        return self.quantity < min_quantity or self.evaluated_value < min_value
