"""
Portfolio snapshot model.

A snapshot is the complete valuation produced by one aggregation pass.
It is frozen and replaced whole, so a reader always sees either the previous
complete valuation or the next one.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from portfolio_engine.core.models.position import Position
from portfolio_engine.core.types.financial import ZERO


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Valuation of cash plus all displayable positions."""

    cash_balance: Decimal
    positions: tuple[Position, ...]
    total_value: Decimal
    total_cost: Decimal
    unrealized_pnl: Decimal
    pnl_percent: Decimal
    holdings_value: Decimal
    computed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def empty(cls, cash_balance: Decimal = ZERO) -> "PortfolioSnapshot":
        """Create the snapshot used before the first aggregation."""
        return cls(
            cash_balance=cash_balance,
            positions=(),
            total_value=cash_balance,
            total_cost=ZERO,
            unrealized_pnl=ZERO,
            pnl_percent=ZERO,
            holdings_value=ZERO,
        )

    def position_for(self, symbol: str) -> Position | None:
        """Get the position for a symbol, or None if it is not held or is dust."""
        for position in self.positions:
            if position.symbol == symbol:
                return position
        return None

    @property
    def symbols(self) -> list[str]:
        """Symbols of all displayed positions in aggregation order."""
        return [position.symbol for position in self.positions]
