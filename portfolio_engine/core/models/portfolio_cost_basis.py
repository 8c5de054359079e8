"""
Weighted-average cost basis.

This module derives the average price paid per unit of what is still held,
following the Single Responsibility Principle for cost bookkeeping.
Selling part of a position scales the recorded cost and cost quantity by the
same factor, so the average cost of the remaining units is unchanged by
partial sells. Lot-level realized gain is not tracked.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from portfolio_engine.core.constants import CLOSE_POSITION_EPSILON
from portfolio_engine.core.models.trade import Trade
from portfolio_engine.core.types.financial import ONE, ZERO


@dataclass(frozen=True)
class CostBasisState:
    """Running totals after replaying a symbol's trades."""

    total_cost_value: Decimal = ZERO
    total_cost_quantity: Decimal = ZERO
    held_quantity: Decimal = ZERO

    @property
    def average_cost(self) -> Decimal:
        """Weighted-average cost per unit, zero when nothing is recorded."""
        if self.total_cost_quantity > ZERO:
            return self.total_cost_value / self.total_cost_quantity
        return ZERO


class CostBasisCalculator:
    """Replays an ordered trade ledger into a weighted-average cost.

    Never raises for well-formed trades: an empty or unrelated ledger yields
    a zero cost.
    """

    def __init__(self, close_epsilon: Decimal = CLOSE_POSITION_EPSILON) -> None:
        """Initialize the calculator.

        Args:
            close_epsilon: Held quantity at or below which a position is
                treated as fully closed and all running totals reset
        """
        self.close_epsilon = close_epsilon

    def compute_average_cost(self, trades: Iterable[Trade], symbol: str) -> Decimal:
        """Calculate the weighted-average acquisition cost for a symbol.

        Args:
            trades: Ledger trades in any order, any symbols
            symbol: Symbol to compute the cost for

        Returns:
            Average cost per remaining unit, or zero
        """
        return self.compute_state(trades, symbol).average_cost

    def compute_state(self, trades: Iterable[Trade], symbol: str) -> CostBasisState:
        """Replay a symbol's trades and return the running totals.

        A SELL larger than the held quantity caps the cost reduction at 100 %
        but still subtracts its full quantity from the held quantity, which
        goes negative until the close check below resets it. A SELL arriving
        while nothing is held is ignored.

        Args:
            trades: Ledger trades in any order, any symbols
            symbol: Symbol to replay

        Returns:
            Final CostBasisState
        """
        symbol_trades = [trade for trade in trades if trade.symbol == symbol]
        if not symbol_trades:
            return CostBasisState()

        total_cost_value = ZERO
        total_cost_quantity = ZERO
        held_quantity = ZERO

        # sorted() is stable: trades at the same instant keep ledger order
        for trade in sorted(symbol_trades, key=lambda t: t.occurred_at):
            if trade.kind.is_buy:
                total_cost_value += trade.quantity * trade.unit_price
                total_cost_quantity += trade.quantity
                held_quantity += trade.quantity
            elif held_quantity > ZERO:
                sell_ratio = min(trade.quantity / held_quantity, ONE)
                remaining_ratio = ONE - sell_ratio
                total_cost_value *= remaining_ratio
                total_cost_quantity *= remaining_ratio
                held_quantity -= trade.quantity

                if held_quantity <= self.close_epsilon:
                    total_cost_value = ZERO
                    total_cost_quantity = ZERO
                    held_quantity = ZERO

        return CostBasisState(
            total_cost_value=total_cost_value,
            total_cost_quantity=total_cost_quantity,
            held_quantity=held_quantity,
        )
