"""
Holdings aggregation.

This module combines account quantities, live prices and cost basis into
per-instrument positions and a portfolio-level snapshot.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from loguru import logger

from portfolio_engine.core.constants import MIN_DISPLAY_QUANTITY, MIN_DISPLAY_VALUE
from portfolio_engine.core.exceptions.engine import ValidationError
from portfolio_engine.core.models.portfolio_cost_basis import CostBasisCalculator
from portfolio_engine.core.models.position import Position
from portfolio_engine.core.models.snapshot import PortfolioSnapshot
from portfolio_engine.core.models.trade import Trade
from portfolio_engine.core.types.financial import ZERO, calculate_percentage


class HoldingsAggregator:
    """Builds a PortfolioSnapshot from raw inputs.

    Safe to call repeatedly with stale or partial price maps: symbols without
    a positive price are left out of the snapshot rather than failing it.
    """

    def __init__(
        self,
        cost_basis: CostBasisCalculator | None = None,
        min_value: Decimal = MIN_DISPLAY_VALUE,
        min_quantity: Decimal = MIN_DISPLAY_QUANTITY,
    ) -> None:
        """Initialize the aggregator.

        Args:
            cost_basis: Calculator used for each position's average cost
            min_value: Holdings worth less than this are dust
            min_quantity: Holdings smaller than this are dust
        """
        self.cost_basis = cost_basis or CostBasisCalculator()
        self.min_value = min_value
        self.min_quantity = min_quantity

    def aggregate(
        self,
        account_quantities: Mapping[str, Decimal],
        prices: Mapping[str, Decimal],
        trades: Iterable[Trade],
        cash_balance: Decimal,
        display_names: Mapping[str, str] | None = None,
    ) -> PortfolioSnapshot:
        """Value the account at the given prices.

        Args:
            account_quantities: Held quantity per symbol, in display order
            prices: Latest known price per symbol (may be partial)
            trades: Full trade ledger used for cost basis
            cash_balance: Uninvested cash
            display_names: Optional human-readable name per symbol

        Returns:
            Complete PortfolioSnapshot
        """
        names = display_names or {}
        trade_list = list(trades)
        positions = []

        for symbol, quantity in account_quantities.items():
            price = prices.get(symbol)
            if price is None or price <= ZERO or quantity <= ZERO:
                continue

            position = self._build_position(symbol, quantity, price, trade_list, names)
            if position is None:
                continue
            if position.is_dust(self.min_value, self.min_quantity):
                logger.debug(f"Skipping dust holding {symbol}: {quantity} @ {price}")
                continue
            positions.append(position)

        return self._summarize(cash_balance, positions)

    def _build_position(
        self,
        symbol: str,
        quantity: Decimal,
        price: Decimal,
        trades: list[Trade],
        names: Mapping[str, str],
    ) -> Position | None:
        """Build one position, or None if the inputs do not form a valid one."""
        average_cost = self.cost_basis.compute_average_cost(trades, symbol)
        try:
            return Position(
                symbol=symbol,
                display_name=names.get(symbol, symbol),
                quantity=quantity,
                average_cost=average_cost,
                current_price=price,
            )
        except ValidationError as e:
            logger.warning(f"Excluding {symbol} from valuation: {e}")
            return None

    def _summarize(self, cash_balance: Decimal, positions: list[Position]) -> PortfolioSnapshot:
        """Roll positions up into portfolio totals."""
        holdings_value = sum((p.evaluated_value for p in positions), ZERO)
        total_cost = sum((p.cost_value for p in positions), ZERO)
        unrealized_pnl = holdings_value - total_cost

        return PortfolioSnapshot(
            cash_balance=cash_balance,
            positions=tuple(positions),
            total_value=cash_balance + holdings_value,
            total_cost=total_cost,
            unrealized_pnl=unrealized_pnl,
            pnl_percent=calculate_percentage(unrealized_pnl, total_cost),
            holdings_value=holdings_value,
        )
