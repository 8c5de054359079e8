"""
Main Portfolio class - orchestrates all portfolio components.

This module provides the main Portfolio interface by composing the focused
components: state store, cost basis, holdings aggregation, allocation
bucketing and view sorting.
"""

from collections.abc import Mapping
from decimal import Decimal

from loguru import logger

from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.enums import SortKey, ViewName
from portfolio_engine.core.exceptions.engine import DataError, NetworkError
from portfolio_engine.core.interfaces.market import ILedgerSource
from portfolio_engine.core.models.allocation import AllocationSlice
from portfolio_engine.core.models.market import MarketQuote
from portfolio_engine.core.models.position import Position
from portfolio_engine.core.models.snapshot import PortfolioSnapshot
from portfolio_engine.core.models.sort_engine import (
    POSITION_FIELDS,
    QUOTE_FIELDS,
    SLICE_FIELDS,
    SortEngine,
)
from portfolio_engine.core.models.view_state import SortSpec, ViewRegistry, ViewState

from .portfolio_allocation import AllocationBucketer
from .portfolio_core import PortfolioStore
from .portfolio_cost_basis import CostBasisCalculator
from .portfolio_holdings import HoldingsAggregator


class Portfolio:
    """Main Portfolio implementation.

    Orchestrates portfolio operations by composing focused components:
    - PortfolioStore: State management
    - CostBasisCalculator: Weighted-average cost
    - HoldingsAggregator: Valuation into snapshots
    - AllocationBucketer: Percentage breakdown
    - SortEngine / ViewRegistry: List ordering and search

    The market sync loop is the only writer of prices; ledger refreshes and
    recomputation may be triggered from anywhere and publish whole snapshots.
    """

    def __init__(self, ledger: ILedgerSource, config: EngineConfig | None = None) -> None:
        """Initialize Portfolio with composition pattern."""
        self.config = config or EngineConfig()
        self.ledger = ledger

        self._store = PortfolioStore()
        self._cost_basis = CostBasisCalculator(close_epsilon=self.config.close_epsilon)
        self._holdings = HoldingsAggregator(
            cost_basis=self._cost_basis,
            min_value=self.config.dust_min_value,
            min_quantity=self.config.dust_min_quantity,
        )
        self._allocation = AllocationBucketer(
            threshold_percent=self.config.allocation_threshold_percent,
            cash_label=self.config.cash_label,
            cash_name=self.config.cash_name,
            other_label=self.config.other_label,
            other_name=self.config.other_name,
        )
        self._sorter = SortEngine()
        self.views = ViewRegistry()

    @property
    def store(self) -> PortfolioStore:
        """Get the underlying state store."""
        return self._store

    @property
    def snapshot(self) -> PortfolioSnapshot:
        """Get the latest published snapshot."""
        return self._store.snapshot

    @property
    def ledger_stale(self) -> bool:
        """Check if the ledger must be refetched before the next valuation."""
        return self._store.ledger_stale

    def invalidate_ledger(self) -> None:
        """Mark the ledger stale, e.g. after a successful deposit or withdraw."""
        logger.debug("Ledger marked stale")
        self._store.mark_ledger_stale()

    def tracked_symbols(self) -> list[str]:
        """Symbols to poll: the market list followed by any other held symbols."""
        symbols = dict.fromkeys(self.config.market_symbols)
        symbols.update(dict.fromkeys(self._store.held_symbols()))
        return list(symbols)

    async def refresh_ledger(self) -> bool:
        """Refetch quantities, trades and cash, then recompute.

        A failed quantity fetch leaves the whole ledger untouched. Failed
        trade or cash fetches keep their previous values. SessionExpiredError
        propagates to the caller.

        Returns:
            True if account quantities were refreshed
        """
        try:
            quantities = await self.ledger.fetch_quantities()
        except (NetworkError, DataError) as e:
            logger.warning(f"Ledger refresh skipped, quantities unavailable: {e}")
            return False

        trades = None
        try:
            trades = await self.ledger.fetch_trades()
        except (NetworkError, DataError) as e:
            logger.warning(f"Keeping previous trade history: {e}")

        cash_balance = None
        try:
            cash_balance = await self.ledger.fetch_cash_balance()
        except (NetworkError, DataError) as e:
            logger.warning(f"Keeping previous cash balance: {e}")

        self._store.replace_ledger(quantities=quantities, trades=trades, cash_balance=cash_balance)
        snapshot = self.recompute()
        logger.info(
            f"Ledger refreshed: {len(quantities)} balances, "
            f"{len(self._store.trades)} trades, total value {snapshot.total_value}"
        )
        return True

    def set_display_names(self, names: Mapping[str, str]) -> None:
        """Record human-readable names used by positions and allocation."""
        self._store.merge_display_names(names)

    def apply_quotes(self, quotes: Mapping[str, MarketQuote]) -> PortfolioSnapshot:
        """Merge a quote batch into the latest prices and recompute."""
        self._store.merge_quotes(quotes)
        return self.recompute()

    def recompute(self) -> PortfolioSnapshot:
        """Aggregate the current inputs and publish the resulting snapshot."""
        quantities, trades, cash_balance, prices, names = self._store.ledger_inputs()
        snapshot = self._holdings.aggregate(
            account_quantities=quantities,
            prices=prices,
            trades=trades,
            cash_balance=cash_balance,
            display_names=names,
        )
        self._store.publish(snapshot)
        return snapshot

    def average_cost(self, symbol: str) -> Decimal:
        """Get the weighted-average cost of a symbol from the stored ledger."""
        return self._cost_basis.compute_average_cost(self._store.trades, symbol.upper())

    def allocation(self) -> list[AllocationSlice]:
        """Get the allocation breakdown of the latest snapshot."""
        return self._allocation.bucket(self.snapshot)

    # View operations
    def select_view(self, view: ViewName) -> ViewState:
        """Switch the active view, resetting sort and search."""
        return self.views.on_view_change(view)

    def toggle_sort(self, view: ViewName, key: SortKey) -> SortSpec:
        """Toggle a view's sort key."""
        return self.views.state(view).toggle(key)

    def set_search(self, view: ViewName, query: str) -> None:
        """Set a view's search filter."""
        self.views.state(view).set_search(query)

    def market_rows(self) -> list[MarketQuote]:
        """Latest quotes, filtered and sorted by the market view state."""
        return self._sorter.apply(
            self._store.quote_list(), self.views.state(ViewName.MARKET), QUOTE_FIELDS
        )

    def holdings_rows(self) -> list[Position]:
        """Displayed positions, filtered and sorted by the holdings view state."""
        return self._sorter.apply(
            list(self.snapshot.positions), self.views.state(ViewName.HOLDINGS), POSITION_FIELDS
        )

    def allocation_rows(self) -> list[AllocationSlice]:
        """Allocation slices, filtered and sorted by the allocation view state."""
        return self._sorter.apply(
            self.allocation(), self.views.state(ViewName.ALLOCATION), SLICE_FIELDS
        )

    def rows(self, view: ViewName) -> list[MarketQuote] | list[Position] | list[AllocationSlice]:
        """Get the rows of any view."""
        if view == ViewName.MARKET:
            return self.market_rows()
        if view == ViewName.HOLDINGS:
            return self.holdings_rows()
        return self.allocation_rows()
