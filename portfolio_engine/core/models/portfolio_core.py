"""
Portfolio core state management.

This module holds the engine's mutable state: the last fetched ledger, the
merged price map, the previous price ticks used for direction signals and the
published snapshot. Every write replaces a field whole under one lock, so a
reader never sees a half-applied update.
"""

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from portfolio_engine.core.models.market import MarketQuote, PriceTick
from portfolio_engine.core.models.snapshot import PortfolioSnapshot
from portfolio_engine.core.models.trade import Trade
from portfolio_engine.core.types.financial import ZERO

from .portfolio_helpers import PortfolioValidator


@dataclass
class PortfolioStore:
    """Single-writer portfolio state.

    Thread Safety:
        All state-modifying operations take an internal RLock and swap whole
        containers. Accessors return copies, so callers cannot mutate the
        store through them.
    """

    quantities: dict[str, Decimal] = field(default_factory=dict)
    trades: tuple[Trade, ...] = ()
    cash_balance: Decimal = ZERO
    display_names: dict[str, str] = field(default_factory=dict)
    quotes: dict[str, MarketQuote] = field(default_factory=dict)
    prices: dict[str, Decimal] = field(default_factory=dict)
    previous_ticks: dict[str, PriceTick] = field(default_factory=dict)
    snapshot: PortfolioSnapshot = field(default_factory=PortfolioSnapshot.empty)
    ledger_stale: bool = True
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def replace_ledger(
        self,
        quantities: Mapping[str, object] | None = None,
        trades: Iterable[object] | None = None,
        cash_balance: object | None = None,
    ) -> None:
        """Replace any of the ledger-derived inputs and clear the stale flag.

        Arguments left as None keep their previous value.
        """
        new_quantities = (
            PortfolioValidator.normalize_quantities(quantities) if quantities is not None else None
        )
        new_trades = PortfolioValidator.validate_trades(trades) if trades is not None else None
        new_cash = PortfolioValidator.normalize_cash(cash_balance) if cash_balance is not None else None

        with self._lock:
            if new_quantities is not None:
                self.quantities = new_quantities
            if new_trades is not None:
                self.trades = new_trades
            if new_cash is not None:
                self.cash_balance = new_cash
            self.ledger_stale = False

    def merge_quotes(self, quotes: Mapping[str, MarketQuote]) -> None:
        """Merge a quote batch into the latest-known quotes and prices.

        Symbols absent from the batch keep their last known price.
        """
        with self._lock:
            self.quotes = {**self.quotes, **quotes}
            self.prices = {**self.prices, **PortfolioValidator.prices_from_quotes(quotes)}

    def swap_previous_ticks(self, current: Mapping[str, PriceTick]) -> dict[str, PriceTick]:
        """Replace the previous-tick map and return the one it replaces."""
        with self._lock:
            previous = self.previous_ticks
            self.previous_ticks = dict(current)
            return dict(previous)

    def merge_display_names(self, names: Mapping[str, str]) -> None:
        """Add or update display names."""
        with self._lock:
            self.display_names = {**self.display_names, **names}

    def publish(self, snapshot: PortfolioSnapshot) -> None:
        """Atomically replace the published snapshot."""
        with self._lock:
            self.snapshot = snapshot

    def mark_ledger_stale(self) -> None:
        """Flag the ledger for refetch before the next valuation."""
        with self._lock:
            self.ledger_stale = True

    def ledger_inputs(
        self,
    ) -> tuple[dict[str, Decimal], tuple[Trade, ...], Decimal, dict[str, Decimal], dict[str, str]]:
        """Get a consistent copy of everything an aggregation pass reads.

        Returns:
            (quantities, trades, cash_balance, prices, display_names)
        """
        with self._lock:
            return (
                dict(self.quantities),
                self.trades,
                self.cash_balance,
                dict(self.prices),
                dict(self.display_names),
            )

    def quote_list(self) -> list[MarketQuote]:
        """Latest-known quotes in insertion order."""
        with self._lock:
            return list(self.quotes.values())

    def held_symbols(self) -> list[str]:
        """Symbols with a positive account quantity."""
        with self._lock:
            return [symbol for symbol, quantity in self.quantities.items() if quantity > ZERO]
