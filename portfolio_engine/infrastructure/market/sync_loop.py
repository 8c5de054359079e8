"""
Market sync loop.

A background asyncio task that polls the market feed on a fixed interval,
raises direction signals for changed prices and feeds the new prices to the
portfolio. Ticks never overlap: a slow tick pushes the next one back.
"""

import asyncio
import contextlib
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from threading import RLock

from loguru import logger

from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.exceptions.engine import (
    FeedError,
    NetworkError,
    SessionExpiredError,
)
from portfolio_engine.core.interfaces.market import IMarketFeed
from portfolio_engine.core.models.market import DirectionSignal, PriceTick
from portfolio_engine.core.models.portfolio import Portfolio

from .signal_board import SignalBoard

SignalObserver = Callable[[list[DirectionSignal]], None]


def _tick_prices(ticks: Mapping[str, PriceTick]) -> dict[str, Decimal]:
    return {symbol: tick.price for symbol, tick in ticks.items()}


class MarketSyncLoop:
    """Polls prices and keeps the portfolio valuation current."""

    def __init__(
        self,
        portfolio: Portfolio,
        feed: IMarketFeed,
        config: EngineConfig | None = None,
        signals: SignalBoard | None = None,
    ) -> None:
        self.portfolio = portfolio
        self.feed = feed
        self.config = config or portfolio.config
        self.signals = signals or SignalBoard(ttl_seconds=self.config.signal_ttl_seconds)

        self._task: asyncio.Task[None] | None = None
        self._observers: list[SignalObserver] = []
        self._observers_lock = RLock()
        self.ticks = 0
        self.failed_ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_observer(self, observer: SignalObserver) -> None:
        """Register a callback receiving each tick's newly issued signals."""
        with self._observers_lock:
            self._observers.append(observer)
            logger.debug(f"Added signal observer: {observer!r}")

    def remove_observer(self, observer: SignalObserver) -> None:
        with self._observers_lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def notify_observers(self, issued: list[DirectionSignal]) -> None:
        """Notify all observers of a tick's signals."""
        with self._observers_lock:
            observers_copy = list(self._observers)
        for observer in observers_copy:
            try:
                observer(issued)
            except Exception as e:
                logger.error(f"Signal observer failed: {e}")

    def start(self) -> None:
        """Start polling on the running event loop. Starting twice is a no-op."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="market-sync")
        logger.info(f"Market sync started, interval {self.config.sync_interval_seconds}s")

    async def stop(self) -> None:
        """Cancel the in-flight tick and stop polling."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info(f"Market sync stopped after {self.ticks} ticks")

    async def _run(self) -> None:
        interval = self.config.sync_interval_seconds
        while True:
            started = time.monotonic()
            try:
                await self.tick()
            except Exception as e:
                self.failed_ticks += 1
                logger.exception(f"Sync tick {self.ticks} crashed, retrying next interval: {e}")
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, interval - elapsed))

    async def tick(self) -> bool:
        """Run one sync cycle.

        Returns:
            True if prices were applied, False if the cycle was skipped
        """
        self.ticks += 1

        if self.portfolio.ledger_stale:
            try:
                await self.portfolio.refresh_ledger()
            except SessionExpiredError as e:
                logger.warning(f"Ledger refresh needs login, valuing previous ledger: {e}")

        symbols = self.portfolio.tracked_symbols()
        try:
            quotes = await self.feed.fetch_quotes(symbols)
        except (FeedError, NetworkError) as e:
            self.failed_ticks += 1
            logger.warning(f"Skipping sync cycle: {e}")
            return False

        observed_at = datetime.now(UTC)
        current = {symbol: quote.to_tick(observed_at) for symbol, quote in quotes.items()}
        previous = self.portfolio.store.swap_previous_ticks(current)
        issued = self.signals.observe(_tick_prices(previous), _tick_prices(current))

        self.portfolio.set_display_names({symbol: quote.name for symbol, quote in quotes.items()})
        snapshot = self.portfolio.apply_quotes(quotes)
        logger.debug(
            f"Sync tick {self.ticks}: {len(quotes)} quotes, {len(issued)} signals, "
            f"total value {snapshot.total_value}"
        )

        if issued:
            self.notify_observers(issued)
        return True
