"""
Direction signal board.

Keeps the transient up/down flag of every symbol whose price changed on the
latest poll. Flags expire on their own after the signal window.
"""

import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from threading import RLock

from cachetools import TTLCache

from portfolio_engine.core.constants import MAX_TRACKED_SYMBOLS, SIGNAL_TTL_SECONDS
from portfolio_engine.core.enums import Direction
from portfolio_engine.core.models.market import DirectionSignal


class SignalBoard:
    """Issues and expires DirectionSignals.

    ``clock`` must be monotonic; tests inject a fake one.
    """

    def __init__(
        self,
        ttl_seconds: float = SIGNAL_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = MAX_TRACKED_SYMBOLS,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("Signal TTL must be positive")
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._signals: TTLCache[str, DirectionSignal] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds, timer=clock
        )
        self._lock = RLock()

    def observe(
        self, previous: Mapping[str, Decimal], current: Mapping[str, Decimal]
    ) -> list[DirectionSignal]:
        """Compare two consecutive price maps and raise signals for changed prices.

        Symbols seen for the first time, or with an unchanged price, raise
        nothing and keep whatever signal they already have.

        Returns:
            Signals issued by this observation
        """
        now = self.clock()
        issued = []
        with self._lock:
            for symbol, price in current.items():
                if symbol not in previous:
                    continue
                direction = Direction.between(previous[symbol], price)
                if direction == Direction.NONE:
                    continue
                signal = DirectionSignal(
                    symbol=symbol, direction=direction, expires_at=now + self.ttl_seconds
                )
                self._signals[symbol] = signal
                issued.append(signal)
        return issued

    def direction(self, symbol: str) -> Direction:
        """Get a symbol's current direction, NONE once its signal has expired."""
        with self._lock:
            signal = self._signals.get(symbol)
        if signal is None:
            return Direction.NONE
        return signal.direction_at(self.clock())

    def active(self) -> dict[str, DirectionSignal]:
        """Get a copy of all unexpired signals."""
        now = self.clock()
        with self._lock:
            self._signals.expire()
            # get() rather than items(): an entry may expire while iterating
            signals = [self._signals.get(symbol) for symbol in list(self._signals)]
        return {s.symbol: s for s in signals if s is not None and s.is_active(now)}

    def clear(self) -> None:
        with self._lock:
            self._signals.clear()
