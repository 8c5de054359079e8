"""
Market and ledger data source interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal

from portfolio_engine.core.models.market import MarketQuote
from portfolio_engine.core.models.trade import Trade


class IMarketFeed(ABC):
    """Abstract interface for the polled price feed."""

    @abstractmethod
    async def fetch_quotes(self, symbols: Iterable[str]) -> dict[str, MarketQuote]:
        """Fetch current quotes for all requested symbols in one batch call.

        Symbols the feed does not know, or cannot parse, are absent from the
        result.

        Raises:
            FeedError: If the batch as a whole is unusable
            NetworkError: If the feed cannot be reached
        """
        pass

    @abstractmethod
    async def fetch_display_names(self, symbols: Iterable[str]) -> dict[str, str]:
        """Fetch human-readable names, falling back to the symbol itself."""
        pass


class ILedgerSource(ABC):
    """Abstract interface for the account/ledger API."""

    @abstractmethod
    async def fetch_trades(self) -> list[Trade]:
        """Fetch the full trade history."""
        pass

    @abstractmethod
    async def fetch_quantities(self) -> dict[str, Decimal]:
        """Fetch held quantity per symbol."""
        pass

    @abstractmethod
    async def fetch_cash_balance(self) -> Decimal:
        """Fetch the uninvested cash balance."""
        pass
