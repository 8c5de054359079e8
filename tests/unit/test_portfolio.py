"""
Unit tests for the Portfolio facade.
"""

from decimal import Decimal

import pytest

from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.enums import SortKey, TradeKind, ViewName
from portfolio_engine.core.exceptions.engine import (
    DataError,
    NetworkError,
    SessionExpiredError,
)
from portfolio_engine.core.models.market import MarketQuote
from portfolio_engine.core.models.portfolio import Portfolio
from tests.fakes import StaticLedger, make_trade

BUY = TradeKind.BUY


def quotes_for(prices: dict[str, str]) -> dict[str, MarketQuote]:
    return {
        symbol: MarketQuote(symbol=symbol, name=f"{symbol} coin", price=Decimal(price))
        for symbol, price in prices.items()
    }


@pytest.fixture
def ledger() -> StaticLedger:
    return StaticLedger(
        quantities={"BTC": Decimal("2"), "ETH": Decimal("10")},
        trades=[make_trade(BUY, "BTC", "2", "100", 0), make_trade(BUY, "ETH", "10", "20", 1)],
        cash_balance=Decimal("1000"),
    )


@pytest.fixture
def portfolio(ledger: StaticLedger) -> Portfolio:
    return Portfolio(ledger, EngineConfig(market_symbols=("BTC", "XRP")))


class TestPortfolioLedgerRefresh:
    """Ledger refresh and failure handling."""

    @pytest.mark.asyncio
    async def test_should_refresh_and_recompute(self, portfolio: Portfolio) -> None:
        """Test that a refresh loads the ledger and publishes a snapshot."""
        portfolio.apply_quotes(quotes_for({"BTC": "150", "ETH": "20"}))

        refreshed = await portfolio.refresh_ledger()

        assert refreshed
        assert not portfolio.ledger_stale
        assert portfolio.snapshot.total_value == Decimal("1500")
        assert portfolio.snapshot.unrealized_pnl == Decimal("100")

    @pytest.mark.asyncio
    async def test_should_skip_refresh_when_quantities_fail(
        self, portfolio: Portfolio, ledger: StaticLedger
    ) -> None:
        """Test that a failed quantity fetch leaves the ledger stale and untouched."""
        ledger.errors["quantities"] = NetworkError("timeout")

        refreshed = await portfolio.refresh_ledger()

        assert not refreshed
        assert portfolio.ledger_stale
        assert portfolio.store.quantities == {}
        assert ledger.calls == ["quantities"]

    @pytest.mark.asyncio
    async def test_should_keep_previous_trades_and_cash_on_partial_failure(
        self, portfolio: Portfolio, ledger: StaticLedger
    ) -> None:
        """Test that trade and cash failures keep the last known values."""
        await portfolio.refresh_ledger()
        ledger.trades = []
        ledger.cash_balance = Decimal("0")
        ledger.errors["trades"] = DataError("tradeLog missing")
        ledger.errors["cash"] = NetworkError("timeout")

        refreshed = await portfolio.refresh_ledger()

        assert refreshed
        assert len(portfolio.store.trades) == 2
        assert portfolio.store.cash_balance == Decimal("1000")

    @pytest.mark.asyncio
    async def test_should_propagate_session_expiry(
        self, portfolio: Portfolio, ledger: StaticLedger
    ) -> None:
        """Test that an expired session is surfaced to the caller."""
        ledger.errors["quantities"] = SessionExpiredError()

        with pytest.raises(SessionExpiredError):
            await portfolio.refresh_ledger()

    @pytest.mark.asyncio
    async def test_should_invalidate_ledger(self, portfolio: Portfolio) -> None:
        """Test marking the ledger stale after a transaction."""
        await portfolio.refresh_ledger()

        portfolio.invalidate_ledger()

        assert portfolio.ledger_stale


class TestPortfolioValuation:
    """Prices, average cost and allocation through the facade."""

    @pytest.mark.asyncio
    async def test_should_recompute_on_new_quotes(self, portfolio: Portfolio) -> None:
        """Test that applying quotes revalues held positions."""
        await portfolio.refresh_ledger()

        snapshot = portfolio.apply_quotes(quotes_for({"BTC": "200", "ETH": "30"}))

        assert snapshot.holdings_value == Decimal("700")
        assert portfolio.snapshot is snapshot

    @pytest.mark.asyncio
    async def test_should_report_average_cost(self, portfolio: Portfolio) -> None:
        """Test average cost lookup is case-insensitive."""
        await portfolio.refresh_ledger()
        assert portfolio.average_cost("btc") == Decimal("100")

    @pytest.mark.asyncio
    async def test_should_track_market_and_held_symbols(self, portfolio: Portfolio) -> None:
        """Test that tracked symbols start with the market list and add holdings."""
        await portfolio.refresh_ledger()
        assert portfolio.tracked_symbols() == ["BTC", "XRP", "ETH"]

    @pytest.mark.asyncio
    async def test_should_bucket_allocation_of_latest_snapshot(self, portfolio: Portfolio) -> None:
        """Test allocation slices of the published snapshot."""
        portfolio.apply_quotes(quotes_for({"BTC": "150", "ETH": "20"}))
        await portfolio.refresh_ledger()

        slices = portfolio.allocation()

        assert [s.label for s in slices] == ["KRW", "BTC", "ETH"]
        assert [s.display_percentage for s in slices] == [
            Decimal("66.67"),
            Decimal("20.00"),
            Decimal("13.33"),
        ]

    def test_should_use_display_names(self, portfolio: Portfolio) -> None:
        """Test that recorded names flow into positions."""
        portfolio.set_display_names({"BTC": "Bitcoin"})
        portfolio.store.replace_ledger(quantities={"BTC": "1"})
        portfolio.apply_quotes(quotes_for({"BTC": "100"}))

        position = portfolio.snapshot.position_for("BTC")

        assert position is not None
        assert position.display_name == "Bitcoin"


class TestPortfolioViews:
    """View selection, sort and search through the facade."""

    def test_should_sort_market_rows(self, portfolio: Portfolio) -> None:
        """Test market rows follow the toggled sort."""
        portfolio.apply_quotes(quotes_for({"BTC": "50000", "ETH": "3000"}))

        portfolio.toggle_sort(ViewName.MARKET, SortKey.PRICE)

        assert [q.symbol for q in portfolio.rows(ViewName.MARKET)] == ["ETH", "BTC"]

    def test_should_filter_holdings_rows(self, portfolio: Portfolio) -> None:
        """Test holdings search."""
        portfolio.store.replace_ledger(quantities={"BTC": "1", "ETH": "1"})
        portfolio.apply_quotes(quotes_for({"BTC": "100", "ETH": "100"}))

        portfolio.set_search(ViewName.HOLDINGS, "eth")

        assert [p.symbol for p in portfolio.holdings_rows()] == ["ETH"]

    def test_should_reset_state_on_view_change(self, portfolio: Portfolio) -> None:
        """Test that selecting a view clears sort and search."""
        portfolio.toggle_sort(ViewName.MARKET, SortKey.NAME)
        portfolio.set_search(ViewName.MARKET, "bit")

        portfolio.select_view(ViewName.ALLOCATION)

        market = portfolio.views.state(ViewName.MARKET)
        assert market.sort is None
        assert market.search_query == ""
        assert portfolio.views.active == ViewName.ALLOCATION

    def test_should_return_allocation_rows(self, portfolio: Portfolio) -> None:
        """Test allocation rows sorted by name."""
        portfolio.store.replace_ledger(quantities={"BTC": "1"}, cash_balance="100")
        portfolio.apply_quotes(quotes_for({"BTC": "100"}))
        portfolio.set_display_names({"BTC": "Bitcoin"})
        portfolio.recompute()

        portfolio.toggle_sort(ViewName.ALLOCATION, SortKey.NAME)

        assert [s.display_name for s in portfolio.rows(ViewName.ALLOCATION)] == ["Bitcoin", "Cash"]
