"""
Unit tests for the FastAPI application.
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests
from fastapi.testclient import TestClient

from portfolio_engine.api.main import create_app
from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.enums import TradeKind
from portfolio_engine.core.models.market import MarketQuote
from portfolio_engine.core.models.portfolio import Portfolio
from portfolio_engine.infrastructure.market import MarketSyncLoop
from portfolio_engine.infrastructure.transactions.submitter import TransactionSubmitter
from tests.fakes import (
    FakeAuth,
    RecordingEncryption,
    ScriptedFeed,
    StaticLedger,
    make_response,
    make_trade,
)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(market_symbols=("BTC", "ETH"), max_transaction_amount=Decimal("1000"))


@pytest.fixture
def portfolio(config: EngineConfig) -> Portfolio:
    portfolio = Portfolio(StaticLedger(), config)
    portfolio.store.replace_ledger(
        quantities={"BTC": "2", "ETH": "10"},
        trades=[
            make_trade(TradeKind.BUY, "BTC", "2", "100"),
            make_trade(TradeKind.BUY, "ETH", "10", "20"),
        ],
        cash_balance="1000",
    )
    portfolio.set_display_names({"BTC": "Bitcoin", "ETH": "Ethereum"})
    portfolio.apply_quotes(
        {
            "BTC": MarketQuote("BTC", "Bitcoin", Decimal("150"), "2.5"),
            "ETH": MarketQuote("ETH", "Ethereum", Decimal("20"), "-1"),
        }
    )
    return portfolio


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)


@pytest.fixture
def submitter(config: EngineConfig, session: Mock) -> TransactionSubmitter:
    return TransactionSubmitter(FakeAuth(), RecordingEncryption(), config=config, session=session)


@pytest.fixture
def client(portfolio: Portfolio, submitter: TransactionSubmitter) -> TestClient:
    return TestClient(create_app(portfolio, submitter))


class TestPortfolioEndpoints:
    """Snapshot, allocation and signal endpoints."""

    def test_should_report_health(self, client: TestClient) -> None:
        """Test root and health endpoints."""
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").json()["status"] == "running"

    def test_should_return_snapshot(self, client: TestClient) -> None:
        """Test snapshot totals serialized as decimal strings."""
        response = client.get("/api/portfolio/snapshot")

        assert response.status_code == 200
        body = response.json()
        assert body["total_value"] == "1500"
        assert body["unrealized_pnl"] == "100"
        assert [p["symbol"] for p in body["positions"]] == ["BTC", "ETH"]

    def test_should_return_allocation(self, client: TestClient) -> None:
        """Test allocation slices in bucketer order."""
        slices = client.get("/api/portfolio/allocation").json()

        assert [s["label"] for s in slices] == ["KRW", "BTC", "ETH"]
        assert [s["display_percentage"] for s in slices] == ["66.67", "20.00", "13.33"]

    def test_should_return_no_signals_initially(self, client: TestClient) -> None:
        """Test the signals endpoint without any price change."""
        assert client.get("/api/portfolio/signals").json() == []


class TestViewEndpoints:
    """Sort, search and view selection."""

    def test_should_toggle_sort(self, client: TestClient) -> None:
        """Test that repeating a sort key flips the direction."""
        first = client.post("/api/portfolio/views/market/sort", json={"key": "price"}).json()
        second = client.post("/api/portfolio/views/market/sort", json={"key": "price"}).json()

        assert [r["symbol"] for r in first["rows"]] == ["ETH", "BTC"]
        assert first["ascending"] is True
        assert [r["symbol"] for r in second["rows"]] == ["BTC", "ETH"]
        assert second["ascending"] is False

    def test_should_reject_unsupported_sort_key(self, client: TestClient) -> None:
        """Test that engine validation errors become 400 responses."""
        response = client.post("/api/portfolio/views/allocation/sort", json={"key": "price"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_should_search_holdings(self, client: TestClient) -> None:
        """Test holdings search by display name."""
        body = client.post(
            "/api/portfolio/views/holdings/search", json={"query": "bitc"}
        ).json()

        assert body["search_query"] == "bitc"
        assert [r["symbol"] for r in body["rows"]] == ["BTC"]

    def test_should_reset_state_on_select(self, client: TestClient) -> None:
        """Test that selecting a view clears its sort."""
        client.post("/api/portfolio/views/market/sort", json={"key": "name"})

        body = client.post("/api/portfolio/views/market/select").json()

        assert body["sort_key"] is None
        assert body["view"] == "market"

    def test_should_reject_unknown_view(self, client: TestClient) -> None:
        """Test path validation of the view name."""
        assert client.get("/api/portfolio/views/orders").status_code == 422


class TestTransactionEndpoints:
    """Deposit and withdraw submission."""

    def test_should_submit_and_invalidate_ledger(
        self, client: TestClient, portfolio: Portfolio, session: Mock
    ) -> None:
        """Test a successful deposit marks the ledger stale."""
        session.post.return_value = make_response(200)

        response = client.post("/api/transactions", json={"kind": "deposit", "amount": "500"})

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "succeeded"
        assert body["succeeded"] is True
        assert portfolio.ledger_stale

    def test_should_return_failed_outcome_with_200(
        self, client: TestClient, portfolio: Portfolio, session: Mock
    ) -> None:
        """Test that rejected submissions still answer 200 and keep the ledger."""
        session.post.return_value = make_response(409)

        body = client.post(
            "/api/transactions",
            json={"kind": "withdraw", "amount": "10", "destination_account": " 123-456 "},
        ).json()

        assert body["outcome"] == "rejected"
        assert body["message"] == "Insufficient balance."
        assert not portfolio.ledger_stale

    def test_should_report_invalid_amount_as_outcome(
        self, client: TestClient, session: Mock
    ) -> None:
        """Test that amounts over the limit become INVALID_REQUEST."""
        body = client.post(
            "/api/transactions", json={"kind": "deposit", "amount": "5000"}
        ).json()

        assert body["outcome"] == "invalid_request"
        session.post.assert_not_called()

    def test_should_reject_unknown_kind(self, client: TestClient) -> None:
        """Test schema validation of the transaction kind."""
        response = client.post("/api/transactions", json={"kind": "transfer", "amount": "5"})
        assert response.status_code == 422


class TestAppLifespan:
    """Sync loop lifecycle."""

    def test_should_run_sync_loop_for_app_lifetime(
        self, portfolio: Portfolio, submitter: TransactionSubmitter
    ) -> None:
        """Test that the loop starts with the app and stops on shutdown."""
        feed = ScriptedFeed([{"BTC": "150", "ETH": "20"}] * 10)
        loop = MarketSyncLoop(portfolio, feed)

        with TestClient(create_app(portfolio, submitter, sync_loop=loop)) as client:
            assert loop.running
            assert client.get("/api/portfolio/signals").status_code == 200

        assert not loop.running
