"""
Unit tests for Position and Trade domain models.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from portfolio_engine.core.enums import TradeKind
from portfolio_engine.core.exceptions.engine import ValidationError
from portfolio_engine.core.models.position import Position
from portfolio_engine.core.models.trade import Trade


class TestPositionCreation:
    """Test suite for Position validation."""

    def test_should_normalize_symbol_and_default_name(self) -> None:
        """Test that the symbol is upper-cased and doubles as the name."""
        position = Position("btc", "", Decimal("1"), Decimal("100"), Decimal("110"))

        assert position.symbol == "BTC"
        assert position.display_name == "BTC"

    @pytest.mark.parametrize("field", ["quantity", "average_cost", "current_price"])
    def test_should_reject_negative_values(self, field: str) -> None:
        """Test that negative numeric fields raise ValidationError."""
        values = {"quantity": "1", "average_cost": "100", "current_price": "110", field: "-1"}

        with pytest.raises(ValidationError, match=f"{field} must be non-negative"):
            Position("BTC", "Bitcoin", **{k: Decimal(v) for k, v in values.items()})

    def test_should_drop_cost_of_empty_position(self) -> None:
        """Test that zero quantity carries no cost basis."""
        position = Position("BTC", "Bitcoin", Decimal("0"), Decimal("100"), Decimal("110"))
        assert position.average_cost == Decimal("0")


class TestPositionValuation:
    """Test suite for Position derived values."""

    @pytest.fixture
    def position(self) -> Position:
        return Position("ETH", "Ethereum", Decimal("2"), Decimal("3000"), Decimal("3300"))

    def test_should_calculate_values(self, position: Position) -> None:
        """Test evaluated value, cost and PnL."""
        assert position.evaluated_value == Decimal("6600")
        assert position.cost_value == Decimal("6000")
        assert position.unrealized_pnl == Decimal("600")
        assert position.pnl_percent == Decimal("10")

    def test_should_report_zero_pnl_percent_without_cost(self) -> None:
        """Test that a position without cost basis has 0 % PnL."""
        position = Position("ETH", "Ethereum", Decimal("2"), Decimal("0"), Decimal("3300"))
        assert position.pnl_percent == Decimal("0")

    @pytest.mark.parametrize(
        ("quantity", "price", "dust"),
        [("0.5", "1.5", True), ("0.0000001", "1000000000", True), ("1", "1", False)],
    )
    def test_should_detect_dust(self, quantity: str, price: str, dust: bool) -> None:
        """Test value and quantity dust thresholds."""
        position = Position("X", "X", Decimal(quantity), Decimal("0"), Decimal(price))
        assert position.is_dust(Decimal("1"), Decimal("0.000001")) is dust


class TestTradeModel:
    """Test suite for Trade validation."""

    def test_should_create_trade(self) -> None:
        """Test a valid trade and its notional value."""
        trade = Trade(
            kind=TradeKind.BUY,
            symbol="sol",
            quantity=Decimal("4"),
            unit_price=Decimal("250000"),
            occurred_at=datetime(2025, 1, 1, tzinfo=UTC),
        )

        assert trade.symbol == "SOL"
        assert trade.notional_value() == Decimal("1000000")

    def test_should_treat_naive_time_as_utc(self) -> None:
        """Test naive timestamps gain a UTC zone."""
        trade = Trade(TradeKind.SELL, "SOL", Decimal("1"), Decimal("1"), datetime(2025, 1, 1))
        assert trade.occurred_at.tzinfo is UTC

    def test_should_ignore_name_in_equality(self) -> None:
        """Test that the display name does not affect identity."""
        when = datetime(2025, 1, 1, tzinfo=UTC)
        first = Trade(TradeKind.BUY, "SOL", Decimal("1"), Decimal("1"), when, name="Solana")
        second = Trade(TradeKind.BUY, "SOL", Decimal("1"), Decimal("1"), when, name="솔라나")
        assert first == second

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"kind": "BUY"}, "Trade kind"),
            ({"quantity": Decimal("0")}, "quantity must be positive"),
            ({"unit_price": Decimal("-1")}, "unit_price must be non-negative"),
            ({"occurred_at": "2025-01-01"}, "occurred_at"),
        ],
    )
    def test_should_reject_invalid_trade(self, overrides: dict[str, object], message: str) -> None:
        """Test trade validation errors."""
        fields: dict[str, object] = {
            "kind": TradeKind.BUY,
            "symbol": "SOL",
            "quantity": Decimal("1"),
            "unit_price": Decimal("1"),
            "occurred_at": datetime(2025, 1, 1, tzinfo=UTC),
            **overrides,
        }
        with pytest.raises(ValidationError, match=message):
            Trade(**fields)  # type: ignore[arg-type]
