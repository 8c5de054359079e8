"""
Unit tests for enum types.
Testing all enum methods and properties.
"""

from decimal import Decimal

import pytest

from portfolio_engine.core.enums import (
    Direction,
    SortKey,
    TradeKind,
    TransactionKind,
    TransactionOutcome,
    TransactionState,
    ViewName,
)


class TestTradeKindEnum:
    """Tests for TradeKind enum."""

    def test_should_convert_from_string_case_insensitive(self) -> None:
        """Test from_string with ledger spellings."""
        assert TradeKind.from_string("buy") == TradeKind.BUY
        assert TradeKind.from_string(" SELL ") == TradeKind.SELL
        assert TradeKind.from_string("bid") == TradeKind.BUY
        assert TradeKind.from_string("ask") == TradeKind.SELL

    def test_should_raise_error_for_unknown_kind(self) -> None:
        """Test that unknown sides are rejected."""
        with pytest.raises(ValueError, match="Unsupported trade kind"):
            TradeKind.from_string("short")

    def test_should_report_side(self) -> None:
        """Test is_buy / is_sell."""
        assert TradeKind.BUY.is_buy and not TradeKind.BUY.is_sell
        assert TradeKind.SELL.is_sell and not TradeKind.SELL.is_buy


class TestDirectionEnum:
    """Tests for Direction enum."""

    @pytest.mark.parametrize(
        ("previous", "current", "expected"),
        [
            (Decimal("100"), Decimal("110"), Direction.UP),
            (Decimal("100"), Decimal("90"), Direction.DOWN),
            (Decimal("100"), Decimal("100.0"), Direction.NONE),
        ],
    )
    def test_should_compare_prices(
        self, previous: Decimal, current: Decimal, expected: Direction
    ) -> None:
        """Test direction between two prices."""
        assert Direction.between(previous, current) == expected


class TestTransactionEnums:
    """Tests for transaction kinds, states and outcomes."""

    def test_should_map_kind_to_endpoint(self) -> None:
        """Test endpoint paths."""
        assert TransactionKind.DEPOSIT.endpoint == "/deposit"
        assert TransactionKind.WITHDRAW.endpoint == "/withdraw"

    def test_should_mark_terminal_states(self) -> None:
        """Test which states end a submission."""
        terminal = {state for state in TransactionState if state.is_terminal}
        assert terminal == {TransactionState.SUCCEEDED, TransactionState.FAILED}

    def test_should_flag_success_and_login_outcomes(self) -> None:
        """Test outcome helpers."""
        assert TransactionOutcome.SUCCEEDED.is_success
        assert not TransactionOutcome.REJECTED.is_success
        assert TransactionOutcome.AUTH_EXPIRED.requires_login
        assert not TransactionOutcome.NETWORK_ERROR.requires_login


class TestViewEnums:
    """Tests for views and sort keys."""

    def test_should_list_supported_keys_per_view(self) -> None:
        """Test view-specific sort keys."""
        assert ViewName.supported_keys(ViewName.MARKET) == (
            SortKey.NAME,
            SortKey.CHANGE,
            SortKey.PRICE,
        )
        assert SortKey.QUANTITY in ViewName.supported_keys(ViewName.HOLDINGS)
        assert ViewName.supported_keys(ViewName.ALLOCATION) == (SortKey.NAME, SortKey.VALUE)

    def test_should_mark_numeric_keys(self) -> None:
        """Test that only the name key is textual."""
        assert not SortKey.NAME.is_numeric
        assert all(key.is_numeric for key in SortKey if key != SortKey.NAME)
