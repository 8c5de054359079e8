"""
Unit tests for utility decorators.
Testing the transaction logging decorator.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from portfolio_engine.core.enums import TransactionKind, TransactionOutcome
from portfolio_engine.core.models.transaction import TxRequest, TxResult
from portfolio_engine.core.utils.decorators import log_transactions


class TestLogTransactionsDecorator:
    """Test suite for @log_transactions decorator."""

    @pytest.fixture
    def request_obj(self) -> TxRequest:
        return TxRequest(
            kind=TransactionKind.WITHDRAW,
            amount=Decimal("250"),
            destination_account="123-456",
        )

    @pytest.mark.asyncio
    async def test_should_log_start_and_success(self, request_obj: TxRequest) -> None:
        """Test that a successful submission logs start and SUCCESS with request fields."""

        @log_transactions
        async def submit(request: TxRequest) -> TxResult:
            return TxResult.build(TransactionOutcome.SUCCEEDED, request.kind, 200)

        with patch("portfolio_engine.core.utils.decorators.logger") as mock_logger:
            result = await submit(request_obj)

        assert result.succeeded
        mock_logger.info.assert_called_once()
        assert "Transaction started: submit" in mock_logger.info.call_args.args[0]
        start_context = mock_logger.info.call_args.kwargs["extra"]
        assert start_context["kind"] == "withdraw"
        assert start_context["amount"] == "250"
        assert start_context["request_id"] == request_obj.request_id
        assert len(start_context["correlation_id"]) == 8

        mock_logger.success.assert_called_once()
        done_context = mock_logger.success.call_args.kwargs["extra"]
        assert done_context["outcome"] == "succeeded"
        assert done_context["status_code"] == 200

    @pytest.mark.asyncio
    async def test_should_never_log_destination_account(self, request_obj: TxRequest) -> None:
        """Test that account numbers stay out of the log context."""

        @log_transactions
        async def submit(request: TxRequest) -> TxResult:
            return TxResult.build(TransactionOutcome.SUCCEEDED, request.kind)

        with patch("portfolio_engine.core.utils.decorators.logger") as mock_logger:
            await submit(request_obj)

        for call in mock_logger.method_calls:
            assert "123-456" not in str(call)

    @pytest.mark.asyncio
    async def test_should_warn_on_unsuccessful_outcome(self, request_obj: TxRequest) -> None:
        """Test that a terminal failure logs a warning, not an error."""

        @log_transactions
        async def submit(request: TxRequest) -> TxResult:
            return TxResult.build(TransactionOutcome.REJECTED, request.kind, 409)

        with patch("portfolio_engine.core.utils.decorators.logger") as mock_logger:
            await submit(request_obj)

        mock_logger.success.assert_not_called()
        mock_logger.warning.assert_called_once()
        assert "rejected" in mock_logger.warning.call_args.args[0]

    @pytest.mark.asyncio
    async def test_should_log_and_reraise_exceptions(self, request_obj: TxRequest) -> None:
        """Test that exceptions are logged with context and propagate."""

        @log_transactions
        async def submit(request: TxRequest) -> TxResult:
            raise RuntimeError("boom")

        with patch("portfolio_engine.core.utils.decorators.logger") as mock_logger:
            with pytest.raises(RuntimeError, match="boom"):
                await submit(request_obj)

        mock_logger.error.assert_called_once()
        error_context = mock_logger.error.call_args.kwargs["extra"]
        assert error_context["error_type"] == "RuntimeError"
        assert error_context["error_message"] == "boom"
        assert error_context["success"] is False

    @pytest.mark.asyncio
    async def test_should_log_plain_arguments(self) -> None:
        """Test that scalar kind and amount arguments are logged directly."""

        @log_transactions
        async def request(kind: TransactionKind, amount: Decimal) -> None:
            return None

        with patch("portfolio_engine.core.utils.decorators.logger") as mock_logger:
            await request(TransactionKind.DEPOSIT, Decimal("5"))

        context = mock_logger.info.call_args.kwargs["extra"]
        assert context["kind"] == "deposit"
        assert context["amount"] == "5"
        mock_logger.warning.assert_called_once()

    def test_should_preserve_function_metadata(self) -> None:
        """Test that functools.wraps keeps the name and docstring."""

        @log_transactions
        async def submit_deposit() -> None:
            """Submit a deposit."""

        assert submit_deposit.__name__ == "submit_deposit"
        assert submit_deposit.__doc__ == "Submit a deposit."
