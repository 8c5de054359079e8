"""
Unit tests for custom exceptions.
Testing all exception classes and their attributes.
"""

from portfolio_engine.core.exceptions.engine import (
    DataError,
    EngineException,
    FeedError,
    NetworkError,
    ParseError,
    SessionExpiredError,
    TransactionError,
    TransactionInProgressError,
    ValidationError,
)


class TestEngineException:
    """Tests for EngineException base class."""

    def test_should_create_base_exception_with_message(self) -> None:
        """Test creating base exception with message."""
        exc = EngineException("Test error message")
        assert str(exc) == "Test error message"
        assert isinstance(exc, Exception)

    def test_should_derive_all_errors_from_base(self) -> None:
        """Test the hierarchy."""
        for exc_type in (ValidationError, DataError, NetworkError, TransactionError):
            assert issubclass(exc_type, EngineException)
        assert issubclass(FeedError, DataError)
        assert issubclass(ParseError, DataError)


class TestParseError:
    """Tests for ParseError."""

    def test_should_keep_source_and_record(self) -> None:
        """Test parse error attributes."""
        record = {"symbol": "BTC"}
        exc = ParseError("tradeLog", "amount missing", record)

        assert str(exc) == "Failed to parse tradeLog: amount missing"
        assert exc.source == "tradeLog"
        assert exc.record is record


class TestSessionExpiredError:
    """Tests for SessionExpiredError."""

    def test_should_have_default_message(self) -> None:
        """Test the default login prompt."""
        assert "log in" in str(SessionExpiredError())


class TestTransactionInProgressError:
    """Tests for TransactionInProgressError."""

    def test_should_carry_request_id(self) -> None:
        """Test request id attribute and message."""
        exc = TransactionInProgressError("abc123")

        assert exc.request_id == "abc123"
        assert "abc123" in str(exc)
        assert isinstance(exc, TransactionError)
