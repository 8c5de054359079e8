"""
Custom exception hierarchy for the portfolio engine.

This module defines domain-specific exceptions for better error handling.
Accounting code never raises these to its callers; they cross the boundary
between the HTTP collaborators and the engine, and are turned into degraded
results (skipped records, skipped sync cycles, terminal transaction outcomes).
"""


class EngineException(Exception):
    """Base exception for all portfolio-engine errors."""

    pass


class ValidationError(EngineException):
    """Raised when input validation fails."""

    pass


class ConfigurationError(EngineException):
    """Raised when configuration is invalid."""

    pass


class DataError(EngineException):
    """Raised when data access or processing fails."""

    pass


class ParseError(DataError):
    """Raised when a single record or symbol cannot be parsed.

    Non-terminal: the offending record is skipped and the batch continues.
    """

    def __init__(self, source: str, detail: str, record: object = None):
        self.source = source
        self.detail = detail
        self.record = record
        super().__init__(f"Failed to parse {source}: {detail}")


class FeedError(DataError):
    """Raised when the market feed answers with an unusable batch."""

    pass


class NetworkError(EngineException):
    """Raised when a request cannot reach the server or times out."""

    pass


class SessionExpiredError(EngineException):
    """Raised when the auth session cannot be refreshed and the user must log in again."""

    def __init__(self, message: str = "Session expired, please log in again"):
        super().__init__(message)


class EncryptionFailureError(EngineException):
    """Raised when the encryption collaborator cannot produce a payload."""

    pass


class TransactionError(EngineException):
    """Raised when transaction submission is misused."""

    pass


class TransactionInProgressError(TransactionError):
    """Raised when the same request is submitted while it is still in flight."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Transaction already in flight: {request_id}")
