"""
Transaction enumerations.

This module defines the request kinds, the submission state machine states,
and the terminal outcomes of a deposit/withdraw submission.
"""

from enum import StrEnum


class TransactionKind(StrEnum):
    """
    Allowed cash transaction kinds.

    The value doubles as the endpoint path segment on the account API.
    """

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"

    @property
    def endpoint(self) -> str:
        """Get the API path for this transaction kind."""
        return f"/{self.value}"


class TransactionState(StrEnum):
    """
    States of the bounded submission state machine.

    BUILT -> ENCRYPTED -> SENT -> SUCCEEDED
                               -> AUTH_RETRY -> ENCRYPTED -> SENT -> SUCCEEDED | FAILED
                               -> FAILED
    """

    BUILT = "built"
    ENCRYPTED = "encrypted"
    SENT = "sent"
    AUTH_RETRY = "auth_retry"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if the state ends the submission."""
        return self in [self.SUCCEEDED, self.FAILED]


class TransactionOutcome(StrEnum):
    """Terminal outcome reported to the caller."""

    SUCCEEDED = "succeeded"
    AUTH_EXPIRED = "auth_expired"
    REJECTED = "rejected"
    NETWORK_ERROR = "network_error"
    ENCRYPTION_FAILURE = "encryption_failure"
    INVALID_REQUEST = "invalid_request"

    @property
    def is_success(self) -> bool:
        """Check if the outcome is a success."""
        return self == self.SUCCEEDED

    @property
    def requires_login(self) -> bool:
        """Check if the caller must send the user through re-authentication."""
        return self == self.AUTH_EXPIRED
