"""
Transaction request/result models.

A TxRequest carries its own retry counter so that the single permitted
refresh-then-resend is part of the request value rather than the call stack.
"""

import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal

from portfolio_engine.core.constants import MAX_TRANSACTION_RETRIES
from portfolio_engine.core.enums import TransactionKind, TransactionOutcome
from portfolio_engine.core.exceptions.engine import ValidationError
from portfolio_engine.core.utils.validation import validate_decimal, validate_positive

# Human-readable reasons for rejected submissions, keyed by HTTP status
REJECTION_MESSAGES: dict[TransactionKind, dict[int, str]] = {
    TransactionKind.DEPOSIT: {
        400: "Invalid request. Please check the entered details.",
        403: "You are not permitted to make deposits.",
        500: "The maximum deposit amount was exceeded. Please check the amount.",
    },
    TransactionKind.WITHDRAW: {
        400: "Invalid request. Please check the entered details.",
        403: "You are not permitted to make withdrawals.",
        404: "The destination account could not be found.",
        409: "Insufficient balance.",
        500: "The maximum withdrawal amount was exceeded. Please check the amount.",
    },
}

OUTCOME_MESSAGES: dict[TransactionOutcome, str] = {
    TransactionOutcome.SUCCEEDED: "{kind} completed.",
    TransactionOutcome.AUTH_EXPIRED: "Your session has expired. Please log in again.",
    TransactionOutcome.NETWORK_ERROR: "Network error. Please check your connection and try again.",
    TransactionOutcome.ENCRYPTION_FAILURE: "The request could not be secured. Please try again.",
    TransactionOutcome.INVALID_REQUEST: "{detail}",
}


@dataclass(frozen=True)
class TxRequest:
    """A deposit or withdraw request."""

    kind: TransactionKind
    amount: Decimal
    destination_account: str | None = None
    retry_count: int = 0
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.kind, TransactionKind):
            raise ValidationError(f"Transaction kind must be TransactionKind, got {self.kind!r}")
        amount = validate_positive(validate_decimal(self.amount, "amount"), "amount")
        object.__setattr__(self, "amount", amount)
        if self.retry_count not in range(MAX_TRANSACTION_RETRIES + 1):
            raise ValidationError(
                f"retry_count must be between 0 and {MAX_TRANSACTION_RETRIES}, "
                f"got {self.retry_count}"
            )

    @property
    def is_retry(self) -> bool:
        """Check if this request is the refresh-then-resend attempt."""
        return self.retry_count > 0

    def next_attempt(self) -> "TxRequest":
        """Create the single retry of this request.

        Raises:
            ValidationError: If the request is already the retry
        """
        return replace(self, retry_count=self.retry_count + 1)


@dataclass(frozen=True)
class TxResult:
    """Terminal result of a submission."""

    outcome: TransactionOutcome
    kind: TransactionKind
    message: str
    status_code: int | None = None
    attempts: int = 0
    refreshes: int = 0
    response_body: str = ""

    @property
    def succeeded(self) -> bool:
        """Check if the submission succeeded."""
        return self.outcome.is_success

    @classmethod
    def build(
        cls,
        outcome: TransactionOutcome,
        kind: TransactionKind,
        status_code: int | None = None,
        detail: str = "",
        **kwargs: object,
    ) -> "TxResult":
        """Create a result with the single human-readable reason for its outcome."""
        return cls(
            outcome=outcome,
            kind=kind,
            message=describe_outcome(outcome, kind, status_code, detail),
            status_code=status_code,
            **kwargs,  # type: ignore[arg-type]
        )


def describe_outcome(
    outcome: TransactionOutcome,
    kind: TransactionKind,
    status_code: int | None = None,
    detail: str = "",
) -> str:
    """Map a terminal outcome to the message shown to the user.

    Args:
        outcome: Terminal outcome
        kind: Deposit or withdraw
        status_code: HTTP status for rejected submissions
        detail: Validation detail for invalid requests

    Returns:
        One human-readable sentence
    """
    if outcome == TransactionOutcome.REJECTED:
        known = REJECTION_MESSAGES[kind].get(status_code or 0)
        if known:
            return known
        return f"{kind.value.capitalize()} failed (status {status_code})."
    template = OUTCOME_MESSAGES[outcome]
    return template.format(kind=kind.value.capitalize(), detail=detail or "Invalid request.")
