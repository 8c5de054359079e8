"""
Deposit and withdraw submission.

Each submission runs a bounded state machine:

    BUILT -> ENCRYPTED -> SENT -> SUCCEEDED
                               -> AUTH_RETRY -> ENCRYPTED -> SENT -> SUCCEEDED | FAILED
                               -> FAILED

The access token travels inside the encrypted payload, so an expired token
means re-encrypting, not just resending. At most one refresh-then-resend
happens per submission.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal
from threading import RLock
from typing import Any

import requests
from loguru import logger

from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.constants import SUCCESS_STATUS_CODES, UNAUTHORIZED_STATUS_CODE
from portfolio_engine.core.enums import TransactionKind, TransactionOutcome, TransactionState
from portfolio_engine.core.exceptions.engine import (
    EncryptionFailureError,
    NetworkError,
    SessionExpiredError,
    TransactionInProgressError,
    ValidationError,
)
from portfolio_engine.core.interfaces.collaborators import IAuthProvider, IEncryptionService
from portfolio_engine.core.models.transaction import TxRequest, TxResult
from portfolio_engine.core.utils.decorators import log_transactions

REFRESH_PATH = "/user/info"
PAYLOAD_FIELD = "e2edata"

SuccessCallback = Callable[[TxResult], None]


@dataclass
class _Submission:
    """Mutable progress of one submission through the state machine."""

    request: TxRequest
    state: TransactionState = TransactionState.BUILT
    payload: str = ""
    status_code: int | None = None
    response_body: str = ""
    attempts: int = 0
    refreshes: int = 0
    outcome: TransactionOutcome | None = None
    detail: str = ""

    def fail(self, outcome: TransactionOutcome, detail: str = "") -> TransactionState:
        self.outcome = outcome
        self.detail = detail
        return TransactionState.FAILED


class TransactionSubmitter:
    """Submits deposit/withdraw requests through the authenticated session."""

    def __init__(
        self,
        auth: IAuthProvider,
        encryption: IEncryptionService,
        config: EngineConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.auth = auth
        self.encryption = encryption
        self.config = config or EngineConfig()
        self.session = session or requests.Session()

        self._in_flight: set[str] = set()
        self._in_flight_lock = RLock()
        self._callbacks: list[SuccessCallback] = []

        self._handlers: dict[
            TransactionState, Callable[[_Submission], Awaitable[TransactionState]]
        ] = {
            TransactionState.BUILT: self._on_built,
            TransactionState.ENCRYPTED: self._on_encrypted,
            TransactionState.SENT: self._on_sent,
            TransactionState.AUTH_RETRY: self._on_auth_retry,
        }

    @property
    def base_url(self) -> str:
        return self.config.api_base_url

    def add_success_callback(self, callback: SuccessCallback) -> None:
        """Register a callback run after every successful submission."""
        self._callbacks.append(callback)

    async def request(
        self,
        kind: TransactionKind,
        amount: Decimal | str | int | float,
        destination_account: str | None = None,
    ) -> TxResult:
        """Build a request and submit it.

        Invalid amounts become an INVALID_REQUEST result instead of raising.
        """
        try:
            tx = TxRequest(kind=kind, amount=amount, destination_account=destination_account)
        except ValidationError as e:
            logger.warning(f"Rejected {kind} request before submission: {e}")
            return TxResult.build(TransactionOutcome.INVALID_REQUEST, kind, detail=str(e))
        return await self.submit(tx)

    @log_transactions
    async def submit(self, request: TxRequest) -> TxResult:
        """Run a request through the state machine to a terminal result.

        Every failure becomes a terminal TxResult.

        Raises:
            TransactionInProgressError: If the same request id is already in flight
        """
        with self._in_flight_lock:
            if request.request_id in self._in_flight:
                raise TransactionInProgressError(request.request_id)
            self._in_flight.add(request.request_id)

        try:
            result = await self._run(_Submission(request=request))
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(request.request_id)

        if result.succeeded:
            self._notify_success(result)
        return result

    def in_flight(self, request_id: str) -> bool:
        with self._in_flight_lock:
            return request_id in self._in_flight

    async def _run(self, submission: _Submission) -> TxResult:
        while not submission.state.is_terminal:
            previous = submission.state
            submission.state = await self._handlers[previous](submission)
            logger.debug(
                f"Transaction {submission.request.request_id[:8]}: {previous} -> {submission.state}"
            )

        outcome = submission.outcome or TransactionOutcome.SUCCEEDED
        return TxResult.build(
            outcome,
            submission.request.kind,
            status_code=submission.status_code,
            detail=submission.detail,
            attempts=submission.attempts,
            refreshes=submission.refreshes,
            response_body=submission.response_body,
        )

    async def _on_built(self, submission: _Submission) -> TransactionState:
        """Check the amount ceiling, then encrypt."""
        request = submission.request
        if request.amount > self.config.max_transaction_amount:
            return submission.fail(
                TransactionOutcome.INVALID_REQUEST,
                f"Amount {request.amount} exceeds the limit of {self.config.max_transaction_amount}",
            )
        return await self._encrypt(submission)

    async def _on_encrypted(self, submission: _Submission) -> TransactionState:
        """POST the payload."""
        submission.attempts += 1
        url = f"{self.base_url}{submission.request.kind.endpoint}"
        try:
            status_code, body = await self._post(url, {PAYLOAD_FIELD: submission.payload})
        except NetworkError as e:
            return submission.fail(TransactionOutcome.NETWORK_ERROR, str(e))
        submission.status_code = status_code
        submission.response_body = body
        return TransactionState.SENT

    async def _on_sent(self, submission: _Submission) -> TransactionState:
        """Classify the response status."""
        status_code = submission.status_code
        if status_code in SUCCESS_STATUS_CODES:
            submission.outcome = TransactionOutcome.SUCCEEDED
            return TransactionState.SUCCEEDED
        if status_code == UNAUTHORIZED_STATUS_CODE:
            if submission.request.is_retry:
                logger.warning("Still unauthorized after refresh, session expired")
                return submission.fail(TransactionOutcome.AUTH_EXPIRED)
            return TransactionState.AUTH_RETRY
        return submission.fail(TransactionOutcome.REJECTED)

    async def _on_auth_retry(self, submission: _Submission) -> TransactionState:
        """Refresh the session once, then re-encrypt with the new token."""
        submission.refreshes += 1
        try:
            await self.auth.perform_authenticated_request(f"{self.base_url}{REFRESH_PATH}", "GET")
        except SessionExpiredError as e:
            return submission.fail(TransactionOutcome.AUTH_EXPIRED, str(e))
        except NetworkError as e:
            return submission.fail(TransactionOutcome.NETWORK_ERROR, str(e))

        submission.request = submission.request.next_attempt()
        submission.status_code = None
        submission.response_body = ""
        return await self._encrypt(submission)

    async def _encrypt(self, submission: _Submission) -> TransactionState:
        """Bind the current access token and the request into one payload."""
        try:
            token = await self.auth.get_valid_access_token()
        except SessionExpiredError as e:
            return submission.fail(TransactionOutcome.AUTH_EXPIRED, str(e))
        except NetworkError as e:
            return submission.fail(TransactionOutcome.NETWORK_ERROR, str(e))
        if not token:
            return submission.fail(TransactionOutcome.AUTH_EXPIRED)

        try:
            submission.payload = self.encryption.encrypt(self._payload_fields(submission.request, token))
        except EncryptionFailureError as e:
            logger.error(f"Payload encryption failed: {e}")
            return submission.fail(TransactionOutcome.ENCRYPTION_FAILURE, str(e))
        return TransactionState.ENCRYPTED

    @staticmethod
    def _payload_fields(request: TxRequest, token: str) -> dict[str, Any]:
        fields: dict[str, Any] = {"token": token, "amount": float(request.amount)}
        if request.kind == TransactionKind.WITHDRAW and request.destination_account:
            fields["account"] = request.destination_account
        return fields

    async def _post(self, url: str, body: dict[str, str]) -> tuple[int, str]:
        """POST JSON in the default executor.

        Raises:
            NetworkError: If the server cannot be reached or times out
        """

        def _send() -> tuple[int, str]:
            try:
                response = self.session.post(
                    url, json=body, timeout=self.config.request_timeout_seconds
                )
            except requests.exceptions.RequestException as e:
                raise NetworkError(f"POST {url} failed: {e}") from e
            return response.status_code, response.text

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _send)

    def _notify_success(self, result: TxResult) -> None:
        for callback in list(self._callbacks):
            try:
                callback(result)
            except Exception as e:
                logger.error(f"Transaction success callback failed: {e}")
