"""
Account ledger client.

Reads trade history, wallet balances and cash from the account API through
the authenticated session. Malformed records are skipped one by one; only an
unreadable response fails a whole call.
"""

import json
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from loguru import logger

from portfolio_engine.core.config import EngineConfig
from portfolio_engine.core.enums import TradeKind
from portfolio_engine.core.exceptions.engine import DataError, ParseError, ValidationError
from portfolio_engine.core.interfaces.collaborators import IAuthProvider
from portfolio_engine.core.interfaces.market import ILedgerSource
from portfolio_engine.core.models.trade import Trade
from portfolio_engine.core.types.financial import ZERO
from portfolio_engine.core.utils.validation import (
    validate_decimal,
    validate_non_negative,
    validate_symbol,
)

TRADE_LOG_PATH = "/tradelog"
WALLET_PATH = "/mywallet"
USER_INFO_PATH = "/user/info"


def parse_order_time(value: Any) -> datetime:
    """Parse an ISO-8601 order timestamp ("2024-05-01T09:30:00Z" or "2024-05-01 09:30:00").

    Raises:
        ValueError: If the value is not a timestamp
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"orderTime must be a non-empty string, got {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    return datetime.fromisoformat(text)


def parse_trade_record(record: Any) -> Trade:
    """Convert one ``tradeLog`` entry into a Trade.

    Raises:
        ParseError: If any field is missing or invalid
    """
    if not isinstance(record, Mapping):
        raise ParseError("tradeLog", "record is not an object", record)
    try:
        return Trade(
            kind=TradeKind.from_string(str(record.get("type", ""))),
            symbol=record.get("symbol"),
            quantity=record.get("amount"),
            unit_price=record.get("orderPrice"),
            occurred_at=parse_order_time(record.get("orderTime")),
            name=str(record.get("name") or ""),
        )
    except (ValidationError, ValueError) as e:
        raise ParseError("tradeLog", str(e), record) from e


def parse_wallet_record(record: Any) -> tuple[str, Decimal]:
    """Convert one ``myWallet`` entry into (symbol, quantity).

    Raises:
        ParseError: If the symbol or amount is invalid
    """
    if not isinstance(record, Mapping):
        raise ParseError("myWallet", "record is not an object", record)
    try:
        symbol = validate_symbol(record.get("symbol"))
        quantity = validate_non_negative(validate_decimal(record.get("amount"), "amount"), "amount")
    except ValidationError as e:
        raise ParseError("myWallet", str(e), record) from e
    return symbol, quantity


class LedgerClient(ILedgerSource):
    """ILedgerSource backed by the account REST API."""

    def __init__(self, auth: IAuthProvider, config: EngineConfig | None = None) -> None:
        self.auth = auth
        self.config = config or EngineConfig()

    @property
    def base_url(self) -> str:
        return self.config.api_base_url

    async def _get_object(self, path: str) -> Mapping[str, Any]:
        """GET a JSON object through the authenticated session.

        Raises:
            DataError: If the body is not a JSON object
        """
        body = await self.auth.perform_authenticated_request(f"{self.base_url}{path}", "GET")
        try:
            payload = json.loads(body)
        except (TypeError, ValueError) as e:
            raise DataError(f"{path} returned invalid JSON: {e}") from e
        if not isinstance(payload, Mapping):
            raise DataError(f"{path} did not return a JSON object")
        return payload

    @staticmethod
    def _records(payload: Mapping[str, Any], key: str, path: str) -> list[Any]:
        records = payload.get(key)
        if not isinstance(records, list):
            raise DataError(f"{path} response has no {key} list")
        return records

    async def fetch_trades(self) -> list[Trade]:
        """Fetch the full trade history in ledger order."""
        payload = await self._get_object(TRADE_LOG_PATH)
        trades = []
        for record in self._records(payload, "tradeLog", TRADE_LOG_PATH):
            try:
                trades.append(parse_trade_record(record))
            except ParseError as e:
                logger.warning(f"Skipping trade record: {e}")
        logger.debug(f"Parsed {len(trades)} trades")
        return trades

    async def fetch_quantities(self) -> dict[str, Decimal]:
        """Fetch held quantity per symbol in wallet order.

        A symbol listed twice keeps its last amount.
        """
        payload = await self._get_object(WALLET_PATH)
        quantities: dict[str, Decimal] = {}
        for record in self._records(payload, "myWallet", WALLET_PATH):
            try:
                symbol, quantity = parse_wallet_record(record)
            except ParseError as e:
                logger.warning(f"Skipping wallet record: {e}")
                continue
            quantities[symbol] = quantity
        return quantities

    async def fetch_cash_balance(self) -> Decimal:
        """Fetch the uninvested cash balance, zero when the account reports none."""
        payload = await self._get_object(USER_INFO_PATH)
        cash = payload.get("cash")
        if cash is None:
            return ZERO
        try:
            return validate_non_negative(validate_decimal(cash, "cash"), "cash")
        except ValidationError as e:
            raise DataError(f"Invalid cash balance: {e}") from e
