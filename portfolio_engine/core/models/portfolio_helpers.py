"""Helper methods for Portfolio to reduce complexity."""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from loguru import logger

from portfolio_engine.core.exceptions.engine import ValidationError
from portfolio_engine.core.models.market import MarketQuote
from portfolio_engine.core.models.trade import Trade
from portfolio_engine.core.types.financial import ZERO
from portfolio_engine.core.utils.validation import (
    validate_decimal,
    validate_non_negative,
    validate_symbol,
)


class PortfolioValidator:
    """Centralized validation helper for portfolio inputs.

    Ledger and feed data reach the store through these helpers, which drop
    bad entries with a warning instead of rejecting the whole batch.
    """

    @staticmethod
    def normalize_quantities(quantities: Mapping[str, object]) -> dict[str, Decimal]:
        """Validate account quantities, keeping input order.

        Args:
            quantities: Raw symbol to quantity mapping

        Returns:
            Mapping of normalized symbol to non-negative Decimal quantity
        """
        normalized: dict[str, Decimal] = {}
        for raw_symbol, raw_quantity in quantities.items():
            try:
                symbol = validate_symbol(raw_symbol)
                quantity = validate_non_negative(
                    validate_decimal(raw_quantity, "quantity"), "quantity"
                )
            except ValidationError as e:
                logger.warning(f"Dropping account quantity for {raw_symbol!r}: {e}")
                continue
            normalized[symbol] = quantity
        return normalized

    @staticmethod
    def normalize_cash(cash_balance: object) -> Decimal:
        """Validate the cash balance, treating an invalid value as zero."""
        try:
            return validate_non_negative(validate_decimal(cash_balance, "cash_balance"), "cash")
        except ValidationError as e:
            logger.warning(f"Invalid cash balance, using 0: {e}")
            return ZERO

    @staticmethod
    def validate_trades(trades: Iterable[object]) -> tuple[Trade, ...]:
        """Keep only Trade instances; anything else is dropped with a warning."""
        valid = []
        for trade in trades:
            if isinstance(trade, Trade):
                valid.append(trade)
            else:
                logger.warning(f"Dropping non-trade ledger entry: {trade!r}")
        return tuple(valid)

    @staticmethod
    def prices_from_quotes(quotes: Mapping[str, MarketQuote]) -> dict[str, Decimal]:
        """Extract the price map from a batch of quotes."""
        return {symbol: quote.price for symbol, quote in quotes.items()}
