"""
Core enumerations for the portfolio engine.

This module provides centralized enumerations for domain concepts
like trade sides, price directions, transaction states and list views.
"""

from .market_types import Direction
from .trade_types import TradeKind
from .transaction_types import TransactionKind, TransactionOutcome, TransactionState
from .view_types import SortKey, ViewName

__all__ = [
    "Direction",
    "SortKey",
    "TradeKind",
    "TransactionKind",
    "TransactionOutcome",
    "TransactionState",
    "ViewName",
]
