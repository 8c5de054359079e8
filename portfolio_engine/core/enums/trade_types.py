"""
Trade kind enumerations.

This module defines the trade sides recorded in the account ledger.
"""

from enum import StrEnum


class TradeKind(StrEnum):
    """
    Allowed ledger trade sides.

    The ledger only records spot buys and sells; there is no shorting.
    """

    BUY = "BUY"
    SELL = "SELL"

    @property
    def is_buy(self) -> bool:
        """Check if the trade adds to the held quantity."""
        return self == self.BUY

    @property
    def is_sell(self) -> bool:
        """Check if the trade reduces the held quantity."""
        return self == self.SELL

    @classmethod
    def from_string(cls, value: str) -> "TradeKind":
        """
        Convert ledger text to TradeKind, with case-insensitive matching.

        Args:
            value: String representation of the trade side

        Returns:
            Corresponding TradeKind enum value

        Raises:
            ValueError: If the side is not BUY or SELL
        """
        value_upper = value.strip().upper()
        if value_upper in ["BUY", "BID"]:
            return cls.BUY
        elif value_upper in ["SELL", "ASK"]:
            return cls.SELL
        else:
            raise ValueError(
                f"Unsupported trade kind: {value}. "
                f"Supported kinds: {', '.join([k.value for k in cls])}"
            )
