"""
View and sort key enumerations.

Each list view supports its own subset of sort keys.
"""

from enum import StrEnum


class SortKey(StrEnum):
    """Selectable sort keys across all views."""

    NAME = "name"
    PRICE = "price"
    CHANGE = "change"
    QUANTITY = "quantity"
    VALUE = "value"

    @property
    def is_numeric(self) -> bool:
        """Check if the key sorts on a numeric field."""
        return self != self.NAME


class ViewName(StrEnum):
    """
    Sortable list views exposed to the UI.

    MARKET lists quotes for all tracked symbols, HOLDINGS lists owned positions,
    ALLOCATION lists the bucketed portfolio breakdown.
    """

    MARKET = "market"
    HOLDINGS = "holdings"
    ALLOCATION = "allocation"

    @classmethod
    def supported_keys(cls, view: "ViewName") -> tuple[SortKey, ...]:
        """
        Get the sort keys a view accepts.

        Args:
            view: View enum value

        Returns:
            Tuple of allowed sort keys
        """
        keys = {
            cls.MARKET: (SortKey.NAME, SortKey.CHANGE, SortKey.PRICE),
            cls.HOLDINGS: (
                SortKey.NAME,
                SortKey.QUANTITY,
                SortKey.PRICE,
                SortKey.VALUE,
                SortKey.CHANGE,
            ),
            cls.ALLOCATION: (SortKey.NAME, SortKey.VALUE),
        }
        return keys[view]
