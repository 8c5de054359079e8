"""
Allocation slice model.
"""

from dataclasses import dataclass
from decimal import Decimal

from portfolio_engine.core.types.financial import round_percentage


@dataclass(frozen=True)
class AllocationSlice:
    """A named share of total portfolio value.

    ``rank`` is the slice's index in the bucketer's output order; downstream
    colour assignment keys off it.
    """

    label: str
    display_name: str
    percentage: Decimal
    value: Decimal
    rank: int = 0
    is_other: bool = False

    @property
    def display_percentage(self) -> Decimal:
        """Percentage rounded for display."""
        return round_percentage(self.percentage)
