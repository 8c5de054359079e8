"""
Portfolio allocation breakdown.

This module converts a snapshot into percentage-of-portfolio slices with
a long-tail "other" bucket.
"""

from dataclasses import replace
from decimal import Decimal

from portfolio_engine.core.constants import (
    ALLOCATION_THRESHOLD_PERCENT,
    CASH_SLICE_LABEL,
    CASH_SLICE_NAME,
    OTHER_SLICE_LABEL,
    OTHER_SLICE_NAME,
)
from portfolio_engine.core.models.allocation import AllocationSlice
from portfolio_engine.core.models.snapshot import PortfolioSnapshot
from portfolio_engine.core.types.financial import ZERO, calculate_percentage


class AllocationBucketer:
    """Buckets a snapshot into allocation slices.

    Output order is deterministic: slices are sorted by percentage with a
    stable sort, so equal percentages keep aggregation order (cash first,
    then positions as the snapshot lists them).
    """

    def __init__(
        self,
        threshold_percent: Decimal = ALLOCATION_THRESHOLD_PERCENT,
        cash_label: str = CASH_SLICE_LABEL,
        cash_name: str = CASH_SLICE_NAME,
        other_label: str = OTHER_SLICE_LABEL,
        other_name: str = OTHER_SLICE_NAME,
    ) -> None:
        self.threshold_percent = threshold_percent
        self.cash_label = cash_label
        self.cash_name = cash_name
        self.other_label = other_label
        self.other_name = other_name

    def bucket(self, snapshot: PortfolioSnapshot) -> list[AllocationSlice]:
        """Compute the allocation breakdown of a snapshot.

        Args:
            snapshot: Valuation to break down

        Returns:
            Slices sorted by descending percentage, small slices merged into
            a trailing "other" slice, each ranked by output position
        """
        total_value = snapshot.total_value
        if total_value <= ZERO:
            return []

        candidates = self._collect_slices(snapshot, total_value)
        candidates.sort(key=lambda s: s.percentage, reverse=True)

        visible: list[AllocationSlice] = []
        other_percentage = ZERO
        other_value = ZERO
        for candidate in candidates:
            if candidate.percentage >= self.threshold_percent:
                visible.append(candidate)
            else:
                other_percentage += candidate.percentage
                other_value += candidate.value

        if other_percentage > ZERO:
            visible.append(
                AllocationSlice(
                    label=self.other_label,
                    display_name=self.other_name,
                    percentage=other_percentage,
                    value=other_value,
                    is_other=True,
                )
            )

        return [replace(s, rank=rank) for rank, s in enumerate(visible)]

    def _collect_slices(
        self, snapshot: PortfolioSnapshot, total_value: Decimal
    ) -> list[AllocationSlice]:
        """Build unranked slices for cash and every valued position."""
        slices = []
        if snapshot.cash_balance > ZERO:
            slices.append(
                AllocationSlice(
                    label=self.cash_label,
                    display_name=self.cash_name,
                    percentage=calculate_percentage(snapshot.cash_balance, total_value),
                    value=snapshot.cash_balance,
                )
            )

        for position in snapshot.positions:
            value = position.evaluated_value
            if value > ZERO:
                slices.append(
                    AllocationSlice(
                        label=position.symbol,
                        display_name=position.display_name,
                        percentage=calculate_percentage(value, total_value),
                        value=value,
                    )
                )
        return slices
