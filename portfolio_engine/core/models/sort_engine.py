"""
Sorting and filtering of view rows.

Rows are sorted on one field selected by SortKey. Each row type declares how
a key maps onto its fields; numeric fields are parsed leniently and anything
unparsable sorts as zero.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from portfolio_engine.core.enums import SortKey
from portfolio_engine.core.models.allocation import AllocationSlice
from portfolio_engine.core.models.market import MarketQuote
from portfolio_engine.core.models.position import Position
from portfolio_engine.core.models.view_state import SortSpec, ViewState
from portfolio_engine.core.types.financial import parse_decimal_or_zero

T = TypeVar("T")

FieldMap = Mapping[SortKey, Callable[[Any], Any]]

QUOTE_FIELDS: FieldMap = {
    SortKey.NAME: lambda q: q.name,
    SortKey.CHANGE: lambda q: q.change_percent,
    SortKey.PRICE: lambda q: q.price,
}

POSITION_FIELDS: FieldMap = {
    SortKey.NAME: lambda p: p.display_name,
    SortKey.QUANTITY: lambda p: p.quantity,
    SortKey.PRICE: lambda p: p.current_price,
    SortKey.VALUE: lambda p: p.evaluated_value,
    SortKey.CHANGE: lambda p: p.pnl_percent,
}

SLICE_FIELDS: FieldMap = {
    SortKey.NAME: lambda s: s.display_name,
    SortKey.VALUE: lambda s: s.percentage,
}

# Text searched by the view filter, per row type
SEARCH_FIELDS: dict[type, Callable[[Any], tuple[str, ...]]] = {
    MarketQuote: lambda q: (q.name, q.symbol),
    Position: lambda p: (p.display_name, p.symbol),
    AllocationSlice: lambda s: (s.display_name, s.label),
}


class SortEngine:
    """Stateless sorter; all state lives in ViewState."""

    def sort(self, items: Iterable[T], spec: SortSpec | None, fields: FieldMap) -> list[T]:
        """Sort rows by the selected key and direction.

        The sort is stable in both directions: rows with equal keys keep their
        input order. An unset sort returns the rows unchanged.

        Args:
            items: Rows to sort
            spec: Selected key and direction, or None
            fields: How each key reads a row

        Returns:
            New sorted list; the input is not modified
        """
        rows = list(items)
        if spec is None:
            return rows

        accessor = fields.get(spec.key)
        if accessor is None:
            return rows

        if spec.key.is_numeric:

            def sort_key(row: T) -> Any:
                return parse_decimal_or_zero(accessor(row))

        else:

            def sort_key(row: T) -> Any:
                return str(accessor(row) or "")

        return sorted(rows, key=sort_key, reverse=not spec.ascending)

    def filter(self, items: Iterable[T], query: str) -> list[T]:
        """Keep rows whose name or symbol contains the query, case-insensitively."""
        rows = list(items)
        needle = query.strip().casefold()
        if not needle:
            return rows
        return [row for row in rows if self._matches(row, needle)]

    def apply(self, items: Sequence[T], state: ViewState, fields: FieldMap) -> list[T]:
        """Filter then sort rows according to a view's state."""
        return self.sort(self.filter(items, state.search_query), state.sort, fields)

    @staticmethod
    def _matches(row: Any, needle: str) -> bool:
        extractor = SEARCH_FIELDS.get(type(row))
        if extractor is None:
            return True
        return any(needle in text.casefold() for text in extractor(row))
