"""
Per-view sort and search state.

Each list view owns its SortSpec and search query. Switching views through
ViewRegistry.on_view_change discards both, for the view being left and for
the view being selected.
"""

from dataclasses import dataclass, field

from loguru import logger

from portfolio_engine.core.enums import SortKey, ViewName
from portfolio_engine.core.exceptions.engine import ValidationError


@dataclass(frozen=True)
class SortSpec:
    """Selected sort key and direction."""

    key: SortKey
    ascending: bool = True


@dataclass
class ViewState:
    """Sort and search state of a single view."""

    view: ViewName
    sort: SortSpec | None = None
    search_query: str = ""

    def toggle(self, key: SortKey) -> SortSpec:
        """Select a sort key the way a column header tap does.

        Choosing the active key flips the direction; choosing a different key
        starts ascending.

        Args:
            key: Sort key to select

        Returns:
            The new SortSpec

        Raises:
            ValidationError: If the view does not support the key
        """
        if key not in ViewName.supported_keys(self.view):
            raise ValidationError(f"View {self.view} cannot be sorted by {key}")

        if self.sort is not None and self.sort.key == key:
            self.sort = SortSpec(key=key, ascending=not self.sort.ascending)
        else:
            self.sort = SortSpec(key=key, ascending=True)
        return self.sort

    def set_search(self, query: str) -> None:
        """Set the search filter; blank clears it."""
        self.search_query = query.strip()

    def reset(self) -> None:
        """Discard sort and search."""
        self.sort = None
        self.search_query = ""


@dataclass
class ViewRegistry:
    """Holds the state of every view and which one is selected."""

    active: ViewName = ViewName.MARKET
    states: dict[ViewName, ViewState] = field(
        default_factory=lambda: {view: ViewState(view=view) for view in ViewName}
    )

    def state(self, view: ViewName) -> ViewState:
        """Get the state object of a view."""
        return self.states[view]

    def on_view_change(self, view: ViewName) -> ViewState:
        """Select a view, discarding sort and search state.

        Args:
            view: View being selected

        Returns:
            The (reset) state of the selected view
        """
        previous = self.active
        self.states[previous].reset()
        self.states[view].reset()
        self.active = view
        logger.debug(f"View changed: {previous} -> {view}")
        return self.states[view]
