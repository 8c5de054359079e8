"""
Portfolio API endpoints.
"""

from fastapi import APIRouter, Depends

from portfolio_engine.api.dependencies import get_portfolio, get_signal_board
from portfolio_engine.api.schemas.api_models import (
    AllocationSliceResponse,
    PositionResponse,
    QuoteResponse,
    SearchRequest,
    SignalResponse,
    SnapshotResponse,
    SortRequest,
    ViewRowsResponse,
)
from portfolio_engine.core.enums import ViewName
from portfolio_engine.core.models.portfolio import Portfolio
from portfolio_engine.infrastructure.market.signal_board import SignalBoard

router = APIRouter()


def _view_rows(view: ViewName, portfolio: Portfolio, signals: SignalBoard) -> ViewRowsResponse:
    """Render a view's filtered and sorted rows."""
    if view == ViewName.MARKET:
        rows = [
            QuoteResponse.from_quote(q, signals.direction(q.symbol))
            for q in portfolio.market_rows()
        ]
    elif view == ViewName.HOLDINGS:
        rows = [PositionResponse.from_position(p) for p in portfolio.holdings_rows()]
    else:
        rows = [AllocationSliceResponse.from_slice(s) for s in portfolio.allocation_rows()]
    return ViewRowsResponse.build(portfolio.views.state(view), rows)


@router.get("/snapshot")
async def get_snapshot(portfolio: Portfolio = Depends(get_portfolio)) -> SnapshotResponse:
    """Get the latest portfolio valuation."""
    return SnapshotResponse.from_snapshot(portfolio.snapshot)


@router.get("/allocation")
async def get_allocation(
    portfolio: Portfolio = Depends(get_portfolio),
) -> list[AllocationSliceResponse]:
    """Get the allocation breakdown in bucketer order."""
    return [AllocationSliceResponse.from_slice(s) for s in portfolio.allocation()]


@router.get("/signals")
async def get_signals(signals: SignalBoard = Depends(get_signal_board)) -> list[SignalResponse]:
    """Get the currently active price-direction signals."""
    return [SignalResponse.from_signal(s) for s in signals.active().values()]


@router.get("/views/{view}")
async def get_view(
    view: ViewName,
    portfolio: Portfolio = Depends(get_portfolio),
    signals: SignalBoard = Depends(get_signal_board),
) -> ViewRowsResponse:
    """Get a view's rows with its current sort and search applied."""
    return _view_rows(view, portfolio, signals)


@router.post("/views/{view}/sort")
async def toggle_sort(
    view: ViewName,
    body: SortRequest,
    portfolio: Portfolio = Depends(get_portfolio),
    signals: SignalBoard = Depends(get_signal_board),
) -> ViewRowsResponse:
    """Select a sort key; selecting the active key again flips direction."""
    portfolio.toggle_sort(view, body.key)
    return _view_rows(view, portfolio, signals)


@router.post("/views/{view}/search")
async def set_search(
    view: ViewName,
    body: SearchRequest,
    portfolio: Portfolio = Depends(get_portfolio),
    signals: SignalBoard = Depends(get_signal_board),
) -> ViewRowsResponse:
    """Set a view's search filter."""
    portfolio.set_search(view, body.query)
    return _view_rows(view, portfolio, signals)


@router.post("/views/{view}/select")
async def select_view(
    view: ViewName,
    portfolio: Portfolio = Depends(get_portfolio),
    signals: SignalBoard = Depends(get_signal_board),
) -> ViewRowsResponse:
    """Switch to a view, resetting sort and search."""
    portfolio.select_view(view)
    return _view_rows(view, portfolio, signals)
