"""
Pydantic schemas for API request/response models.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from portfolio_engine.core.enums import (
    Direction,
    SortKey,
    TransactionKind,
    TransactionOutcome,
    ViewName,
)
from portfolio_engine.core.models.allocation import AllocationSlice
from portfolio_engine.core.models.market import DirectionSignal, MarketQuote
from portfolio_engine.core.models.position import Position
from portfolio_engine.core.models.snapshot import PortfolioSnapshot
from portfolio_engine.core.models.transaction import TxResult
from portfolio_engine.core.models.view_state import ViewState


class PositionResponse(BaseModel):
    """Response model for one held position."""

    symbol: str
    display_name: str
    quantity: Decimal
    average_cost: Decimal
    current_price: Decimal
    evaluated_value: Decimal
    unrealized_pnl: Decimal
    pnl_percent: Decimal

    @classmethod
    def from_position(cls, position: Position) -> "PositionResponse":
        return cls(
            symbol=position.symbol,
            display_name=position.display_name,
            quantity=position.quantity,
            average_cost=position.average_cost,
            current_price=position.current_price,
            evaluated_value=position.evaluated_value,
            unrealized_pnl=position.unrealized_pnl,
            pnl_percent=position.pnl_percent,
        )


class SnapshotResponse(BaseModel):
    """Response model for the portfolio valuation."""

    cash_balance: Decimal
    holdings_value: Decimal
    total_value: Decimal
    total_cost: Decimal
    unrealized_pnl: Decimal
    pnl_percent: Decimal
    computed_at: datetime
    positions: list[PositionResponse]

    @classmethod
    def from_snapshot(cls, snapshot: PortfolioSnapshot) -> "SnapshotResponse":
        return cls(
            cash_balance=snapshot.cash_balance,
            holdings_value=snapshot.holdings_value,
            total_value=snapshot.total_value,
            total_cost=snapshot.total_cost,
            unrealized_pnl=snapshot.unrealized_pnl,
            pnl_percent=snapshot.pnl_percent,
            computed_at=snapshot.computed_at,
            positions=[PositionResponse.from_position(p) for p in snapshot.positions],
        )


class AllocationSliceResponse(BaseModel):
    """Response model for one allocation slice."""

    label: str
    display_name: str
    percentage: Decimal
    display_percentage: Decimal
    value: Decimal
    rank: int
    is_other: bool

    @classmethod
    def from_slice(cls, allocation_slice: AllocationSlice) -> "AllocationSliceResponse":
        return cls(
            label=allocation_slice.label,
            display_name=allocation_slice.display_name,
            percentage=allocation_slice.percentage,
            display_percentage=allocation_slice.display_percentage,
            value=allocation_slice.value,
            rank=allocation_slice.rank,
            is_other=allocation_slice.is_other,
        )


class QuoteResponse(BaseModel):
    """Response model for one market row."""

    symbol: str
    name: str
    price: Decimal
    change_rate: str
    direction: Direction = Direction.NONE

    @classmethod
    def from_quote(
        cls, quote: MarketQuote, direction: Direction = Direction.NONE
    ) -> "QuoteResponse":
        return cls(
            symbol=quote.symbol,
            name=quote.name,
            price=quote.price,
            change_rate=quote.change_rate,
            direction=direction,
        )


class SignalResponse(BaseModel):
    """Response model for an active price-direction signal."""

    symbol: str
    direction: Direction

    @classmethod
    def from_signal(cls, signal: DirectionSignal) -> "SignalResponse":
        return cls(symbol=signal.symbol, direction=signal.direction)


class ViewRowsResponse(BaseModel):
    """Response model for the rows of a sortable view."""

    view: ViewName
    sort_key: SortKey | None = None
    ascending: bool | None = None
    search_query: str = ""
    rows: list[QuoteResponse | PositionResponse | AllocationSliceResponse]

    @classmethod
    def build(
        cls,
        state: ViewState,
        rows: list[QuoteResponse | PositionResponse | AllocationSliceResponse],
    ) -> "ViewRowsResponse":
        return cls(
            view=state.view,
            sort_key=state.sort.key if state.sort else None,
            ascending=state.sort.ascending if state.sort else None,
            search_query=state.search_query,
            rows=rows,
        )


class SortRequest(BaseModel):
    """Request model for toggling a view's sort key."""

    key: SortKey = Field(..., description="Column to sort by; repeating it flips direction")


class SearchRequest(BaseModel):
    """Request model for a view's search filter."""

    query: str = Field(default="", max_length=100, description="Name or symbol substring")


class TransactionRequest(BaseModel):
    """Request model for a deposit or withdraw submission.

    Amount limits are enforced by the submitter so that they surface as an
    INVALID_REQUEST outcome rather than a schema error.
    """

    kind: TransactionKind = Field(..., description="deposit or withdraw")
    amount: Decimal = Field(..., description="Amount in the account currency")
    destination_account: str | None = Field(default=None, max_length=64)

    @field_validator("destination_account")
    @classmethod
    def validate_destination_account(cls, v: str | None) -> str | None:
        """Strip whitespace; blank means no account."""
        if v is None:
            return None
        return v.strip() or None


class TransactionResponse(BaseModel):
    """Response model for a submission's terminal result."""

    outcome: TransactionOutcome
    kind: TransactionKind
    message: str
    status_code: int | None = None
    attempts: int
    refreshes: int
    succeeded: bool
    requires_login: bool

    @classmethod
    def from_result(cls, result: TxResult) -> "TransactionResponse":
        return cls(
            outcome=result.outcome,
            kind=result.kind,
            message=result.message,
            status_code=result.status_code,
            attempts=result.attempts,
            refreshes=result.refreshes,
            succeeded=result.succeeded,
            requires_login=result.outcome.requires_login,
        )


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str
    message: str
    details: dict | None = None
