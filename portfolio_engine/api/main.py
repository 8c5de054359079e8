"""
FastAPI main application for the portfolio engine.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from portfolio_engine.core.exceptions.engine import (
    TransactionInProgressError,
    ValidationError,
)
from portfolio_engine.core.models.portfolio import Portfolio
from portfolio_engine.infrastructure.market.signal_board import SignalBoard
from portfolio_engine.infrastructure.market.sync_loop import MarketSyncLoop
from portfolio_engine.infrastructure.transactions.submitter import TransactionSubmitter

from .routers import portfolio as portfolio_router
from .routers import transactions as transactions_router
from .schemas.api_models import ErrorResponse

API_VERSION = "1.0.0"


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    """Build a consistent JSON error response."""
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Map engine exceptions raised by routes to HTTP responses."""

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning(f"Rejected API request: {exc}")
        return _error_response(400, "validation_error", str(exc))

    @app.exception_handler(TransactionInProgressError)
    async def handle_in_progress(
        _request: Request, exc: TransactionInProgressError
    ) -> JSONResponse:
        logger.warning(f"Duplicate submission: {exc.request_id}")
        return _error_response(409, "transaction_in_progress", str(exc))


def create_app(
    portfolio: Portfolio,
    submitter: TransactionSubmitter,
    sync_loop: MarketSyncLoop | None = None,
) -> FastAPI:
    """Create the API around already-built engine objects.

    Successful transactions invalidate the portfolio's ledger. When a sync
    loop is given it runs for the lifetime of the application and its signal
    board backs the signal endpoints.

    Args:
        portfolio: Portfolio facade to expose
        submitter: Submitter for deposit/withdraw requests
        sync_loop: Optional market sync loop to start and stop with the app

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if sync_loop is not None:
            sync_loop.start()
        yield
        if sync_loop is not None:
            await sync_loop.stop()

    app = FastAPI(
        title="Portfolio Engine API",
        version=API_VERSION,
        description="Portfolio valuation, market sync and cash transactions",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # Development frontend
            "http://localhost:8080",  # Alternative development port
        ],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    )

    app.state.portfolio = portfolio
    app.state.submitter = submitter
    app.state.signals = (
        sync_loop.signals
        if sync_loop is not None
        else SignalBoard(ttl_seconds=portfolio.config.signal_ttl_seconds)
    )

    submitter.add_success_callback(lambda _result: portfolio.invalidate_ledger())

    register_error_handlers(app)
    app.include_router(portfolio_router.router, prefix="/api/portfolio", tags=["portfolio"])
    app.include_router(
        transactions_router.router, prefix="/api/transactions", tags=["transactions"]
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {"message": "Portfolio Engine API", "version": API_VERSION, "status": "running"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
