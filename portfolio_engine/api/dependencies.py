"""
Dependency injection for the API routers.

The engine objects are created once by the caller of create_app and stored
on ``app.state``; these functions hand them to the routes.
"""

from fastapi import Request

from portfolio_engine.core.models.portfolio import Portfolio
from portfolio_engine.infrastructure.market.signal_board import SignalBoard
from portfolio_engine.infrastructure.transactions.submitter import TransactionSubmitter


def get_portfolio(request: Request) -> Portfolio:
    return request.app.state.portfolio


def get_submitter(request: Request) -> TransactionSubmitter:
    return request.app.state.submitter


def get_signal_board(request: Request) -> SignalBoard:
    return request.app.state.signals
