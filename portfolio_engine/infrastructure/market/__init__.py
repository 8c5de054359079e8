"""
Market data infrastructure.

This module provides the polled price feed, the direction signal board
and the background sync loop.
"""

from .market_feed import HttpMarketFeed
from .signal_board import SignalBoard
from .sync_loop import MarketSyncLoop

__all__ = ["HttpMarketFeed", "MarketSyncLoop", "SignalBoard"]
