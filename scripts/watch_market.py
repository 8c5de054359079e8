#!/usr/bin/env python3
"""
Market Watcher

Polls the public ticker for a set of symbols and logs every price move as an
up/down signal, the same way the engine's sync loop detects them.

URL Pattern: {feed_base_url}/public/ticker/ALL_KRW
"""

import argparse
import asyncio
import sys
import time

from loguru import logger

from portfolio_engine.core.config import EngineConfig, load_config
from portfolio_engine.core.exceptions.engine import ConfigurationError, FeedError, NetworkError
from portfolio_engine.core.interfaces.market import IMarketFeed
from portfolio_engine.core.utils.logging_setup import setup_logging
from portfolio_engine.infrastructure.market.market_feed import HttpMarketFeed
from portfolio_engine.infrastructure.market.signal_board import SignalBoard


async def watch(
    config: EngineConfig, symbols: list[str], cycles: int, feed: IMarketFeed | None = None
) -> tuple[int, int]:
    """Poll the feed and log direction signals.

    Args:
        config: Engine configuration (feed URL, interval, signal window)
        symbols: Symbols to watch
        cycles: Number of polls, 0 for unlimited
        feed: Feed to poll instead of the HTTP ticker

    Returns:
        Tuple of (polls made, polls failed)
    """
    http_feed = HttpMarketFeed(config) if feed is None else None
    source = feed or http_feed
    board = SignalBoard(ttl_seconds=config.signal_ttl_seconds)
    previous: dict = {}
    failures = 0
    count = 0

    try:
        while cycles == 0 or count < cycles:
            count += 1
            started = time.monotonic()
            try:
                quotes = await source.fetch_quotes(symbols)
            except (FeedError, NetworkError) as e:
                failures += 1
                logger.warning(f"Poll {count} failed: {e}")
            else:
                current = {symbol: quote.price for symbol, quote in quotes.items()}
                for signal in board.observe(previous, current):
                    quote = quotes[signal.symbol]
                    logger.info(
                        f"{signal.direction.upper():<4} {quote.name} ({quote.symbol}) "
                        f"{previous[signal.symbol]} -> {quote.price} [{quote.change_rate}%]"
                    )
                previous = current
                logger.debug(f"Poll {count}: {len(quotes)} quotes")

            if cycles and count >= cycles:
                break
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, config.sync_interval_seconds - elapsed))
    finally:
        if http_feed is not None:
            http_feed.close()

    return count, failures


def exit_status(polls: int, failures: int) -> int:
    """Exit code for a finished watch: 1 only when no poll succeeded."""
    return 1 if polls and failures == polls else 0


def main():
    parser = argparse.ArgumentParser(
        description="Watch ticker prices and log up/down moves",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Watch the default market list forever
  python watch_market.py

  # Watch two symbols for ten polls
  python watch_market.py --symbols BTC ETH --cycles 10

  # Poll every second with debug logging
  python watch_market.py --interval 1 --debug
        """,
    )

    parser.add_argument(
        "--symbols", nargs="+", default=None, help="Symbols to watch (default: market list)"
    )

    parser.add_argument(
        "--interval", type=float, default=None, help="Seconds between polls (default: 3)"
    )

    parser.add_argument(
        "--cycles", type=int, default=0, help="Number of polls, 0 for unlimited (default: 0)"
    )

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    setup_logging(args.debug)

    if args.cycles < 0:
        logger.error("Cycles must be zero or positive")
        return 1

    overrides: dict[str, object] = {}
    if args.interval is not None:
        overrides["sync_interval_seconds"] = args.interval
    if args.symbols:
        overrides["market_symbols"] = args.symbols
    try:
        config = load_config(**overrides)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    symbols = list(config.market_symbols)
    logger.info(f"Watching {len(symbols)} symbols every {config.sync_interval_seconds}s")

    try:
        polls, failures = asyncio.run(watch(config, symbols, args.cycles))
    except KeyboardInterrupt:
        logger.info("Stopped")
        return 0

    if failures:
        logger.warning(f"Finished with {failures} of {polls} polls failed")
    else:
        logger.success("Finished watching")
    return exit_status(polls, failures)


if __name__ == "__main__":
    sys.exit(main())
