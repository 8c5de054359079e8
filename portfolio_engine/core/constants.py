"""
Core constants and limits.

Defines engine-wide defaults. Every value here is the default of a field in
EngineConfig and can be overridden per deployment.
"""

from decimal import Decimal

# Cost Basis
CLOSE_POSITION_EPSILON = Decimal("0.001")  # Held quantity at or below this closes the position

# Dust Filtering
MIN_DISPLAY_VALUE = Decimal("1")  # Holdings worth less than 1 currency unit are hidden
MIN_DISPLAY_QUANTITY = Decimal("0.000001")

# Allocation
ALLOCATION_THRESHOLD_PERCENT = Decimal("0.5")  # Slices below this merge into "other"
CASH_SLICE_LABEL = "KRW"
CASH_SLICE_NAME = "Cash"
OTHER_SLICE_LABEL = "ETC"
OTHER_SLICE_NAME = "Other"

# Market Sync
SYNC_INTERVAL_SECONDS = 3.0
SIGNAL_TTL_SECONDS = 0.3
MAX_TRACKED_SYMBOLS = 1000  # Upper bound for signal and name caches
DISPLAY_NAME_CACHE_TTL_SECONDS = 3600
FALLBACK_NAME_CACHE_TTL_SECONDS = 60  # Listing retry delay while it is unreachable

# Transactions
MAX_TRANSACTION_AMOUNT = Decimal("2000000000")  # Per-request ceiling for deposit/withdraw
MAX_TRANSACTION_RETRIES = 1  # Exactly one silent refresh-then-resend
SUCCESS_STATUS_CODES = frozenset({200, 201})
UNAUTHORIZED_STATUS_CODE = 401

# Network
DEFAULT_API_BASE_URL = "https://www.downbit.net"
DEFAULT_FEED_BASE_URL = "https://api.bithumb.com"
REQUEST_TIMEOUT_SECONDS = 10.0
FEED_OK_STATUS = "0000"

# Instruments shown in the market view regardless of holdings
DEFAULT_MARKET_SYMBOLS = (
    "BTC", "ETH", "XRP", "USDT", "DOGE", "SOL", "ENA", "PEPE", "SHIB", "SUI",
    "WLD", "SPK", "BONK", "ES", "XLM", "CFX", "ONDO", "FORT", "BABY", "WOO",
)
