"""Global enums — values are persisted verbatim and must match the DB CHECK constraints."""

from enum import Enum


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    LIMIT = "LIMIT"
    MARKET = "MARKET"


class OrderStatus(str, Enum):
    OPEN = "OPEN"
    PARTIAL = "PARTIAL"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"


class MarketPhase(str, Enum):
    """Which engine prices the market: the sandbox bonding curve or the order book."""
    SANDBOX_CURVE = "SANDBOX_CURVE"
    ORDER_BOOK = "ORDER_BOOK"


class MarketStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
