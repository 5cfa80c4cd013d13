"""Price and quantity helpers for the 0.01-tick probability grid.

Prices are floats in [0, 1]; the order book indexes them by integer tick
(0..100) so that level lookups never compare floats.
"""

import math

from src.ot_common.enums import OrderSide, OrderType, Outcome
from src.ot_common.errors import (
    InvalidOrderTypeError,
    InvalidOutcomeError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidSideError,
)

TICKS_PER_UNIT = 100
MAX_TICK = TICKS_PER_UNIT


def price_to_tick(price: float) -> int:
    """Round half-up to the nearest tick: 0.306 -> 31, 0.304 -> 30."""
    return int(math.floor(price * TICKS_PER_UNIT + 0.5))


def tick_to_price(tick: int) -> float:
    return tick / TICKS_PER_UNIT


def round_to_tick(price: float) -> float:
    return tick_to_price(price_to_tick(price))


def validate_price(price: float) -> float:
    """Raise InvalidPriceError unless price is a finite number in [0, 1]."""
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise InvalidPriceError(price)
    if not math.isfinite(price) or price < 0 or price > 1:
        raise InvalidPriceError(price)
    return float(price)


def validate_quantity(qty: float) -> float:
    """Raise InvalidQuantityError unless qty is a finite number > 0."""
    if isinstance(qty, bool) or not isinstance(qty, (int, float)):
        raise InvalidQuantityError(qty)
    if not math.isfinite(qty) or qty <= 0:
        raise InvalidQuantityError(qty)
    return float(qty)


def parse_outcome(value: str) -> Outcome:
    """Accept YES/NO in any case."""
    try:
        return Outcome(str(value).upper())
    except ValueError:
        raise InvalidOutcomeError(value) from None


def parse_side(value: str) -> OrderSide:
    try:
        return OrderSide(str(value).upper())
    except ValueError:
        raise InvalidSideError(value) from None


def parse_order_type(value: str) -> OrderType:
    try:
        return OrderType(str(value).upper())
    except ValueError:
        raise InvalidOrderTypeError(value) from None
