"""Probability derivation for both pricing sources.

Order-book markets: mid of the YES book when the spread is tight, else the
last YES trade, else 50/50.
Curve markets: the two independent curve prices normalised to sum to 1.
"""

from config.settings import settings
from src.ot_curve.domain.curve import curve_price
from src.ot_curve.domain.models import CurvePrices, CurveState

DEFAULT_PROBABILITY = 0.5


def book_yes_probability(
    best_bid: float | None,
    best_ask: float | None,
    last_trade_price: float | None,
    spread_guard: float | None = None,
) -> float:
    guard = settings.SPREAD_GUARD if spread_guard is None else spread_guard
    if best_bid is not None and best_ask is not None:
        if best_ask - best_bid <= guard + 1e-8:
            return (best_bid + best_ask) / 2
    if last_trade_price is not None:
        return last_trade_price
    return DEFAULT_PROBABILITY


def curve_prices(curve: CurveState) -> CurvePrices:
    yes_price = curve_price(curve.yes)
    no_price = curve_price(curve.no)
    total = (yes_price + no_price) or 1.0
    prob_yes = yes_price / total
    return CurvePrices(
        yes_price=yes_price,
        no_price=no_price,
        prob_yes=prob_yes,
        prob_no=1 - prob_yes,
    )
