"""Bonding curve math for sandbox markets.

Each outcome has its own linear, capped curve:

    price(s) = min_price + (max_price - min_price) * clamp(s / max_supply, 0, 1)

YES and NO curves are independent: their prices are not constrained to sum
to 1, so a market's probability is derived by normalising the two prices
(see src/ot_oracle/domain/pricing.py). This is deliberately not a
constant-product market maker.

Costs use the trapezoidal rule over [s, s + delta], which is exact for the
linear part of the curve.
"""

import logging

from config.settings import settings
from src.ot_curve.domain.models import CurveState, OutcomeCurve

logger = logging.getLogger(__name__)


def price_at_supply(curve: OutcomeCurve, supply: float) -> float:
    t = min(max(supply / curve.max_supply, 0.0), 1.0)
    return curve.min_price + (curve.max_price - curve.min_price) * t


def curve_price(curve: OutcomeCurve) -> float:
    """Current marginal price of one share."""
    return price_at_supply(curve, curve.supply)


def buy_cost(curve: OutcomeCurve, delta: float) -> float:
    start_price = price_at_supply(curve, curve.supply)
    end_price = price_at_supply(curve, curve.supply + delta)
    return ((start_price + end_price) / 2) * delta


def sell_payout(curve: OutcomeCurve, delta: float) -> float:
    """Formula payout for selling ``delta`` shares, before the reserve clamp."""
    start_price = price_at_supply(curve, curve.supply)
    end_price = price_at_supply(curve, curve.supply - delta)
    return ((start_price + end_price) / 2) * delta


def buy(curve: OutcomeCurve, delta: float) -> float:
    """Issue ``delta`` shares. Mutates supply/reserve and returns the cost."""
    cost = buy_cost(curve, delta)
    curve.supply += delta
    curve.reserve += cost
    return cost


def sell(curve: OutcomeCurve, delta: float) -> tuple[float, bool]:
    """Redeem ``delta`` shares. Returns (payout, clamped).

    The payout never exceeds the curve's own reserve: if the formula asks for
    more, it is reduced to the reserve and ``clamped`` is True.
    """
    payout = sell_payout(curve, delta)
    clamped = False
    if payout > curve.reserve:
        logger.warning(
            "Curve reserve insufficient: payout=%.6f reserve=%.6f delta=%.6f",
            payout,
            curve.reserve,
            delta,
        )
        payout = max(curve.reserve, 0.0)
        clamped = True
    curve.supply = max(curve.supply - delta, 0.0)
    curve.reserve = max(curve.reserve - payout, 0.0)
    return payout, clamped


def create_curve_state(
    initial_liquidity: float,
    min_price: float | None = None,
    max_price: float | None = None,
    depth_usd: float | None = None,
) -> CurveState:
    """Fresh YES/NO curves for a new sandbox market.

    max_supply is the share count whose full buy-out (supply 0 -> max_supply)
    costs roughly ``depth_usd``; initial liquidity is split evenly between
    the two reserves.
    """
    lo = settings.CURVE_MIN_PRICE if min_price is None else min_price
    hi = settings.CURVE_MAX_PRICE if max_price is None else max_price
    depth = settings.CURVE_DEPTH_USD if depth_usd is None else depth_usd
    if not (0 <= lo <= hi <= 1) or hi <= 0 or depth <= 0:
        raise ValueError(f"Invalid curve parameters: min={lo}, max={hi}, depth={depth}")
    avg_price = (lo + hi) / 2
    max_supply = float(round(depth / avg_price))

    def _curve() -> OutcomeCurve:
        return OutcomeCurve(
            supply=0.0,
            reserve=initial_liquidity / 2,
            min_price=lo,
            max_price=hi,
            max_supply=max_supply,
        )

    return CurveState(yes=_curve(), no=_curve())
