"""Trade sizing against a bonding curve.

Buys are requested as a USD budget and converted to a share count; sells are
requested as a share count and clamped to what the seller holds.
"""

from config.settings import settings
from src.ot_common.errors import AmountTooSmallError, InsufficientSharesError
from src.ot_curve.domain.curve import buy_cost
from src.ot_curve.domain.models import OutcomeCurve


def size_buy(curve: OutcomeCurve, budget: float, step: int | None = None) -> tuple[float, float]:
    """Largest multiple of ``step`` shares affordable within ``budget``.

    Returns (delta, cost). Falls back to a single share when not even one
    step is affordable, and raises AmountTooSmallError when that fails too.
    buy_cost is increasing in delta, so the search doubles to bracket the
    answer and then bisects instead of walking one step at a time.
    """
    step = step or settings.CURVE_BUY_STEP

    def cost_of(k: int) -> float:
        return buy_cost(curve, k * step)

    if cost_of(1) <= budget:
        lo, hi = 1, 2
        while cost_of(hi) <= budget:
            lo, hi = hi, hi * 2
        # invariant: cost_of(lo) <= budget < cost_of(hi)
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if cost_of(mid) <= budget:
                lo = mid
            else:
                hi = mid
        delta = float(lo * step)
        return delta, buy_cost(curve, delta)

    unit_cost = buy_cost(curve, 1)
    if unit_cost <= budget:
        return 1.0, unit_cost
    raise AmountTooSmallError(budget)


def size_sell(requested: float, held: float) -> float:
    """Clamp a sell request to the held quantity."""
    delta = min(requested, held)
    if delta <= 0:
        raise InsufficientSharesError(held=held, requested=requested)
    return delta
