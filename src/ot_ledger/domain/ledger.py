"""Fill application: weighted-average cost basis and realized PnL.

The same rules apply whether a fill came from the order book or from the
bonding curve.
"""

from config.settings import settings
from src.ot_common.enums import OrderSide
from src.ot_ledger.domain.models import OutcomePosition


def apply_fill(position: OutcomePosition, side: str, price: float, qty: float) -> float:
    """Apply one fill to ``position`` in place. Returns the PnL realized by it.

    BUY:  avg = (q_old * avg_old + qty * price) / (q_old + qty); never realizes PnL.
    SELL: sells min(q_old, qty) shares; realized += (price - avg_old) * sold.
          Over-sells clamp silently; callers are responsible for not requesting
          more than is held.
    """
    if side == OrderSide.BUY:
        prev_qty = position.qty
        total_cost = prev_qty * position.avg_price + qty * price
        position.qty = prev_qty + qty
        position.avg_price = total_cost / position.qty if position.qty > 0 else 0.0
        return 0.0

    sell_qty = min(position.qty, qty)
    pnl = (price - position.avg_price) * sell_qty
    position.realized_pnl += pnl
    position.qty -= sell_qty
    # snap float residue (e.g. 0.3 - 0.1 - 0.2) to an exact zero
    if position.qty <= settings.SHARE_EPSILON:
        position.qty = 0.0
        position.avg_price = 0.0
    return pnl
