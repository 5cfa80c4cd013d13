"""Price-time priority matching algorithm for one (market, outcome) order book."""
from collections import deque
from datetime import datetime

from config.settings import settings
from src.ot_common.enums import OrderStatus, OrderType
from src.ot_common.id_generator import IdFactory
from src.ot_common.ticks import MAX_TICK
from src.ot_matching.domain.models import MatchResult, Order, Trade
from src.ot_matching.engine.order_book import OrderBook


def limit_tick(incoming: Order) -> int:
    """Worst tick the incoming order accepts. MARKET orders accept any price."""
    if incoming.order_type == OrderType.MARKET:
        return MAX_TICK if incoming.is_buy else 0
    return incoming.tick


def match_order(
    incoming: Order,
    ob: OrderBook,
    new_id: IdFactory,
    now: datetime,
    prevent_self_trade: bool = False,
) -> MatchResult:
    if incoming.is_buy:
        return _match_buy(incoming, ob, new_id, now, prevent_self_trade)
    return _match_sell(incoming, ob, new_id, now, prevent_self_trade)


def _match_buy(
    incoming: Order, ob: OrderBook, new_id: IdFactory, now: datetime, prevent_self_trade: bool
) -> MatchResult:
    """Match a BUY against resting asks: lowest price first, then earliest."""
    result = MatchResult()
    worst = limit_tick(incoming)
    # ticks above `worst` are not marketable, so the scan stops there
    for tick in range(ob.best_ask_tick, worst + 1):
        if incoming.remaining_qty <= 0:
            break
        _match_level(incoming, ob, ob.asks[tick], new_id, now, prevent_self_trade, result)
    ob._refresh_best_ask()
    return result


def _match_sell(
    incoming: Order, ob: OrderBook, new_id: IdFactory, now: datetime, prevent_self_trade: bool
) -> MatchResult:
    """Match a SELL against resting bids: highest price first, then earliest."""
    result = MatchResult()
    worst = limit_tick(incoming)
    for tick in range(ob.best_bid_tick, worst - 1, -1):
        if incoming.remaining_qty <= 0:
            break
        _match_level(incoming, ob, ob.bids[tick], new_id, now, prevent_self_trade, result)
    ob._refresh_best_bid()
    return result


def _match_level(
    incoming: Order,
    ob: OrderBook,
    queue: deque[Order],
    new_id: IdFactory,
    now: datetime,
    prevent_self_trade: bool,
    result: MatchResult,
) -> None:
    # iterate over a copy: filled makers leave the queue mid-loop
    for resting in list(queue):
        if incoming.remaining_qty <= 0:
            break
        if prevent_self_trade and resting.user_id == incoming.user_id:
            continue
        fill_qty = min(incoming.remaining_qty, resting.remaining_qty)
        result.trades.append(_make_trade(incoming, resting, fill_qty, new_id, now))
        if resting not in result.makers:
            result.makers.append(resting)
        _apply_fill(incoming, resting, fill_qty, now)
        if resting.remaining_qty <= 0:
            queue.remove(resting)
            ob._order_index.pop(resting.id, None)


def _make_trade(
    incoming: Order, resting: Order, qty: float, new_id: IdFactory, now: datetime
) -> Trade:
    return Trade(
        id=new_id("trade"),
        market_id=incoming.market_id,
        outcome=incoming.outcome,
        price=resting.price,  # maker price
        qty=qty,
        taker_order_id=incoming.id,
        maker_order_id=resting.id,
        taker_user_id=incoming.user_id,
        maker_user_id=resting.user_id,
        taker_side=incoming.side,
        created_at=now,
    )


def _apply_fill(incoming: Order, resting: Order, qty: float, now: datetime) -> None:
    for order in (incoming, resting):
        order.remaining_qty -= qty
        # snap float residue (e.g. 0.3 - 0.1 - 0.2) to an exact zero
        if order.remaining_qty <= settings.SHARE_EPSILON:
            order.remaining_qty = 0.0
            order.status = OrderStatus.FILLED.value
        else:
            order.status = OrderStatus.PARTIAL.value
        order.updated_at = now
