from collections import deque
from dataclasses import dataclass, field

from src.ot_common.enums import Outcome
from src.ot_common.ticks import MAX_TICK, tick_to_price
from src.ot_matching.domain.models import BookLevel, Order

_NO_BID = -1
_NO_ASK = MAX_TICK + 1


def _empty_levels() -> list[deque[Order]]:
    return [deque() for _ in range(MAX_TICK + 1)]


@dataclass
class OrderBook:
    """Resting orders of one (market, outcome). Indices 0-100 = price ticks.

    Each level is a FIFO queue, so within a price the earliest order is
    always at the front (time priority).
    """

    market_id: str
    outcome: str
    bids: list[deque[Order]] = field(default_factory=_empty_levels)
    asks: list[deque[Order]] = field(default_factory=_empty_levels)
    best_bid_tick: int = _NO_BID  # -1 = no bids
    best_ask_tick: int = _NO_ASK  # 101 = no asks
    _order_index: dict[str, tuple[str, int]] = field(default_factory=dict)
    # _order_index[order_id] = (side, tick)

    def add_order(self, order: Order) -> None:
        tick = order.tick
        if order.is_buy:
            self.bids[tick].append(order)
            if tick > self.best_bid_tick:
                self.best_bid_tick = tick
        else:
            self.asks[tick].append(order)
            if tick < self.best_ask_tick:
                self.best_ask_tick = tick
        self._order_index[order.id] = (order.side, tick)

    def cancel_order(self, order_id: str) -> Order | None:
        if order_id not in self._order_index:
            return None
        side, tick = self._order_index.pop(order_id)
        queue = self.bids[tick] if side == "BUY" else self.asks[tick]
        removed = None
        for i, order in enumerate(queue):
            if order.id == order_id:
                removed = order
                del queue[i]
                break
        if side == "BUY" and tick == self.best_bid_tick:
            self._refresh_best_bid()
        elif side == "SELL" and tick == self.best_ask_tick:
            self._refresh_best_ask()
        return removed

    def get(self, order_id: str) -> Order | None:
        if order_id not in self._order_index:
            return None
        side, tick = self._order_index[order_id]
        queue = self.bids[tick] if side == "BUY" else self.asks[tick]
        for order in queue:
            if order.id == order_id:
                return order
        return None

    def __contains__(self, order_id: str) -> bool:
        return order_id in self._order_index

    def __len__(self) -> int:
        return len(self._order_index)

    @property
    def best_bid(self) -> float | None:
        return tick_to_price(self.best_bid_tick) if self.best_bid_tick != _NO_BID else None

    @property
    def best_ask(self) -> float | None:
        return tick_to_price(self.best_ask_tick) if self.best_ask_tick != _NO_ASK else None

    def bid_levels(self) -> list[BookLevel]:
        """Aggregated bids, best (highest) price first."""
        return [
            BookLevel(price=tick_to_price(t), qty=sum(o.remaining_qty for o in self.bids[t]))
            for t in range(MAX_TICK, -1, -1)
            if self.bids[t]
        ]

    def ask_levels(self) -> list[BookLevel]:
        """Aggregated asks, best (lowest) price first."""
        return [
            BookLevel(price=tick_to_price(t), qty=sum(o.remaining_qty for o in self.asks[t]))
            for t in range(MAX_TICK + 1)
            if self.asks[t]
        ]

    def _refresh_best_bid(self) -> None:
        for t in range(MAX_TICK, -1, -1):
            if self.bids[t]:
                self.best_bid_tick = t
                return
        self.best_bid_tick = _NO_BID

    def _refresh_best_ask(self) -> None:
        for t in range(MAX_TICK + 1):
            if self.asks[t]:
                self.best_ask_tick = t
                return
        self.best_ask_tick = _NO_ASK


@dataclass
class MarketBooks:
    """Both outcome books of one market."""

    market_id: str
    yes: OrderBook = field(init=False)
    no: OrderBook = field(init=False)

    def __post_init__(self) -> None:
        self.yes = OrderBook(market_id=self.market_id, outcome=Outcome.YES.value)
        self.no = OrderBook(market_id=self.market_id, outcome=Outcome.NO.value)

    def for_outcome(self, outcome: str) -> OrderBook:
        return self.yes if outcome == Outcome.YES else self.no

    def find(self, order_id: str) -> OrderBook | None:
        for book in (self.yes, self.no):
            if order_id in book:
                return book
        return None
