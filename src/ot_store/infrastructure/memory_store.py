"""InMemoryStore — process-local implementation of TradingStoreProtocol.

Each entity type has its own partition keyed by market id. Objects are
deep-copied on the way in and out, so callers can never mutate stored
state except through ``commit``.
"""

import copy
from collections import defaultdict

from src.ot_common.enums import OrderStatus
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_market.domain.models import Market
from src.ot_matching.domain.models import Order, Trade
from src.ot_oracle.domain.models import PricePoint
from src.ot_store.domain.repository import ChangeBatch

_ACTIVE = (OrderStatus.OPEN.value, OrderStatus.PARTIAL.value)


class InMemoryStore:
    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._orders: dict[str, dict[str, Order]] = defaultdict(dict)
        self._order_market: dict[str, str] = {}
        self._trades: dict[str, list[Trade]] = defaultdict(list)
        self._positions: dict[str, dict[tuple[str, str], OutcomePosition]] = defaultdict(dict)
        self._price_points: dict[str, list[PricePoint]] = defaultdict(list)

    async def get_market(self, market_id: str) -> Market | None:
        market = self._markets.get(market_id)
        return copy.deepcopy(market) if market else None

    async def list_markets(self) -> list[Market]:
        return [copy.deepcopy(m) for m in self._markets.values()]

    async def get_order(self, order_id: str) -> Order | None:
        market_id = self._order_market.get(order_id)
        if market_id is None:
            return None
        return copy.copy(self._orders[market_id][order_id])

    async def list_open_orders(self, market_id: str) -> list[Order]:
        # insertion order is submission order: upserts keep the original slot
        return [
            copy.copy(o) for o in self._orders.get(market_id, {}).values() if o.status in _ACTIVE
        ]

    async def list_trades(self, market_id: str) -> list[Trade]:
        return [copy.copy(t) for t in self._trades.get(market_id, [])]

    async def get_last_trade_price(self, market_id: str, outcome: str) -> float | None:
        for trade in reversed(self._trades.get(market_id, [])):
            if trade.outcome == outcome:
                return trade.price
        return None

    async def get_position(
        self, user_id: str, market_id: str, outcome: str
    ) -> OutcomePosition | None:
        pos = self._positions.get(market_id, {}).get((user_id, outcome))
        return copy.copy(pos) if pos else None

    async def list_positions(self, user_id: str, market_id: str) -> list[OutcomePosition]:
        return [
            copy.copy(p)
            for (uid, _), p in sorted(self._positions.get(market_id, {}).items())
            if uid == user_id
        ]

    async def list_price_points(self, market_id: str) -> list[PricePoint]:
        return list(self._price_points.get(market_id, []))

    async def commit(self, batch: ChangeBatch) -> None:
        for market in batch.markets:
            self._markets[market.id] = copy.deepcopy(market)
        for order in batch.orders:
            self._orders[order.market_id][order.id] = copy.copy(order)
            self._order_market[order.id] = order.market_id
        for trade in batch.trades:
            self._trades[trade.market_id].append(copy.copy(trade))
        for pos in batch.positions:
            self._positions[pos.market_id][(pos.user_id, pos.outcome)] = copy.copy(pos)
        for point in batch.price_points:
            self._price_points[point.market_id].append(point)
