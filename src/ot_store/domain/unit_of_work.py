"""UnitOfWork — stages one request's writes and reads through them.

Engines mutate domain objects in memory, register them here, and the
service commits once at the end. Nothing reaches the store if the request
fails before ``commit``.
"""

from src.ot_ledger.domain.models import OutcomePosition
from src.ot_market.domain.models import Market
from src.ot_matching.domain.models import Order, Trade
from src.ot_oracle.domain.models import PricePoint
from src.ot_store.domain.repository import ChangeBatch, TradingStoreProtocol


class UnitOfWork:
    def __init__(self, store: TradingStoreProtocol) -> None:
        self._store = store
        self._markets: dict[str, Market] = {}
        self._orders: dict[str, Order] = {}
        self._positions: dict[tuple[str, str, str], OutcomePosition] = {}
        self._trades: list[Trade] = []
        self._price_points: list[PricePoint] = []
        self._committed = False

    @property
    def store(self) -> TradingStoreProtocol:
        return self._store

    # --- reads that see staged writes ---

    async def get_or_create_position(
        self, user_id: str, market_id: str, outcome: str
    ) -> OutcomePosition:
        key = (user_id, market_id, outcome)
        pos = self._positions.get(key)
        if pos is None:
            pos = await self._store.get_position(user_id, market_id, outcome)
            if pos is None:
                pos = OutcomePosition(user_id=user_id, market_id=market_id, outcome=outcome)
            self._positions[key] = pos
        return pos

    async def last_trade_price(self, market_id: str, outcome: str) -> float | None:
        for trade in reversed(self._trades):
            if trade.market_id == market_id and trade.outcome == outcome:
                return trade.price
        return await self._store.get_last_trade_price(market_id, outcome)

    # --- staging ---

    def add_market(self, market: Market) -> None:
        self._markets[market.id] = market

    def add_order(self, order: Order) -> None:
        self._orders[order.id] = order

    def add_trade(self, trade: Trade) -> None:
        self._trades.append(trade)

    def add_position(self, position: OutcomePosition) -> None:
        self._positions[position.key] = position

    def add_price_point(self, point: PricePoint) -> None:
        self._price_points.append(point)

    def to_batch(self) -> ChangeBatch:
        return ChangeBatch(
            markets=list(self._markets.values()),
            orders=list(self._orders.values()),
            trades=list(self._trades),
            positions=list(self._positions.values()),
            price_points=list(self._price_points),
        )

    async def commit(self) -> None:
        if self._committed:
            raise RuntimeError("UnitOfWork already committed")
        batch = self.to_batch()
        if not batch.is_empty:
            await self._store.commit(batch)
        self._committed = True
