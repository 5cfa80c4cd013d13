# src/ot_store/domain/repository.py
"""Store Protocol — the engine's only persistence collaborator.

One logical partition per entity type (markets, orders, trades, positions,
price points), each scoped by market id. Reads return detached copies; all
writes of one request arrive together in a single ChangeBatch so the store
can apply them atomically.

Unit tests inject the in-memory implementation; the SQL implementation
lives in the infrastructure layer.
"""

from dataclasses import dataclass, field
from typing import Protocol

from src.ot_ledger.domain.models import OutcomePosition
from src.ot_market.domain.models import Market
from src.ot_matching.domain.models import Order, Trade
from src.ot_oracle.domain.models import PricePoint


@dataclass
class ChangeBatch:
    """Every write produced by one engine request."""

    markets: list[Market] = field(default_factory=list)  # upsert
    orders: list[Order] = field(default_factory=list)  # upsert
    trades: list[Trade] = field(default_factory=list)  # insert
    positions: list[OutcomePosition] = field(default_factory=list)  # upsert
    price_points: list[PricePoint] = field(default_factory=list)  # append

    @property
    def is_empty(self) -> bool:
        return not (
            self.markets or self.orders or self.trades or self.positions or self.price_points
        )


class TradingStoreProtocol(Protocol):
    async def get_market(self, market_id: str) -> Market | None: ...

    async def list_markets(self) -> list[Market]: ...

    async def get_order(self, order_id: str) -> Order | None: ...

    async def list_open_orders(self, market_id: str) -> list[Order]: ...

    async def list_trades(self, market_id: str) -> list[Trade]: ...

    async def get_last_trade_price(self, market_id: str, outcome: str) -> float | None: ...

    async def get_position(
        self, user_id: str, market_id: str, outcome: str
    ) -> OutcomePosition | None: ...

    async def list_positions(self, user_id: str, market_id: str) -> list[OutcomePosition]: ...

    async def list_price_points(self, market_id: str) -> list[PricePoint]: ...

    async def commit(self, batch: ChangeBatch) -> None: ...
