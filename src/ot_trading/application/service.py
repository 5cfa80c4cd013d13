"""TradingService — the engine's external interface.

Wires the store, the shared per-market lock registry, the ledger and the
oracle into both pricing engines and routes each call to the right one.
All results are pydantic schemas; domain objects never leave this layer.
"""

from config.settings import settings
from src.ot_common.datetime_utils import Clock, MonotonicClock
from src.ot_common.enums import MarketPhase
from src.ot_common.errors import MarketNotFoundError
from src.ot_common.id_generator import IdFactory, generate_id
from src.ot_common.locks import MarketLockRegistry
from src.ot_common.logging_config import configure_logging
from src.ot_curve.engine.engine import BondingCurveEngine
from src.ot_ledger.application.ledger import PositionLedger
from src.ot_market.application.service import MarketService
from src.ot_market.domain.models import Market
from src.ot_matching.engine.engine import MatchingEngine
from src.ot_oracle.application.oracle import PriceOracle
from src.ot_store.domain.repository import TradingStoreProtocol
from src.ot_store.infrastructure.memory_store import InMemoryStore
from src.ot_trading.application.schemas import (
    CurveTradeResult,
    MarketOut,
    OrderBookOut,
    OrderOut,
    PositionOut,
    PricePointOut,
    SubmitOrderResult,
    TradeOut,
)


def build_store(backend: str | None = None) -> TradingStoreProtocol:
    backend = (backend or settings.STORE_BACKEND).lower()
    if backend == "memory":
        return InMemoryStore()
    if backend == "sql":
        from src.ot_store.infrastructure.sql_store import SqlStore

        return SqlStore()
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")


class TradingService:
    def __init__(
        self,
        store: TradingStoreProtocol | None = None,
        clock: Clock | None = None,
        new_id: IdFactory = generate_id,
        prevent_self_trade: bool | None = None,
    ) -> None:
        self._store = store or build_store()
        clock = clock or MonotonicClock()
        locks = MarketLockRegistry()
        ledger = PositionLedger()
        self._ledger = ledger
        self._oracle = PriceOracle(clock=clock)
        self._markets = MarketService(
            self._store, oracle=self._oracle, locks=locks, clock=clock, new_id=new_id
        )
        self._matching = MatchingEngine(
            self._store,
            ledger=ledger,
            oracle=self._oracle,
            locks=locks,
            clock=clock,
            new_id=new_id,
            prevent_self_trade=prevent_self_trade,
        )
        self._curve = BondingCurveEngine(
            self._store, ledger=ledger, oracle=self._oracle, locks=locks, clock=clock
        )

    @property
    def store(self) -> TradingStoreProtocol:
        return self._store

    @property
    def matching_engine(self) -> MatchingEngine:
        return self._matching

    async def _require_market(self, market_id: str) -> Market:
        market = await self._store.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    # --- markets ---

    async def create_market(
        self,
        question: str,
        category: str = "General",
        rules: str = "",
        resolution_date: str | None = None,
        initial_liquidity: float = 0.0,
        phase: str = MarketPhase.SANDBOX_CURVE.value,
    ) -> MarketOut:
        market = await self._markets.create_market(
            question, category, rules, resolution_date, initial_liquidity, phase
        )
        return MarketOut.from_domain(market)

    async def get_market(self, market_id: str) -> MarketOut:
        return MarketOut.from_domain(await self._markets.get_market(market_id))

    async def list_markets(
        self, phase: str | None = None, category: str | None = None
    ) -> list[MarketOut]:
        markets = await self._markets.list_markets(phase=phase, category=category)
        return [MarketOut.from_domain(m) for m in markets]

    async def graduate_market(self, market_id: str) -> MarketOut:
        return MarketOut.from_domain(await self._markets.graduate_market(market_id))

    # --- order book ---

    async def submit_order(
        self,
        market_id: str,
        user_id: str,
        outcome: str,
        side: str,
        price: float,
        qty: float,
        order_type: str = "LIMIT",
    ) -> SubmitOrderResult:
        order, trades = await self._matching.submit_order(
            market_id, user_id, outcome, side, price, qty, order_type
        )
        return SubmitOrderResult(
            order=OrderOut.from_domain(order),
            trades=[TradeOut.from_domain(t) for t in trades],
        )

    async def cancel_order(self, order_id: str, user_id: str | None = None) -> OrderOut:
        return OrderOut.from_domain(await self._matching.cancel_order(order_id, user_id))

    async def get_order_book(self, market_id: str) -> OrderBookOut:
        return OrderBookOut.from_domain(await self._matching.get_order_book(market_id))

    async def get_trades(self, market_id: str) -> list[TradeOut]:
        await self._require_market(market_id)
        return [TradeOut.from_domain(t) for t in await self._store.list_trades(market_id)]

    # --- bonding curve ---

    async def execute_curve_trade(
        self, market_id: str, user_id: str, outcome: str, side: str, amount: float
    ) -> CurveTradeResult:
        execution = await self._curve.execute_curve_trade(market_id, user_id, outcome, side, amount)
        return CurveTradeResult.from_domain(execution)

    # --- prices and positions ---

    async def get_price_history(self, market_id: str) -> list[PricePointOut]:
        await self._require_market(market_id)
        points = await self._oracle.get_price_history(market_id, self._store)
        return [PricePointOut.from_domain(p) for p in points]

    async def get_positions(self, user_id: str, market_id: str) -> list[PositionOut]:
        await self._require_market(market_id)
        positions = await self._ledger.list_positions(self._store, user_id, market_id)
        return [PositionOut.from_domain(p) for p in positions]


_service: TradingService | None = None


def get_trading_service() -> TradingService:
    global _service  # noqa: PLW0603
    if _service is None:
        configure_logging()
        _service = TradingService()
    return _service
