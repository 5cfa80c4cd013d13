"""MarketService — market creation, lookup and phase graduation."""

import logging
import math

from src.ot_common.datetime_utils import Clock, utc_now
from src.ot_common.enums import MarketPhase, MarketStatus
from src.ot_common.errors import (
    InvalidMarketError,
    InvalidQuantityError,
    MarketNotFoundError,
    MarketPhaseError,
)
from src.ot_common.id_generator import IdFactory, generate_id
from src.ot_common.locks import MarketLockRegistry
from src.ot_curve.domain.curve import create_curve_state
from src.ot_market.domain.models import Market
from src.ot_oracle.application.oracle import PriceOracle
from src.ot_store.domain.repository import TradingStoreProtocol
from src.ot_store.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class MarketService:
    def __init__(
        self,
        store: TradingStoreProtocol,
        oracle: PriceOracle | None = None,
        locks: MarketLockRegistry | None = None,
        clock: Clock = utc_now,
        new_id: IdFactory = generate_id,
    ) -> None:
        self._store = store
        self._oracle = oracle or PriceOracle(clock=clock)
        self._locks = locks or MarketLockRegistry()
        self._clock = clock
        self._new_id = new_id

    async def create_market(
        self,
        question: str,
        category: str = "General",
        rules: str = "",
        resolution_date: str | None = None,
        initial_liquidity: float = 0.0,
        phase: str = MarketPhase.SANDBOX_CURVE.value,
    ) -> Market:
        """Create a market. Sandbox markets get fresh curves and an initial snapshot."""
        if not question or not question.strip():
            raise InvalidMarketError("question must not be empty")
        try:
            phase_ = MarketPhase(str(phase).upper())
        except ValueError:
            raise InvalidMarketError(f"unknown phase {phase}") from None

        if phase_ == MarketPhase.SANDBOX_CURVE:
            if (
                isinstance(initial_liquidity, bool)
                or not isinstance(initial_liquidity, (int, float))
                or not math.isfinite(initial_liquidity)
                or initial_liquidity <= 0
            ):
                raise InvalidQuantityError(initial_liquidity)
        elif initial_liquidity < 0:
            raise InvalidQuantityError(initial_liquidity)

        now = self._clock()
        market = Market(
            id=self._new_id("market"),
            question=question.strip(),
            category=category,
            rules=rules,
            resolution_date=resolution_date,
            phase=phase_.value,
            status=MarketStatus.OPEN.value,
            initial_liquidity=float(initial_liquidity),
            created_at=now,
            updated_at=now,
        )
        uow = UnitOfWork(self._store)
        if phase_ == MarketPhase.SANDBOX_CURVE:
            market.curve = create_curve_state(float(initial_liquidity))
            uow.add_market(market)
            self._oracle.record_curve_snapshot(market, uow)
        else:
            uow.add_market(market)
        await uow.commit()

        logger.info(
            "Market %s created: phase=%s liquidity=%.2f question=%r",
            market.id,
            market.phase,
            market.initial_liquidity,
            market.question,
        )
        return market

    async def get_market(self, market_id: str) -> Market:
        market = await self._store.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def list_markets(
        self, phase: str | None = None, category: str | None = None
    ) -> list[Market]:
        markets = await self._store.list_markets()
        if phase is not None:
            markets = [m for m in markets if m.phase == phase.upper()]
        if category is not None:
            markets = [m for m in markets if m.category == category]
        return markets

    async def graduate_market(self, market_id: str) -> Market:
        """SANDBOX_CURVE -> ORDER_BOOK. The curve state is kept for audit."""
        async with self._locks.for_market(market_id):
            market = await self.get_market(market_id)
            if not market.is_curve_phase:
                raise MarketPhaseError(market_id, market.phase, "graduation")
            if not market.is_open:
                raise MarketPhaseError(market_id, market.status, "graduation")
            market.phase = MarketPhase.ORDER_BOOK.value
            market.updated_at = self._clock()
            uow = UnitOfWork(self._store)
            uow.add_market(market)
            await uow.commit()

        logger.info("Market %s graduated to %s", market_id, market.phase)
        return market
