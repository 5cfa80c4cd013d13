"""BondingCurveEngine — executes sandbox-market trades against the outcome curves."""
import logging
from dataclasses import dataclass

from src.ot_common.datetime_utils import Clock, utc_now
from src.ot_common.enums import OrderSide
from src.ot_common.errors import MarketNotFoundError, MarketPhaseError
from src.ot_common.locks import MarketLockRegistry
from src.ot_common.ticks import parse_outcome, parse_side, validate_quantity
from src.ot_curve.domain.curve import buy, sell
from src.ot_curve.domain.models import CurvePrices
from src.ot_curve.domain.sizing import size_buy, size_sell
from src.ot_ledger.application.ledger import PositionLedger
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_market.domain.models import Market
from src.ot_oracle.application.oracle import PriceOracle
from src.ot_store.domain.repository import TradingStoreProtocol
from src.ot_store.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class CurveExecution:
    market: Market
    position: OutcomePosition
    current_prices: CurvePrices
    balance_delta: float  # -cost on BUY, +payout on SELL
    shares: float
    payout_clamped: bool = False


class BondingCurveEngine:
    def __init__(
        self,
        store: TradingStoreProtocol,
        ledger: PositionLedger | None = None,
        oracle: PriceOracle | None = None,
        locks: MarketLockRegistry | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._ledger = ledger or PositionLedger()
        self._oracle = oracle or PriceOracle(clock=clock)
        self._locks = locks or MarketLockRegistry()
        self._clock = clock

    async def execute_curve_trade(
        self,
        market_id: str,
        user_id: str,
        outcome: str,
        side: str,
        amount: float,
    ) -> CurveExecution:
        """BUY spends ``amount`` USD; SELL redeems ``amount`` shares."""
        outcome_ = parse_outcome(outcome).value
        side_ = parse_side(side).value
        amount = validate_quantity(amount)

        async with self._locks.for_market(market_id):
            market = await self._store.get_market(market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if not market.is_curve_phase or market.curve is None:
                raise MarketPhaseError(market_id, market.phase, "curve trading")
            if not market.is_open:
                raise MarketPhaseError(market_id, market.status, "curve trading")

            uow = UnitOfWork(self._store)
            curve = market.curve.for_outcome(outcome_)
            clamped = False

            if side_ == OrderSide.BUY:
                delta, _ = size_buy(curve, amount)
                cost = buy(curve, delta)
                balance_delta = -cost
                notional = cost
            else:
                held = await self._ledger.get_position(uow, user_id, market_id, outcome_)
                delta = size_sell(amount, held.qty)
                payout, clamped = sell(curve, delta)
                balance_delta = payout
                notional = payout

            position = await self._ledger.apply_fill(
                uow, user_id, market_id, outcome_, side_, notional / delta, delta
            )
            market.volume += notional
            market.updated_at = self._clock()
            uow.add_market(market)
            self._oracle.record_curve_snapshot(market, uow)
            await uow.commit()

        prices = self._oracle.curve_prices(market)
        logger.info(
            "Curve trade: market=%s user=%s %s %s shares=%.6f notional=%.6f"
            " yes_price=%.4f no_price=%.4f clamped=%s",
            market_id,
            user_id,
            side_,
            outcome_,
            delta,
            notional,
            prices.yes_price,
            prices.no_price,
            clamped,
        )
        return CurveExecution(
            market=market,
            position=position,
            current_prices=prices,
            balance_delta=balance_delta,
            shares=delta,
            payout_clamped=clamped,
        )
