"""PriceOracle — current probability of a market and its snapshot history."""

import logging

from src.ot_common.datetime_utils import Clock, utc_now
from src.ot_common.enums import Outcome
from src.ot_curve.domain.models import CurvePrices
from src.ot_market.domain.models import Market
from src.ot_matching.engine.order_book import MarketBooks
from src.ot_oracle.domain.models import PricePoint
from src.ot_oracle.domain.pricing import book_yes_probability, curve_prices
from src.ot_store.domain.repository import TradingStoreProtocol
from src.ot_store.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PriceOracle:
    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def book_probability(self, books: MarketBooks, last_yes_price: float | None) -> float:
        return book_yes_probability(books.yes.best_bid, books.yes.best_ask, last_yes_price)

    def curve_prices(self, market: Market) -> CurvePrices:
        if market.curve is None:
            raise ValueError(f"Market {market.id} has no bonding curve")
        return curve_prices(market.curve)

    async def record_book_snapshot(
        self, market_id: str, books: MarketBooks, uow: UnitOfWork
    ) -> PricePoint:
        last = await uow.last_trade_price(market_id, Outcome.YES.value)
        yes_prob = self.book_probability(books, last)
        point = PricePoint(
            market_id=market_id,
            timestamp=self._clock(),
            yes_prob=yes_prob,
            no_prob=1 - yes_prob,
        )
        uow.add_price_point(point)
        logger.debug("Book snapshot: market=%s yes=%.4f", market_id, yes_prob)
        return point

    def record_curve_snapshot(self, market: Market, uow: UnitOfWork) -> PricePoint:
        prices = self.curve_prices(market)
        point = PricePoint(
            market_id=market.id,
            timestamp=self._clock(),
            yes_prob=prices.prob_yes,
            no_prob=prices.prob_no,
            yes_price=prices.yes_price,
            no_price=prices.no_price,
        )
        uow.add_price_point(point)
        logger.debug(
            "Curve snapshot: market=%s yes_price=%.4f no_price=%.4f prob_yes=%.4f",
            market.id,
            prices.yes_price,
            prices.no_price,
            prices.prob_yes,
        )
        return point

    async def get_price_history(
        self, market_id: str, store: TradingStoreProtocol
    ) -> list[PricePoint]:
        points = await store.list_price_points(market_id)
        # stable: equal timestamps keep append order
        return sorted(points, key=lambda p: p.timestamp)
