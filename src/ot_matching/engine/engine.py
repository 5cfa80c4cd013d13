"""MatchingEngine — stateful orchestrator for per-market order placement."""
import logging

from config.settings import settings
from src.ot_common.datetime_utils import Clock, utc_now
from src.ot_common.enums import OrderSide, OrderStatus, OrderType, Outcome
from src.ot_common.errors import (
    InsufficientSharesError,
    MarketNotFoundError,
    MarketPhaseError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderNotOwnedError,
)
from src.ot_common.id_generator import IdFactory, generate_id
from src.ot_common.locks import MarketLockRegistry
from src.ot_common.ticks import (
    parse_order_type,
    parse_outcome,
    parse_side,
    round_to_tick,
    validate_price,
    validate_quantity,
)
from src.ot_ledger.application.ledger import PositionLedger
from src.ot_market.domain.models import Market
from src.ot_matching.domain.models import MarketBookView, Order, OutcomeBookView, Trade
from src.ot_matching.engine.matching_algo import match_order
from src.ot_matching.engine.order_book import MarketBooks, OrderBook
from src.ot_oracle.application.oracle import PriceOracle
from src.ot_store.domain.repository import TradingStoreProtocol
from src.ot_store.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class MatchingEngine:
    def __init__(
        self,
        store: TradingStoreProtocol,
        ledger: PositionLedger | None = None,
        oracle: PriceOracle | None = None,
        locks: MarketLockRegistry | None = None,
        clock: Clock = utc_now,
        new_id: IdFactory = generate_id,
        prevent_self_trade: bool | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger or PositionLedger()
        self._oracle = oracle or PriceOracle(clock=clock)
        self._locks = locks or MarketLockRegistry()
        self._clock = clock
        self._new_id = new_id
        self._prevent_self_trade = (
            settings.PREVENT_SELF_TRADE if prevent_self_trade is None else prevent_self_trade
        )
        self._books: dict[str, MarketBooks] = {}

    async def _get_or_rebuild_books(self, market_id: str) -> MarketBooks:
        if market_id not in self._books:
            await self.rebuild_orderbook(market_id)
        return self._books[market_id]

    async def rebuild_orderbook(self, market_id: str) -> None:
        """Lazy rebuild from the store on first use or after error recovery."""
        books = MarketBooks(market_id=market_id)
        # store returns open orders in submission order, which preserves time priority
        orders = await self._store.list_open_orders(market_id)
        for order in orders:
            books.for_outcome(order.outcome).add_order(order)
        self._books[market_id] = books
        logger.debug("Order book rebuilt: market=%s resting=%d", market_id, len(orders))

    def evict(self, market_id: str) -> None:
        self._books.pop(market_id, None)

    async def _load_tradable_market(self, market_id: str) -> Market:
        market = await self._store.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if not market.is_order_book_phase:
            raise MarketPhaseError(market_id, market.phase, "order submission")
        if not market.is_open:
            raise MarketPhaseError(market_id, market.status, "order submission")
        return market

    async def submit_order(
        self,
        market_id: str,
        user_id: str,
        outcome: str,
        side: str,
        price: float,
        qty: float,
        order_type: str = "LIMIT",
    ) -> tuple[Order, list[Trade]]:
        """Main entry point. Returns (order, trades)."""
        outcome_ = parse_outcome(outcome)
        side_ = parse_side(side)
        type_ = parse_order_type(order_type)
        qty = validate_quantity(qty)
        if type_ == OrderType.LIMIT:
            price = round_to_tick(validate_price(price))
        else:
            # MARKET orders cross the whole book
            price = 1.0 if side_ == OrderSide.BUY else 0.0

        async with self._locks.for_market(market_id):
            market = await self._load_tradable_market(market_id)
            uow = UnitOfWork(self._store)

            if side_ == OrderSide.SELL:
                pos = await self._ledger.get_position(uow, user_id, market_id, outcome_.value)
                if pos.qty + settings.SHARE_EPSILON < qty:
                    raise InsufficientSharesError(pos.qty, qty)

            try:
                return await self._submit_inner(
                    market, uow, user_id, outcome_.value, side_.value, price, qty, type_.value
                )
            except Exception:
                # Evict orderbook; it is rebuilt lazily on the next request
                self.evict(market_id)
                raise

    async def _submit_inner(
        self,
        market: Market,
        uow: UnitOfWork,
        user_id: str,
        outcome: str,
        side: str,
        price: float,
        qty: float,
        order_type: str,
    ) -> tuple[Order, list[Trade]]:
        books = await self._get_or_rebuild_books(market.id)
        ob = books.for_outcome(outcome)
        now = self._clock()
        order = Order(
            id=self._new_id("order"),
            market_id=market.id,
            user_id=user_id,
            outcome=outcome,
            side=side,
            price=price,
            qty=qty,
            order_type=order_type,
            created_at=now,
            updated_at=now,
        )

        result = match_order(order, ob, self._new_id, now, self._prevent_self_trade)

        # Apply each fill: maker first, then taker
        for trade in result.trades:
            for party, party_side in (
                (trade.maker_user_id, trade.maker_side),
                (trade.taker_user_id, trade.taker_side),
            ):
                await self._ledger.apply_fill(
                    uow, party, market.id, outcome, party_side, trade.price, trade.qty
                )
            uow.add_trade(trade)

        self._finalize_order(order, ob)

        uow.add_order(order)
        for maker in result.makers:
            uow.add_order(maker)

        if result.trades:
            market.volume += sum(t.price * t.qty for t in result.trades)
            market.updated_at = now
            uow.add_market(market)
            await self._oracle.record_book_snapshot(market.id, books, uow)

        await uow.commit()
        logger.info(
            "Order %s: market=%s user=%s %s %s %s %.6f@%.2f status=%s trades=%d matched=%.6f",
            order.id,
            market.id,
            user_id,
            order_type,
            side,
            outcome,
            qty,
            price,
            order.status,
            len(result.trades),
            result.matched_qty,
        )
        return order, result.trades

    def _finalize_order(self, order: Order, ob: OrderBook) -> None:
        if order.remaining_qty <= 0:
            return
        if order.order_type == OrderType.LIMIT:
            # status is already OPEN (untouched) or PARTIAL
            ob.add_order(order)
        else:
            order.status = OrderStatus.CANCELLED.value

    async def cancel_order(self, order_id: str, user_id: str | None = None) -> Order:
        order = await self._store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if user_id is not None and order.user_id != user_id:
            raise OrderNotOwnedError(order_id)

        async with self._locks.for_market(order.market_id):
            # re-read: a match may have filled it while we waited for the lock
            order = await self._store.get_order(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if order.status == OrderStatus.CANCELLED:
                return order
            if not order.is_cancellable:
                raise OrderNotCancellableError(order_id, order.status)

            try:
                books = await self._get_or_rebuild_books(order.market_id)
                resting = books.for_outcome(order.outcome).cancel_order(order_id)
                target = resting or order
                target.status = OrderStatus.CANCELLED.value
                target.updated_at = self._clock()
                uow = UnitOfWork(self._store)
                uow.add_order(target)
                await uow.commit()
            except Exception:
                self.evict(order.market_id)
                raise

        logger.info(
            "Order %s cancelled: market=%s user=%s remaining=%.6f",
            order_id,
            target.market_id,
            target.user_id,
            target.remaining_qty,
        )
        return target

    async def get_order_book(self, market_id: str) -> MarketBookView:
        market = await self._store.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)

        async with self._locks.for_market(market_id):
            books = await self._get_or_rebuild_books(market_id)
            if market.is_curve_phase and market.curve is not None:
                probability = self._oracle.curve_prices(market).prob_yes
            else:
                last_yes = await self._store.get_last_trade_price(market_id, Outcome.YES.value)
                probability = self._oracle.book_probability(books, last_yes)

            return MarketBookView(
                market_id=market_id,
                yes=_outcome_view(books.yes),
                no=_outcome_view(books.no),
                probability=probability * 100,
            )


def _outcome_view(ob: OrderBook) -> OutcomeBookView:
    return OutcomeBookView(
        bids=ob.bid_levels(),
        asks=ob.ask_levels(),
        best_bid=ob.best_bid,
        best_ask=ob.best_ask,
    )
