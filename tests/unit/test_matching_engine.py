"""Unit tests for MatchingEngine orchestrator."""
from unittest.mock import AsyncMock

import pytest

from src.ot_common.errors import (
    InsufficientSharesError,
    InvalidOrderTypeError,
    InvalidOutcomeError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidSideError,
    MarketNotFoundError,
    MarketPhaseError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderNotOwnedError,
)
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_matching.engine.engine import MatchingEngine
from src.ot_store.domain.repository import ChangeBatch
from src.ot_store.infrastructure.memory_store import InMemoryStore
from tests.factories import make_curve_market, make_market


@pytest.fixture
async def engine(store: InMemoryStore, clock, ids) -> MatchingEngine:
    await store.commit(ChangeBatch(markets=[make_market("mkt-1")]))
    return MatchingEngine(store, clock=clock, new_id=ids, prevent_self_trade=False)


async def _give_shares(store: InMemoryStore, user: str, qty: float, outcome: str = "YES") -> None:
    pos = OutcomePosition(user_id=user, market_id="mkt-1", outcome=outcome, qty=qty, avg_price=0.3)
    await store.commit(ChangeBatch(positions=[pos]))


class TestMatchingEngineInit:
    def test_engine_starts_empty(self, store: InMemoryStore) -> None:
        engine = MatchingEngine(store)
        assert len(engine._books) == 0

    async def test_books_cached_per_market(self, engine: MatchingEngine) -> None:
        b1 = await engine._get_or_rebuild_books("mkt-1")
        b2 = await engine._get_or_rebuild_books("mkt-1")
        assert b1 is b2


class TestSubmitValidation:
    @pytest.mark.parametrize(
        ("kwargs", "error"),
        [
            ({"qty": 0}, InvalidQuantityError),
            ({"qty": float("nan")}, InvalidQuantityError),
            ({"price": 1.2}, InvalidPriceError),
            ({"price": float("inf")}, InvalidPriceError),
            ({"outcome": "MAYBE"}, InvalidOutcomeError),
            ({"side": "HOLD"}, InvalidSideError),
            ({"order_type": "STOP"}, InvalidOrderTypeError),
        ],
    )
    async def test_invalid_inputs(self, engine: MatchingEngine, kwargs, error) -> None:
        args = {"outcome": "YES", "side": "BUY", "price": 0.5, "qty": 10, **kwargs}
        with pytest.raises(error):
            await engine.submit_order("mkt-1", "u1", **args)

    async def test_unknown_market(self, engine: MatchingEngine) -> None:
        with pytest.raises(MarketNotFoundError):
            await engine.submit_order("nope", "u1", "YES", "BUY", 0.5, 10)

    async def test_curve_phase_market_rejected(self, engine: MatchingEngine, store) -> None:
        await store.commit(ChangeBatch(markets=[make_curve_market("sbx-1")]))
        with pytest.raises(MarketPhaseError):
            await engine.submit_order("sbx-1", "u1", "YES", "BUY", 0.5, 10)

    async def test_resolved_market_rejected(self, engine: MatchingEngine, store) -> None:
        await store.commit(ChangeBatch(markets=[make_market("mkt-2", status="RESOLVED")]))
        with pytest.raises(MarketPhaseError):
            await engine.submit_order("mkt-2", "u1", "YES", "BUY", 0.5, 10)

    async def test_market_price_ignored(self, engine: MatchingEngine) -> None:
        order, _ = await engine.submit_order("mkt-1", "u1", "YES", "BUY", 7.0, 10, "MARKET")
        assert order.price == 1.0


class TestNoShortSelling:
    async def test_sell_without_shares_rejected(self, engine: MatchingEngine, store) -> None:
        with pytest.raises(InsufficientSharesError):
            await engine.submit_order("mkt-1", "u1", "YES", "SELL", 0.5, 1)
        assert await store.list_open_orders("mkt-1") == []

    async def test_oversell_leaves_position_unchanged(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "u1", 10)
        with pytest.raises(InsufficientSharesError):
            await engine.submit_order("mkt-1", "u1", "YES", "SELL", 0.5, 20)
        pos = await store.get_position("u1", "mkt-1", "YES")
        assert pos is not None and pos.qty == 10

    async def test_epsilon_tolerance(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "u1", 10 - 1e-10)
        order, _ = await engine.submit_order("mkt-1", "u1", "YES", "SELL", 0.5, 10)
        assert order.status == "OPEN"

    async def test_shares_checked_per_outcome(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "u1", 10, outcome="NO")
        with pytest.raises(InsufficientSharesError):
            await engine.submit_order("mkt-1", "u1", "YES", "SELL", 0.5, 5)


class TestSubmitMatching:
    async def test_resting_bid_on_empty_book(self, engine: MatchingEngine) -> None:
        order, trades = await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.30, 100)
        assert trades == []
        assert order.status == "OPEN"
        view = await engine.get_order_book("mkt-1")
        assert [(lv.price, lv.qty) for lv in view.yes.bids] == [(0.30, 100)]
        assert view.yes.asks == []

    async def test_price_rounded_half_up(self, engine: MatchingEngine) -> None:
        order, _ = await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.306, 1)
        assert order.price == 0.31

    async def test_partial_fill_rests_remainder(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 50)
        await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.40, 50)
        order, trades = await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.45, 100)
        assert [(t.price, t.qty) for t in trades] == [(0.40, 50)]
        assert order.status == "PARTIAL"
        assert order.remaining_qty == 50
        view = await engine.get_order_book("mkt-1")
        assert [(lv.price, lv.qty) for lv in view.yes.bids] == [(0.45, 50)]
        assert view.yes.asks == []

    async def test_fills_update_both_positions(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 50)
        await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.40, 50)
        await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.45, 20)
        buyer = await store.get_position("buyer", "mkt-1", "YES")
        seller = await store.get_position("seller", "mkt-1", "YES")
        assert buyer.qty == 20 and buyer.avg_price == pytest.approx(0.40)
        assert seller.qty == 30
        assert seller.realized_pnl == pytest.approx((0.40 - 0.3) * 20)

    async def test_trade_persists_makers_and_snapshot(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 50)
        maker, _ = await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.40, 50)
        await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.40, 50)
        stored_maker = await store.get_order(maker.id)
        assert stored_maker.status == "FILLED"
        assert len(await store.list_trades("mkt-1")) == 1
        points = await store.list_price_points("mkt-1")
        assert len(points) == 1
        assert points[0].yes_prob == pytest.approx(0.40)  # no spread: last trade
        market = await store.get_market("mkt-1")
        assert market.volume == pytest.approx(20.0)

    async def test_no_snapshot_without_trades(self, engine: MatchingEngine, store) -> None:
        await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.30, 10)
        assert await store.list_price_points("mkt-1") == []

    async def test_outcome_books_are_independent(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 50, outcome="NO")
        await engine.submit_order("mkt-1", "seller", "NO", "SELL", 0.40, 50)
        _, trades = await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.90, 10)
        assert trades == []

    async def test_market_order_remainder_cancelled(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 5)
        await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.90, 5)
        order, trades = await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0, 10, "MARKET")
        assert sum(t.qty for t in trades) == 5
        assert order.status == "CANCELLED"
        assert order.remaining_qty == 5
        view = await engine.get_order_book("mkt-1")
        assert view.yes.bids == []


class TestCancelOrder:
    async def test_cancel_open_order(self, engine: MatchingEngine, store) -> None:
        order, _ = await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.30, 10)
        cancelled = await engine.cancel_order(order.id, "u1")
        assert cancelled.status == "CANCELLED"
        assert (await store.get_order(order.id)).status == "CANCELLED"
        view = await engine.get_order_book("mkt-1")
        assert view.yes.bids == []

    async def test_cancel_is_idempotent(self, engine: MatchingEngine) -> None:
        order, _ = await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.30, 10)
        await engine.cancel_order(order.id)
        again = await engine.cancel_order(order.id)
        assert again.status == "CANCELLED"

    async def test_cancel_not_found(self, engine: MatchingEngine) -> None:
        with pytest.raises(OrderNotFoundError):
            await engine.cancel_order("missing")

    async def test_cancel_wrong_user(self, engine: MatchingEngine) -> None:
        order, _ = await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.30, 10)
        with pytest.raises(OrderNotOwnedError):
            await engine.cancel_order(order.id, "u2")

    async def test_cancel_filled_rejected(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 10)
        maker, _ = await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.40, 10)
        await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.40, 10)
        with pytest.raises(OrderNotCancellableError):
            await engine.cancel_order(maker.id)

    async def test_cancel_partial_keeps_fills(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 10)
        await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.40, 10)
        order, _ = await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.40, 30)
        cancelled = await engine.cancel_order(order.id)
        assert cancelled.status == "CANCELLED"
        assert cancelled.remaining_qty == 20
        assert cancelled.filled_qty == 10


class TestOrderBookView:
    async def test_probability_mid_in_percent(self, engine: MatchingEngine, store) -> None:
        await _give_shares(store, "seller", 10)
        await engine.submit_order("mkt-1", "buyer", "YES", "BUY", 0.40, 10)
        await engine.submit_order("mkt-1", "seller", "YES", "SELL", 0.46, 10)
        view = await engine.get_order_book("mkt-1")
        assert view.yes.best_bid == 0.40
        assert view.yes.best_ask == 0.46
        assert view.probability == pytest.approx(43.0)

    async def test_empty_book_defaults_to_fifty(self, engine: MatchingEngine) -> None:
        view = await engine.get_order_book("mkt-1")
        assert view.probability == pytest.approx(50.0)
        assert view.yes.best_bid is None and view.no.best_ask is None

    async def test_curve_market_uses_curve_probability(self, engine: MatchingEngine, store) -> None:
        await store.commit(ChangeBatch(markets=[make_curve_market("sbx-1")]))
        view = await engine.get_order_book("sbx-1")
        assert view.probability == pytest.approx(50.0)

    async def test_unknown_market(self, engine: MatchingEngine) -> None:
        with pytest.raises(MarketNotFoundError):
            await engine.get_order_book("nope")


class TestRecovery:
    async def test_rebuild_restores_time_priority(self, store, clock, ids) -> None:
        await store.commit(ChangeBatch(markets=[make_market("mkt-1")]))
        first = MatchingEngine(store, clock=clock, new_id=ids)
        await _give_shares(store, "s1", 10)
        await _give_shares(store, "s2", 10)
        early, _ = await first.submit_order("mkt-1", "s1", "YES", "SELL", 0.50, 10)
        await first.submit_order("mkt-1", "s2", "YES", "SELL", 0.50, 10)

        restarted = MatchingEngine(store, clock=clock, new_id=ids)
        _, trades = await restarted.submit_order("mkt-1", "b", "YES", "BUY", 0.50, 10)
        assert [t.maker_order_id for t in trades] == [early.id]

    async def test_commit_failure_evicts_book(self, store, clock, ids) -> None:
        await store.commit(ChangeBatch(markets=[make_market("mkt-1")]))
        engine = MatchingEngine(store, clock=clock, new_id=ids)
        await engine.submit_order("mkt-1", "u1", "YES", "BUY", 0.30, 10)
        assert "mkt-1" in engine._books

        original_commit = store.commit
        store.commit = AsyncMock(side_effect=RuntimeError("disk full"))
        with pytest.raises(RuntimeError):
            await engine.submit_order("mkt-1", "u2", "YES", "BUY", 0.31, 10)
        assert "mkt-1" not in engine._books

        store.commit = original_commit
        view = await engine.get_order_book("mkt-1")
        assert [(lv.price, lv.qty) for lv in view.yes.bids] == [(0.30, 10)]
