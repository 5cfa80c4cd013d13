# tests/unit/test_positions.py
"""Unit tests for position accounting: domain apply_fill and PositionLedger."""
import pytest

from src.ot_ledger.application.ledger import PositionLedger
from src.ot_ledger.domain.ledger import apply_fill
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_store.domain.repository import ChangeBatch
from src.ot_store.domain.unit_of_work import UnitOfWork
from src.ot_store.infrastructure.memory_store import InMemoryStore


def _pos(qty: float = 0.0, avg: float = 0.0, pnl: float = 0.0) -> OutcomePosition:
    return OutcomePosition(
        user_id="u1", market_id="mkt-1", outcome="YES", qty=qty, avg_price=avg, realized_pnl=pnl
    )


class TestApplyFillBuy:
    def test_first_buy_sets_avg(self) -> None:
        pos = _pos()
        pnl = apply_fill(pos, "BUY", 0.40, 100)
        assert pos.qty == 100
        assert pos.avg_price == pytest.approx(0.40)
        assert pnl == 0.0

    def test_weighted_average(self) -> None:
        pos = _pos(qty=100, avg=0.40)
        apply_fill(pos, "BUY", 0.60, 100)
        assert pos.qty == 200
        assert pos.avg_price == pytest.approx(0.50)

    @pytest.mark.parametrize(("old_avg", "price"), [(0.2, 0.8), (0.8, 0.2), (0.5, 0.5)])
    def test_avg_between_old_avg_and_price(self, old_avg: float, price: float) -> None:
        pos = _pos(qty=50, avg=old_avg)
        apply_fill(pos, "BUY", price, 30)
        assert min(old_avg, price) - 1e-12 <= pos.avg_price <= max(old_avg, price) + 1e-12
        assert pos.qty == 80

    def test_buy_never_realizes(self) -> None:
        pos = _pos(qty=10, avg=0.3, pnl=1.5)
        apply_fill(pos, "BUY", 0.9, 10)
        assert pos.realized_pnl == 1.5


class TestApplyFillSell:
    def test_realizes_against_avg(self) -> None:
        pos = _pos(qty=100, avg=0.40)
        pnl = apply_fill(pos, "SELL", 0.55, 40)
        assert pnl == pytest.approx(6.0)
        assert pos.realized_pnl == pytest.approx(6.0)
        assert pos.qty == 60
        assert pos.avg_price == pytest.approx(0.40)  # unchanged by sells

    def test_loss(self) -> None:
        pos = _pos(qty=10, avg=0.70)
        assert apply_fill(pos, "SELL", 0.50, 10) == pytest.approx(-2.0)

    def test_full_exit_resets_avg(self) -> None:
        pos = _pos(qty=10, avg=0.70)
        apply_fill(pos, "SELL", 0.80, 10)
        assert pos.qty == 0.0
        assert pos.avg_price == 0.0

    def test_oversell_clamps_to_held(self) -> None:
        pos = _pos(qty=10, avg=0.50)
        pnl = apply_fill(pos, "SELL", 0.60, 25)
        assert pnl == pytest.approx(1.0)  # only 10 sold
        assert pos.qty == 0.0

    def test_float_residue_snaps_to_zero(self) -> None:
        pos = _pos()
        apply_fill(pos, "BUY", 0.5, 0.1)
        apply_fill(pos, "BUY", 0.5, 0.2)
        apply_fill(pos, "SELL", 0.5, 0.3)
        assert pos.qty == 0.0
        assert pos.avg_price == 0.0

    def test_sell_on_empty_position_is_noop(self) -> None:
        pos = _pos()
        assert apply_fill(pos, "SELL", 0.5, 5) == 0.0
        assert pos.qty == 0.0


class TestPositionLedger:
    async def test_get_position_creates_zero_state(self) -> None:
        uow = UnitOfWork(InMemoryStore())
        pos = await PositionLedger().get_position(uow, "u1", "mkt-1", "YES")
        assert (pos.qty, pos.avg_price, pos.realized_pnl) == (0.0, 0.0, 0.0)

    async def test_lookup_is_idempotent(self) -> None:
        uow = UnitOfWork(InMemoryStore())
        ledger = PositionLedger()
        first = await ledger.get_position(uow, "u1", "mkt-1", "YES")
        second = await ledger.get_position(uow, "u1", "mkt-1", "YES")
        assert first is second

    async def test_apply_fill_stages_and_commits(self) -> None:
        store = InMemoryStore()
        uow = UnitOfWork(store)
        await PositionLedger().apply_fill(uow, "u1", "mkt-1", "NO", "BUY", 0.25, 40)
        assert await store.get_position("u1", "mkt-1", "NO") is None  # not yet committed
        await uow.commit()
        stored = await store.get_position("u1", "mkt-1", "NO")
        assert stored is not None
        assert stored.qty == 40
        assert stored.avg_price == pytest.approx(0.25)

    async def test_apply_fill_reads_existing_position(self) -> None:
        store = InMemoryStore()
        await store.commit(ChangeBatch(positions=[_pos(qty=10, avg=0.5)]))
        uow = UnitOfWork(store)
        pos = await PositionLedger().apply_fill(uow, "u1", "mkt-1", "YES", "SELL", 0.7, 4)
        assert pos.qty == 6
        assert pos.realized_pnl == pytest.approx(0.8)

    async def test_list_positions(self) -> None:
        store = InMemoryStore()
        yes = _pos(qty=1)
        no = OutcomePosition(user_id="u1", market_id="mkt-1", outcome="NO", qty=2)
        other = OutcomePosition(user_id="u2", market_id="mkt-1", outcome="NO", qty=3)
        await store.commit(ChangeBatch(positions=[yes, no, other]))
        positions = await PositionLedger().list_positions(store, "u1", "mkt-1")
        assert [p.outcome for p in positions] == ["NO", "YES"]
