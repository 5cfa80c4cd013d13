"""PositionLedger — applies fills to positions staged in a UnitOfWork."""

import logging

from src.ot_ledger.domain.ledger import apply_fill
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_store.domain.repository import TradingStoreProtocol
from src.ot_store.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PositionLedger:
    async def get_position(
        self, uow: UnitOfWork, user_id: str, market_id: str, outcome: str
    ) -> OutcomePosition:
        """Lookup-or-create; the first reference yields a zero-state position."""
        return await uow.get_or_create_position(user_id, market_id, outcome)

    async def apply_fill(
        self,
        uow: UnitOfWork,
        user_id: str,
        market_id: str,
        outcome: str,
        side: str,
        price: float,
        qty: float,
    ) -> OutcomePosition:
        pos = await uow.get_or_create_position(user_id, market_id, outcome)
        pnl = apply_fill(pos, side, price, qty)
        uow.add_position(pos)
        logger.debug(
            "Fill applied: user=%s market=%s %s %s %.6f@%.4f pnl=%.6f qty_after=%.6f",
            user_id,
            market_id,
            outcome,
            side,
            qty,
            price,
            pnl,
            pos.qty,
        )
        return pos

    async def list_positions(
        self, store: TradingStoreProtocol, user_id: str, market_id: str
    ) -> list[OutcomePosition]:
        return await store.list_positions(user_id, market_id)
