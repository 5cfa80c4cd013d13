"""Integration-test fixtures: a service with seeded holders on an order-book market."""

import pytest

from src.ot_ledger.domain.models import OutcomePosition
from src.ot_store.domain.repository import ChangeBatch
from src.ot_store.infrastructure.memory_store import InMemoryStore
from src.ot_trading.application.service import TradingService


@pytest.fixture
async def book_market(service: TradingService, store: InMemoryStore) -> str:
    """Order-book market where sellers s1..s3 each hold 1000 YES and 1000 NO shares."""
    market = await service.create_market("Will it snow on New Year's Day?", phase="ORDER_BOOK")
    positions = [
        OutcomePosition(user_id=f"s{i}", market_id=market.id, outcome=o, qty=1000.0, avg_price=0.5)
        for i in (1, 2, 3)
        for o in ("YES", "NO")
    ]
    await store.commit(ChangeBatch(positions=positions))
    return market.id
