"""Shared test fixtures."""

import pytest

from src.ot_common.locks import MarketLockRegistry
from src.ot_ledger.application.ledger import PositionLedger
from src.ot_oracle.application.oracle import PriceOracle
from src.ot_store.infrastructure.memory_store import InMemoryStore
from src.ot_trading.application.service import TradingService
from tests.factories import SeqIds, StepClock


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def ids() -> SeqIds:
    return SeqIds()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def locks() -> MarketLockRegistry:
    return MarketLockRegistry()


@pytest.fixture
def ledger() -> PositionLedger:
    return PositionLedger()


@pytest.fixture
def oracle(clock: StepClock) -> PriceOracle:
    return PriceOracle(clock=clock)


@pytest.fixture
def service(store: InMemoryStore, clock: StepClock, ids: SeqIds) -> TradingService:
    """TradingService over a fresh in-memory store with deterministic time and ids."""
    return TradingService(store=store, clock=clock, new_id=ids)
