"""Market domain model — pure dataclass, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.ot_common.enums import MarketPhase, MarketStatus
from src.ot_curve.domain.models import CurveState


@dataclass
class Market:
    id: str
    question: str
    category: str = "General"
    rules: str = ""
    resolution_date: str | None = None
    phase: str = MarketPhase.SANDBOX_CURVE.value
    status: str = MarketStatus.OPEN.value
    initial_liquidity: float = 0.0
    curve: CurveState | None = None  # set for markets created in the sandbox phase
    volume: float = 0.0  # cumulative traded notional, USD
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_curve_phase(self) -> bool:
        return self.phase == MarketPhase.SANDBOX_CURVE

    @property
    def is_order_book_phase(self) -> bool:
        return self.phase == MarketPhase.ORDER_BOOK

    @property
    def is_open(self) -> bool:
        return self.status == MarketStatus.OPEN
