"""Price history domain model — append-only, never mutated."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PricePoint:
    market_id: str
    timestamp: datetime
    yes_prob: float  # 0-1
    no_prob: float  # always 1 - yes_prob
    # raw curve prices, only on snapshots of sandbox-curve markets
    yes_price: float | None = None
    no_price: float | None = None
