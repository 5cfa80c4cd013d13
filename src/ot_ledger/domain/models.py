"""Position domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class OutcomePosition:
    """Holdings of one user in one outcome of one market.

    Invariant: qty == 0 implies avg_price == 0.
    """

    user_id: str
    market_id: str
    outcome: str  # YES / NO
    qty: float = 0.0
    avg_price: float = 0.0  # volume-weighted cost basis per share
    realized_pnl: float = 0.0
    updated_at: datetime | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user_id, self.market_id, self.outcome)

    @property
    def cost_basis(self) -> float:
        return self.qty * self.avg_price
