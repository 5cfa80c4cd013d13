"""Order and Trade domain models — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.ot_common.enums import OrderSide, OrderStatus
from src.ot_common.ticks import price_to_tick


@dataclass
class Order:
    id: str
    market_id: str
    user_id: str
    outcome: str  # YES / NO
    side: str  # BUY / SELL
    price: float  # 0-1, already rounded to the 0.01 tick
    qty: float  # original order size
    order_type: str = "LIMIT"  # LIMIT / MARKET
    status: str = "OPEN"
    remaining_qty: float = field(default=-1.0)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.remaining_qty < 0:
            self.remaining_qty = self.qty

    @property
    def tick(self) -> int:
        return price_to_tick(self.price)

    @property
    def filled_qty(self) -> float:
        return self.qty - self.remaining_qty

    @property
    def is_buy(self) -> bool:
        return self.side == OrderSide.BUY

    @property
    def is_active(self) -> bool:
        return self.status in (OrderStatus.OPEN, OrderStatus.PARTIAL)

    @property
    def is_cancellable(self) -> bool:
        return self.status in (OrderStatus.OPEN, OrderStatus.PARTIAL)


@dataclass
class Trade:
    """Single match event. The execution price is always the maker's price."""

    id: str
    market_id: str
    outcome: str
    price: float
    qty: float
    taker_order_id: str
    maker_order_id: str
    taker_user_id: str
    maker_user_id: str
    taker_side: str  # BUY / SELL
    created_at: datetime | None = None

    @property
    def maker_side(self) -> str:
        return OrderSide.SELL if self.taker_side == OrderSide.BUY else OrderSide.BUY


@dataclass
class BookLevel:
    """Aggregated resting quantity at one price."""

    price: float
    qty: float


@dataclass
class MatchResult:
    """Output of one matching pass: the trades plus every maker order they touched."""

    trades: list[Trade] = field(default_factory=list)
    makers: list[Order] = field(default_factory=list)

    @property
    def matched_qty(self) -> float:
        return sum(t.qty for t in self.trades)


@dataclass
class OutcomeBookView:
    bids: list[BookLevel]  # descending by price
    asks: list[BookLevel]  # ascending by price
    best_bid: float | None = None
    best_ask: float | None = None


@dataclass
class MarketBookView:
    market_id: str
    yes: OutcomeBookView
    no: OutcomeBookView
    probability: float  # YES probability in percent (0-100)
