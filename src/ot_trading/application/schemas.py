"""Pydantic schemas for TradingService results.

Every output is built from a domain object via ``from_domain`` so callers
never hold references into engine state.
"""

from datetime import datetime

from pydantic import BaseModel

from src.ot_curve.domain.models import CurvePrices, OutcomeCurve
from src.ot_curve.engine.engine import CurveExecution
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_market.domain.models import Market
from src.ot_matching.domain.models import (
    BookLevel,
    MarketBookView,
    Order,
    OutcomeBookView,
    Trade,
)
from src.ot_oracle.domain.models import PricePoint

# ---------------------------------------------------------------------------
# Orders and trades
# ---------------------------------------------------------------------------


class OrderOut(BaseModel):
    id: str
    market_id: str
    user_id: str
    outcome: str
    side: str
    order_type: str
    price: float
    qty: float
    remaining_qty: float
    filled_qty: float
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, o: Order) -> "OrderOut":
        return cls(
            id=o.id,
            market_id=o.market_id,
            user_id=o.user_id,
            outcome=o.outcome,
            side=o.side,
            order_type=o.order_type,
            price=o.price,
            qty=o.qty,
            remaining_qty=o.remaining_qty,
            filled_qty=o.filled_qty,
            status=o.status,
            created_at=o.created_at,
            updated_at=o.updated_at,
        )


class TradeOut(BaseModel):
    id: str
    market_id: str
    outcome: str
    price: float
    qty: float
    taker_order_id: str
    maker_order_id: str
    taker_user_id: str
    maker_user_id: str
    taker_side: str
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeOut":
        return cls(
            id=t.id,
            market_id=t.market_id,
            outcome=t.outcome,
            price=t.price,
            qty=t.qty,
            taker_order_id=t.taker_order_id,
            maker_order_id=t.maker_order_id,
            taker_user_id=t.taker_user_id,
            maker_user_id=t.maker_user_id,
            taker_side=t.taker_side,
            created_at=t.created_at,
        )


class SubmitOrderResult(BaseModel):
    order: OrderOut
    trades: list[TradeOut]


# ---------------------------------------------------------------------------
# Order book
# ---------------------------------------------------------------------------


class PriceLevelOut(BaseModel):
    price: float
    qty: float

    @classmethod
    def from_domain(cls, lv: BookLevel) -> "PriceLevelOut":
        return cls(price=lv.price, qty=lv.qty)


class OutcomeBookOut(BaseModel):
    bids: list[PriceLevelOut]  # best (highest) first
    asks: list[PriceLevelOut]  # best (lowest) first
    best_bid: float | None = None
    best_ask: float | None = None

    @classmethod
    def from_domain(cls, view: OutcomeBookView) -> "OutcomeBookOut":
        return cls(
            bids=[PriceLevelOut.from_domain(lv) for lv in view.bids],
            asks=[PriceLevelOut.from_domain(lv) for lv in view.asks],
            best_bid=view.best_bid,
            best_ask=view.best_ask,
        )


class OrderBookOut(BaseModel):
    market_id: str
    yes: OutcomeBookOut
    no: OutcomeBookOut
    probability: float  # YES, percent

    @classmethod
    def from_domain(cls, view: MarketBookView) -> "OrderBookOut":
        return cls(
            market_id=view.market_id,
            yes=OutcomeBookOut.from_domain(view.yes),
            no=OutcomeBookOut.from_domain(view.no),
            probability=view.probability,
        )


# ---------------------------------------------------------------------------
# Positions, prices, markets
# ---------------------------------------------------------------------------


class PositionOut(BaseModel):
    user_id: str
    market_id: str
    outcome: str
    qty: float
    avg_price: float
    realized_pnl: float
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, p: OutcomePosition) -> "PositionOut":
        return cls(
            user_id=p.user_id,
            market_id=p.market_id,
            outcome=p.outcome,
            qty=p.qty,
            avg_price=p.avg_price,
            realized_pnl=p.realized_pnl,
            updated_at=p.updated_at,
        )


class PricePointOut(BaseModel):
    market_id: str
    timestamp: datetime
    yes_prob: float
    no_prob: float
    yes_price: float | None = None
    no_price: float | None = None

    @classmethod
    def from_domain(cls, p: PricePoint) -> "PricePointOut":
        return cls(
            market_id=p.market_id,
            timestamp=p.timestamp,
            yes_prob=p.yes_prob,
            no_prob=p.no_prob,
            yes_price=p.yes_price,
            no_price=p.no_price,
        )


class CurvePricesOut(BaseModel):
    yes_price: float
    no_price: float
    prob_yes: float
    prob_no: float

    @classmethod
    def from_domain(cls, p: CurvePrices) -> "CurvePricesOut":
        return cls(
            yes_price=p.yes_price,
            no_price=p.no_price,
            prob_yes=p.prob_yes,
            prob_no=p.prob_no,
        )


class OutcomeCurveOut(BaseModel):
    supply: float
    reserve: float
    min_price: float
    max_price: float
    max_supply: float

    @classmethod
    def from_domain(cls, c: OutcomeCurve) -> "OutcomeCurveOut":
        return cls(
            supply=c.supply,
            reserve=c.reserve,
            min_price=c.min_price,
            max_price=c.max_price,
            max_supply=c.max_supply,
        )


class MarketOut(BaseModel):
    id: str
    question: str
    category: str
    rules: str
    resolution_date: str | None
    phase: str
    status: str
    initial_liquidity: float
    volume: float
    yes_curve: OutcomeCurveOut | None = None
    no_curve: OutcomeCurveOut | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketOut":
        return cls(
            id=m.id,
            question=m.question,
            category=m.category,
            rules=m.rules,
            resolution_date=m.resolution_date,
            phase=m.phase,
            status=m.status,
            initial_liquidity=m.initial_liquidity,
            volume=m.volume,
            yes_curve=OutcomeCurveOut.from_domain(m.curve.yes) if m.curve else None,
            no_curve=OutcomeCurveOut.from_domain(m.curve.no) if m.curve else None,
            created_at=m.created_at,
            updated_at=m.updated_at,
        )


class CurveTradeResult(BaseModel):
    market: MarketOut
    position: PositionOut
    current_prices: CurvePricesOut
    balance_delta: float  # -cost on BUY, +payout on SELL
    shares: float
    payout_clamped: bool

    @classmethod
    def from_domain(cls, ex: CurveExecution) -> "CurveTradeResult":
        return cls(
            market=MarketOut.from_domain(ex.market),
            position=PositionOut.from_domain(ex.position),
            current_prices=CurvePricesOut.from_domain(ex.current_prices),
            balance_delta=ex.balance_delta,
            shares=ex.shares,
            payout_clamped=ex.payout_clamped,
        )
