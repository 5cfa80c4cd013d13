"""SQLAlchemy ORM models for the trading store.

DDL reference only — SqlStore queries use raw SQL. These map to the tables
created by the Alembic migrations; DO NOT add/remove columns here without a
corresponding migration.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Double, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.ot_common.database import Base


class MarketORM(Base):
    __tablename__ = "markets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="General")
    rules: Mapped[str] = mapped_column(Text, nullable=False, default="")
    resolution_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    phase: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPEN")
    initial_liquidity: Mapped[float] = mapped_column(Double, nullable=False, default=0)
    volume: Mapped[float] = mapped_column(Double, nullable=False, default=0)
    # curve columns are NULL for markets created directly in the order-book phase
    yes_supply: Mapped[float | None] = mapped_column(Double, nullable=True)
    yes_reserve: Mapped[float | None] = mapped_column(Double, nullable=True)
    no_supply: Mapped[float | None] = mapped_column(Double, nullable=True)
    no_reserve: Mapped[float | None] = mapped_column(Double, nullable=True)
    curve_min_price: Mapped[float | None] = mapped_column(Double, nullable=True)
    curve_max_price: Mapped[float | None] = mapped_column(Double, nullable=True)
    curve_max_supply: Mapped[float | None] = mapped_column(Double, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class OrderORM(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seq: Mapped[int] = mapped_column(BigInteger, autoincrement=True, nullable=False)
    market_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    outcome: Mapped[str] = mapped_column(String(3), nullable=False)
    side: Mapped[str] = mapped_column(String(4), nullable=False)
    order_type: Mapped[str] = mapped_column(String(10), nullable=False, default="LIMIT")
    price: Mapped[float] = mapped_column(Double, nullable=False)
    qty: Mapped[float] = mapped_column(Double, nullable=False)
    remaining_qty: Mapped[float] = mapped_column(Double, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPEN")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class TradeORM(Base):
    __tablename__ = "trades"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seq: Mapped[int] = mapped_column(BigInteger, autoincrement=True, nullable=False)
    market_id: Mapped[str] = mapped_column(String(64), nullable=False)
    outcome: Mapped[str] = mapped_column(String(3), nullable=False)
    price: Mapped[float] = mapped_column(Double, nullable=False)
    qty: Mapped[float] = mapped_column(Double, nullable=False)
    taker_order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    maker_order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    taker_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    maker_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    taker_side: Mapped[str] = mapped_column(String(4), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # NOTE: No updated_at, trades are immutable


class PositionORM(Base):
    __tablename__ = "positions"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    market_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    outcome: Mapped[str] = mapped_column(String(3), primary_key=True)
    qty: Mapped[float] = mapped_column(Double, nullable=False, default=0)
    avg_price: Mapped[float] = mapped_column(Double, nullable=False, default=0)
    realized_pnl: Mapped[float] = mapped_column(Double, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class PricePointORM(Base):
    __tablename__ = "price_points"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    market_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    yes_prob: Mapped[float] = mapped_column(Double, nullable=False)
    no_prob: Mapped[float] = mapped_column(Double, nullable=False)
    yes_price: Mapped[float | None] = mapped_column(Double, nullable=True)
    no_price: Mapped[float | None] = mapped_column(Double, nullable=True)
    # NOTE: No updated_at, price_points is append-only
