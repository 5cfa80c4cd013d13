# src/ot_store/infrastructure/sql_store.py
"""SqlStore — raw SQL implementation of TradingStoreProtocol (PostgreSQL).

Every ChangeBatch is written inside one transaction, so a request is either
fully persisted or not at all.
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ot_common.database import get_session_factory
from src.ot_curve.domain.models import CurveState, OutcomeCurve
from src.ot_ledger.domain.models import OutcomePosition
from src.ot_market.domain.models import Market
from src.ot_matching.domain.models import Order, Trade
from src.ot_oracle.domain.models import PricePoint
from src.ot_store.domain.repository import ChangeBatch

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question, category, rules, resolution_date, phase, status,
    initial_liquidity, volume, yes_supply, yes_reserve, no_supply, no_reserve,
    curve_min_price, curve_max_price, curve_max_supply, created_at, updated_at
"""

_GET_MARKET_SQL = text(f"SELECT {_MARKET_COLUMNS} FROM markets WHERE id = :id")

_LIST_MARKETS_SQL = text(f"SELECT {_MARKET_COLUMNS} FROM markets ORDER BY created_at, id")

_UPSERT_MARKET_SQL = text("""
    INSERT INTO markets (id, question, category, rules, resolution_date, phase, status,
        initial_liquidity, volume, yes_supply, yes_reserve, no_supply, no_reserve,
        curve_min_price, curve_max_price, curve_max_supply, created_at, updated_at)
    VALUES (:id, :question, :category, :rules, :resolution_date, :phase, :status,
        :initial_liquidity, :volume, :yes_supply, :yes_reserve, :no_supply, :no_reserve,
        :curve_min_price, :curve_max_price, :curve_max_supply, :created_at, NOW())
    ON CONFLICT (id) DO UPDATE
    SET phase = EXCLUDED.phase, status = EXCLUDED.status, volume = EXCLUDED.volume,
        yes_supply = EXCLUDED.yes_supply, yes_reserve = EXCLUDED.yes_reserve,
        no_supply = EXCLUDED.no_supply, no_reserve = EXCLUDED.no_reserve,
        updated_at = NOW()
""")

_ORDER_COLUMNS = """
    id, market_id, user_id, outcome, side, order_type, price, qty, remaining_qty,
    status, created_at, updated_at
"""

_GET_ORDER_SQL = text(f"SELECT {_ORDER_COLUMNS} FROM orders WHERE id = :id")

_LIST_OPEN_ORDERS_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM orders
    WHERE market_id = :market_id AND status IN ('OPEN', 'PARTIAL')
    ORDER BY created_at ASC, seq ASC
""")

_UPSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, market_id, user_id, outcome, side, order_type, price, qty,
        remaining_qty, status, created_at, updated_at)
    VALUES (:id, :market_id, :user_id, :outcome, :side, :order_type, :price, :qty,
        :remaining_qty, :status, :created_at, NOW())
    ON CONFLICT (id) DO UPDATE
    SET remaining_qty = EXCLUDED.remaining_qty, status = EXCLUDED.status,
        updated_at = NOW()
""")

_TRADE_COLUMNS = """
    id, market_id, outcome, price, qty, taker_order_id, maker_order_id,
    taker_user_id, maker_user_id, taker_side, created_at
"""

_LIST_TRADES_SQL = text(f"""
    SELECT {_TRADE_COLUMNS} FROM trades WHERE market_id = :market_id ORDER BY seq ASC
""")

_LAST_TRADE_PRICE_SQL = text("""
    SELECT price FROM trades
    WHERE market_id = :market_id AND outcome = :outcome
    ORDER BY seq DESC
    LIMIT 1
""")

_INSERT_TRADE_SQL = text(f"""
    INSERT INTO trades ({_TRADE_COLUMNS})
    VALUES (:id, :market_id, :outcome, :price, :qty, :taker_order_id, :maker_order_id,
        :taker_user_id, :maker_user_id, :taker_side, :created_at)
""")

_GET_POSITION_SQL = text("""
    SELECT user_id, market_id, outcome, qty, avg_price, realized_pnl, updated_at
    FROM positions
    WHERE user_id = :user_id AND market_id = :market_id AND outcome = :outcome
""")

_LIST_POSITIONS_SQL = text("""
    SELECT user_id, market_id, outcome, qty, avg_price, realized_pnl, updated_at
    FROM positions
    WHERE user_id = :user_id AND market_id = :market_id
    ORDER BY outcome
""")

_UPSERT_POSITION_SQL = text("""
    INSERT INTO positions (user_id, market_id, outcome, qty, avg_price, realized_pnl, updated_at)
    VALUES (:user_id, :market_id, :outcome, :qty, :avg_price, :realized_pnl, NOW())
    ON CONFLICT (user_id, market_id, outcome) DO UPDATE
    SET qty = EXCLUDED.qty, avg_price = EXCLUDED.avg_price,
        realized_pnl = EXCLUDED.realized_pnl, updated_at = NOW()
""")

_LIST_PRICE_POINTS_SQL = text("""
    SELECT market_id, timestamp, yes_prob, no_prob, yes_price, no_price
    FROM price_points
    WHERE market_id = :market_id
    ORDER BY timestamp ASC, id ASC
""")

_INSERT_PRICE_POINT_SQL = text("""
    INSERT INTO price_points (market_id, timestamp, yes_prob, no_prob, yes_price, no_price)
    VALUES (:market_id, :timestamp, :yes_prob, :no_prob, :yes_price, :no_price)
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    curve = None
    if row.yes_supply is not None:
        params = {
            "min_price": row.curve_min_price,
            "max_price": row.curve_max_price,
            "max_supply": row.curve_max_supply,
        }
        curve = CurveState(
            yes=OutcomeCurve(supply=row.yes_supply, reserve=row.yes_reserve, **params),
            no=OutcomeCurve(supply=row.no_supply, reserve=row.no_reserve, **params),
        )
    return Market(
        id=row.id,
        question=row.question,
        category=row.category,
        rules=row.rules,
        resolution_date=row.resolution_date,
        phase=row.phase,
        status=row.status,
        initial_liquidity=row.initial_liquidity,
        curve=curve,
        volume=row.volume,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _market_params(market: Market) -> dict[str, Any]:
    curve = market.curve
    return {
        "id": market.id,
        "question": market.question,
        "category": market.category,
        "rules": market.rules,
        "resolution_date": market.resolution_date,
        "phase": market.phase,
        "status": market.status,
        "initial_liquidity": market.initial_liquidity,
        "volume": market.volume,
        "yes_supply": curve.yes.supply if curve else None,
        "yes_reserve": curve.yes.reserve if curve else None,
        "no_supply": curve.no.supply if curve else None,
        "no_reserve": curve.no.reserve if curve else None,
        "curve_min_price": curve.yes.min_price if curve else None,
        "curve_max_price": curve.yes.max_price if curve else None,
        "curve_max_supply": curve.yes.max_supply if curve else None,
        "created_at": market.created_at,
    }


def _row_to_order(row: Any) -> Order:
    return Order(
        id=row.id,
        market_id=row.market_id,
        user_id=row.user_id,
        outcome=row.outcome,
        side=row.side,
        order_type=row.order_type,
        price=row.price,
        qty=row.qty,
        remaining_qty=row.remaining_qty,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_trade(row: Any) -> Trade:
    return Trade(
        id=row.id,
        market_id=row.market_id,
        outcome=row.outcome,
        price=row.price,
        qty=row.qty,
        taker_order_id=row.taker_order_id,
        maker_order_id=row.maker_order_id,
        taker_user_id=row.taker_user_id,
        maker_user_id=row.maker_user_id,
        taker_side=row.taker_side,
        created_at=row.created_at,
    )


def _row_to_position(row: Any) -> OutcomePosition:
    return OutcomePosition(
        user_id=row.user_id,
        market_id=row.market_id,
        outcome=row.outcome,
        qty=row.qty,
        avg_price=row.avg_price,
        realized_pnl=row.realized_pnl,
        updated_at=row.updated_at,
    )


def _row_to_price_point(row: Any) -> PricePoint:
    return PricePoint(
        market_id=row.market_id,
        timestamp=row.timestamp,
        yes_prob=row.yes_prob,
        no_prob=row.no_prob,
        yes_price=row.yes_price,
        no_price=row.no_price,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SqlStore:
    """Concrete implementation of TradingStoreProtocol using raw SQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or get_session_factory()

    async def get_market(self, market_id: str) -> Market | None:
        async with self._session_factory() as db:
            row = (await db.execute(_GET_MARKET_SQL, {"id": market_id})).fetchone()
        return _row_to_market(row) if row else None

    async def list_markets(self) -> list[Market]:
        async with self._session_factory() as db:
            rows = (await db.execute(_LIST_MARKETS_SQL)).fetchall()
        return [_row_to_market(r) for r in rows]

    async def get_order(self, order_id: str) -> Order | None:
        async with self._session_factory() as db:
            row = (await db.execute(_GET_ORDER_SQL, {"id": order_id})).fetchone()
        return _row_to_order(row) if row else None

    async def list_open_orders(self, market_id: str) -> list[Order]:
        async with self._session_factory() as db:
            rows = (
                await db.execute(_LIST_OPEN_ORDERS_SQL, {"market_id": market_id})
            ).fetchall()
        return [_row_to_order(r) for r in rows]

    async def list_trades(self, market_id: str) -> list[Trade]:
        async with self._session_factory() as db:
            rows = (await db.execute(_LIST_TRADES_SQL, {"market_id": market_id})).fetchall()
        return [_row_to_trade(r) for r in rows]

    async def get_last_trade_price(self, market_id: str, outcome: str) -> float | None:
        async with self._session_factory() as db:
            result = await db.execute(
                _LAST_TRADE_PRICE_SQL, {"market_id": market_id, "outcome": outcome}
            )
            return result.scalar_one_or_none()

    async def get_position(
        self, user_id: str, market_id: str, outcome: str
    ) -> OutcomePosition | None:
        async with self._session_factory() as db:
            row = (
                await db.execute(
                    _GET_POSITION_SQL,
                    {"user_id": user_id, "market_id": market_id, "outcome": outcome},
                )
            ).fetchone()
        return _row_to_position(row) if row else None

    async def list_positions(self, user_id: str, market_id: str) -> list[OutcomePosition]:
        async with self._session_factory() as db:
            rows = (
                await db.execute(
                    _LIST_POSITIONS_SQL, {"user_id": user_id, "market_id": market_id}
                )
            ).fetchall()
        return [_row_to_position(r) for r in rows]

    async def list_price_points(self, market_id: str) -> list[PricePoint]:
        async with self._session_factory() as db:
            rows = (
                await db.execute(_LIST_PRICE_POINTS_SQL, {"market_id": market_id})
            ).fetchall()
        return [_row_to_price_point(r) for r in rows]

    async def commit(self, batch: ChangeBatch) -> None:
        async with self._session_factory() as db, db.begin():
            await self._write_batch(batch, db)

    async def _write_batch(self, batch: ChangeBatch, db: AsyncSession) -> None:
        for market in batch.markets:
            await db.execute(_UPSERT_MARKET_SQL, _market_params(market))
        for order in batch.orders:
            await db.execute(
                _UPSERT_ORDER_SQL,
                {
                    "id": order.id,
                    "market_id": order.market_id,
                    "user_id": order.user_id,
                    "outcome": order.outcome,
                    "side": order.side,
                    "order_type": order.order_type,
                    "price": order.price,
                    "qty": order.qty,
                    "remaining_qty": order.remaining_qty,
                    "status": order.status,
                    "created_at": order.created_at,
                },
            )
        for trade in batch.trades:
            await db.execute(
                _INSERT_TRADE_SQL,
                {
                    "id": trade.id,
                    "market_id": trade.market_id,
                    "outcome": trade.outcome,
                    "price": trade.price,
                    "qty": trade.qty,
                    "taker_order_id": trade.taker_order_id,
                    "maker_order_id": trade.maker_order_id,
                    "taker_user_id": trade.taker_user_id,
                    "maker_user_id": trade.maker_user_id,
                    "taker_side": trade.taker_side,
                    "created_at": trade.created_at,
                },
            )
        for pos in batch.positions:
            await db.execute(
                _UPSERT_POSITION_SQL,
                {
                    "user_id": pos.user_id,
                    "market_id": pos.market_id,
                    "outcome": pos.outcome,
                    "qty": pos.qty,
                    "avg_price": pos.avg_price,
                    "realized_pnl": pos.realized_pnl,
                },
            )
        for point in batch.price_points:
            await db.execute(
                _INSERT_PRICE_POINT_SQL,
                {
                    "market_id": point.market_id,
                    "timestamp": point.timestamp,
                    "yes_prob": point.yes_prob,
                    "no_prob": point.no_prob,
                    "yes_price": point.yes_price,
                    "no_price": point.no_price,
                },
            )
