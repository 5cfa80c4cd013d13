"""0002: create orders table

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id              VARCHAR(64)         PRIMARY KEY,
            seq             BIGSERIAL           NOT NULL,
            market_id       VARCHAR(64)         NOT NULL REFERENCES markets (id),
            user_id         VARCHAR(64)         NOT NULL,
            outcome         VARCHAR(3)          NOT NULL,
            side            VARCHAR(4)          NOT NULL,
            order_type      VARCHAR(10)         NOT NULL DEFAULT 'LIMIT',
            price           DOUBLE PRECISION    NOT NULL,
            qty             DOUBLE PRECISION    NOT NULL,
            remaining_qty   DOUBLE PRECISION    NOT NULL,
            status          VARCHAR(20)         NOT NULL DEFAULT 'OPEN',
            created_at      TIMESTAMPTZ         NOT NULL,
            updated_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_outcome    CHECK (outcome IN ('YES', 'NO')),
            CONSTRAINT ck_orders_side       CHECK (side IN ('BUY', 'SELL')),
            CONSTRAINT ck_orders_type       CHECK (order_type IN ('LIMIT', 'MARKET')),
            CONSTRAINT ck_orders_price      CHECK (price >= 0 AND price <= 1),
            CONSTRAINT ck_orders_qty        CHECK (qty > 0),
            CONSTRAINT ck_orders_remaining  CHECK (remaining_qty >= 0 AND remaining_qty <= qty),
            CONSTRAINT ck_orders_status     CHECK (
                status IN ('OPEN', 'PARTIAL', 'FILLED', 'CANCELLED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_user ON orders (user_id, created_at DESC);")
    # book rebuild reads open orders of one market in submission order
    op.execute("""
        CREATE INDEX idx_orders_market_open
        ON orders (market_id, created_at, seq)
        WHERE status IN ('OPEN', 'PARTIAL');
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
