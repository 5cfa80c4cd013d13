"""0003: create trades table

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "0003"
down_revision: Union[str, None] = "0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trades (
            id              VARCHAR(64)         PRIMARY KEY,
            seq             BIGSERIAL           NOT NULL,
            market_id       VARCHAR(64)         NOT NULL REFERENCES markets (id),
            outcome         VARCHAR(3)          NOT NULL,
            price           DOUBLE PRECISION    NOT NULL,
            qty             DOUBLE PRECISION    NOT NULL,
            taker_order_id  VARCHAR(64)         NOT NULL REFERENCES orders (id),
            maker_order_id  VARCHAR(64)         NOT NULL REFERENCES orders (id),
            taker_user_id   VARCHAR(64)         NOT NULL,
            maker_user_id   VARCHAR(64)         NOT NULL,
            taker_side      VARCHAR(4)          NOT NULL,
            created_at      TIMESTAMPTZ         NOT NULL,
            CONSTRAINT ck_trades_outcome    CHECK (outcome IN ('YES', 'NO')),
            CONSTRAINT ck_trades_side       CHECK (taker_side IN ('BUY', 'SELL')),
            CONSTRAINT ck_trades_price      CHECK (price >= 0 AND price <= 1),
            CONSTRAINT ck_trades_qty        CHECK (qty > 0)
        );
    """)
    op.execute("CREATE INDEX idx_trades_market_seq ON trades (market_id, outcome, seq DESC);")
    op.execute("COMMENT ON TABLE trades IS 'Immutable match events; price is always the maker price';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trades CASCADE;")
