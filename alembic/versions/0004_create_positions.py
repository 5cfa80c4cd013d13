"""0004: create positions table

Revision ID: 0004
Revises: 0003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "0004"
down_revision: Union[str, None] = "0003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            user_id         VARCHAR(64)         NOT NULL,
            market_id       VARCHAR(64)         NOT NULL REFERENCES markets (id),
            outcome         VARCHAR(3)          NOT NULL,
            qty             DOUBLE PRECISION    NOT NULL DEFAULT 0,
            avg_price       DOUBLE PRECISION    NOT NULL DEFAULT 0,
            realized_pnl    DOUBLE PRECISION    NOT NULL DEFAULT 0,
            updated_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, market_id, outcome),
            CONSTRAINT ck_positions_outcome CHECK (outcome IN ('YES', 'NO')),
            CONSTRAINT ck_positions_qty     CHECK (qty >= 0),
            CONSTRAINT ck_positions_avg     CHECK (avg_price >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
