"""0001: create markets table

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(64)         PRIMARY KEY,
            question            TEXT                NOT NULL,
            category            VARCHAR(64)         NOT NULL DEFAULT 'General',
            rules               TEXT                NOT NULL DEFAULT '',
            resolution_date     VARCHAR(64),
            phase               VARCHAR(20)         NOT NULL,
            status              VARCHAR(20)         NOT NULL DEFAULT 'OPEN',
            initial_liquidity   DOUBLE PRECISION    NOT NULL DEFAULT 0,
            volume              DOUBLE PRECISION    NOT NULL DEFAULT 0,
            yes_supply          DOUBLE PRECISION,
            yes_reserve         DOUBLE PRECISION,
            no_supply           DOUBLE PRECISION,
            no_reserve          DOUBLE PRECISION,
            curve_min_price     DOUBLE PRECISION,
            curve_max_price     DOUBLE PRECISION,
            curve_max_supply    DOUBLE PRECISION,
            created_at          TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_phase     CHECK (phase IN ('SANDBOX_CURVE', 'ORDER_BOOK')),
            CONSTRAINT ck_markets_status    CHECK (status IN ('OPEN', 'RESOLVED')),
            CONSTRAINT ck_markets_liquidity CHECK (initial_liquidity >= 0),
            CONSTRAINT ck_markets_volume    CHECK (volume >= 0),
            CONSTRAINT ck_markets_supply    CHECK (
                (yes_supply IS NULL OR yes_supply >= 0) AND (no_supply IS NULL OR no_supply >= 0)
            ),
            CONSTRAINT ck_markets_reserve   CHECK (
                (yes_reserve IS NULL OR yes_reserve >= 0) AND (no_reserve IS NULL OR no_reserve >= 0)
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_phase_created ON markets (phase, created_at);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
