"""0005: create price_points table

Revision ID: 0005
Revises: 0004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "0005"
down_revision: Union[str, None] = "0004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE price_points (
            id          BIGSERIAL           PRIMARY KEY,
            market_id   VARCHAR(64)         NOT NULL REFERENCES markets (id),
            timestamp   TIMESTAMPTZ         NOT NULL,
            yes_prob    DOUBLE PRECISION    NOT NULL,
            no_prob     DOUBLE PRECISION    NOT NULL,
            yes_price   DOUBLE PRECISION,
            no_price    DOUBLE PRECISION,
            CONSTRAINT ck_price_points_prob CHECK (
                yes_prob >= 0 AND yes_prob <= 1 AND no_prob >= 0 AND no_prob <= 1
            )
        );
    """)
    op.execute("CREATE INDEX idx_price_points_market_ts ON price_points (market_id, timestamp);")
    op.execute("COMMENT ON TABLE price_points IS 'Append-only probability history, never pruned';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS price_points CASCADE;")
