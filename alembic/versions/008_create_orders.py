"""008: create orders table

Revision ID: 008
Revises: 007
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(64) PRIMARY KEY,
            user_id             VARCHAR(64) NOT NULL,
            team_id             INT         NOT NULL REFERENCES teams (id),
            direction           VARCHAR(4)  NOT NULL DEFAULT 'BUY',
            quantity            BIGINT      NOT NULL,
            price_per_share     BIGINT      NOT NULL,
            amount              BIGINT      NOT NULL,
            market_cap_before   BIGINT      NOT NULL,
            market_cap_after    BIGINT      NOT NULL,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_direction      CHECK (direction IN ('BUY')),
            CONSTRAINT ck_orders_quantity_gt_0  CHECK (quantity > 0),
            CONSTRAINT ck_orders_price_gt_0     CHECK (price_per_share > 0),
            CONSTRAINT ck_orders_amount         CHECK (amount = price_per_share * quantity)
        );
    """)
    op.execute("CREATE INDEX idx_orders_user_time ON orders (user_id, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_orders_team ON orders (team_id, created_at DESC);")
    op.execute("COMMENT ON TABLE orders IS 'Executed purchases; append-only audit of price and valuation';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
