"""010: create account_week_snapshots table

Revision ID: 010
Revises: 009
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "010"
down_revision: Union[str, None] = "009"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE account_week_snapshots (
            id                      BIGSERIAL   PRIMARY KEY,
            user_id                 VARCHAR(64) NOT NULL,
            week_start              TIMESTAMPTZ NOT NULL,
            week_end                TIMESTAMPTZ NOT NULL,
            start_wallet_value      BIGINT      NOT NULL DEFAULT 0,
            start_portfolio_value   BIGINT      NOT NULL DEFAULT 0,
            start_account_value     BIGINT      NOT NULL DEFAULT 0,
            start_deposit_total     BIGINT      NOT NULL DEFAULT 0,
            end_wallet_value        BIGINT,
            end_portfolio_value     BIGINT,
            end_account_value       BIGINT,
            end_deposit_total       BIGINT,
            deposits_during_week    BIGINT,
            closed_at               TIMESTAMPTZ,
            created_at              TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_week_snapshots_user_week  UNIQUE (user_id, week_start, week_end),
            CONSTRAINT ck_week_snapshots_bounds     CHECK (week_end > week_start)
        );
    """)
    op.execute("CREATE INDEX idx_week_snapshots_week ON account_week_snapshots (week_start, week_end);")
    op.execute(
        "COMMENT ON TABLE account_week_snapshots IS "
        "'Per-user weekly start/end values; end values become next week start values. "
        "*_deposit_total are lifetime DEPOSIT sums read with the balances';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS account_week_snapshots CASCADE;")
