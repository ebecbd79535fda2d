"""004: create teams table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE teams (
            id                  INT             PRIMARY KEY,
            name                VARCHAR(128)    NOT NULL,
            short_name          VARCHAR(32),
            market_cap          BIGINT          NOT NULL,
            total_shares        BIGINT          NOT NULL,
            available_shares    BIGINT          NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_teams_market_cap_gte_0        CHECK (market_cap >= 0),
            CONSTRAINT ck_teams_total_shares_gt_0       CHECK (total_shares > 0),
            CONSTRAINT ck_teams_available_gte_0         CHECK (available_shares >= 0),
            CONSTRAINT ck_teams_available_lte_total     CHECK (available_shares <= total_shares)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_teams_updated_at
            BEFORE UPDATE ON teams
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE teams IS 'Tradable teams; id is the football-data.org team id';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS teams CASCADE;")
