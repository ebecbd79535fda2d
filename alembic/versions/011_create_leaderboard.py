"""011: create leaderboard tables

Revision ID: 011
Revises: 010
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "011"
down_revision: Union[str, None] = "010"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE leaderboard_weeks (
            id              BIGSERIAL   PRIMARY KEY,
            week_start      TIMESTAMPTZ NOT NULL,
            week_end        TIMESTAMPTZ NOT NULL,
            entry_count     INT         NOT NULL DEFAULT 0,
            built_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_leaderboard_weeks UNIQUE (week_start, week_end)
        );
    """)
    op.execute("""
        CREATE TABLE weekly_leaderboard (
            id                      BIGSERIAL   PRIMARY KEY,
            week_start              TIMESTAMPTZ NOT NULL,
            week_end                TIMESTAMPTZ NOT NULL,
            user_id                 VARCHAR(64) NOT NULL,
            rank                    INT         NOT NULL,
            start_wallet_value      BIGINT      NOT NULL,
            start_portfolio_value   BIGINT      NOT NULL,
            start_account_value     BIGINT      NOT NULL,
            end_wallet_value        BIGINT      NOT NULL,
            end_portfolio_value     BIGINT      NOT NULL,
            end_account_value       BIGINT      NOT NULL,
            deposits_during_week    BIGINT      NOT NULL,
            weekly_return           NUMERIC     NOT NULL,
            is_latest               BOOLEAN     NOT NULL DEFAULT FALSE,
            created_at              TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_weekly_leaderboard_user   UNIQUE (week_start, week_end, user_id),
            CONSTRAINT uq_weekly_leaderboard_rank   UNIQUE (week_start, week_end, rank),
            CONSTRAINT ck_weekly_leaderboard_rank   CHECK (rank >= 1)
        );
    """)
    op.execute("CREATE INDEX idx_weekly_leaderboard_latest ON weekly_leaderboard (rank) WHERE is_latest;")
    # Published rows are frozen: only the is_latest flag may change
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_weekly_leaderboard_frozen()
        RETURNS TRIGGER AS $$
        BEGIN
            IF NEW.weekly_return IS DISTINCT FROM OLD.weekly_return
               OR NEW.rank IS DISTINCT FROM OLD.rank
               OR NEW.user_id IS DISTINCT FROM OLD.user_id
               OR NEW.start_account_value IS DISTINCT FROM OLD.start_account_value
               OR NEW.end_account_value IS DISTINCT FROM OLD.end_account_value
               OR NEW.deposits_during_week IS DISTINCT FROM OLD.deposits_during_week THEN
                RAISE EXCEPTION 'weekly_leaderboard rows are frozen once published';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_weekly_leaderboard_frozen
            BEFORE UPDATE ON weekly_leaderboard
            FOR EACH ROW EXECUTE FUNCTION fn_weekly_leaderboard_frozen();
    """)
    op.execute("COMMENT ON TABLE weekly_leaderboard IS 'Published weekly rankings; frozen once written';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS weekly_leaderboard CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_weekly_leaderboard_frozen();")
    op.execute("DROP TABLE IF EXISTS leaderboard_weeks CASCADE;")
