"""005: create fixtures table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE fixtures (
            id                  VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            external_id         INT,
            home_team_id        INT             NOT NULL REFERENCES teams (id),
            away_team_id        INT             NOT NULL REFERENCES teams (id),
            kickoff_at          TIMESTAMPTZ     NOT NULL,
            buy_close_at        TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'SCHEDULED',
            result              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            home_score          INT,
            away_score          INT,
            snapshot_home_cap   BIGINT,
            snapshot_away_cap   BIGINT,
            snapshot_at         TIMESTAMPTZ,
            settled_at          TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_fixtures_external_id      UNIQUE (external_id),
            CONSTRAINT ck_fixtures_distinct_teams   CHECK (home_team_id <> away_team_id),
            CONSTRAINT ck_fixtures_buy_close        CHECK (buy_close_at <= kickoff_at),
            CONSTRAINT ck_fixtures_status CHECK (
                status IN ('SCHEDULED', 'CLOSED', 'APPLIED', 'POSTPONED')
            ),
            CONSTRAINT ck_fixtures_result CHECK (
                result IN ('PENDING', 'HOME_WIN', 'AWAY_WIN', 'DRAW')
            ),
            CONSTRAINT ck_fixtures_snapshot_pair CHECK (
                (snapshot_home_cap IS NULL) = (snapshot_away_cap IS NULL)
            ),
            CONSTRAINT ck_fixtures_settled_needs_snapshot CHECK (
                settled_at IS NULL OR snapshot_home_cap IS NOT NULL
            )
        );
    """)
    op.execute("CREATE INDEX idx_fixtures_kickoff_status ON fixtures (kickoff_at, status);")
    op.execute("CREATE INDEX idx_fixtures_home ON fixtures (home_team_id, kickoff_at);")
    op.execute("CREATE INDEX idx_fixtures_away ON fixtures (away_team_id, kickoff_at);")
    op.execute("""
        CREATE TRIGGER trg_fixtures_updated_at
            BEFORE UPDATE ON fixtures
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE fixtures IS 'Matches: SCHEDULED -> CLOSED -> APPLIED, or POSTPONED';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS fixtures CASCADE;")
