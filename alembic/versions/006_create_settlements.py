"""006: create settlements table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlements (
            id                  BIGSERIAL       PRIMARY KEY,
            fixture_id          VARCHAR(64)     NOT NULL REFERENCES fixtures (id),
            result              VARCHAR(20)     NOT NULL,
            winner_team_id      INT,
            loser_team_id       INT,
            snapshot_home_cap   BIGINT          NOT NULL,
            snapshot_away_cap   BIGINT          NOT NULL,
            transfer_amount     BIGINT          NOT NULL,
            note                TEXT,
            settled_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_settlements_fixture       UNIQUE (fixture_id),
            CONSTRAINT ck_settlements_result CHECK (result IN ('HOME_WIN', 'AWAY_WIN', 'DRAW')),
            CONSTRAINT ck_settlements_transfer_gte_0 CHECK (transfer_amount >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE settlements IS 'Exactly one row per settled fixture; append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlements CASCADE;")
