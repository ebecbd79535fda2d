"""003: create accounts and wallet_credits tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE accounts (
            id                  UUID        PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id             VARCHAR(64) NOT NULL,
            wallet_balance      BIGINT      NOT NULL DEFAULT 0,
            version             BIGINT      NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_accounts_user_id          UNIQUE (user_id),
            CONSTRAINT ck_accounts_wallet_gte_0     CHECK (wallet_balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'User cash wallets, all amounts in cents';")

    op.execute("""
        CREATE TABLE wallet_credits (
            id                  BIGSERIAL       PRIMARY KEY,
            idempotency_ref     VARCHAR(128)    NOT NULL,
            user_id             VARCHAR(64)     NOT NULL,
            amount              BIGINT          NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_wallet_credits_ref        UNIQUE (idempotency_ref),
            CONSTRAINT ck_wallet_credits_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_wallet_credits_user ON wallet_credits (user_id, created_at DESC);")
    op.execute("COMMENT ON TABLE wallet_credits IS 'One row per applied payment reference';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallet_credits CASCADE;")
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
