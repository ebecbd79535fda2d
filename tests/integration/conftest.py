"""Integration-test fixtures (requires a running PostgreSQL).

Pre-condition: DATABASE_URL points at a database migrated with
`alembic upgrade head`. When it is unreachable or unmigrated the tests skip.

Every test runs inside one outer transaction that is rolled back at the end.
The session joins it with savepoints, so services that commit or roll back
behave exactly as in production without leaving rows behind.
"""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from config.settings import settings

_SCHEMA_CHECK_SQL = text("""
    SELECT 1
    FROM information_schema.columns
    WHERE table_name = 'account_week_snapshots'
      AND column_name = 'start_deposit_total'
""")


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
    try:
        conn = await engine.connect()
    except (OSError, SQLAlchemyError) as exc:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {exc!r}")

    trans = await conn.begin()
    try:
        if (await conn.execute(_SCHEMA_CHECK_SQL)).first() is None:
            pytest.skip("schema not migrated: run `alembic upgrade head`")
        session = AsyncSession(
            bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False
        )
        try:
            yield session
        finally:
            await session.close()
    finally:
        await trans.rollback()
        await conn.close()
        await engine.dispose()
