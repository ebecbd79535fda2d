"""ClearingService: transaction boundary around snapshot and settlement.

Each call commits on success and rolls back on any exception. Events are
published only after a successful commit.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_clearing.domain.settlement import SettlementOutcome, settle_fixture
from src.mx_clearing.domain.snapshot import SnapshotOutcome, backfill_snapshot, capture_snapshot
from src.mx_common.datetime_utils import utc_now
from src.mx_common.enums import SettlementStatus, SnapshotStatus
from src.mx_common.events import EventPublisherProtocol, RedisEventPublisher, SettlementCompleted

logger = logging.getLogger(__name__)


class ClearingService:
    def __init__(
        self,
        publisher: EventPublisherProtocol | None = None,
        transfer_bps: int | None = None,
    ) -> None:
        self._publisher: EventPublisherProtocol = publisher or RedisEventPublisher()
        self._transfer_bps = (
            transfer_bps if transfer_bps is not None else settings.SETTLEMENT_TRANSFER_BPS
        )

    async def capture_snapshot(
        self, db: AsyncSession, fixture_id: str, now: datetime | None = None
    ) -> SnapshotOutcome:
        try:
            outcome = await capture_snapshot(fixture_id, db, now or utc_now())
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if outcome.status == SnapshotStatus.CAPTURED:
            logger.info(
                "Snapshot captured for fixture %s: home=%s away=%s",
                fixture_id,
                outcome.home_cap,
                outcome.away_cap,
            )
        return outcome

    async def backfill_snapshot(
        self,
        db: AsyncSession,
        fixture_id: str,
        home_cap: int | None = None,
        away_cap: int | None = None,
    ) -> SnapshotOutcome:
        try:
            outcome = await backfill_snapshot(fixture_id, db, utc_now(), home_cap, away_cap)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Snapshot backfill for fixture %s: %s", fixture_id, outcome.status.value)
        return outcome

    async def settle(
        self, db: AsyncSession, fixture_id: str, now: datetime | None = None
    ) -> SettlementOutcome:
        try:
            outcome = await settle_fixture(fixture_id, db, now or utc_now(), self._transfer_bps)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if outcome.status == SettlementStatus.SETTLED:
            logger.info(
                "Settled fixture %s: %s, transfer=%d",
                fixture_id,
                outcome.result.value if outcome.result else None,
                outcome.transfer_amount,
            )
            await self._publisher.publish(
                SettlementCompleted(
                    fixture_id=fixture_id,
                    result=outcome.result.value if outcome.result else "",
                    home_team_id=outcome.home_team_id or 0,
                    away_team_id=outcome.away_team_id or 0,
                    transfer_amount=outcome.transfer_amount,
                )
            )
        return outcome
