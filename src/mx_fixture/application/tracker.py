"""FixtureTracker: one pass of the fixture lifecycle over a bounded window.

Per fixture, in order:
  1. past buy close, still SCHEDULED, no snapshot  -> capture the snapshot
  2. past buy close with an external id             -> ask the feed, apply the planned transition
  3. APPLIED with a decided result                  -> hand to settlement (exactly-once)

Each step commits on its own. A fixture that fails is rolled back, counted in
`errors` and skipped; the rest of the batch still runs. Every step is safe to
repeat, so a crashed run is simply run again.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_clearing.application.service import ClearingService
from src.mx_common.datetime_utils import utc_now
from src.mx_common.enums import FixtureStatus, MatchResult, SettlementStatus, SnapshotStatus
from src.mx_fixture.domain.lifecycle import plan_transition
from src.mx_fixture.domain.models import Fixture
from src.mx_fixture.domain.repository import FixtureRepositoryProtocol, MatchFeedProtocol
from src.mx_fixture.infrastructure.feed_client import FootballDataClient
from src.mx_fixture.infrastructure.persistence import FixtureRepository

logger = logging.getLogger(__name__)


@dataclass
class TrackerSummary:
    checked: int = 0
    updated: int = 0
    snapshots: int = 0
    settled: int = 0
    errors: int = 0


class FixtureTracker:
    def __init__(
        self,
        repo: FixtureRepositoryProtocol | None = None,
        feed: MatchFeedProtocol | None = None,
        clearing: ClearingService | None = None,
    ) -> None:
        self._repo: FixtureRepositoryProtocol = repo or FixtureRepository()
        self._feed: MatchFeedProtocol = feed or FootballDataClient()
        self._clearing = clearing or ClearingService()

    async def run_cycle(self, db: AsyncSession, now: datetime | None = None) -> TrackerSummary:
        now = now or utc_now()
        since = now - timedelta(hours=settings.TRACKER_LOOKBACK_HOURS)
        until = now + timedelta(hours=settings.TRACKER_LOOKAHEAD_HOURS)
        settle_since = now - timedelta(hours=settings.TRACKER_SETTLE_LOOKBACK_HOURS)

        fixtures = await self._repo.list_tracking_window(db, since, until, settle_since)
        summary = TrackerSummary()
        for fixture in fixtures:
            summary.checked += 1
            try:
                await self._process(db, fixture, now, summary)
            except Exception:
                await db.rollback()
                summary.errors += 1
                logger.exception("Tracker failed on fixture %s", fixture.id)

        logger.info(
            "Tracker cycle: checked=%d updated=%d snapshots=%d settled=%d errors=%d",
            summary.checked,
            summary.updated,
            summary.snapshots,
            summary.settled,
            summary.errors,
        )
        return summary

    async def aclose(self) -> None:
        await self._feed.aclose()

    async def _process(
        self, db: AsyncSession, fixture: Fixture, now: datetime, summary: TrackerSummary
    ) -> None:
        past_buy_close = now >= fixture.buy_close_at

        if (
            past_buy_close
            and fixture.status == FixtureStatus.SCHEDULED
            and not fixture.has_snapshot
        ):
            snap = await self._clearing.capture_snapshot(db, fixture.id, now)
            if snap.status == SnapshotStatus.CAPTURED:
                summary.snapshots += 1

        status, result = fixture.status, fixture.result
        needs_feed = status in (FixtureStatus.SCHEDULED, FixtureStatus.CLOSED) or (
            status == FixtureStatus.APPLIED and result == MatchResult.PENDING
        )
        if past_buy_close and needs_feed and fixture.external_id is not None:
            feed_match = await self._feed.get_match(fixture.external_id)
            update = plan_transition(fixture, feed_match, now, settings.MATCH_DURATION_MINUTES)
            if update is not None:
                moved = await self._repo.apply_update(db, fixture.id, fixture.status, update)
                await db.commit()
                if not moved:
                    logger.info("Fixture %s changed concurrently; skipping", fixture.id)
                    return
                summary.updated += 1
                status, result = update.status, update.result
                logger.info(
                    "Fixture %s: %s -> %s (%s)",
                    fixture.id,
                    fixture.status.value,
                    status.value,
                    result.value,
                )

        if status == FixtureStatus.APPLIED and result != MatchResult.PENDING:
            outcome = await self._clearing.settle(db, fixture.id, now)
            if outcome.status == SettlementStatus.SETTLED:
                summary.settled += 1
