"""Fixture lifecycle rules: pure functions, no I/O.

    SCHEDULED ──> CLOSED ──> APPLIED
        │  └───────────────────┘ (live phase never observed)
        └──> POSTPONED

APPLIED may be rewritten once more while unsettled, to fill in a result that
was still PENDING. Nothing ever moves backwards.
"""

from datetime import datetime

from src.mx_common.enums import FeedStatus, FixtureStatus, MatchResult
from src.mx_fixture.domain.models import FeedMatch, Fixture, FixtureUpdate

ALLOWED_TRANSITIONS: dict[FixtureStatus, frozenset[FixtureStatus]] = {
    FixtureStatus.SCHEDULED: frozenset(
        {FixtureStatus.CLOSED, FixtureStatus.APPLIED, FixtureStatus.POSTPONED}
    ),
    FixtureStatus.CLOSED: frozenset({FixtureStatus.APPLIED}),
    FixtureStatus.APPLIED: frozenset({FixtureStatus.APPLIED}),
    FixtureStatus.POSTPONED: frozenset(),
}

_LIVE_FEED_STATUSES = frozenset(
    s.value for s in (FeedStatus.IN_PLAY, FeedStatus.LIVE, FeedStatus.PAUSED)
)
_CALLED_OFF_FEED_STATUSES = frozenset(
    s.value for s in (FeedStatus.POSTPONED, FeedStatus.SUSPENDED, FeedStatus.CANCELLED)
)


def derive_result(home_score: int | None, away_score: int | None) -> MatchResult:
    """Result from a final score. 0-0 is a DRAW; a missing side keeps it PENDING."""
    if home_score is None or away_score is None:
        return MatchResult.PENDING
    if home_score > away_score:
        return MatchResult.HOME_WIN
    if away_score > home_score:
        return MatchResult.AWAY_WIN
    return MatchResult.DRAW


def can_transition(current: FixtureStatus, target: FixtureStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def plan_transition(
    fixture: Fixture,
    feed: FeedMatch,
    now: datetime,
    match_duration_minutes: int,
) -> FixtureUpdate | None:
    """What the feed says this fixture should become, or None if nothing changes.

    A settled fixture is frozen. An APPLIED fixture whose stored result and
    score already match the feed yields None, so reprocessing never triggers a
    second write.
    """
    if fixture.is_settled:
        return None

    if feed.status == FeedStatus.FINISHED.value:
        update = FixtureUpdate(
            status=FixtureStatus.APPLIED,
            result=derive_result(feed.home_score, feed.away_score),
            home_score=feed.home_score,
            away_score=feed.away_score,
        )
        if fixture.status == FixtureStatus.APPLIED and (
            fixture.result == update.result
            and fixture.home_score == update.home_score
            and fixture.away_score == update.away_score
        ):
            return None
        # A decided result is never replaced by PENDING
        if fixture.status == FixtureStatus.APPLIED and fixture.result != MatchResult.PENDING:
            return None
        return update if can_transition(fixture.status, update.status) else None

    if feed.status in _LIVE_FEED_STATUSES:
        if fixture.status == FixtureStatus.SCHEDULED and fixture.is_live_at(
            now, match_duration_minutes
        ):
            return FixtureUpdate(
                status=FixtureStatus.CLOSED,
                result=fixture.result,
                home_score=feed.home_score,
                away_score=feed.away_score,
            )
        return None

    if feed.status in _CALLED_OFF_FEED_STATUSES and fixture.status == FixtureStatus.SCHEDULED:
        return FixtureUpdate(
            status=FixtureStatus.POSTPONED,
            result=MatchResult.PENDING,
            home_score=None,
            away_score=None,
        )

    return None
