"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class FixtureStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CLOSED = "CLOSED"        # buy window shut, match live
    APPLIED = "APPLIED"      # full time observed, result recorded
    POSTPONED = "POSTPONED"


class MatchResult(str, Enum):
    PENDING = "PENDING"
    HOME_WIN = "HOME_WIN"
    AWAY_WIN = "AWAY_WIN"
    DRAW = "DRAW"


class FeedStatus(str, Enum):
    """Match status as reported by football-data.org."""
    SCHEDULED = "SCHEDULED"
    TIMED = "TIMED"
    LIVE = "LIVE"
    IN_PLAY = "IN_PLAY"
    PAUSED = "PAUSED"
    FINISHED = "FINISHED"
    POSTPONED = "POSTPONED"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"


class OrderDirection(str, Enum):
    BUY = "BUY"


class LedgerEntryType(str, Enum):
    DEPOSIT = "DEPOSIT"
    PURCHASE = "PURCHASE"


class SnapshotStatus(str, Enum):
    CAPTURED = "CAPTURED"
    ALREADY_CAPTURED = "ALREADY_CAPTURED"
    NOT_SCHEDULED = "NOT_SCHEDULED"
    ALREADY_SETTLED = "ALREADY_SETTLED"


class SettlementStatus(str, Enum):
    SETTLED = "SETTLED"
    ALREADY_SETTLED = "ALREADY_SETTLED"
    MISSING_SNAPSHOT = "MISSING_SNAPSHOT"
    RESULT_PENDING = "RESULT_PENDING"
    NOT_APPLIED = "NOT_APPLIED"
