"""Outbound domain events.

Published after the owning transaction commits, for a separate notification
component (WebSocket fan-out, e-mail, ...) to consume. Core state never depends
on delivery: a failed publish is logged and dropped.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Protocol

from config.settings import settings
from src.mx_common.datetime_utils import utc_now
from src.mx_common.redis_client import get_redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    occurred_at: datetime = field(default_factory=utc_now, kw_only=True)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_json(self) -> str:
        payload = asdict(self)
        payload["event_type"] = self.event_type
        payload["occurred_at"] = self.occurred_at.isoformat()
        return json.dumps(payload)


@dataclass(frozen=True)
class PurchaseCompleted(DomainEvent):
    order_id: str
    user_id: str
    team_id: int
    quantity: int
    amount: int
    wallet_balance_after: int


@dataclass(frozen=True)
class SettlementCompleted(DomainEvent):
    fixture_id: str
    result: str
    home_team_id: int
    away_team_id: int
    transfer_amount: int


@dataclass(frozen=True)
class WalletCredited(DomainEvent):
    user_id: str
    amount: int
    idempotency_ref: str
    wallet_balance_after: int


class EventPublisherProtocol(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...


class RedisEventPublisher:
    """Redis Pub/Sub publisher on settings.EVENTS_CHANNEL."""

    def __init__(self, channel: str | None = None) -> None:
        self._channel = channel or settings.EVENTS_CHANNEL

    async def publish(self, event: DomainEvent) -> None:
        try:
            redis = await get_redis()
            await redis.publish(self._channel, event.to_json())
        except Exception:
            logger.warning("Dropped %s event: publish failed", event.event_type, exc_info=True)
