"""football-data.org v4 client for match status and final score.

Responses are memoised in a TTLCache keyed by external match id. The cache
only ever sits between the tracker and the network.
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.mx_common.errors import FeedUnavailableError
from src.mx_common.ttl_cache import TTLCache
from src.mx_fixture.domain.models import FeedMatch

logger = logging.getLogger(__name__)


def parse_match(payload: dict[str, Any]) -> FeedMatch:
    """Map a /matches/{id} body to FeedMatch.

    Accepts both the bare match object and the {"match": {...}} envelope some
    plans return.
    """
    match = payload.get("match", payload)
    try:
        full_time = (match.get("score") or {}).get("fullTime") or {}
        return FeedMatch(
            external_id=int(match["id"]),
            status=str(match["status"]),
            home_score=full_time.get("home"),
            away_score=full_time.get("away"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise FeedUnavailableError(f"malformed match payload: {exc!r}") from exc


class FootballDataClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        cache: TTLCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.FEED_BASE_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.FEED_API_KEY
        self._timeout = timeout if timeout is not None else settings.FEED_TIMEOUT_SECONDS
        self._cache = cache or TTLCache(
            ttl_seconds=settings.FEED_CACHE_TTL_SECONDS,
            max_entries=settings.FEED_CACHE_MAX_ENTRIES,
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _client_get(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"X-Auth-Token": self._api_key},
                transport=self._transport,
            )
        return self._client

    async def get_match(self, external_id: int) -> FeedMatch:
        """Raises FeedUnavailableError on transport errors, non-2xx or a malformed body."""
        return await self._cache.get_or_fetch(
            f"match:{external_id}", lambda: self._fetch_match(external_id)
        )

    async def _fetch_match(self, external_id: int) -> FeedMatch:
        try:
            response = await self._client_get().get(f"/matches/{external_id}")
        except httpx.HTTPError as exc:
            raise FeedUnavailableError(f"{type(exc).__name__} for match {external_id}") from exc

        if response.status_code == 429:
            logger.warning("Match feed rate limited on match %s", external_id)
        if response.status_code >= 400:
            raise FeedUnavailableError(f"HTTP {response.status_code} for match {external_id}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise FeedUnavailableError(f"non-JSON body for match {external_id}") from exc
        return parse_match(payload)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
