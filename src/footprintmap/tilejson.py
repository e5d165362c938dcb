"""Mapbox TileJSON lookups with client-side rate limiting and retry.

A wrong tileset identifier never errors in the renderer, it just draws an
empty layer. fetch_tilejson() asks the Mapbox API directly so the app can show
whether the tilesets behind the current layers exist.
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

TILEJSON_URL = "https://api.mapbox.com/v4/{tileset_id}.json"

T = TypeVar("T")


class TilesetLookupError(Exception):
    """TileJSON request failed."""


class RateLimitExceeded(TilesetLookupError):
    """Client-side request budget for the current window is spent."""

    def __init__(self, message: str, retry_after: float) -> None:
        super().__init__(message)
        self.retry_after = retry_after


@dataclass
class _Window:
    count: int
    start: float


class RateLimiter:
    """Fixed-window request counter per identifier."""

    def __init__(
        self,
        max_requests: int,
        window: float,
        identifier: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window = window
        self.identifier = identifier
        self._clock = clock
        self._records: dict[str, _Window] = {}

    def is_allowed(self, identifier: str | None = None) -> bool:
        """Count one request. False when the window's budget is spent."""
        key = identifier or self.identifier
        now = self._clock()
        if len(self._records) > 100:
            self._prune(now)

        record = self._records.get(key)
        if record is None or now - record.start >= self.window:
            self._records[key] = _Window(count=1, start=now)
            return True
        if record.count < self.max_requests:
            record.count += 1
            return True
        return False

    def remaining(self, identifier: str | None = None) -> int:
        record = self._records.get(identifier or self.identifier)
        if record is None or self._clock() - record.start >= self.window:
            return self.max_requests
        return max(0, self.max_requests - record.count)

    def time_until_reset(self, identifier: str | None = None) -> float:
        record = self._records.get(identifier or self.identifier)
        if record is None:
            return 0.0
        return max(0.0, record.start + self.window - self._clock())

    def _prune(self, now: float) -> None:
        expired = [k for k, r in self._records.items() if now - r.start >= self.window]
        for key in expired:
            del self._records[key]


mapbox_rate_limiter = RateLimiter(max_requests=50, window=60.0, identifier="mapbox-api")


def with_exponential_backoff(
    fn: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (httpx.TransportError,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call fn, retrying `retry_on` errors with base * 2**n + jitter second pauses."""
    attempt = 0
    while True:
        try:
            return fn()
        except retry_on as exc:
            if attempt >= max_retries:
                raise
            delay = base_delay * 2**attempt + random.random()
            logger.warning(
                "Request failed (%s), retrying in %.2fs (attempt %d/%d)",
                exc,
                delay,
                attempt + 1,
                max_retries,
            )
            sleep(delay)
            attempt += 1


def fetch_tilejson(
    tileset_id: str,
    access_token: str,
    client: httpx.Client | None = None,
    limiter: RateLimiter = mapbox_rate_limiter,
    max_retries: int = 3,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any] | None:
    """Fetch TileJSON metadata for a tileset.

    Args:
        tileset_id: "<namespace>.<name>", as used in mapbox:// source URLs.
        access_token: Mapbox public token.
        client: Optional shared httpx client.
        limiter: Client-side rate limiter.
        max_retries: Retries on transport errors and 5xx responses.
        sleep: Pause function between retries.

    Returns:
        Parsed TileJSON, or None if the tileset does not exist (404).

    Raises:
        RateLimitExceeded: The limiter refused the request.
        TilesetLookupError: Any other non-success response, or retries exhausted.
    """
    if not limiter.is_allowed():
        retry_after = limiter.time_until_reset()
        raise RateLimitExceeded(
            f"Rate limit exceeded. Try again in {int(retry_after) + 1} seconds.",
            retry_after=retry_after,
        )

    url = TILEJSON_URL.format(tileset_id=tileset_id)
    own_client = client is None
    http = client or httpx.Client(timeout=10)

    def _get() -> httpx.Response:
        resp = http.get(url, params={"access_token": access_token})
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp

    try:
        resp = with_exponential_backoff(
            _get,
            max_retries=max_retries,
            retry_on=(httpx.TransportError, httpx.HTTPStatusError),
            sleep=sleep,
        )
    except httpx.HTTPError as exc:
        raise TilesetLookupError(f"TileJSON request for {tileset_id} failed: {exc}") from exc
    finally:
        if own_client:
            http.close()

    if resp.status_code == 404:
        logger.warning("Tileset %s not found", tileset_id)
        return None
    if resp.status_code != 200:
        raise TilesetLookupError(
            f"TileJSON request for {tileset_id} returned {resp.status_code}"
        )
    return resp.json()
