"""Shared cache for FPL bootstrap-static data.

One BootstrapCache is owned per process (see dependencies.py) to:
1. Avoid re-downloading and re-parsing the ~1.8MB payload on every analysis
2. Build the id indexes once per refresh instead of once per request
3. Handle concurrent requests without thundering herd via asyncio.Lock

Cache TTL: 1 hour (players, teams and gameweek metadata change slowly)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from cachetools import TTLCache

from fpl_analyzer.services.fpl_client import BootstrapData, UpstreamUnavailable

logger = logging.getLogger(__name__)

BOOTSTRAP_CACHE_TTL = 3600  # 1 hour
_CACHE_KEY = "bootstrap"

BootstrapFetcher = Callable[[], Awaitable[dict[str, Any]]]


class BootstrapCache:
    """TTL cache holding the single current bootstrap snapshot.

    A failed refresh never discards the previous snapshot: if one exists it is
    served (stale) and the next call tries again. With nothing cached the
    failure propagates.
    """

    def __init__(
        self,
        ttl: int = BOOTSTRAP_CACHE_TTL,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._cache: TTLCache[str, BootstrapData] = TTLCache(
            maxsize=1, ttl=ttl, timer=timer
        )
        self._previous: BootstrapData | None = None
        self._lock = asyncio.Lock()
        self._last_fetch_time: float = 0.0

    async def get(self, fetcher: BootstrapFetcher) -> BootstrapData:
        """Get bootstrap data from cache or fetch if expired/missing.

        Args:
            fetcher: Async callable returning the raw bootstrap-static payload.
                     Usually FplApiClient.get_bootstrap_static.

        Returns:
            Indexed bootstrap data

        Raises:
            UpstreamUnavailable: If the fetch fails and nothing was cached before
        """
        # Fast path: TTLCache.get() returns None for expired items
        cached = self._cache.get(_CACHE_KEY)
        if cached is not None:
            logger.debug("Bootstrap cache hit")
            return cached

        async with self._lock:
            # Another request may have refreshed while we waited
            cached = self._cache.get(_CACHE_KEY)
            if cached is not None:
                logger.debug("Bootstrap cache hit (after lock)")
                return cached

            logger.info("Fetching bootstrap-static from FPL API (cache miss)")
            start = time.monotonic()

            try:
                data = await fetcher()
            except UpstreamUnavailable as e:
                if self._previous is None:
                    logger.error(f"Failed to fetch bootstrap-static: {e}")
                    raise
                logger.warning(
                    f"Failed to refresh bootstrap-static: {e}. Serving previous snapshot."
                )
                return self._previous

            elapsed = time.monotonic() - start
            bootstrap = BootstrapData.from_payload(data)

            # Validate response before caching
            if not data.get("elements"):
                logger.error(
                    "Bootstrap response missing 'elements' key. "
                    f"Response keys: {list(data.keys())}. "
                    "API may be under maintenance or rate-limiting."
                )
                return bootstrap  # Return but don't cache invalid response

            self._cache[_CACHE_KEY] = bootstrap
            self._previous = bootstrap
            self._last_fetch_time = time.time()
            logger.info(
                f"Cached bootstrap-static: {len(bootstrap.players)} players, "
                f"fetched in {elapsed:.2f}s"
            )
            return bootstrap

    def clear(self) -> None:
        """Drop the cached snapshot, including the stale fallback."""
        self._cache.clear()
        self._previous = None

    def stats(self) -> dict[str, Any]:
        """Get cache statistics for monitoring."""
        return {
            "cached": _CACHE_KEY in self._cache,
            "last_fetch": self._last_fetch_time,
            "ttl_seconds": self.ttl,
        }
