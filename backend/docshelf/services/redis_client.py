"""Redis client and rendered-page cache.

Public read payloads (a document page, the public listing, the dashboard
listing) are cached per page path. Mutations revalidate a path by deleting
its cached entries so the next read rebuilds them from the store.
"""

import json
import logging
import re
from typing import Any

import redis.asyncio as redis

from docshelf.config import settings

logger = logging.getLogger(__name__)

_KEY_PREFIX = "page:"
_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")

DOCS_PATH = "/docs"
DASHBOARD_PATH = "/dashboard"


def doc_page_path(slug: str) -> str:
    """Page path of a single public document."""
    return f"{DOCS_PATH}/{slug}"


async def create_redis() -> redis.Redis:
    """Create a Redis client backed by its own connection pool."""
    pool = redis.ConnectionPool.from_url(
        settings.redis_url,
        decode_responses=True,
        max_connections=10,
    )
    client = redis.Redis(connection_pool=pool)
    logger.info("Redis connection pool initialized")
    return client


async def close_redis(client: redis.Redis | None) -> None:
    """Close a client created by :func:`create_redis` and its pool."""
    if client is None:
        return
    await client.aclose()
    await client.connection_pool.aclose()
    logger.info("Redis connection pool closed")


def _glob_escape(value: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class PageCache:
    """Redis-backed cache of rendered page payloads keyed by path.

    Every operation fails silently so a Redis outage never breaks a request;
    reads simply fall through to the store.
    """

    def __init__(self, redis_client: redis.Redis | None, ttl_seconds: int = 600, enabled: bool = True):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled and redis_client is not None

    def _key(self, path: str, variant: str | None = None) -> str:
        """Generate Redis key for a page path (and optional query variant)."""
        key = f"{_KEY_PREFIX}{path}"
        return f"{key}?{variant}" if variant else key

    async def get(self, path: str, variant: str | None = None) -> Any | None:
        """Get a cached payload. Returns None on miss or error."""
        if not self.enabled:
            return None
        try:
            raw = await self.redis.get(self._key(path, variant))  # type: ignore[union-attr]
            if raw is None:
                return None
            return json.loads(raw)
        except Exception:
            logger.debug("Page cache miss/error for %s", path, exc_info=True)
            return None

    async def set(self, path: str, value: Any, variant: str | None = None) -> None:
        """Store a payload with TTL. Fails silently."""
        if not self.enabled:
            return
        try:
            await self.redis.setex(  # type: ignore[union-attr]
                self._key(path, variant),
                self.ttl_seconds,
                json.dumps(value, default=str),
            )
        except Exception:
            logger.debug("Page cache set failed for %s", path, exc_info=True)

    async def invalidate(self, *paths: str) -> None:
        """Revalidate pages: drop each path and all of its query variants."""
        if not self.enabled:
            return
        for path in paths:
            try:
                keys = [self._key(path)]
                async for key in self.redis.scan_iter(match=f"{_glob_escape(self._key(path))}\\?*"):  # type: ignore[union-attr]
                    keys.append(key)
                await self.redis.delete(*keys)  # type: ignore[union-attr]
                logger.debug("Revalidated %s (%d keys)", path, len(keys))
            except Exception:
                logger.warning("Page cache invalidation failed for %s", path, exc_info=True)

    async def invalidate_tree(self, path: str) -> None:
        """Revalidate ``path`` and every page below it (``/docs`` and all ``/docs/...``)."""
        await self.invalidate(path)
        if not self.enabled:
            return
        try:
            keys = [
                key
                async for key in self.redis.scan_iter(match=f"{_glob_escape(self._key(path))}/*")  # type: ignore[union-attr]
            ]
            if keys:
                await self.redis.delete(*keys)  # type: ignore[union-attr]
            logger.debug("Revalidated pages under %s (%d keys)", path, len(keys))
        except Exception:
            logger.warning("Page cache invalidation failed under %s", path, exc_info=True)
