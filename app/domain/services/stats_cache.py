"""
Workload Stats Cache
Two-tier TTL cache (in-process + optional Redis) injected into the reporter
"""
import json
import logging
import time
from typing import Any, Dict, Optional, Tuple

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class StatsCache:
    """
    TTL cache for read-only aggregates.

    Redis, shared across workers, is used when a client or URL is given and
    reachable. It is then the only tier, so an invalidation by one worker is
    seen by all of them. Without Redis, or if it cannot be reached, entries
    live in an in-process dict with the same TTL.

    Keys are namespaced with KEY_PREFIX. Values must be JSON-serializable.
    """

    KEY_PREFIX = "assignment:stats:"

    def __init__(
        self,
        ttl_seconds: int = 300,
        redis_client=None,
        redis_url: Optional[str] = None,
        clock=time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._memory: Dict[str, Tuple[float, Any]] = {}
        self._redis = redis_client
        self._redis_url = redis_url
        self._initialized = redis_client is not None or not redis_url

    @property
    def redis_enabled(self) -> bool:
        return self._redis is not None

    async def initialize(self) -> None:
        """Connect to Redis if a URL was configured."""
        if self._initialized:
            return
        self._initialized = True

        try:
            self._redis = await redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True
            )
            await self._redis.ping()
            logger.info(f"StatsCache connected to Redis: {self._redis_url}")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis, stats cache is memory-only: {e}")
            self._redis = None

    async def get(self, key: str) -> Optional[Any]:
        if self.ttl_seconds <= 0:
            return None

        if not self._initialized:
            await self.initialize()
        if self._redis is None:
            return self._get_memory(key)

        try:
            raw = await self._redis.get(self.KEY_PREFIX + key)
        except Exception as e:
            logger.warning(f"Stats cache read failed for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Stats cache entry for {key} is not valid JSON: {e}")
            return None

    def _get_memory(self, key: str) -> Optional[Any]:
        entry = self._memory.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at > self._clock():
            return value
        del self._memory[key]
        return None

    async def set(self, key: str, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return

        if not self._initialized:
            await self.initialize()
        if self._redis is None:
            self._memory[key] = (self._clock() + self.ttl_seconds, value)
            return

        try:
            await self._redis.set(self.KEY_PREFIX + key, json.dumps(value), ex=self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Stats cache write failed for {key}: {e}")

    async def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or every cached aggregate when key is None."""
        if key is None:
            self._memory.clear()
        else:
            self._memory.pop(key, None)

        if self._redis is None:
            return

        try:
            if key is not None:
                await self._redis.delete(self.KEY_PREFIX + key)
            else:
                keys = [k async for k in self._redis.scan_iter(match=self.KEY_PREFIX + "*")]
                if keys:
                    await self._redis.delete(*keys)
        except Exception as e:
            logger.warning(f"Stats cache invalidation failed: {e}")
