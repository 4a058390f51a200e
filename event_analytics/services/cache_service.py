"""Best-effort Redis cache for aggregate query results"""
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import redis

from event_analytics.core.config import settings
from event_analytics.core.exceptions import CacheUnavailable
from event_analytics.core.logging import get_logger

logger = get_logger(__name__)


class CacheBackend(Protocol):
    """Capability interface for the read-aside cache. Implementations never raise."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes, ttl: int) -> bool:
        ...

    def close(self) -> None:
        ...


class NullCache:
    """Cache that stores nothing; used when no cache backend is configured"""

    def get(self, key: str) -> Optional[bytes]:
        return None

    def set(self, key: str, value: bytes, ttl: int) -> bool:
        return False

    def close(self) -> None:
        pass


@dataclass
class CacheState:
    """Availability of the cache backend across a failure episode."""

    available: bool = True
    last_warned_at: Optional[float] = None
    last_failure_at: Optional[float] = None


class RedisCache:
    """Service for caching aggregate results in Redis"""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        retry_interval: Optional[float] = None,
        clock=time.monotonic,
    ):
        """
        Initialize the cache service.

        No connection is attempted here; the first command connects lazily, so
        an unreachable Redis at startup is just the start of a failure episode.

        Args:
            redis_url: Redis URL (defaults to settings.CACHE_REDIS_URL)
            client: Pre-built client, mainly for tests
            retry_interval: Seconds to skip Redis after a failure before retrying
            clock: Monotonic time source
        """
        self.redis_url = redis_url or settings.CACHE_REDIS_URL
        self.retry_interval = (
            settings.CACHE_RETRY_INTERVAL_SECONDS if retry_interval is None else retry_interval
        )
        self.state = CacheState()
        self._clock = clock

        if client is not None:
            self.redis_client = client
        else:
            conn_params = {
                "decode_responses": False,
                "socket_connect_timeout": settings.CACHE_SOCKET_TIMEOUT,
                "socket_timeout": settings.CACHE_SOCKET_TIMEOUT,
                "health_check_interval": 30,
            }

            # Add SSL parameters for rediss:// URLs
            if self.redis_url.startswith("rediss://"):
                conn_params["ssl_cert_reqs"] = "none"

            self.redis_client = redis.from_url(self.redis_url, **conn_params)

    def _should_attempt(self) -> bool:
        if self.state.available:
            return True
        # Back off while an episode is ongoing, then probe again
        return self._clock() - (self.state.last_failure_at or 0) >= self.retry_interval

    def _record_failure(self, operation: str, error: Exception) -> None:
        if self.state.available:
            logger.warning(
                f"Redis cache unavailable ({operation} failed: {error}); "
                f"continuing without cache"
            )
            self.state.last_warned_at = self._clock()
        self.state.available = False
        self.state.last_failure_at = self._clock()

    def _record_success(self) -> None:
        if not self.state.available:
            logger.info("Redis cache connection restored")
        self.state.available = True
        self.state.last_warned_at = None
        self.state.last_failure_at = None

    def _execute(self, operation: str, *args):
        try:
            return getattr(self.redis_client, operation)(*args)
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e

    def get(self, key: str) -> Optional[bytes]:
        """
        Retrieve a cached value.

        Args:
            key: Cache key

        Returns:
            Cached bytes if found, None on miss or when Redis is unavailable
        """
        if not self._should_attempt():
            return None

        try:
            value = self._execute("get", key)
        except CacheUnavailable as e:
            self._record_failure("get", e)
            return None

        self._record_success()
        if value is not None:
            logger.debug(f"Cache hit for key: {key}")
        else:
            logger.debug(f"Cache miss for key: {key}")
        return value

    def set(self, key: str, value: bytes, ttl: int) -> bool:
        """
        Cache a value with a TTL.

        Args:
            key: Cache key
            value: Serialized value
            ttl: Time to live in seconds

        Returns:
            True if cached successfully, False otherwise
        """
        if not self._should_attempt():
            return False

        try:
            self._execute("setex", key, ttl, value)
        except CacheUnavailable as e:
            self._record_failure("set", e)
            return False

        self._record_success()
        logger.debug(f"Cached value with key: {key} (TTL: {ttl}s)")
        return True

    def ping(self) -> bool:
        """Check connectivity, updating availability state."""
        try:
            self._execute("ping")
        except CacheUnavailable as e:
            self._record_failure("ping", e)
            return False
        self._record_success()
        return True

    def close(self) -> None:
        """Close Redis connection"""
        try:
            self.redis_client.close()
        except redis.RedisError as e:
            logger.debug(f"Error closing Redis cache connection: {e}")
        logger.info("Closed Redis cache connection")


def build_cache(redis_url: Optional[str] = None) -> CacheBackend:
    """Build the configured cache backend; NullCache when no URL is set."""
    url = redis_url if redis_url is not None else settings.CACHE_REDIS_URL
    if not url or not url.strip():
        logger.warning("Redis not configured (CACHE_REDIS_URL not set); caching disabled")
        return NullCache()
    logger.info("Using Redis cache for aggregate results")
    return RedisCache(redis_url=url)


# Singleton instance
_cache_service: Optional[CacheBackend] = None


def get_cache_service() -> CacheBackend:
    """Get or create the cache service singleton"""
    global _cache_service
    if _cache_service is None:
        _cache_service = build_cache()
    return _cache_service


def close_cache_service() -> None:
    """Close and forget the cache service singleton"""
    global _cache_service
    if _cache_service is not None:
        _cache_service.close()
        _cache_service = None
