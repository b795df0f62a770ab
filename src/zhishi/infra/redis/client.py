"""Redis key-value store for zhishi.

This module provides an optional async Redis backend for the local
cache. Redis is optional - if not configured or unreachable, the
orchestrator falls back to the in-process store.
"""

from typing import TYPE_CHECKING, Any, Self

from zhishi.config import RedisSettings
from zhishi.exceptions import StorageError
from zhishi.interfaces.storage import KeyValueStoreInterface
from zhishi.logging import get_logger
from zhishi.utils.lazy_import import lazy_import

if TYPE_CHECKING:
    from redis.asyncio import Redis

__all__ = [
    "RedisClient",
]

logger = get_logger(__name__)

get_async_redis = lazy_import("redis.asyncio", "Redis")


class RedisClient(KeyValueStoreInterface):
    """Async Redis-backed key-value store.

    All keys are namespaced with settings.key_prefix. Backend errors
    are raised as StorageError for the cache layer to absorb.

    Example:
        client = RedisClient(settings)
        if await client.connect():
            await client.set("theme", '"dark"')
        await client.disconnect()
    """

    config_class = RedisSettings

    def __init__(self, settings: RedisSettings, redis: "Redis | None" = None) -> None:
        """Initialize client with settings.

        Args:
            settings: Redis connection settings
            redis: Pre-built redis.asyncio client (tests inject a fake here)
        """
        self._settings = settings
        self._prefix = settings.key_prefix
        self._redis = redis
        self._connected = redis is not None

    @classmethod
    async def from_config(cls, config: RedisSettings) -> Self:
        """Factory method for Zhishi instantiation."""
        client = cls(config)
        await client.connect()
        return client

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict."""
        return await cls.from_config(RedisSettings(**config))

    @property
    def is_enabled(self) -> bool:
        """Check if Redis is enabled in configuration."""
        return self._settings.enabled and self._settings.url is not None

    @property
    def is_connected(self) -> bool:
        """Check if connected to Redis."""
        return self._connected

    async def connect(self) -> bool:
        """Initialize connection to Redis.

        Returns:
            True if connected successfully, False otherwise
        """
        if self._redis is not None:
            return self._connected

        if not self.is_enabled:
            logger.info("redis_disabled", reason="not configured")
            return False

        try:
            Redis = get_async_redis()  # noqa: N806
            self._redis = Redis.from_url(  # type: ignore[attr-defined]
                self._settings.url,
                decode_responses=True,
            )
            await self._redis.ping()
            self._connected = True
            logger.info("connected_to_redis", url=self._settings.url)
            return True
        except Exception as e:
            logger.warning(
                "redis_connection_failed",
                error=str(e),
                reason="Redis unavailable, using in-process store",
            )
            self._redis = None
            self._connected = False
            return False

    async def disconnect(self) -> None:
        """Close connection to Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            self._connected = False
            logger.info("disconnected_from_redis")

    async def close(self) -> None:
        """Alias for disconnect, for the orchestrator's shutdown path."""
        await self.disconnect()

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _require(self, key: str) -> "Redis":
        if not self._connected or self._redis is None:
            raise StorageError("redis not connected", key=key)
        return self._redis

    async def get(self, key: str) -> str | None:
        redis = self._require(key)
        try:
            return await redis.get(self._key(key))
        except Exception as e:
            raise StorageError(f"redis get failed: {e}", key=key) from e

    async def set(self, key: str, value: str) -> None:
        redis = self._require(key)
        try:
            await redis.set(self._key(key), value)
        except Exception as e:
            raise StorageError(f"redis set failed: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        redis = self._require(key)
        try:
            await redis.delete(self._key(key))
        except Exception as e:
            raise StorageError(f"redis delete failed: {e}", key=key) from e

    async def keys(self) -> list[str]:
        redis = self._require("*")
        try:
            found = [k async for k in redis.scan_iter(match=f"{self._prefix}*")]
        except Exception as e:
            raise StorageError(f"redis scan failed: {e}") from e
        return [k[len(self._prefix):] for k in found]

    async def __aenter__(self) -> "RedisClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()
