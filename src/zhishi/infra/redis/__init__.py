"""Redis storage backend for zhishi."""

from zhishi.infra.redis.client import RedisClient

__all__ = ["RedisClient"]
