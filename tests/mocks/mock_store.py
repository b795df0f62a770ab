"""Key-value store doubles for testing."""

from typing import Any

from zhishi.exceptions import StorageError


class FailingStore:
    """Store whose every operation raises StorageError."""

    async def get(self, key: str) -> str | None:
        raise StorageError("quota exceeded", key=key)

    async def set(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded", key=key)

    async def delete(self, key: str) -> None:
        raise StorageError("quota exceeded", key=key)

    async def keys(self) -> list[str]:
        raise StorageError("quota exceeded")


class MockRedis:
    """In-memory stand-in for redis.asyncio.Redis (decode_responses=True)."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, **kwargs: Any) -> bool:
        self.data[key] = value
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def scan_iter(self, match: str | None = None):
        prefix = (match or "*").rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def aclose(self) -> None:
        self.closed = True
