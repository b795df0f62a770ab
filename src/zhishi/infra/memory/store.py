"""In-process key-value store for zhishi.

This is the default backend. It plays the role of a single browser's
local storage: one writer, last write wins, nothing survives the process.
"""

from typing import Any, Self

from zhishi.interfaces.storage import KeyValueStoreInterface

__all__ = [
    "MemoryStore",
]


class MemoryStore(KeyValueStoreInterface):
    """Dictionary-backed key-value store."""

    config_class = None

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict ({"initial": {...}})."""
        return cls(config.get("initial"))

    async def close(self) -> None:
        """Nothing to release."""

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self._data)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the raw contents (for inspection and tests)."""
        return dict(self._data)
