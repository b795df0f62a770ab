"""Key-value storage interface for zhishi.

This module defines the Protocol for the local persistent cache backend.
Values are JSON-encoded strings; typed access lives in
zhishi.services.local_cache.
"""

from typing import Protocol, runtime_checkable

__all__ = [
    "KeyValueStoreInterface",
]


@runtime_checkable
class KeyValueStoreInterface(Protocol):
    """Contract for string key-value stores.

    Implementations raise StorageError on backend failure. Callers in the
    cache layer log it and treat the read as empty.
    """

    async def get(self, key: str) -> str | None:
        """Get value for key.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if absent
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store value under key, overwriting any previous value.

        Args:
            key: Storage key
            value: JSON-encoded string
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove key if present.

        Args:
            key: Storage key
        """
        ...

    async def keys(self) -> list[str]:
        """List all keys currently stored.

        Returns:
            Unprefixed key names
        """
        ...
