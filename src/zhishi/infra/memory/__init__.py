"""In-process storage backend for zhishi."""

from zhishi.infra.memory.store import MemoryStore

__all__ = ["MemoryStore"]
