"""Exception types for zhishi.

Only the completion boundary, the dialogue service and the storage
adapters raise these. The feed store and session controller catch them
and resolve to a renderable state.
"""

__all__ = [
    "MalformedResponse",
    "RemoteCallError",
    "StorageError",
    "ZhishiError",
]


class ZhishiError(Exception):
    """Base exception for zhishi."""


class RemoteCallError(ZhishiError):
    """Raised when the completion endpoint cannot be reached or rejects the call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(ZhishiError):
    """Raised when model output cannot be coerced into the expected shape."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        # Keep only a short excerpt for logs
        self.raw = raw[:200] if raw else raw
        super().__init__(message)


class StorageError(ZhishiError):
    """Raised by key-value store adapters on read/write failure."""

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)
