"""Completion interface for zhishi.

This module defines the Protocol for the single network boundary:
one prompt in, one free-text completion out.
"""

from typing import Protocol, runtime_checkable

__all__ = [
    "CompletionInterface",
]


@runtime_checkable
class CompletionInterface(Protocol):
    """Contract for chat-completion providers.

    Implementations send exactly one request per call and do not retry.
    Resilience (retry prompts, fallbacks) lives in the services layer.
    """

    async def complete(self, prompt: str) -> str:
        """Send prompt as a single user turn and return the first candidate's text.

        Args:
            prompt: Full prompt text

        Returns:
            Raw completion text (may contain markdown or prose around JSON)

        Raises:
            RemoteCallError: On transport failure or non-success status
        """
        ...

    async def close(self) -> None:
        """Release any underlying HTTP resources."""
        ...
