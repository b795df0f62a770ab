"""Interface contracts for zhishi.

This module exports all Protocol-based interfaces for dependency injection.
"""

from zhishi.interfaces.llm import CompletionInterface
from zhishi.interfaces.storage import KeyValueStoreInterface

__all__ = [
    "CompletionInterface",
    "KeyValueStoreInterface",
]
