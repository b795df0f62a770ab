"""Identifier helpers for zhishi.

Generated cards and options that arrive without an id get a short
deterministic one derived from their content and batch position.
"""

import hashlib
import time
import uuid
from typing import Any

__all__ = [
    "generate_card_id",
    "generate_option_id",
    "generate_session_id",
    "hash_text",
    "now_ms",
    "stable_hash",
]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def hash_text(text: str) -> str:
    """Generate SHA256 hash of text.

    Args:
        text: Input text to hash

    Returns:
        Hexadecimal SHA256 hash string
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def stable_hash(*args: Any) -> str:
    """Generate a stable hash from multiple arguments joined with "|"."""
    return hash_text("|".join(str(arg) for arg in args))


def generate_card_id(title: str, batch_ms: int, index: int) -> str:
    """Generate an id for a generated card that lacks one.

    Args:
        title: Card title
        batch_ms: Epoch milliseconds of the generation batch
        index: Position of the record in the batch

    Returns:
        Identifier of the form "gen_<batch_ms>_<index>_<hash8>"
    """
    return f"gen_{batch_ms}_{index}_{stable_hash('card', title, batch_ms, index)[:8]}"


def generate_option_id(text: str, index: int) -> str:
    """Generate an id for a curiosity option that lacks one."""
    return f"opt_{index}_{stable_hash('option', text)[:8]}"


def generate_session_id() -> str:
    """Generate a session id: epoch milliseconds plus a random suffix."""
    return f"{now_ms()}_{uuid.uuid4().hex[:6]}"
