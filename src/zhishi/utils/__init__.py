"""Utility functions for zhishi.

This module contains internal utility functions.
"""

from zhishi.utils.hashing import (
    generate_card_id,
    generate_option_id,
    generate_session_id,
    hash_text,
    now_ms,
    stable_hash,
)
from zhishi.utils.timing import PerformanceMonitor, performance_monitor

__all__ = [
    "PerformanceMonitor",
    "generate_card_id",
    "generate_option_id",
    "generate_session_id",
    "hash_text",
    "now_ms",
    "performance_monitor",
    "stable_hash",
]
