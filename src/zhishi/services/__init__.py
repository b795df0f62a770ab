"""Service layer for zhishi.

This module exports the main service entry points.
"""

from zhishi.services.card_generation import CardGenerationService
from zhishi.services.dialogue import FALLBACK_OPTIONS, DialogueService
from zhishi.services.feed_store import CardFeedStore
from zhishi.services.local_cache import CardCache, PreferenceStore, SessionStore
from zhishi.services.session_controller import SessionController
from zhishi.services.swipe import (
    FeedView,
    SwipeController,
    SwipeDirection,
    SwipeState,
    compute_threshold,
)

__all__ = [
    "FALLBACK_OPTIONS",
    "CardCache",
    "CardFeedStore",
    "CardGenerationService",
    "DialogueService",
    "FeedView",
    "PreferenceStore",
    "SessionController",
    "SessionStore",
    "SwipeController",
    "SwipeDirection",
    "SwipeState",
    "compute_threshold",
]
