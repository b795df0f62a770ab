"""Public data models for zhishi.

This module exports all public data transfer objects.
"""

from zhishi.models.card import Difficulty, KnowledgeCard
from zhishi.models.domain import Agent, DomainType, KnowledgeDomain
from zhishi.models.message import (
    UNKNOWN_AGENT_ID,
    USER_AGENT_ID,
    USER_AGENT_NAME,
    AgentMessage,
    MessageType,
)
from zhishi.models.option import CuriosityOption
from zhishi.models.session import LearningSession
from zhishi.models.user import CardAnnotations, Theme, UserPreferences, UserState

__all__ = [
    "UNKNOWN_AGENT_ID",
    "USER_AGENT_ID",
    "USER_AGENT_NAME",
    "Agent",
    "AgentMessage",
    "CardAnnotations",
    "CuriosityOption",
    "Difficulty",
    "DomainType",
    "KnowledgeCard",
    "KnowledgeDomain",
    "LearningSession",
    "MessageType",
    "Theme",
    "UserPreferences",
    "UserState",
]
