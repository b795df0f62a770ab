"""Chat transcript models for zhishi."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "USER_AGENT_ID",
    "USER_AGENT_NAME",
    "UNKNOWN_AGENT_ID",
    "AgentMessage",
    "MessageType",
]

USER_AGENT_ID = "user"
USER_AGENT_NAME = "你"
UNKNOWN_AGENT_ID = "unknown"


class MessageType(StrEnum):
    """Kinds of transcript entries."""

    TEXT = "text"
    QUESTION = "question"
    SUGGESTION = "suggestion"


class AgentMessage(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Single transcript entry.

    Authored either by a simulated agent or by the human user.
    Transcript order is append-only and chronological.

    Attributes:
        agent_id: Agent identifier, "user", or "unknown" when a batch
            response ran past the active agent list
        agent_name: Display label
        message: Free text
        timestamp: When the entry was created
        message_type: text, question or suggestion
        related_card_id: Card the conversation is about
        is_user: True for user-authored entries
    """

    agent_id: str
    agent_name: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    message_type: MessageType = Field(default=MessageType.TEXT)
    related_card_id: str
    is_user: bool = Field(default=False)

    @classmethod
    def from_user(cls, text: str, card_id: str) -> "AgentMessage":
        """Build a user-authored transcript entry."""
        return cls(
            agent_id=USER_AGENT_ID,
            agent_name=USER_AGENT_NAME,
            message=text,
            related_card_id=card_id,
            is_user=True,
        )

    @property
    def speaker_line(self) -> str:
        """Format as "name: message" for conversation-history prompts."""
        return f"{self.agent_name}: {self.message}"
