"""Learning session model for zhishi."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from zhishi.models.message import AgentMessage

__all__ = [
    "LearningSession",
]


class LearningSession(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Learning-mode session for one card.

    One session is live at a time. It is persisted after every turn
    and ended explicitly on exit.

    Attributes:
        id: Session identifier
        card_id: Card being studied
        start_time: When learning mode was entered
        end_time: When the session ended (None while live)
        messages: Transcript snapshot
        selected_options: Option ids chosen, in order
        completed: True once ended
    """

    id: str
    card_id: str
    start_time: datetime = Field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = Field(default=None)
    messages: list[AgentMessage] = Field(default_factory=list)
    selected_options: list[str] = Field(default_factory=list)
    completed: bool = Field(default=False)

    def with_messages(self, messages: list[AgentMessage]) -> "LearningSession":
        """Return a copy holding the given transcript snapshot."""
        return self.model_copy(update={"messages": list(messages)})

    def with_selected_option(self, option_id: str) -> "LearningSession":
        """Return a copy with option_id appended to the selection history."""
        return self.model_copy(update={"selected_options": [*self.selected_options, option_id]})

    def ended(self) -> "LearningSession":
        """Return a completed copy stamped with the end time."""
        return self.model_copy(update={"end_time": datetime.now(UTC), "completed": True})
