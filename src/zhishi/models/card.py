"""Knowledge card models for zhishi.

A card is one unit of generated content shown full-screen in the feed.
"""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "Difficulty",
    "KnowledgeCard",
]


class Difficulty(StrEnum):
    """Card difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class KnowledgeCard(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Knowledge card accepted into the feed.

    Cards are immutable once in the feed. Like/favorite/learned state
    is stored separately by card id.

    Attributes:
        id: Unique card identifier
        title: Card headline (never empty)
        content: Card body, 200-300 characters target (never empty)
        difficulty: easy, medium or hard
        category: Primary taxonomy label
        domain: Primary knowledge domain
        sub_category: Sub-classification label
        related_domains: Secondary labels, ordered
        tags: Free-form tags, ordered
        ai_generated: Provenance flag
        created_at: Creation timestamp
    """

    id: str
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM)
    category: str
    domain: str
    sub_category: str = Field(default="")
    related_domains: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    ai_generated: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def history_line(self, prefix_length: int = 50) -> str:
        """Render the card as a one-line summary for continuation prompts."""
        return f"- {self.title}: {self.content[:prefix_length]}..."
