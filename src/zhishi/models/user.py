"""User state models for zhishi."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from zhishi.models.card import Difficulty

__all__ = [
    "CardAnnotations",
    "Theme",
    "UserPreferences",
    "UserState",
]

Theme = Literal["dark", "light"]


class UserPreferences(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """User preference record."""

    difficulty: Difficulty = Field(default=Difficulty.MEDIUM)
    auto_play: bool = Field(default=True)
    sound_enabled: bool = Field(default=False)


class UserState(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Persisted user state.

    Attributes:
        selected_domains: Taxonomy ids the user picked
        current_card_index: Last feed cursor
        learning_history: Card ids studied in learning mode, oldest first
        preferences: User preference record
    """

    selected_domains: list[str] = Field(default_factory=list)
    current_card_index: int = Field(default=0, ge=0)
    learning_history: list[str] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class CardAnnotations(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Per-card like/favorite/learned status, keyed by card id."""

    liked: list[str] = Field(default_factory=list)
    favorited: list[str] = Field(default_factory=list)
    learned: list[str] = Field(default_factory=list)

    def toggled(self, field: Literal["liked", "favorited"], card_id: str) -> "CardAnnotations":
        """Return a copy with card_id flipped in the given list."""
        current: list[str] = getattr(self, field)
        if card_id in current:
            updated = [cid for cid in current if cid != card_id]
        else:
            updated = [*current, card_id]
        return self.model_copy(update={field: updated})

    def with_learned(self, card_id: str) -> "CardAnnotations":
        """Return a copy with card_id marked learned (idempotent)."""
        if card_id in self.learned:
            return self
        return self.model_copy(update={"learned": [*self.learned, card_id]})
