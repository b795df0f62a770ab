"""Curiosity option model for zhishi."""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "CuriosityOption",
]


class CuriosityOption(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Suggested next chat message, selectable instead of typed.

    The active option set is replaced wholesale after every turn.

    Attributes:
        id: Option identifier (recorded in the session on selection)
        text: Short display text, also sent as the user message
        curiosity: Category label used for icon lookup
        next_topic: Hint for the next generation prompt
    """

    id: str
    text: str = Field(min_length=1)
    curiosity: str = Field(default="")
    next_topic: str = Field(default="")
