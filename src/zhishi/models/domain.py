"""Taxonomy and agent models for zhishi.

These are static reference data, loaded once at startup.
"""

from enum import StrEnum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "Agent",
    "DomainType",
    "KnowledgeDomain",
]


class DomainType(StrEnum):
    """Flavour of a knowledge domain."""

    CLASSIC = "classic"
    COUNTERINTUITIVE = "counterintuitive"
    FUN = "fun"


class KnowledgeDomain(
    BaseModel,
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
):
    """Knowledge domain in the static taxonomy."""

    id: str
    name: str
    icon: str
    color: str
    sub_categories: list[str] = Field(default_factory=list)
    type: DomainType
    description: str = Field(default="")
    attraction_tags: list[str] = Field(default_factory=list)


class Agent(BaseModel, frozen=True):
    """Simulated chat persona.

    Agents are prompt framings, not processes.

    Attributes:
        id: Stable agent identifier
        name: Display label
        role: One-line persona description used in prompts
        icon: Display icon
        color: Display color
        is_core: True for the three always-present agents
        domain: Specialist domain, if any
    """

    id: str
    name: str
    role: str
    icon: str = Field(default="🤖")
    color: str = Field(default="#666")
    is_core: bool = Field(default=False)
    domain: str | None = Field(default=None)
