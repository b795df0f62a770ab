"""Agent registry for zhishi.

Agents are prompt framings for simulated chat contributors. Three core
agents take part in every session; one domain specialist is added per
card.
"""

import re

from zhishi.models.domain import Agent
from zhishi.models.message import UNKNOWN_AGENT_ID

__all__ = [
    "AGENTS",
    "CORE_AGENT_IDS",
    "DEFAULT_SPECIALIST_ID",
    "UNKNOWN_AGENT_NAME",
    "agent_name",
    "get_agent",
    "get_agent_group",
]

UNKNOWN_AGENT_NAME = "未知助手"

AGENTS: dict[str, Agent] = {
    agent.id: agent
    for agent in (
        Agent(
            id="knowledge_teacher",
            name="知识讲解师",
            role="耐心的启蒙导师，用悬念式开头和震撼案例讲清核心概念",
            icon="📚",
            color="#4CAF50",
            is_core=True,
        ),
        Agent(
            id="thinking_collider",
            name="思维碰撞者",
            role="犀利的思辨者，展示不同观点与认知冲突",
            icon="⚡",
            color="#FF9800",
            is_core=True,
        ),
        Agent(
            id="practice_connector",
            name="实践连接者",
            role="务实的实干家，用具体案例连接理论与现实",
            icon="🔧",
            color="#2196F3",
            is_core=True,
        ),
        Agent(
            id="science_explainer",
            name="科学解释者",
            role="严谨的科学家，用实验和证据解释科学概念",
            icon="🔬",
            color="#9C27B0",
            domain="science",
        ),
        Agent(
            id="history_narrator",
            name="历史叙述者",
            role="博学的历史学家，用生动的故事梳理因果",
            icon="📖",
            color="#795548",
            domain="history",
        ),
        Agent(
            id="art_appreciator",
            name="艺术鉴赏者",
            role="感性的艺术导师，解读作品的美学与文化内涵",
            icon="🎨",
            color="#E91E63",
            domain="art",
        ),
        Agent(
            id="logic_reasoner",
            name="逻辑推理者",
            role="严谨的逻辑学家，梳理推理过程并识别谬误",
            icon="🧠",
            color="#607D8B",
            domain="philosophy",
        ),
    )
}

CORE_AGENT_IDS: tuple[str, ...] = ("knowledge_teacher", "thinking_collider", "practice_connector")
DEFAULT_SPECIALIST_ID = "science_explainer"

# Checked in order; first match wins. English ids match whole words,
# Chinese labels match as substrings.
_SPECIALIST_RULES: tuple[tuple[frozenset[str], tuple[str, ...], str], ...] = (
    (frozenset({"science", "technology"}), ("科学", "技术"), "science_explainer"),
    (frozenset({"history", "culture"}), ("历史", "文化"), "history_narrator"),
    (frozenset({"art", "literature"}), ("艺术", "文学"), "art_appreciator"),
    (frozenset({"philosophy", "logic"}), ("哲学", "逻辑"), "logic_reasoner"),
)

_WORD_SEPARATOR = re.compile(r"[\s_\-/&,]+")


def get_agent(agent_id: str) -> Agent | None:
    """Look up an agent by id."""
    return AGENTS.get(agent_id)


def agent_name(agent_id: str) -> str:
    """Display name for an agent id, or the unknown-agent label."""
    if agent_id == UNKNOWN_AGENT_ID:
        return UNKNOWN_AGENT_NAME
    agent = AGENTS.get(agent_id)
    return agent.name if agent else UNKNOWN_AGENT_NAME


def _specialist_for(domain: str) -> str:
    label = domain.lower()
    words = set(_WORD_SEPARATOR.split(label))
    for english, chinese, agent_id in _SPECIALIST_RULES:
        if words & english or any(needle in label for needle in chinese):
            return agent_id
    return DEFAULT_SPECIALIST_ID


def get_agent_group(domain: str) -> list[str]:
    """Choose the agents for a card's domain.

    Args:
        domain: Domain label of the card (taxonomy id or display name)

    Returns:
        The three core agent ids followed by exactly one specialist id
    """
    return [*CORE_AGENT_IDS, _specialist_for(domain or "")]
