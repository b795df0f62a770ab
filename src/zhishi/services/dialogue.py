"""Dialogue service for zhishi.

This module provides the remote requests behind learning mode: one
batched multi-agent reply per turn, and curiosity options for the user
to pick from.
"""

from zhishi.exceptions import MalformedResponse, RemoteCallError
from zhishi.interfaces.llm import CompletionInterface
from zhishi.logging import get_logger
from zhishi.models.card import KnowledgeCard
from zhishi.models.message import AgentMessage
from zhishi.models.option import CuriosityOption
from zhishi.services.coercion import coerce_agent_messages, coerce_options, safe_parse_json
from zhishi.services.prompts import (
    build_curiosity_options_prompt,
    build_multi_agent_prompt,
    build_next_options_prompt,
)

__all__ = [
    "FALLBACK_OPTIONS",
    "DialogueService",
]

logger = get_logger(__name__)

FALLBACK_OPTIONS: tuple[CuriosityOption, ...] = (
    CuriosityOption(
        id="deep_1",
        text="这个现象还有哪些我们没讨论到的角度？",
        curiosity="深度探索",
        next_topic="多角度分析",
    ),
    CuriosityOption(
        id="deep_2",
        text="如果改变一个关键条件会怎样？",
        curiosity="假设思考",
        next_topic="条件变化",
    ),
    CuriosityOption(
        id="deep_3",
        text="这个知识在实际生活中如何应用？",
        curiosity="实践应用",
        next_topic="实际应用",
    ),
)


class DialogueService:
    """Service for multi-agent replies and curiosity options.

    Agent replies raise on failure so the caller can surface an error;
    option requests never raise and fall back to FALLBACK_OPTIONS.

    Example:
        service = DialogueService(llm)
        replies = await service.get_multi_agent_response(card, agent_ids)
    """

    def __init__(self, llm: CompletionInterface) -> None:
        """Initialize service with dependencies.

        Args:
            llm: Completion provider
        """
        self._llm = llm

    async def get_multi_agent_response(
        self,
        card: KnowledgeCard,
        agent_ids: list[str],
    ) -> list[AgentMessage]:
        """Request one batched reply from all active agents.

        Args:
            card: Card the conversation is about
            agent_ids: Active agents, in attribution order

        Returns:
            Transcript entries, attributed positionally to agent_ids

        Raises:
            RemoteCallError: If the completion call fails
            MalformedResponse: If no reply could be coerced
        """
        raw = await self._llm.complete(build_multi_agent_prompt(card, agent_ids))
        messages = coerce_agent_messages(safe_parse_json(raw), card, agent_ids)
        if messages is None:
            raise MalformedResponse("no agent replies in response", raw=raw)

        logger.debug("agent_replies_received", card_id=card.id, count=len(messages))
        return messages

    async def generate_curiosity_options(
        self,
        card: KnowledgeCard,
        topic: str,
    ) -> list[CuriosityOption]:
        """Generate the first option set for a session."""
        return await self._options(build_curiosity_options_prompt(card, topic), card)

    async def generate_next_options(
        self,
        card: KnowledgeCard,
        messages: list[AgentMessage],
    ) -> list[CuriosityOption]:
        """Generate options conditioned on the full transcript so far."""
        return await self._options(build_next_options_prompt(card, messages), card)

    async def _options(self, prompt: str, card: KnowledgeCard) -> list[CuriosityOption]:
        try:
            raw = await self._llm.complete(prompt)
        except RemoteCallError as e:
            logger.warning("option_generation_failed", card_id=card.id, error=str(e))
            return list(FALLBACK_OPTIONS)

        options = coerce_options(safe_parse_json(raw))
        if options is None:
            logger.warning("option_generation_unparseable", card_id=card.id)
            return list(FALLBACK_OPTIONS)
        return options
