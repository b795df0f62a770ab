"""Card generation service for zhishi.

This module provides the service that turns a domain selection and the
current feed into a batch of new cards.
"""

from zhishi.exceptions import RemoteCallError
from zhishi.interfaces.llm import CompletionInterface
from zhishi.logging import get_logger
from zhishi.models.card import KnowledgeCard
from zhishi.services.coercion import coerce_cards, safe_parse_json
from zhishi.services.mock_cards import mock_cards
from zhishi.services.prompts import STRICT_CARDS_PROMPT, build_cards_prompt

__all__ = [
    "CardGenerationService",
]

logger = get_logger(__name__)


class CardGenerationService:
    """Service for generating knowledge cards.

    Runs a three-tier fallback ladder so a batch request always yields
    cards:

    1. Full prompt (related/novel split, seeded with recent history)
    2. One strict minimal-shape retry if nothing was accepted
    3. Hand-authored mock cards

    A remote failure at either of the first two tiers skips straight
    to the mock tier.

    Example:
        service = CardGenerationService(llm)
        cards = await service.generate_cards(["science"], feed, count=5)
    """

    def __init__(self, llm: CompletionInterface, related_ratio: float = 0.7) -> None:
        """Initialize service with dependencies.

        Args:
            llm: Completion provider
            related_ratio: Share of each batch that continues recent topics
        """
        self._llm = llm
        self._related_ratio = related_ratio

    async def generate_cards(
        self,
        domains: list[str],
        existing_cards: list[KnowledgeCard],
        count: int = 5,
    ) -> list[KnowledgeCard]:
        """Generate a batch of cards.

        Args:
            domains: Domain labels to generate for
            existing_cards: Current feed, used to seed continuation topics
            count: Maximum number of cards to return

        Returns:
            Between 1 and count cards (never raises for remote or parse failures)
        """
        if count <= 0:
            return []

        try:
            prompt = build_cards_prompt(domains, existing_cards, count, self._related_ratio)
            cards = await self._attempt(prompt, domains)
            if cards:
                return cards[:count]

            logger.info("card_generation_retrying", reason="no valid cards in response")
            cards = await self._attempt(STRICT_CARDS_PROMPT, domains)
            if cards:
                return cards[:count]

            logger.warning("card_generation_unparseable", domains=domains)
        except RemoteCallError as e:
            logger.warning(
                "card_generation_failed",
                error=str(e),
                status_code=e.status_code,
            )

        return mock_cards(domains, count)

    async def _attempt(self, prompt: str, domains: list[str]) -> list[KnowledgeCard] | None:
        raw = await self._llm.complete(prompt)
        cards = coerce_cards(safe_parse_json(raw), domains)
        logger.debug("card_generation_attempt", accepted=len(cards) if cards else 0)
        return cards
