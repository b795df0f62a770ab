#!/usr/bin/env python
"""End-to-end run of zhishi against the real completion endpoint.

Generates a feed, swipes through it until a background batch is
prefetched, then opens a learning session on the current card and
plays two turns. Redis is disabled; the in-process store is used.

Usage:
    python scripts/e2e_demo.py

Environment variables (via .env):
    ZHISHI_LLM_PROVIDER=glm
    ZHISHI_LLM_API_KEY=your_api_key
    ZHISHI_LLM_MODEL=glm-4-flash
"""

import asyncio
import logging
import sys

from zhishi import Zhishi
from zhishi.config import ZhishiConfig
from zhishi.logging import configure_logging, get_logger
from zhishi.models.card import KnowledgeCard

configure_logging(level=logging.INFO)
logger = get_logger(__name__)


def _preview(card: KnowledgeCard) -> str:
    return f"[{card.difficulty.value}] {card.title} ({card.domain})"


class E2EDemoRunner:
    """Drives the orchestrator through one feed and one learning session."""

    def __init__(self, config: ZhishiConfig) -> None:
        self.config = config
        self.app = Zhishi(config=config)

    async def run_feed(self) -> dict:
        """Generate a feed and swipe until a prefetch lands."""
        print("\n" + "=" * 60)
        print("STEP 1: Card feed")
        print("=" * 60)

        app = self.app
        await app.select_domains(["science", "counterintuitive_psychology"])
        feed = app.feed
        print(f"\nGenerated {feed.card_count} card(s):")
        for card in feed.cards:
            print(f"  {_preview(card)}")

        initial = feed.card_count
        swipe = app.swipe
        while feed.current_index < initial - 2:
            swipe.on_gesture_start(200, 600)
            swipe.on_gesture_move(200, 420)
            swipe.on_gesture_end()
            # Let the real transition timers fire
            await asyncio.sleep(0.7)
            await swipe.wait_for_cursor()
            print(f"  swiped to card {feed.current_index}")

        await feed.wait_for_prefetch()
        print(f"\nFeed after prefetch: {feed.card_count} card(s)")
        if feed.last_error:
            print(f"  error: {feed.last_error}")

        return {
            "initial_cards": initial,
            "cards_after_prefetch": feed.card_count,
            "cursor": feed.current_index,
        }

    async def run_learning(self) -> dict:
        """Open a session on the current card and play two turns."""
        print("\n" + "=" * 60)
        print("STEP 2: Learning session")
        print("=" * 60)

        app = self.app
        card = app.feed.current_card
        if card is None:
            raise RuntimeError("feed is empty")
        print(f"\nCard: {_preview(card)}")

        await app.enter_learning(card)
        session = app.session
        print(f"  agents: {session.active_agents}")
        for message in session.messages:
            print(f"  {message.speaker_line[:80]}")

        if session.options:
            option = session.options[0]
            print(f"\n> option: {option.text}")
            await session.select_option(card, option)

        await session.send_user_message(card, "这个结论有反例吗？")
        for message in session.messages[-5:]:
            print(f"  {message.speaker_line[:80]}")
        print("\nNext options:")
        for option in session.options:
            print(f"  - {option.text} [{option.curiosity}]")

        await app.toggle_favorite(card)
        await app.mark_learned(card.id)
        ended = await app.exit_learning()

        return {
            "messages": len(ended.messages) if ended else 0,
            "selected_options": len(ended.selected_options) if ended else 0,
            "last_error": session.last_error,
        }

    async def run_all(self) -> None:
        print("\n" + "#" * 60)
        print("#  zhishi End-to-End Demo")
        print("#" * 60)

        try:
            async with self.app:
                feed_results = await self.run_feed()
                learning_results = await self.run_learning()

            print("\n" + "=" * 60)
            print("SUMMARY")
            print("=" * 60)
            print("\nFeed:")
            for key, value in feed_results.items():
                print(f"  {key}: {value}")
            print("\nLearning:")
            for key, value in learning_results.items():
                print(f"  {key}: {value}")

        except Exception as e:
            logger.exception("e2e_demo_failed")
            print(f"\nERROR: {e}")
            raise


async def main() -> None:
    """Main entry point."""
    config = ZhishiConfig()

    if not config.llm.api_key:
        print("ERROR: ZHISHI_LLM_API_KEY not set in environment")
        print("Please set up your .env file with the required variables.")
        sys.exit(1)

    # Keep everything in process for the demo
    config.redis.enabled = False

    await E2EDemoRunner(config).run_all()


if __name__ == "__main__":
    asyncio.run(main())
