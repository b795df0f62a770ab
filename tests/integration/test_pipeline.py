"""Integration tests for the zhishi application core.

These run the orchestrator end to end against the in-process store and
a scripted completion provider: feed generation, swipe navigation with
background prefetch, a learning session, and a restart from the cache.
"""

from collections.abc import Callable

import pytest
from mocks.mock_completion import ScriptedCompletion
from mocks.responses import agent_reply_response, cards_response, options_response

from zhishi.config import RedisSettings, ZhishiConfig
from zhishi.infra.memory.store import MemoryStore
from zhishi.orchestrator import Zhishi
from zhishi.services.agents import CORE_AGENT_IDS, agent_name
from zhishi.services.dialogue import FALLBACK_OPTIONS
from zhishi.services.local_cache import SessionStore
from zhishi.services.swipe import SwipeState

SCIENCE_NAMES = [agent_name(a) for a in [*CORE_AGENT_IDS, "science_explainer"]]


class ManualScheduler:
    """Swipe timer scheduler fired explicitly by the test."""

    def __init__(self) -> None:
        self.pending: list[tuple[float, Callable[[], None]]] = []

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay_s, callback))

    def flush(self) -> None:
        pending, self.pending = sorted(self.pending, key=lambda p: p[0]), []
        for _, callback in pending:
            callback()


async def _swipe_up(app: Zhishi, scheduler: ManualScheduler) -> bool:
    swipe = app.swipe
    swipe.on_gesture_start(200, 600, t=0)
    swipe.on_gesture_move(200, 450, t=80)
    committed = swipe.on_gesture_end(t=160)
    scheduler.flush()
    await swipe.wait_for_cursor()
    return committed


@pytest.fixture
def config() -> ZhishiConfig:
    return ZhishiConfig(redis=RedisSettings(url=None), default_domains=["science"])


class TestFeedPipeline:
    """Feed generation, navigation and prefetch."""

    @pytest.mark.asyncio
    async def test_swiping_to_the_end_prefetches_one_batch(self, config: ZhishiConfig) -> None:
        scheduler = ManualScheduler()
        app = Zhishi(
            llm_class=ScriptedCompletion,
            store_class=MemoryStore,
            config=config,
            llm_custom_config={
                "responses": [cards_response(5, prefix="一"), cards_response(5, prefix="二")]
            },
            store_custom_config={},
            swipe_scheduler=scheduler,
        )

        async with app:
            await app.skip_domain_selection()
            assert app.feed.card_count == 5

            for expected in (1, 2, 3):
                assert await _swipe_up(app, scheduler) is True
                assert app.feed.current_index == expected
                assert app.swipe.state is SwipeState.IDLE

            await app.feed.wait_for_prefetch()
            assert app.feed.card_count == 10
            assert app._llm.call_count == 2

            # Second batch prompt quotes the tail of the first batch
            assert "一4" in app._llm.prompts[1]

    @pytest.mark.asyncio
    async def test_failing_endpoint_still_yields_cards(self, config: ZhishiConfig) -> None:
        app = Zhishi(
            llm_class=ScriptedCompletion,
            store_class=MemoryStore,
            config=config,
            llm_custom_config={},
            store_custom_config={},
        )

        async with app:
            await app.select_domains(["科学"])

            assert app.feed.card_count == 5
            assert all(card.id.startswith("mock_") for card in app.feed.cards)
            assert all(card.domain == "科学" for card in app.feed.cards)
            assert app.feed.last_error is None


class TestLearningPipeline:
    """A full learning session followed by a restart."""

    @pytest.mark.asyncio
    async def test_learning_session_and_restart(self, config: ZhishiConfig) -> None:
        app = Zhishi(
            llm_class=ScriptedCompletion,
            store_class=MemoryStore,
            config=config,
            llm_custom_config={
                "responses": [
                    cards_response(5),
                    agent_reply_response(SCIENCE_NAMES, prefix="开场"),
                    options_response(["企鹅为什么不怕冷"]),
                    agent_reply_response(SCIENCE_NAMES, prefix="回答"),
                    options_response(["再深入一点"]),
                ]
            },
            store_custom_config={},
        )

        async with app:
            await app.skip_domain_selection()
            card = app.feed.current_card
            assert card is not None

            await app.enter_learning(card)
            option = app.session.options[0]
            await app.session.select_option(card, option)

            messages = app.session.messages
            assert len(messages) == 9
            assert messages[4].is_user is True
            assert messages[4].message == "企鹅为什么不怕冷"
            assert [m.message for m in messages[5:]] == [f"回答{i}" for i in range(4)]
            assert [o.text for o in app.session.options] == ["再深入一点"]

            # Endpoint now exhausted: the turn fails but keeps the user message
            await app.session.send_user_message(card, "还有呢？")
            assert app.session.messages[-1].message == "还有呢？"
            assert app.session.options == FALLBACK_OPTIONS
            assert app.session.last_error is not None

            await app.mark_learned(card.id)
            ended = await app.exit_learning()
            assert ended is not None
            assert ended.selected_options == [option.id]
            assert len(ended.messages) == 9

            snapshot = app._store.snapshot()

        restarted = Zhishi(
            llm_class=ScriptedCompletion,
            store_class=MemoryStore,
            config=config,
            llm_custom_config={},
            store_custom_config={"initial": snapshot},
        )
        async with restarted:
            await restarted.start()

            assert restarted.feed.card_count == 5
            assert restarted.feed.selected_domains == ["science"]
            assert (await restarted.annotations()).learned == [card.id]
            sessions = await SessionStore(restarted._store).completed_sessions()
            assert [s.id for s in sessions] == [ended.id]
