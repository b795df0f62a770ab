"""Learning session controller for zhishi.

This module owns the chat transcript and option list for the card the
user is studying, and the session record persisted alongside them.
"""

from zhishi.logging import get_logger, log_context
from zhishi.models.card import KnowledgeCard
from zhishi.models.message import AgentMessage
from zhishi.models.option import CuriosityOption
from zhishi.models.session import LearningSession
from zhishi.services.agents import get_agent_group
from zhishi.services.dialogue import FALLBACK_OPTIONS, DialogueService
from zhishi.services.local_cache import PreferenceStore, SessionStore
from zhishi.utils.hashing import generate_session_id

__all__ = [
    "INIT_ERROR_MESSAGE",
    "SEND_ERROR_MESSAGE",
    "SessionController",
]

logger = get_logger(__name__)

INIT_ERROR_MESSAGE = "加载学习内容失败，请重试"
SEND_ERROR_MESSAGE = "获取回复失败，请重试"


class SessionController:
    """Owner of one learning session at a time.

    Every async operation captures the live session id before its first
    await and applies its result only if that session is still live, so
    late replies for a card the user has left are dropped.

    Callers must not start a second send while is_sending is True; the
    transcript is appended in completion order.

    Public operations never raise. Failures are logged and reported
    through last_error.

    Example:
        controller = SessionController(dialogue, sessions, preferences)
        await controller.init_session(card)
        await controller.send_user_message(card, "为什么？")
    """

    def __init__(
        self,
        dialogue: DialogueService,
        sessions: SessionStore,
        preferences: PreferenceStore | None = None,
    ) -> None:
        """Initialize controller with dependencies.

        Args:
            dialogue: Agent reply and option requests
            sessions: Session persistence
            preferences: Learning-history persistence (optional)
        """
        self._dialogue = dialogue
        self._sessions = sessions
        self._preferences = preferences

        self._session: LearningSession | None = None
        self._messages: list[AgentMessage] = []
        self._options: list[CuriosityOption] = []
        self._active_agents: list[str] = []
        self._is_loading = False
        self._is_sending = False
        self._last_error: str | None = None

    # State

    @property
    def session(self) -> LearningSession | None:
        return self._session

    @property
    def messages(self) -> tuple[AgentMessage, ...]:
        return tuple(self._messages)

    @property
    def options(self) -> tuple[CuriosityOption, ...]:
        return tuple(self._options)

    @property
    def active_agents(self) -> list[str]:
        return list(self._active_agents)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_sending(self) -> bool:
        return self._is_sending

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def _is_live(self, session_id: str) -> bool:
        return self._session is not None and self._session.id == session_id

    def _is_live_for(self, card: KnowledgeCard) -> bool:
        return self._session is not None and self._session.card_id == card.id

    # Operations

    async def enter(self, card: KnowledgeCard) -> LearningSession:
        """Start a fresh session for card, replacing any live one."""
        self._session = LearningSession(id=generate_session_id(), card_id=card.id)
        self._messages = []
        self._options = []
        self._active_agents = get_agent_group(card.domain)
        self._is_loading = False
        self._is_sending = False
        self._last_error = None

        session = self._session
        await self._sessions.save_session(session)
        if self._preferences is not None:
            await self._preferences.add_learning_history(card.id)

        logger.info(
            "learning_session_started",
            session_id=session.id,
            card_id=card.id,
            agents=self._active_agents,
        )
        return session

    async def init_session(self, card: KnowledgeCard) -> None:
        """Load the opening agent turn and first option set for card.

        On success the transcript is replaced wholesale. On failure it is
        left empty and last_error is set.
        """
        if not self._is_live_for(card):
            await self.enter(card)
        assert self._session is not None
        session_id = self._session.id
        agents = list(self._active_agents)

        self._is_loading = True
        self._last_error = None
        with log_context(session_id=session_id, card_id=card.id):
            try:
                replies = await self._dialogue.get_multi_agent_response(card, agents)
                options = await self._dialogue.generate_curiosity_options(card, card.title)
                if not self._is_live(session_id):
                    logger.info("stale_session_result_discarded", op="init")
                    return

                self._messages = list(replies)
                self._options = list(options)
                await self._persist()
            except Exception as e:
                logger.warning("session_init_failed", error=str(e))
                if self._is_live(session_id):
                    self._messages = []
                    self._options = list(FALLBACK_OPTIONS)
                    self._last_error = INIT_ERROR_MESSAGE
            finally:
                if self._is_live(session_id):
                    self._is_loading = False

    async def send_user_message(self, card: KnowledgeCard, text: str) -> None:
        """Append the user's message, then one agent turn and fresh options.

        The user entry is appended before any remote call and is never
        rolled back.
        """
        text = text.strip()
        if not text:
            return

        if not self._is_live_for(card):
            await self.enter(card)
        assert self._session is not None
        session_id = self._session.id
        agents = list(self._active_agents)

        self._messages.append(AgentMessage.from_user(text, card.id))
        self._is_sending = True
        self._last_error = None
        with log_context(session_id=session_id, card_id=card.id):
            try:
                replies = await self._dialogue.get_multi_agent_response(card, agents)
                if not self._is_live(session_id):
                    logger.info("stale_session_result_discarded", op="send")
                    return
                self._messages.extend(replies)

                options = await self._dialogue.generate_next_options(card, list(self._messages))
                if not self._is_live(session_id):
                    logger.info("stale_session_result_discarded", op="options")
                    return
                self._options = list(options)
                await self._persist()
            except Exception as e:
                logger.warning("session_send_failed", error=str(e))
                if self._is_live(session_id):
                    self._options = list(FALLBACK_OPTIONS)
                    self._last_error = SEND_ERROR_MESSAGE
            finally:
                if self._is_live(session_id):
                    self._is_sending = False

    async def select_option(self, card: KnowledgeCard, option: CuriosityOption) -> None:
        """Record the option choice, then send its text as the user's message."""
        if not self._is_live_for(card):
            await self.enter(card)
        assert self._session is not None
        self._session = self._session.with_selected_option(option.id)
        await self.send_user_message(card, option.text)

    async def exit(self) -> LearningSession | None:
        """End the live session, persist it, and clear the chat state.

        Returns:
            The completed session, or None if none was live
        """
        session = self._session
        self._session = None
        self._messages = []
        self._options = []
        self._active_agents = []
        self._is_loading = False
        self._is_sending = False
        self._last_error = None

        if session is None:
            return None

        ended = session.ended()
        await self._sessions.save_session(ended)
        logger.info(
            "learning_session_ended",
            session_id=ended.id,
            messages=len(ended.messages),
            selected_options=len(ended.selected_options),
        )
        return ended

    def dismiss_error(self) -> None:
        self._last_error = None

    async def _persist(self) -> None:
        assert self._session is not None
        self._session = self._session.with_messages(self._messages)
        await self._sessions.save_session(self._session)
