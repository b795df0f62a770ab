"""Unit tests for zhishi models."""

import pytest
from pydantic import ValidationError

from zhishi.models.card import Difficulty, KnowledgeCard
from zhishi.models.message import USER_AGENT_ID, USER_AGENT_NAME, AgentMessage
from zhishi.models.option import CuriosityOption
from zhishi.models.session import LearningSession
from zhishi.models.user import CardAnnotations, UserState


class TestKnowledgeCard:
    """Tests for KnowledgeCard model."""

    def test_defaults(self) -> None:
        card = KnowledgeCard(id="c1", title="标题", content="内容", category="科学", domain="science")
        assert card.difficulty == Difficulty.MEDIUM
        assert card.sub_category == ""
        assert card.related_domains == []
        assert card.tags == []
        assert card.ai_generated is True
        assert card.created_at.tzinfo is not None

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            KnowledgeCard(id="c1", title="", content="内容", category="科学", domain="science")

    def test_empty_content_rejected(self) -> None:
        with pytest.raises(ValidationError):
            KnowledgeCard(id="c1", title="标题", content="", category="科学", domain="science")

    def test_invalid_difficulty(self) -> None:
        with pytest.raises(ValidationError):
            KnowledgeCard(
                id="c1",
                title="标题",
                content="内容",
                category="科学",
                domain="science",
                difficulty="extreme",  # type: ignore[arg-type]
            )

    def test_frozen_model(self, sample_card: KnowledgeCard) -> None:
        with pytest.raises(ValidationError):
            sample_card.title = "changed"  # type: ignore[misc]

    def test_camel_case_round_trip(self, sample_card: KnowledgeCard) -> None:
        dumped = sample_card.model_dump(by_alias=True, mode="json")
        assert "relatedDomains" in dumped
        assert "aiGenerated" in dumped
        assert "createdAt" in dumped
        assert KnowledgeCard.model_validate(dumped) == sample_card

    def test_history_line_truncates_content(self) -> None:
        card = KnowledgeCard(
            id="c1", title="量子", content="字" * 80, category="科学", domain="science"
        )
        assert card.history_line() == f"- 量子: {'字' * 50}..."


class TestAgentMessage:
    """Tests for AgentMessage model."""

    def test_from_user(self) -> None:
        msg = AgentMessage.from_user("为什么？", "card-1")
        assert msg.agent_id == USER_AGENT_ID
        assert msg.agent_name == USER_AGENT_NAME
        assert msg.is_user is True
        assert msg.related_card_id == "card-1"

    def test_speaker_line(self) -> None:
        msg = AgentMessage(
            agent_id="knowledge_teacher",
            agent_name="知识讲解师",
            message="你好",
            related_card_id="card-1",
        )
        assert msg.speaker_line == "知识讲解师: 你好"
        assert msg.is_user is False


class TestCuriosityOption:
    """Tests for CuriosityOption model."""

    def test_empty_text_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CuriosityOption(id="o1", text="")

    def test_alias_population(self) -> None:
        option = CuriosityOption.model_validate({"id": "o1", "text": "问题", "nextTopic": "话题"})
        assert option.next_topic == "话题"


class TestLearningSession:
    """Tests for LearningSession model."""

    def test_copy_helpers_do_not_mutate(self) -> None:
        session = LearningSession(id="s1", card_id="card-1")
        msg = AgentMessage.from_user("hi", "card-1")

        with_msgs = session.with_messages([msg])
        with_opt = with_msgs.with_selected_option("o1")
        ended = with_opt.ended()

        assert session.messages == []
        assert with_msgs.messages == [msg]
        assert with_opt.selected_options == ["o1"]
        assert with_msgs.selected_options == []
        assert ended.completed is True
        assert ended.end_time is not None
        assert with_opt.completed is False


class TestUserModels:
    """Tests for user state models."""

    def test_user_state_rejects_negative_index(self) -> None:
        with pytest.raises(ValidationError):
            UserState(current_card_index=-1)

    def test_annotation_toggle(self) -> None:
        annotations = CardAnnotations()
        liked = annotations.toggled("liked", "c1")
        assert liked.liked == ["c1"]
        assert liked.toggled("liked", "c1").liked == []
        assert annotations.liked == []

    def test_learned_is_idempotent(self) -> None:
        annotations = CardAnnotations().with_learned("c1")
        assert annotations.with_learned("c1").learned == ["c1"]
