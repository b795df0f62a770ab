"""Response coercion for zhishi.

Model output is untrusted free text. This module turns it into validated
records in two stages:

1. A pipeline of pure text steps ending in a JSON parse
   (safe_parse_json). Each step returns None to signal "no result".
2. Record coercion, which maps the parsed value onto cards, transcript
   entries or options, applying field aliases and defaults and dropping
   records that fail validation.

Nothing here raises; callers get a value or None.
"""

import json
import re
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from zhishi.logging import get_logger
from zhishi.models.card import Difficulty, KnowledgeCard
from zhishi.models.message import UNKNOWN_AGENT_ID, AgentMessage
from zhishi.models.option import CuriosityOption
from zhishi.services.agents import agent_name
from zhishi.utils.hashing import generate_card_id, generate_option_id, now_ms

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_CURIOSITY",
    "coerce_agent_messages",
    "coerce_cards",
    "coerce_options",
    "parse_json",
    "remove_trailing_commas",
    "safe_parse_json",
    "slice_json_object",
    "strip_bom_and_cr",
    "strip_code_fence",
    "trim",
]

logger = get_logger(__name__)

DEFAULT_CATEGORY = "综合"
DEFAULT_CURIOSITY = "深度探索"

_FENCE_OPEN = re.compile(r"^```[\w-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")

_DIFFICULTIES = {d.value for d in Difficulty}


# Text pipeline


def trim(text: str | None) -> str | None:
    """Strip surrounding whitespace; None for missing input."""
    if text is None:
        return None
    return text.strip()


def strip_code_fence(text: str | None) -> str | None:
    """Remove a leading ``` fence (with or without a language tag) and a trailing fence."""
    if text is None:
        return None
    if not text.startswith("```"):
        return text
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text, count=1), count=1)


def slice_json_object(text: str | None) -> str | None:
    """Keep the span from the first "{" to the last "}".

    Returns:
        The sliced span, or None if the text holds no such span
    """
    if text is None:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def strip_bom_and_cr(text: str | None) -> str | None:
    """Drop a leading byte-order mark and every carriage return."""
    if text is None:
        return None
    return text.removeprefix("\ufeff").replace("\r", "")


def remove_trailing_commas(text: str | None) -> str | None:
    """Remove commas that directly precede a closing brace or bracket."""
    if text is None:
        return None
    return _TRAILING_COMMA.sub(r"\1", text)


def parse_json(text: str | None) -> Any | None:
    """Parse JSON, returning None on any decode error.

    Deeply nested arrays raise RecursionError and integers past the
    interpreter's digit limit raise a plain ValueError; both count as
    undecodable.
    """
    if text is None:
        return None
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


_PIPELINE: tuple[Callable[[str | None], str | None], ...] = (
    trim,
    strip_code_fence,
    slice_json_object,
    strip_bom_and_cr,
    remove_trailing_commas,
)


def safe_parse_json(raw: str | None) -> Any | None:
    """Run raw model output through the text pipeline and parse it.

    Args:
        raw: Completion text as returned by the provider

    Returns:
        Parsed JSON value, or None if any step yields no result
    """
    text = raw
    for step in _PIPELINE:
        text = step(text)
        if text is None:
            return None
    return parse_json(text)


# Record coercion


def _records(parsed: Any, key: str) -> list[Any] | None:
    """Accept either a top-level list or {key: [...]}."""
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get(key), list):
        return parsed[key]
    return None


def _text(value: Any) -> str:
    """Stringify scalar field values; anything else counts as empty."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return ""


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in (_text(v) for v in value) if item]


def _log_dropped(kind: str, total: int, accepted: int) -> None:
    if accepted < total:
        logger.debug("records_dropped", kind=kind, dropped=total - accepted, accepted=accepted)


def coerce_cards(parsed: Any, domains: list[str]) -> list[KnowledgeCard] | None:
    """Coerce a parsed completion into knowledge cards.

    Accepts a top-level list or {"cards": [...]}. Aliases "heading" for
    title and "text" for content; "domain" and "category" stand in for
    each other. Records without a non-empty title and content are dropped.

    Args:
        parsed: Output of safe_parse_json
        domains: Requested domains; the first is the category fallback

    Returns:
        Accepted cards in input order, or None if none were accepted
    """
    records = _records(parsed, "cards")
    if records is None:
        return None

    fallback = domains[0] if domains else DEFAULT_CATEGORY
    batch_ms = now_ms()
    cards: list[KnowledgeCard] = []

    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            continue

        title = _text(record.get("title")) or _text(record.get("heading"))
        content = _text(record.get("content")) or _text(record.get("text"))
        if not title or not content:
            continue

        difficulty = _text(record.get("difficulty"))
        category = _text(record.get("category"))
        domain = _text(record.get("domain"))
        try:
            card = KnowledgeCard(
                id=_text(record.get("id")) or generate_card_id(title, batch_ms, idx),
                title=title,
                content=content,
                difficulty=difficulty if difficulty in _DIFFICULTIES else Difficulty.MEDIUM,
                category=category or domain or fallback,
                domain=domain or category or fallback,
                sub_category=_text(record.get("subCategory") or record.get("sub_category")),
                related_domains=_string_list(
                    record.get("relatedDomains", record.get("related_domains"))
                ),
                tags=_string_list(record.get("tags")),
            )
        except ValidationError:
            continue
        cards.append(card)

    _log_dropped("cards", len(records), len(cards))
    return cards or None


def coerce_agent_messages(
    parsed: Any,
    card: KnowledgeCard,
    agent_ids: list[str],
) -> list[AgentMessage] | None:
    """Coerce a parsed multi-agent batch into transcript entries.

    Attribution is positional: element i of the response array belongs to
    agent_ids[i]. Elements past the end of agent_ids keep the sentinel
    UNKNOWN_AGENT_ID. Positions are counted before invalid elements are
    dropped, so one bad element never shifts the others.

    Args:
        parsed: Output of safe_parse_json
        card: Card the conversation is about
        agent_ids: Active agents, in prompt order

    Returns:
        Accepted entries in response order, or None if none were accepted
    """
    records = _records(parsed, "responses")
    if records is None:
        return None

    messages: list[AgentMessage] = []
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            continue
        text = _text(record.get("message")) or _text(record.get("content"))
        if not text:
            continue

        agent_id = agent_ids[idx] if idx < len(agent_ids) else UNKNOWN_AGENT_ID
        name = _text(record.get("agent")) or _text(record.get("name")) or agent_name(agent_id)
        messages.append(
            AgentMessage(
                agent_id=agent_id,
                agent_name=name,
                message=text,
                related_card_id=card.id,
            )
        )

    _log_dropped("agent_messages", len(records), len(messages))
    return messages or None


def coerce_options(parsed: Any) -> list[CuriosityOption] | None:
    """Coerce a parsed completion into curiosity options.

    Args:
        parsed: Output of safe_parse_json ({"options": [...]} or a list)

    Returns:
        Accepted options in input order, or None if none were accepted
    """
    records = _records(parsed, "options")
    if records is None:
        return None

    options: list[CuriosityOption] = []
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            continue
        text = _text(record.get("text"))
        if not text:
            continue
        options.append(
            CuriosityOption(
                id=_text(record.get("id")) or generate_option_id(text, idx),
                text=text,
                curiosity=_text(record.get("curiosity")) or DEFAULT_CURIOSITY,
                next_topic=_text(record.get("nextTopic") or record.get("next_topic")) or text,
            )
        )

    _log_dropped("options", len(records), len(options))
    return options or None
