"""Prompt templates for zhishi.

All prompts ask for a JSON object; the coercion layer tolerates the
markdown fences and prose the model adds anyway.
"""

from zhishi.models.card import KnowledgeCard
from zhishi.models.message import AgentMessage
from zhishi.services.agents import agent_name, get_agent

__all__ = [
    "STRICT_CARDS_PROMPT",
    "build_cards_prompt",
    "build_curiosity_options_prompt",
    "build_multi_agent_prompt",
    "build_next_options_prompt",
    "split_related_count",
]

HISTORY_WINDOW = 3

CARDS_PROMPT = """基于以下信息生成{count}个极具吸引力的知识卡片：

用户关注领域：{domains}

已有卡片历史：
{history}

请生成{count}个新的知识卡片，其中{related_count}个延续已有卡片的主题深入展开{random_hint}。

【标题要求】：
必须包含数字、疑问、认知冲突或震撼词之一，例如：
- 震惊！90%的人不知道：量子纠缠竟然能...
- 为什么爱因斯坦说"上帝不掷骰子"？真相颠覆认知
- 3个量子实验，彻底改变你对现实的理解

【内容结构】（200-300字）：
1. 震撼开头：用"你以为...？"或"你知道吗？"引出反常识事实
2. 核心知识：具体的实验/事件/理论名称、具体数字、因果解释和案例
3. 深入解释：补充细节和数据
4. 悬念结尾："更令人震惊的是..."

【质量标准】：
1. 看完后用户能说出至少1个具体知识点
2. 内容至少包含2个具体数字、名称或案例
3. 每句话都有实质信息

返回JSON格式：
{{
  "cards": [
    {{
      "id": "unique_id",
      "title": "极具吸引力的悬念式标题",
      "content": "震撼开头+核心内容+悬念结尾",
      "category": "知识分类",
      "difficulty": "easy|medium|hard",
      "domain": "所属领域",
      "relatedDomains": ["相关领域1", "相关领域2"],
      "tags": ["标签1", "标签2"]
    }}
  ]
}}"""

RANDOM_HINT = "，其余{random_count}个为全新的吸引人主题（反常识、冷知识、震撼事实）"

STRICT_CARDS_PROMPT = (
    '仅输出JSON，不要任何额外文字。结构：{"cards":[{"id":"string","title":"string",'
    '"content":"string","category":"string","difficulty":"easy|medium|hard",'
    '"domain":"string","relatedDomains":[],"tags":[]}]}'
)

MULTI_AGENT_PROMPT = """请模拟{agent_names}这{agent_count}个AI助手的协作对话。

{agent_roles}

当前知识卡片：{card}

要求：
1. 每个助手都要参与讨论，按上面的顺序依次发言，展示不同观点
2. 用震撼的事实和案例吸引用户
3. 创造认知冲突和思维碰撞
4. 不要反问用户，专注于内容输出
5. 总字数控制在400字以内
6. 特别关注反常识、冷知识、颠覆认知的内容

请以JSON格式返回，不要包含任何markdown标记：
{{
  "responses": [
    {{"agent": "助手名称", "message": "回复内容"}},
    {{"agent": "助手名称", "message": "回复内容"}}
  ]
}}"""

CURIOSITY_OPTIONS_PROMPT = """基于当前知识卡片内容，生成3-4个让用户难以拒绝的好奇心驱动选择选项。

当前知识卡片：{card}
当前话题：{topic}

要求：
1. 每个选项都要包含悬念和好奇心元素
2. 选项要引导用户深入探索相关知识
3. 选项要简短有力，不超过15个字
4. 避免反问句，使用陈述句或感叹句
5. 特别关注反常识、冷知识、颠覆认知的内容

请以JSON格式返回，不要包含任何markdown标记：
{{
  "options": [
    {{"id": "option1", "text": "选项文本", "curiosity": "好奇心描述", "nextTopic": "下一个话题"}}
  ]
}}"""

NEXT_OPTIONS_PROMPT = """基于以下知识卡片和对话历史，生成3-4个极具吸引力的下一步探索问题：

知识卡片：
标题：{title}
内容：{content}
领域：{domain}

对话历史：
{history}

要求：
1. 基于对话内容深入探索，不要重复已经讨论过的问题
2. 使用悬念式开头："为什么"、"如何"、"揭秘"
3. 问题要具体、有趣，结尾留悬念
4. 每个问题都要有对应的好奇心标签

返回JSON格式：
{{
  "options": [
    {{"id": "unique_id", "text": "极具吸引力的悬念式问题", "curiosity": "好奇心标签", "nextTopic": "下一个话题"}}
  ]
}}"""


def split_related_count(count: int, related_ratio: float = 0.7) -> tuple[int, int]:
    """Split a batch into (related, novel) counts.

    The related share is floor(count * ratio); the rest are novel topics.
    """
    related = int(count * related_ratio)
    return related, count - related


def _card_context(card: KnowledgeCard) -> str:
    return card.model_dump_json(
        by_alias=True,
        include={"id", "title", "content", "category", "domain", "difficulty", "tags"},
    )


def build_cards_prompt(
    domains: list[str],
    existing_cards: list[KnowledgeCard],
    count: int,
    related_ratio: float = 0.7,
) -> str:
    """Build the card generation prompt.

    Args:
        domains: Domain labels the user follows
        existing_cards: Feed so far; only the last three are quoted
        count: Number of cards to request
        related_ratio: Share of cards that continue recent topics

    Returns:
        Prompt text
    """
    related_count, random_count = split_related_count(count, related_ratio)
    history = "\n".join(card.history_line() for card in existing_cards[-HISTORY_WINDOW:])
    random_hint = RANDOM_HINT.format(random_count=random_count) if random_count > 0 else ""
    return CARDS_PROMPT.format(
        count=count,
        domains="、".join(domains),
        history=history,
        related_count=related_count,
        random_hint=random_hint,
    )


def build_multi_agent_prompt(card: KnowledgeCard, agent_ids: list[str]) -> str:
    """Build the prompt for one batched multi-agent turn."""
    names = [agent_name(agent_id) for agent_id in agent_ids]
    roles = []
    for agent_id, name in zip(agent_ids, names, strict=True):
        agent = get_agent(agent_id)
        if agent is not None:
            roles.append(f"- {name}：{agent.role}")
    return MULTI_AGENT_PROMPT.format(
        agent_names="、".join(names),
        agent_count=len(agent_ids),
        agent_roles="\n".join(roles),
        card=_card_context(card),
    )


def build_curiosity_options_prompt(card: KnowledgeCard, topic: str) -> str:
    """Build the prompt for the first option set of a session."""
    return CURIOSITY_OPTIONS_PROMPT.format(card=_card_context(card), topic=topic)


def build_next_options_prompt(card: KnowledgeCard, messages: list[AgentMessage]) -> str:
    """Build the prompt for options conditioned on the transcript so far."""
    return NEXT_OPTIONS_PROMPT.format(
        title=card.title,
        content=card.content,
        domain=card.domain,
        history="\n".join(message.speaker_line for message in messages),
    )
