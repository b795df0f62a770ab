"""Static knowledge-domain taxonomy for zhishi.

Loaded once at startup; a snapshot is written to the local cache.
"""

from zhishi.models.domain import DomainType, KnowledgeDomain

__all__ = [
    "KNOWLEDGE_DOMAINS",
    "domain_by_id",
    "domain_label",
]


def _domain(
    id: str,
    name: str,
    icon: str,
    color: str,
    sub_categories: list[str],
    type: DomainType,
    description: str,
    attraction_tags: list[str],
) -> KnowledgeDomain:
    return KnowledgeDomain(
        id=id,
        name=name,
        icon=icon,
        color=color,
        sub_categories=sub_categories,
        type=type,
        description=description,
        attraction_tags=attraction_tags,
    )


KNOWLEDGE_DOMAINS: tuple[KnowledgeDomain, ...] = (
    # Classic
    _domain("science", "科学", "🔬", "#4CAF50", ["物理", "化学", "生物", "数学", "天文", "地理"],
            DomainType.CLASSIC, "探索自然界的奥秘", ["实验", "发现", "理论"]),
    _domain("history", "历史", "📚", "#795548", ["古代史", "近代史", "现代史", "世界史", "中国史"],
            DomainType.CLASSIC, "了解人类文明的发展", ["故事", "人物", "事件"]),
    _domain("literature", "文学", "📖", "#E91E63", ["古典文学", "现代文学", "外国文学", "诗歌", "小说"],
            DomainType.CLASSIC, "感受文字的魅力", ["经典", "名著", "诗歌"]),
    _domain("technology", "技术", "💻", "#2196F3", ["人工智能", "区块链", "量子计算", "生物技术", "新能源"],
            DomainType.CLASSIC, "体验科技的力量", ["创新", "突破", "未来"]),
    _domain("art", "艺术", "🎨", "#FF9800", ["绘画", "音乐", "雕塑", "建筑", "设计"],
            DomainType.CLASSIC, "欣赏美的创造", ["美学", "创作", "灵感"]),
    _domain("philosophy", "哲学", "🤔", "#9C27B0", ["伦理学", "认识论", "存在论", "逻辑学", "美学"],
            DomainType.CLASSIC, "思考人生的意义", ["思辨", "智慧", "真理"]),
    # Counterintuitive
    _domain("counterintuitive_science", "反常识科学", "⚡", "#FF5722",
            ["量子力学", "相对论", "混沌理论", "复杂系统"],
            DomainType.COUNTERINTUITIVE, "颠覆常识的科学发现", ["反直觉", "震撼", "颠覆"]),
    _domain("counterintuitive_history", "反常识历史", "🔄", "#607D8B",
            ["历史误解", "隐藏真相", "另类解读"],
            DomainType.COUNTERINTUITIVE, "重新审视历史", ["真相", "误解", "重新解读"]),
    _domain("counterintuitive_psychology", "反常识心理", "🧠", "#E91E63",
            ["认知偏差", "行为经济学", "社会心理学"],
            DomainType.COUNTERINTUITIVE, "揭示心理的奥秘", ["认知", "偏差", "行为"]),
    _domain("counterintuitive_economics", "反常识经济", "💰", "#4CAF50",
            ["行为经济学", "博弈论", "市场异常"],
            DomainType.COUNTERINTUITIVE, "经济学的另类视角", ["行为", "博弈", "异常"]),
    _domain("counterintuitive_life", "反常识生活", "🏠", "#FF9800",
            ["生活技巧", "健康误区", "效率提升"],
            DomainType.COUNTERINTUITIVE, "生活的另类智慧", ["技巧", "误区", "效率"]),
    # Fun facts
    _domain("universe_mysteries", "宇宙奥秘", "🌌", "#673AB7",
            ["黑洞", "暗物质", "平行宇宙", "时间旅行"],
            DomainType.FUN, "探索宇宙的终极秘密", ["神秘", "未知", "探索"]),
    _domain("nature_wonders", "生物奇观", "🦋", "#4CAF50",
            ["极端生物", "进化奇迹", "生物超能力"],
            DomainType.FUN, "发现生命的奇迹", ["奇迹", "进化", "超能力"]),
    _domain("unsolved_mysteries", "未解之谜", "🔍", "#FF5722",
            ["古代文明", "神秘现象", "超自然事件"],
            DomainType.FUN, "探索未解之谜", ["神秘", "未解", "探索"]),
    _domain("cutting_edge_tech", "黑科技", "🚀", "#2196F3",
            ["量子技术", "脑机接口", "基因编辑", "纳米技术"],
            DomainType.FUN, "体验未来科技", ["未来", "突破", "科技"]),
)

_BY_ID = {domain.id: domain for domain in KNOWLEDGE_DOMAINS}


def domain_by_id(domain_id: str) -> KnowledgeDomain | None:
    """Look up a taxonomy entry by id."""
    return _BY_ID.get(domain_id)


def domain_label(domain_id: str) -> str:
    """Display name for a taxonomy id; unknown ids pass through unchanged."""
    domain = _BY_ID.get(domain_id)
    return domain.name if domain else domain_id
