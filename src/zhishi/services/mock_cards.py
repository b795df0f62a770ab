"""Hand-authored cards used when generation fails.

This is the last rung of the generation fallback ladder. The content is
fixed; only ids and the domain label depend on the request.
"""

from zhishi.models.card import Difficulty, KnowledgeCard
from zhishi.utils.hashing import now_ms

__all__ = [
    "MOCK_CARD_COUNT",
    "mock_cards",
]

_MOCK_DOMAIN = "科学"

_TEMPLATES: tuple[dict, ...] = (
    {
        "title": "震惊！90%的人不知道：量子纠缠速度比光速快10000倍？",
        "content": (
            "你以为光速是宇宙极限？量子纠缠瞬间传递信息，距离再远也是0秒！"
            "在2017年的墨子号卫星实验中，科学家在相距1200公里的两个粒子间实现了量子纠缠，"
            "改变其中一个粒子的状态，另一个瞬间改变，传递速度超过光速10000倍！"
            "爱因斯坦把这叫做\"鬼魅般的超距作用\"，直到临死都不相信。"
            "更震撼的是，这个现象已经被用于量子通信，中国已经建成了4600公里的量子通信网络。"
            "这个发现不仅颠覆了我们对物理学的理解，更可能改变未来的通信技术。"
            "更令人震惊的是，量子纠缠可能还隐藏着宇宙更深层的秘密..."
        ),
        "category": "Quantum Physics",
        "difficulty": Difficulty.HARD,
        "related_domains": ["物理学", "相对论"],
        "tags": ["量子", "纠缠", "光速"],
        "sub_category": "physics",
    },
    {
        "title": "为什么爱因斯坦说\"上帝不掷骰子\"？真相颠覆认知",
        "content": (
            "你以为爱因斯坦反对量子力学？真相恰恰相反！"
            "他说的\"上帝不掷骰子\"不是否定量子现象，而是认为背后有更深层的规律。"
            "在1935年的EPR悖论论文中，爱因斯坦与波多尔斯基、罗森一起质疑量子力学的完备性，"
            "认为量子纠缠违反了局域实在论。"
            "但当1982年的阿斯派克特实验证明量子纠缠确实存在时，爱因斯坦的疑问有了答案。"
            "这个实验显示，两个纠缠粒子无论相距多远，测量一个会瞬间影响另一个。"
            "更令人震惊的是，量子纠缠可能还隐藏着宇宙更深层的秘密..."
        ),
        "category": "Physics",
        "difficulty": Difficulty.HARD,
        "related_domains": ["量子力学", "哲学"],
        "tags": ["爱因斯坦", "量子", "现实"],
        "sub_category": "physics",
    },
    {
        "title": "3个心理学实验，揭示人性的黑暗面",
        "content": (
            "你以为自己很善良？这些心理学实验会让你重新认识自己！"
            "1971年的斯坦福监狱实验证明：普通人只需6天就能变成施虐者！"
            "实验中，学生被随机分为\"狱警\"和\"囚犯\"，结果\"狱警\"开始虐待\"囚犯\"，"
            "甚至半夜叫醒他们做俯卧撑。"
            "1961年的米尔格拉姆电击实验更震撼：65%的人会因为\"权威命令\"而电击他人致死！"
            "1951年的阿希从众实验则揭示：75%的人会为了合群而违背自己的判断。"
            "这三个实验共同揭示了一个可怕的真相：环境和他人的压力能轻易改变我们的行为。"
            "更令人震惊的是，这些实验揭示的人性黑暗面可能比我们想象的更加普遍..."
        ),
        "category": "Counterintuitive Psychology",
        "difficulty": Difficulty.MEDIUM,
        "related_domains": ["社会心理学", "行为学"],
        "tags": ["实验", "人性", "心理学"],
        "sub_category": "psychology",
    },
    {
        "title": "不可思议！这个\"错误\"竟然拯救了数亿人生命",
        "content": (
            "你以为错误总是坏事？青霉素的发现源于一个\"意外\"！"
            "1928年9月，英国细菌学家亚历山大·弗莱明在伦敦圣玛丽医院实验室工作，"
            "他忘记清理培养皿就度假去了。"
            "两周后回来时，发现一个培养皿被青霉菌污染，周围的葡萄球菌全部死亡！"
            "这个看似微不足道的\"错误\"却拯救了数亿人的生命。"
            "青霉素在二战期间被称为\"神药\"，挽救了无数士兵的生命。"
            "更令人震撼的是，历史上许多重大发现都源于意外：X射线、微波炉、特氟龙涂层..."
            "为什么\"错误\"往往比\"正确\"更有价值？"
        ),
        "category": "Science History",
        "difficulty": Difficulty.EASY,
        "related_domains": ["医学", "历史"],
        "tags": ["发现", "错误", "医学"],
        "sub_category": "history",
    },
    {
        "title": "为什么企鹅不会飞？真相颠覆你的认知！",
        "content": (
            "你以为企鹅不会飞是因为翅膀太小？真相恰恰相反！"
            "企鹅的翅膀已经进化成了高效的\"桨\"，让它们在水中的游泳速度达到每小时36公里，"
            "比大多数鱼类还要快。帝企鹅甚至能潜水到565米深，憋气22分钟！"
            "这种进化让它们成为了海洋中的游泳高手，但代价就是永远失去了飞行的能力。"
            "企鹅的骨骼密度比一般鸟类更高，这让它们能够承受深海的巨大压力。"
            "科学家发现，企鹅的祖先在6000万年前是会飞的，"
            "但为了适应极端环境，它们选择了游泳而不是飞行。更令人震惊的是..."
        ),
        "category": "Animal Behavior",
        "difficulty": Difficulty.EASY,
        "related_domains": ["生物学", "进化论"],
        "tags": ["动物", "进化", "游泳"],
        "sub_category": "biology",
    },
)

MOCK_CARD_COUNT = len(_TEMPLATES)


def mock_cards(domains: list[str], count: int) -> list[KnowledgeCard]:
    """Build up to count hand-authored cards.

    Args:
        domains: Requested domains; the first becomes every card's domain
        count: Maximum number of cards to return

    Returns:
        Between 0 and MOCK_CARD_COUNT cards, in fixed order
    """
    batch_ms = now_ms()
    domain = domains[0] if domains else _MOCK_DOMAIN
    return [
        KnowledgeCard(id=f"mock_{batch_ms}_{n}", domain=domain, **template)
        for n, template in enumerate(_TEMPLATES[: max(count, 0)], start=1)
    ]
