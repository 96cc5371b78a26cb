"""Static topic catalog shown in the sidebar.

The catalog is read-only for the lifetime of the process. Selecting a topic
does not query anything by itself: ``topic_question()`` turns the topic into
the natural-language question that is then dispatched exactly like a typed
search.
"""

from __future__ import annotations

from typing import Optional

from structkb.models import Category

#: Category expanded when the page first loads.
DEFAULT_EXPANDED = "mandatory"

_TOPIC_QUESTION = "请详细讲解关于“{topic}”的结构概念及其在中国规范中的相关强条要求。"

CATEGORIES: tuple[Category, ...] = (
    Category(
        id="mandatory",
        title="通用规范强条",
        icon="fa-shield-halved",
        items=(
            "工程结构通用规范 GB 55001",
            "建筑与市政工程抗震通用规范 GB 55002",
            "建筑与市政地基基础通用规范 GB 55003",
            "钢结构通用规范 GB 55006",
            "砌体结构通用规范 GB 55007",
            "混凝土结构通用规范 GB 55008",
        ),
    ),
    Category(
        id="loads",
        title="荷载与作用",
        icon="fa-weight-hanging",
        items=(
            "荷载基本组合与标准组合",
            "楼面活荷载取值",
            "基本风压与风振系数",
            "基本雪压与积雪分布",
            "温度作用",
            "偶然作用与结构整体稳固性",
        ),
    ),
    Category(
        id="concrete",
        title="混凝土结构",
        icon="fa-cubes",
        items=(
            "钢筋混凝土梁",
            "正截面受弯承载力",
            "斜截面受剪承载力",
            "裂缝宽度控制",
            "混凝土保护层厚度",
            "预应力混凝土",
            "钢筋锚固与搭接",
        ),
    ),
    Category(
        id="steel",
        title="钢结构",
        icon="fa-industry",
        items=(
            "受弯构件整体稳定",
            "板件局部稳定与宽厚比",
            "轴心受压构件稳定系数",
            "高强度螺栓连接",
            "焊缝连接与质量等级",
            "钢结构防火与防腐",
        ),
    ),
    Category(
        id="seismic",
        title="抗震设计",
        icon="fa-house-crack",
        items=(
            "抗震设防类别与抗震等级",
            "强柱弱梁",
            "强剪弱弯",
            "柱轴压比限值",
            "结构规则性与薄弱层",
            "隔震与消能减震",
        ),
    ),
    Category(
        id="foundation",
        title="地基基础",
        icon="fa-layer-group",
        items=(
            "地基承载力特征值",
            "地基变形与沉降控制",
            "桩基竖向承载力",
            "筏形基础",
            "基坑支护",
            "抗浮设计",
        ),
    ),
)


def get_categories() -> tuple[Category, ...]:
    """Return the catalog in display order."""
    return CATEGORIES


def find_category(category_id: str) -> Optional[Category]:
    """Look up a category by id, or ``None`` if unknown."""
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None


def all_topics() -> list[str]:
    """Every topic across all categories, in display order."""
    return [item for category in CATEGORIES for item in category.items]


def topic_question(topic: str) -> str:
    """Build the question dispatched when *topic* is picked from the sidebar.

    Examples:
        >>> topic_question("强柱弱梁")
        '请详细讲解关于“强柱弱梁”的结构概念及其在中国规范中的相关强条要求。'
    """
    return _TOPIC_QUESTION.format(topic=topic)
