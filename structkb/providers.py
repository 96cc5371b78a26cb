"""Provider interface shared by the AI back ends.

Each provider answers a single free-text prompt and advertises what else it
can do. The dispatch flow in ``structkb.assistant`` is written once against
this interface; it never branches on which provider is selected.

    provider = build_provider(config, settings)
    answer = provider.answer(prompt)
    image = provider.illustrate(prompt) if provider.supports_image else None
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from structkb.models import ModelType, SourceRef

if TYPE_CHECKING:
    from config.settings import Settings
    from structkb.models import Config

logger = logging.getLogger(__name__)

#: Fixed preamble sent with every request.
SYSTEM_INSTRUCTION = (
    "你是一名资深的中国一级注册结构工程师，熟悉现行建筑结构设计规范，"
    "包括 GB 550xx 系列通用规范及 GB 50010、GB 50017、GB 50011、GB 50007、GB 50009 等专项规范。"
    "请用简体中文回答，并严格使用 Markdown 排版：以二级标题组织“概念解析”“力学原理”"
    "“规范要求”“工程应用要点”等部分，必要时使用表格对比参数。"
    "引用规范条文时注明规范名称、编号与条文号；强制性条文必须以引用块（>）单独列出。"
    "只讨论结构工程相关内容，不确定的条文号请明确说明，不得编造。"
)


@dataclass
class ProviderAnswer:
    """Normalised output of ``Provider.answer()``."""

    text: str
    sources: list[SourceRef] = field(default_factory=list)


class Provider(ABC):
    """A remote model that can answer structural-engineering questions."""

    #: Whether ``illustrate()`` can produce an image.
    supports_image: bool = False
    #: Whether ``answer()`` is web-search grounded and may return sources.
    supports_search: bool = False

    @abstractmethod
    def answer(self, prompt: str) -> ProviderAnswer:
        """Answer *prompt*.

        Raises:
            structkb.errors.AssistantError: On any failure; an answer with
                no usable text raises ``EmptyResponseError``.
        """

    def illustrate(self, prompt: str) -> Optional[str]:
        """Return a ``data:`` image URI for *prompt*, or ``None``.

        Never raises: a failed illustration is the same as no illustration.
        """
        return None


def build_provider(config: Config, settings: Settings) -> Provider:
    """Select the provider implementation for *config*."""
    if config.model_type == ModelType.DEEPSEEK:
        from structkb.deepseek import DeepSeekProvider
        return DeepSeekProvider(settings, api_key=config.deepseek_api_key)

    from structkb.gemini import GeminiProvider
    return GeminiProvider(settings)
