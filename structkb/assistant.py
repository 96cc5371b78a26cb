"""Query dispatch flow.

State machine
─────────────
    IDLE / SUCCESS / FAILED ──submit──▶ LOADING ──▶ SUCCESS | FAILED

Starting a query clears the previous result, error and highlighted topic.
Overlapping submissions are resolved cancel-and-replace style: each
submission takes a generation number, and only the newest one is allowed to
write the shared state. An older call still finishes and returns (or raises)
to its own caller, but its outcome is dropped.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from structkb.catalog import topic_question
from structkb.errors import AssistantError, EmptyResponseError, ProviderError
from structkb.models import Config, QueryResult
from structkb.providers import Provider, build_provider

if TYPE_CHECKING:
    from config.settings import Settings
    from structkb.config_store import ConfigHolder

logger = logging.getLogger(__name__)

#: Shown in place of an answer when the provider returns no text.
FALLBACK_TEXT = "未能生成内容，请稍后再试。"


class QueryState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryOutcome:
    """One finished query, as seen by the caller that submitted it."""

    result: QueryResult
    generation: int
    #: True when a newer query was submitted before this one finished.
    stale: bool = False


class Assistant:
    """Owns the current config, the current result and the loading flag.

    The presentation layer reads ``config``, ``result`` and ``loading`` and
    drives the flow through ``submit_query()``, ``select_topic()`` and
    ``update_config()``.
    """

    def __init__(
        self,
        settings: Settings,
        config_holder: ConfigHolder,
        provider_factory: Callable[[Config, Settings], Provider] = build_provider,
    ) -> None:
        self.settings = settings
        self._config_holder = config_holder
        self._provider_factory = provider_factory
        self._lock = threading.Lock()
        self._generation = 0

        self.state = QueryState.IDLE
        self.result: Optional[QueryResult] = None
        self.error: Optional[AssistantError] = None
        self.active_topic = ""

    # ── Config ─────────────────────────────────────────────────────────────

    @property
    def config(self) -> Config:
        return self._config_holder.get()

    def update_config(self, config: Config) -> None:
        """Replace the current config; the holder persists it."""
        self._config_holder.set(config)
        logger.info("Config updated: model_type=%s", config.model_type.value)

    # ── Queries ────────────────────────────────────────────────────────────

    @property
    def loading(self) -> bool:
        return self.state == QueryState.LOADING

    def select_topic(self, topic: str) -> Optional[QueryResult]:
        """Ask the catalog question for *topic* and highlight it.

        The move into LOADING clears any previous highlight; *topic* is then
        kept highlighted while its answer loads and after it arrives. This
        intentionally differs from a typed query, which leaves no highlight.
        """
        outcome = self.dispatch(topic_question(topic), topic=topic)
        return outcome.result if outcome else None

    def submit_query(self, text: str) -> Optional[QueryResult]:
        """Run one typed query through the selected provider.

        Blank input is ignored and returns ``None`` without changing state.

        Raises:
            AssistantError: If the answer call fails. The state is set to
                ``FAILED`` and no result is kept.
        """
        outcome = self.dispatch(text)
        return outcome.result if outcome else None

    def dispatch(self, text: str, topic: str = "") -> Optional[QueryOutcome]:
        """Run one query and report whether it is still the newest one.

        Any failure, including an unexpected exception from a provider, moves
        the state to ``FAILED`` and surfaces as an ``AssistantError``.
        """
        if not text.strip():
            return None

        config = self.config
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.state = QueryState.LOADING
            self.result = None
            self.error = None
            self.active_topic = topic

        try:
            result = self._run(text, config)
        except AssistantError as exc:
            logger.warning("Query failed kind=%s: %s", exc.kind.value, exc.message)
            self._commit(generation, QueryState.FAILED, error=exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected provider failure for query=%r", text)
            error = ProviderError()
            self._commit(generation, QueryState.FAILED, error=error)
            raise error from exc

        current = self._commit(generation, QueryState.SUCCESS, result=result)
        return QueryOutcome(result=result, generation=generation, stale=not current)

    def _run(self, text: str, config: Config) -> QueryResult:
        provider = self._provider_factory(config, self.settings)

        try:
            answer = provider.answer(text)
            answer_text, sources = answer.text, answer.sources
        except EmptyResponseError:
            logger.warning("Provider returned no text for query=%r", text)
            answer_text, sources = FALLBACK_TEXT, []

        image = provider.illustrate(text) if provider.supports_image else None
        if not provider.supports_search:
            sources = []

        return QueryResult(text=answer_text, sources=tuple(sources), image=image)

    def _commit(
        self,
        generation: int,
        state: QueryState,
        result: Optional[QueryResult] = None,
        error: Optional[AssistantError] = None,
    ) -> bool:
        """Write the outcome if *generation* is still current; report whether it was."""
        with self._lock:
            if generation != self._generation:
                logger.info("Dropping stale outcome of query #%d", generation)
                return False
            self.state = state
            self.result = result
            self.error = error
            return True
