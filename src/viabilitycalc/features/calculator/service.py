from __future__ import annotations

import logging
import secrets
import string
import threading
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass

from ...core import feature_flags
from ...core.catalog import DEFAULT_CATALOG, EXAMPLE_ANSWERS, QuestionCatalog
from ...core.errors import CapabilityDisabledError, ExportError
from ...core.models import UNANSWERED
from ...core.scoring import ScoreEngine, ScoreState, format_score
from ...core.selection import SelectionStore
from .concurrency import run_blocking
from .export import ExportedImage, ViewExporter
from .schemas import (
    CalculatorResponse,
    CapabilitiesPayload,
    OptionPayload,
    QuestionPayload,
    ScorePayload,
)

__all__ = [
    "CalculatorConfig",
    "CalculatorManager",
    "CalculatorSession",
    "ExportOutcome",
]

logger = logging.getLogger(__name__)

_MAX_TEXT = 200


@dataclass(frozen=True)
class CalculatorConfig:
    """Optional capabilities wired into one calculator view."""

    example_fill: bool = True
    export: bool = True

    @classmethod
    def from_flags(cls) -> CalculatorConfig:
        return cls(
            example_fill=feature_flags.is_enabled(feature_flags.EXAMPLE_FILL, default=True),
            export=feature_flags.is_enabled(feature_flags.EXPORT, default=True),
        )


@dataclass
class CalculatorSession:
    config: CalculatorConfig
    store: SelectionStore
    engine: ScoreEngine
    startup_name: str = ""
    pitch: str = ""


@dataclass(frozen=True)
class ExportOutcome:
    image: ExportedImage | None = None
    error: ExportError | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


class CalculatorManager:
    """Registry of calculator views; each view owns its own selection."""

    def __init__(
        self,
        catalog: QuestionCatalog = DEFAULT_CATALOG,
        *,
        example_answers: Mapping[str, str] = EXAMPLE_ANSWERS,
        max_sessions: int = 1024,
    ) -> None:
        self._catalog = catalog
        self._example_answers = dict(example_answers)
        self._max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[str, CalculatorSession] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def catalog(self) -> QuestionCatalog:
        return self._catalog

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_session(self, config: CalculatorConfig | None = None) -> str:
        store = SelectionStore(self._catalog)
        state = CalculatorSession(
            config=config if config is not None else CalculatorConfig.from_flags(),
            store=store,
            engine=ScoreEngine(store),
        )
        session_id = _sid()
        with self._lock:
            self._sessions[session_id] = state
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.debug("calculator session evicted", extra={"session_id": evicted})
        logger.debug("calculator session created", extra={"session_id": session_id})
        return session_id

    def get_view(self, session_id: str) -> CalculatorResponse:
        with self._lock:
            state = self._require_session(session_id)
            return _view_payload(session_id, state)

    def select(self, session_id: str, question_id: str, option_id: str | None) -> CalculatorResponse:
        """Record (or clear, when ``option_id`` is None) one answer."""

        with self._lock:
            state = self._require_session(session_id)
            state.store.set_selection(question_id, UNANSWERED if option_id is None else option_id)
            return _view_payload(session_id, state)

    def populate_example(self, session_id: str) -> CalculatorResponse:
        with self._lock:
            state = self._require_session(session_id)
            if not state.config.example_fill:
                raise CapabilityDisabledError(feature_flags.EXAMPLE_FILL)
            state.store.apply_batch(self._example_answers)
            return _view_payload(session_id, state)

    def reset(self, session_id: str) -> CalculatorResponse:
        with self._lock:
            state = self._require_session(session_id)
            state.store.clear()
            return _view_payload(session_id, state)

    def update_details(self, session_id: str, *, startup_name: str, pitch: str) -> CalculatorResponse:
        """Store the free-text name/pitch fields; they are shown but never scored."""

        with self._lock:
            state = self._require_session(session_id)
            state.startup_name = startup_name.strip()[:_MAX_TEXT]
            state.pitch = pitch.strip()[:_MAX_TEXT]
            return _view_payload(session_id, state)

    def export(self, session_id: str, exporter: ViewExporter) -> ExportOutcome:
        """Render the current view through ``exporter``.

        Exporter failures are logged and reported in the outcome; they never
        change the session.
        """

        with self._lock:
            state = self._require_session(session_id)
            if not state.config.export:
                raise CapabilityDisabledError(feature_flags.EXPORT)
            view = _view_payload(session_id, state)
        try:
            image = exporter(view)
        except Exception as exc:
            error = ExportError(f"export failed: {exc}")
            logger.warning("calculator export failed", extra={"session_id": session_id}, exc_info=True)
            return ExportOutcome(error=error)
        return ExportOutcome(image=image)

    async def export_async(self, session_id: str, exporter: ViewExporter) -> ExportOutcome:
        return await run_blocking(self.export, session_id, exporter)

    def discard(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.debug("calculator session discarded", extra={"session_id": session_id})
        return removed

    def _require_session(self, session_id: str) -> CalculatorSession:
        state = self._sessions.get(session_id)
        if state is None:
            raise KeyError(f"session '{session_id}' not found")
        self._sessions.move_to_end(session_id)
        return state


def _sid(length: int = 12) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _score_payload(state: ScoreState, *, answered: int, total: int) -> ScorePayload:
    return ScorePayload(
        raw_product=state.raw_product,
        score=state.normalized_score,
        display=format_score(state.normalized_score),
        verdict=state.verdict_label,
        color=state.display_color.value,
        color_class=state.color_class,
        answered=answered,
        total=total,
    )


def _view_payload(session_id: str, state: CalculatorSession) -> CalculatorResponse:
    selections = state.store.get_all_selections()
    questions = []
    for question in state.store.catalog:
        answer = selections[question.id]
        questions.append(
            QuestionPayload(
                id=question.id,
                label=question.label,
                helper_text=question.helper_text,
                options=[OptionPayload(id=opt.id, label=opt.label, value=opt.value) for opt in question.options],
                selected=None if answer is UNANSWERED else answer.id,
            )
        )
    return CalculatorResponse(
        session=session_id,
        questions=questions,
        score=_score_payload(
            state.engine.state,
            answered=state.store.answered_count(),
            total=len(state.store.catalog),
        ),
        capabilities=CapabilitiesPayload(example_fill=state.config.example_fill, export=state.config.export),
        startup_name=state.startup_name,
        pitch=state.pitch,
    )
