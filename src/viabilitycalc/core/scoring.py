from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from .models import UNANSWERED, Answer, ColorToken, Verdict
from .selection import SelectionStore

__all__ = [
    "CALIBRATION_DIVISOR",
    "SCALE_UP_THRESHOLD",
    "SELF_FUND_THRESHOLD",
    "ScoreEngine",
    "ScoreState",
    "answer_value",
    "classify",
    "color_for",
    "compute_raw_product",
    "evaluate",
    "format_score",
    "normalize",
]

# Raw product of the baseline answer set used to calibrate the thresholds.
CALIBRATION_DIVISOR: Final = 625_000.0

SCALE_UP_THRESHOLD: Final = 4.0
SELF_FUND_THRESHOLD: Final = 2.0

# Unanswered questions zero the product, which reads as "TBD".
UNANSWERED_VALUE: Final = 0.0

_VERDICT_COLORS: Final[Mapping[Verdict, ColorToken]] = {
    Verdict.SCALE_UP: ColorToken.GREEN_400,
    Verdict.SELF_FUND: ColorToken.GREEN_200,
    Verdict.PENDING: ColorToken.STONE_200,
    Verdict.NOT_VIABLE: ColorToken.RED_400,
}


@dataclass(frozen=True)
class ScoreState:
    raw_product: float
    normalized_score: float
    verdict: Verdict
    display_color: ColorToken

    @property
    def verdict_label(self) -> str:
        return self.verdict.label

    @property
    def color_class(self) -> str:
        return self.display_color.css_class


def answer_value(answer: Answer) -> float:
    if answer is UNANSWERED:
        return UNANSWERED_VALUE
    return answer.value


def compute_raw_product(selections: Mapping[str, Answer]) -> float:
    """Multiply the value of every slot; any unanswered slot yields 0."""

    return math.prod(answer_value(answer) for answer in selections.values())


def normalize(raw_product: float) -> float:
    return raw_product / CALIBRATION_DIVISOR


def classify(normalized_score: float) -> Verdict:
    # Order matters: the zero check must run before the threshold bands.
    if normalized_score == 0:
        return Verdict.PENDING
    if normalized_score >= SCALE_UP_THRESHOLD:
        return Verdict.SCALE_UP
    if normalized_score >= SELF_FUND_THRESHOLD:
        return Verdict.SELF_FUND
    return Verdict.NOT_VIABLE


def color_for(verdict: Verdict) -> ColorToken:
    return _VERDICT_COLORS[verdict]


def format_score(score: float) -> str:
    """Full-precision score text; whole numbers drop the trailing ".0".

    Matches how the page has always printed the score, e.g. ``0`` and
    ``1600000000`` rather than ``0.0`` and ``1600000000.0``.
    """

    if math.isfinite(score) and score.is_integer() and abs(score) < 1e21:
        return str(int(score))
    return repr(score)


def evaluate(selections: Mapping[str, Answer]) -> ScoreState:
    raw = compute_raw_product(selections)
    score = normalize(raw)
    verdict = classify(score)
    return ScoreState(
        raw_product=raw,
        normalized_score=score,
        verdict=verdict,
        display_color=color_for(verdict),
    )


class ScoreEngine:
    """Presentation-facing view of the score for one :class:`SelectionStore`.

    The state is a pure function of the store's snapshot.  It is cached per
    store revision so repeated queries between user actions do not recompute.
    """

    def __init__(self, store: SelectionStore) -> None:
        self._store = store
        self._cached: tuple[int, ScoreState] | None = None
        self.recomputations = 0

    @property
    def store(self) -> SelectionStore:
        return self._store

    @property
    def state(self) -> ScoreState:
        revision = self._store.revision
        if self._cached is None or self._cached[0] != revision:
            self._cached = (revision, evaluate(self._store.get_all_selections()))
            self.recomputations += 1
        return self._cached[1]

    def get_display_score(self) -> float:
        return self.state.normalized_score

    def get_verdict_label(self) -> str:
        return self.state.verdict_label

    def get_display_color_token(self) -> ColorToken:
        return self.state.display_color
