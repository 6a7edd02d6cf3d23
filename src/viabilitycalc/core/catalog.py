"""The fixed question set behind the "Is My Startup Viable?" calculator.

Questions and options are kept in display order.  The order is user visible
(it is the order the dropdowns render in) so it must stay stable; scoring
itself only depends on the option values.

The weights follow Jason Cohen's "Excuse me, is there a problem?" framework:
the customer count and annual budget set the scale of the opportunity and the
remaining factors discount it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType

from .errors import InvalidSelectionError
from .models import Option, Question

__all__ = [
    "DEFAULT_CATALOG",
    "EXAMPLE_ANSWERS",
    "EXAMPLE_NAME",
    "QuestionCatalog",
]


class QuestionCatalog:
    """Immutable, ordered collection of questions."""

    def __init__(self, questions: Sequence[Question]) -> None:
        ordered = tuple(questions)
        seen: set[str] = set()
        for question in ordered:
            if question.id in seen:
                raise ValueError(f"duplicate question id '{question.id}'")
            seen.add(question.id)
            if not question.options:
                raise ValueError(f"question '{question.id}' has no options")
            option_ids = [option.id for option in question.options]
            if len(set(option_ids)) != len(option_ids):
                raise ValueError(f"duplicate option id in question '{question.id}'")
            labels = [option.label for option in question.options]
            if len(set(labels)) != len(labels):
                raise ValueError(f"duplicate option label in question '{question.id}'")
        self._questions = ordered
        self._by_id: Mapping[str, Question] = MappingProxyType({q.id: q for q in ordered})

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def ids(self) -> tuple[str, ...]:
        return tuple(question.id for question in self._questions)

    def question(self, question_id: str) -> Question:
        question = self._by_id.get(question_id)
        if question is None:
            raise InvalidSelectionError(question_id)
        return question

    def option(self, question_id: str, option_id: str) -> Option:
        option = self.question(question_id).find(option_id)
        if option is None:
            raise InvalidSelectionError(question_id, option_id)
        return option


def _options(*entries: tuple[str, float, str]) -> tuple[Option, ...]:
    return tuple(Option(id=key, value=float(value), label=label) for key, value, label in entries)


_QUESTIONS = (
    Question(
        id="plausible",
        label="Plausible",
        helper_text="Number of potential customers (consumers or businesses)",
        options=_options(
            ("1b", 1_000_000_000, "1,000,000,000"),
            ("100m", 100_000_000, "100,000,000"),
            ("10m", 10_000_000, "10,000,000"),
            ("1m", 1_000_000, "1,000,000"),
            ("100k", 100_000, "100,000"),
            ("10k", 10_000, "10,000"),
            ("1k", 1_000, "1,000"),
        ),
    ),
    Question(
        id="self_aware",
        label="Self-Aware",
        helper_text="Willing to solve the problem",
        options=_options(
            ("few-care", 0.01, "0.01: Few agree or care"),
            ("thought-leaders", 0.1, "0.1: Thought-leaders care/evangelize"),
            ("standard-practice", 0.5, "0.5: Industry standard-practice"),
            ("everyone-cares", 1.0, "1.0: Hard to find someone who doesn't care"),
        ),
    ),
    Question(
        id="lucrative",
        label="Lucrative",
        helper_text="Annual allocated budget",
        options=_options(
            ("usd-1m", 1_000_000, "$1,000,000"),
            ("usd-100k", 100_000, "$100,000"),
            ("usd-10k", 10_000, "$10,000"),
            ("usd-1k", 1_000, "$1,000"),
            ("usd-100", 100, "$100"),
            ("usd-10", 10, "$10"),
            ("usd-1", 1, "$1"),
        ),
    ),
    Question(
        id="liquid",
        label="Liquid",
        helper_text="Frequency of purchase decision",
        options=_options(
            ("every-few-years", 0.01, "0.01: Every few years"),
            ("annual", 0.1, "0.1: An annual decision"),
            ("always-in-market", 1.0, "1.0: Always in the market, easy to switch"),
        ),
    ),
    Question(
        id="eager_identity",
        label="Eager (identity)",
        helper_text="Attitude towards your company",
        options=_options(
            ("cannot-buy", 0, "0: They cannot buy from you"),
            ("trust-challenges", 0.1, "0.1: Structural/trust challenges"),
            ("indifferent", 0.5, "0.5: Indifferent"),
            ("emotional-desire", 1.0, "1.0: Emotional desire to select you"),
        ),
    ),
    Question(
        id="eager_comparative",
        label="Eager (comparative)",
        helper_text="Competitive differentiation",
        options=_options(
            ("no-differentiation", 0.1, "0.1: No material differentiation"),
            ("best-in-class", 0.5, "0.5: Some best-in-class features"),
            ("no-alternative", 1.0, "1.0: No viable alternative"),
        ),
    ),
    Question(
        id="enduring",
        label="Enduring",
        helper_text="Will they still be here a year from now?",
        options=_options(
            ("one-off", 0.01, "0.01: One-off purchase without loyalty"),
            ("one-off-evangelism", 0.1, "0.1 : One-off purchase with evangelism"),
            ("recurring", 0.5, "0.5 : Recurring-revenue + recurring-problem"),
            ("lock-in", 1.0, "1.0 : Strong lock-in"),
        ),
    ),
)

DEFAULT_CATALOG = QuestionCatalog(_QUESTIONS)

EXAMPLE_NAME = "WP Engine"

# question id -> option id
EXAMPLE_ANSWERS: Mapping[str, str] = MappingProxyType(
    {
        "plausible": "10m",
        "self_aware": "few-care",
        "lucrative": "usd-10k",
        "liquid": "every-few-years",
        "eager_identity": "trust-challenges",
        "eager_comparative": "best-in-class",
        "enduring": "one-off-evangelism",
    }
)
