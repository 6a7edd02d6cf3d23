from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "Answer",
    "ColorToken",
    "Option",
    "Question",
    "UNANSWERED",
    "Unanswered",
    "Verdict",
]


@dataclass(frozen=True)
class Option:
    # Stable key used for selection; never derived from ``label``.
    id: str
    value: float
    label: str


@dataclass(frozen=True)
class Question:
    id: str
    label: str
    helper_text: str
    options: tuple[Option, ...]

    def find(self, option_id: str) -> Option | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def option_ids(self) -> tuple[str, ...]:
        return tuple(option.id for option in self.options)


class Unanswered(Enum):
    """Explicit "no choice yet" marker, distinct from a zero-valued option."""

    UNANSWERED = "unanswered"

    def __repr__(self) -> str:
        return "UNANSWERED"


UNANSWERED = Unanswered.UNANSWERED

Answer = Option | Unanswered


class Verdict(str, Enum):
    SCALE_UP = "Scale Up"
    SELF_FUND = "Self-Fund"
    NOT_VIABLE = "Not viable"
    PENDING = "TBD"

    @property
    def label(self) -> str:
        return self.value


class ColorToken(str, Enum):
    GREEN_400 = "green-400"
    GREEN_200 = "green-200"
    STONE_200 = "stone-200"
    RED_400 = "red-400"

    @property
    def css_class(self) -> str:
        """Background utility class consumed by the page stylesheet."""

        return f"bg-{self.value}"
