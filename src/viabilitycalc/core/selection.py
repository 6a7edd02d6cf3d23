from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from .catalog import DEFAULT_CATALOG, QuestionCatalog
from .errors import InvalidSelectionError
from .models import UNANSWERED, Answer, Option, Unanswered

__all__ = ["SelectionStore", "Selections"]

logger = logging.getLogger(__name__)

# Read-only, catalog-ordered view of every slot.
Selections = Mapping[str, Answer]


class SelectionStore:
    """Holds one answer slot per catalog question for a single calculator view.

    Every question always has a slot; unanswered slots hold ``UNANSWERED``.
    ``revision`` increases by one per successful mutation, so a batch update
    counts as a single change.
    """

    def __init__(self, catalog: QuestionCatalog = DEFAULT_CATALOG) -> None:
        self._catalog = catalog
        self._slots: dict[str, Answer] = {question_id: UNANSWERED for question_id in catalog.ids()}
        self._revision = 0

    @property
    def catalog(self) -> QuestionCatalog:
        return self._catalog

    @property
    def revision(self) -> int:
        return self._revision

    def set_selection(self, question_id: str, option: Option | str | Unanswered) -> Answer:
        """Replace the slot for ``question_id`` and return the stored answer.

        ``option`` may be an :class:`Option` of that question, its option id,
        or ``UNANSWERED`` to clear the slot.
        """

        answer = self._resolve(question_id, option)
        self._slots[question_id] = answer
        self._revision += 1
        return answer

    def get_selection(self, question_id: str) -> Answer:
        if question_id not in self._slots:
            raise InvalidSelectionError(question_id)
        return self._slots[question_id]

    def get_all_selections(self) -> Selections:
        return MappingProxyType(dict(self._slots))

    def apply_batch(self, answers: Mapping[str, Option | str | Unanswered]) -> Selections:
        """Replace several slots at once.

        All entries are resolved before any slot changes, so one bad entry
        leaves the store untouched.  Slots not named in ``answers`` keep
        their current value.
        """

        resolved = {question_id: self._resolve(question_id, option) for question_id, option in answers.items()}
        if not resolved:
            return self.get_all_selections()
        self._slots.update(resolved)
        self._revision += 1
        logger.debug("selection batch applied", extra={"questions": len(resolved), "revision": self._revision})
        return self.get_all_selections()

    def clear(self) -> None:
        for question_id in self._slots:
            self._slots[question_id] = UNANSWERED
        self._revision += 1

    def answered_count(self) -> int:
        return sum(1 for answer in self._slots.values() if answer is not UNANSWERED)

    def _resolve(self, question_id: str, option: Option | str | Unanswered) -> Answer:
        question = self._catalog.question(question_id)
        if option is UNANSWERED:
            return UNANSWERED
        if isinstance(option, Option):
            if option not in question.options:
                raise InvalidSelectionError(question_id, option.id)
            return option
        if isinstance(option, str):
            found = question.find(option)
            if found is None:
                raise InvalidSelectionError(question_id, option)
            return found
        raise InvalidSelectionError(question_id, repr(option))
