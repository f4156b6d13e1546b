from __future__ import annotations

from enum import StrEnum


class MoveClassification(StrEnum):
    """Quality label assigned to a single move."""

    BOOK = "book"
    BEST = "best"
    GREAT = "great"
    BRILLIANT = "brilliant"
    GOOD = "good"
    INACCURACY = "inaccuracy"
    MISTAKE = "mistake"
    BLUNDER = "blunder"

    @property
    def is_error(self) -> bool:
        return self in _ERRORS

    @property
    def is_highlight(self) -> bool:
        return self in {MoveClassification.BRILLIANT, MoveClassification.GREAT}


_ERRORS = frozenset(
    {MoveClassification.INACCURACY, MoveClassification.MISTAKE, MoveClassification.BLUNDER}
)
