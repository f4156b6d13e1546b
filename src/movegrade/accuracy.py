"""Move accuracy from centipawn loss and classification."""

from __future__ import annotations

import math

from movegrade.domain.move_classification import MoveClassification

MAX_COUNTED_LOSS = 1000
ACCURACY_DECAY = 0.002
ACCURACY_STREAK_THRESHOLD = 90

CLASSIFICATION_PENALTIES = {
    MoveClassification.BOOK: 0,
    MoveClassification.BLUNDER: 25,
    MoveClassification.MISTAKE: 15,
    MoveClassification.INACCURACY: 8,
    MoveClassification.GOOD: 2,
    MoveClassification.BEST: 0,
    MoveClassification.GREAT: 0,
    MoveClassification.BRILLIANT: 0,
}


def raw_accuracy(loss: int | float) -> int:
    """``round(100 * exp(-0.002 * min(|loss|, 1000)))`` with half-up rounding."""
    capped = min(abs(loss), MAX_COUNTED_LOSS)
    return int(math.floor(100 * math.exp(-ACCURACY_DECAY * capped) + 0.5))


def move_accuracy(loss: int | float, classification: MoveClassification) -> int:
    penalty = CLASSIFICATION_PENALTIES.get(classification, 0)
    return max(0, raw_accuracy(loss) - penalty)
