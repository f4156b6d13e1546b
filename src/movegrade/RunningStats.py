"""Running accuracy and loss statistics over an analysis log."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from movegrade.accuracy import ACCURACY_STREAK_THRESHOLD, MAX_COUNTED_LOSS
from movegrade.domain.analysis_log_entry import AnalysisLogEntry

SWING_SCORE_CAP = 1000


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def _capped(value: int | None) -> int:
    if value is None:
        return 0
    return max(-SWING_SCORE_CAP, min(SWING_SCORE_CAP, value))


@dataclass(slots=True)
class RunningStats:
    """Accumulators rebuilt from a persisted prefix when an analysis resumes.

    The eval swing compares consecutive pre-move scores from White's point of
    view, capped at ±1000 so mate scores do not dominate. Losses are capped at
    the same bound.
    """

    white_accuracy_sum: int = 0
    white_moves: int = 0
    black_accuracy_sum: int = 0
    black_moves: int = 0
    total_cp_loss: int = 0
    moves: int = 0
    current_streak: int = 0
    max_streak: int = 0
    max_eval_swing: int = 0
    previous_score_white: int = 0

    @classmethod
    def replay(cls, entries: Iterable[AnalysisLogEntry]) -> RunningStats:
        stats = cls()
        for entry in entries:
            stats.add(entry)
        return stats

    def add(self, entry: AnalysisLogEntry) -> None:
        self.moves += 1
        self.total_cp_loss += min(entry.eval_diff, MAX_COUNTED_LOSS)
        if entry.accuracy >= ACCURACY_STREAK_THRESHOLD:
            self.current_streak += 1
            self.max_streak = max(self.max_streak, self.current_streak)
        else:
            self.current_streak = 0
        if entry.is_white:
            self.white_accuracy_sum += entry.accuracy
            self.white_moves += 1
        else:
            self.black_accuracy_sum += entry.accuracy
            self.black_moves += 1
        score_white = _capped(entry.score)
        self.max_eval_swing = max(self.max_eval_swing, abs(score_white - self.previous_score_white))
        self.previous_score_white = score_white

    @property
    def white_accuracy(self) -> int:
        if not self.white_moves:
            return 0
        return _round_half_up(self.white_accuracy_sum / self.white_moves)

    @property
    def black_accuracy(self) -> int:
        if not self.black_moves:
            return 0
        return _round_half_up(self.black_accuracy_sum / self.black_moves)

    @property
    def avg_cp_loss(self) -> int:
        if not self.moves:
            return 0
        return _round_half_up(self.total_cp_loss / self.moves)

    def summary(self) -> dict[str, object]:
        return {
            "white_accuracy": self.white_accuracy,
            "black_accuracy": self.black_accuracy,
            "avg_cp_loss": self.avg_cp_loss,
            "max_accuracy_streak": self.max_streak,
            "max_eval_swing": self.max_eval_swing,
        }
