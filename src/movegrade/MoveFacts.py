"""Inputs to the move classification rule table."""

from __future__ import annotations

from dataclasses import dataclass

from movegrade.domain.evaluation import is_mate_value
from movegrade.domain.game_phase import GamePhase


@dataclass(frozen=True, slots=True)
class MoveFacts:
    """Everything the classifier needs about one played move.

    Scores are mover-perspective values where mates are encoded as
    ``±(MATE_SCORE - n)``. ``gap`` and ``second_value`` are None when the
    engine returned a single candidate line.
    """

    move: str
    best_move: str | None
    score_before: int
    score_after: int
    phase: GamePhase
    material_delta: int = 0
    lookahead_delta: int = 0
    gap: int | None = None
    second_value: int | None = None
    motifs: tuple[str, ...] = ()
    is_top_candidate: bool = False
    is_simple_recapture: bool = False

    @property
    def eval_diff(self) -> int:
        return max(0, self.score_before - self.score_after)

    @property
    def multiplier(self) -> float:
        return self.phase.threshold_multiplier

    @property
    def leads_to_mate(self) -> bool:
        """The mover has a forced mate after the move."""
        return is_mate_value(self.score_after) and self.score_after > 0

    @property
    def both_mate_same_side(self) -> bool:
        if not (is_mate_value(self.score_before) and is_mate_value(self.score_after)):
            return False
        return (self.score_before > 0) == (self.score_after > 0)
