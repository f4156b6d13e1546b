"""Short plan hints and explanations attached to each analysed move."""

from __future__ import annotations

from collections.abc import Sequence

from movegrade.domain.game_phase import GamePhase
from movegrade.domain.move_classification import MoveClassification


def plan_hint(
    phase: GamePhase,
    motifs: Sequence[str],
    classification: MoveClassification,
) -> str:
    if phase is GamePhase.OPENING:
        if "pin" in motifs:
            return "Pin the defender to gain easy development."
        if "fork" in motifs:
            return "Look for forks on weakly defended pieces."
        return "Focus on rapid development and king safety."
    if phase is GamePhase.ENDGAME:
        return "Activate your king and simplify into favorable pawn endings."
    if "sacrifice" in motifs:
        return "Invest material for lasting initiative."
    if classification in {MoveClassification.BLUNDER, MoveClassification.MISTAKE}:
        return "Slow down and calculate forcing lines."
    return "Improve piece activity and target weaknesses."


_EXPLANATIONS = {
    MoveClassification.BOOK: "Book move. This is a known opening line.",
    MoveClassification.BRILLIANT: (
        "Brilliant!! A difficult-to-find, winning sacrifice. {move} is the engine's top choice."
    ),
    MoveClassification.GREAT: (
        "Great! A critical, often only, good move. {move} keeps you on track."
    ),
    MoveClassification.BLUNDER: (
        "This move loses significant material or allows a mate. "
        "You played {move}, but {best} was much better."
    ),
    MoveClassification.MISTAKE: (
        "A mistake that gives away your advantage. "
        "{best} would have kept the position equal or better."
    ),
    MoveClassification.INACCURACY: "A slightly passive move. {best} was more precise.",
    MoveClassification.BEST: "Best move. {move} is the highest-engine-rated choice.",
    MoveClassification.GOOD: "Good move. Solid and correct, though not the very best.",
}


def explanation(
    classification: MoveClassification,
    move: str,
    best_move: str | None,
) -> str:
    template = _EXPLANATIONS[classification]
    return template.format(move=move, best=best_move or "the engine move")
