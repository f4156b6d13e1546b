"""Derive review positions from a finished analysis log."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.move_classification import MoveClassification
from movegrade.domain.review_position import ReviewPosition
from movegrade.utils.generate_id import generate_id

FIRST_REVIEW_DELAY = timedelta(days=1)

_BASE_PRIORITY = 2
_CLASSIFICATION_PRIORITY = {
    MoveClassification.BRILLIANT: 5,
    MoveClassification.GREAT: 5,
    MoveClassification.BLUNDER: 4,
    MoveClassification.MISTAKE: 4,
    MoveClassification.INACCURACY: 3,
}
_CONVERSION_QUESTIONS = frozenset({"convert_win", "find_defense"})


def is_review_worthy(entry: AnalysisLogEntry) -> bool:
    classification = entry.classification
    return (
        classification.is_error
        or classification.is_highlight
        or entry.missed_win
        or entry.missed_defense
    )


def question_type(entry: AnalysisLogEntry) -> str:
    if entry.classification.is_highlight:
        return "find_brilliant"
    if entry.missed_win:
        return "convert_win"
    if entry.missed_defense:
        return "find_defense"
    return "best_move"


def review_tags(entry: AnalysisLogEntry) -> list[str]:
    tags = [str(entry.classification), str(entry.phase), *entry.motifs]
    if entry.missed_win:
        tags.append("missedWin")
    if entry.missed_defense:
        tags.append("missedDefense")
    return tags


def review_priority(
    classification: MoveClassification,
    question: str,
    missed_win: bool = False,
    missed_defense: bool = False,
) -> int:
    """Higher values survive storage eviction longer.

    Conversion drills (missed wins and defenses) rank one below the
    classification they carry.
    """
    score = _CLASSIFICATION_PRIORITY.get(classification, _BASE_PRIORITY)
    if question == "find_brilliant":
        score += 1
    if missed_win or missed_defense or question in _CONVERSION_QUESTIONS:
        score -= 1
    return score


def build_review_position(game_id: str, entry: AnalysisLogEntry, now: datetime) -> ReviewPosition:
    question = question_type(entry)
    return ReviewPosition(
        review_id=generate_id("review-"),
        game_id=game_id,
        ply=entry.ply,
        fen=entry.fen,
        move=entry.move,
        best_move=entry.best_move,
        classification=entry.classification,
        question_type=question,
        side=entry.side,
        phase=str(entry.phase),
        priority=review_priority(
            entry.classification, question, entry.missed_win, entry.missed_defense
        ),
        created_at=now,
        next_review_at=now + FIRST_REVIEW_DELAY,
        score=entry.score,
        loss=entry.eval_diff,
        tags=review_tags(entry),
        motifs=list(entry.motifs),
        missed_win=entry.missed_win,
        missed_defense=entry.missed_defense,
        plan_hint=entry.plan_hint,
        explanation=entry.explanation,
    )


def build_review_positions(
    game_id: str,
    entries: Iterable[AnalysisLogEntry],
    now: datetime,
    sides: set[str] | None = None,
) -> list[ReviewPosition]:
    """Review positions for the interesting entries, optionally limited to some sides."""
    return [
        build_review_position(game_id, entry, now)
        for entry in entries
        if is_review_worthy(entry) and (sides is None or entry.side in sides)
    ]
