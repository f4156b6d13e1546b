from datetime import UTC, datetime, timedelta

from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.game_phase import GamePhase
from movegrade.domain.move_classification import MoveClassification
from movegrade.review_positions import (
    build_review_position,
    build_review_positions,
    is_review_worthy,
    question_type,
    review_priority,
    review_tags,
)

NOW = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)


def _entry(
    ply: int,
    classification: MoveClassification,
    side: str = "w",
    **overrides,
) -> AnalysisLogEntry:
    values = {
        "ply": ply,
        "fen": "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3",
        "move": "f1c4",
        "side": side,
        "classification": classification,
        "phase": GamePhase.OPENING,
        "best_move": "d2d4",
        "score": 30,
        "eval_diff": 0,
    }
    values.update(overrides)
    return AnalysisLogEntry(**values)


def test_review_worthy_classifications_and_missed_chances() -> None:
    assert is_review_worthy(_entry(1, MoveClassification.BLUNDER))
    assert is_review_worthy(_entry(1, MoveClassification.GREAT))
    assert not is_review_worthy(_entry(1, MoveClassification.BEST))
    assert is_review_worthy(_entry(1, MoveClassification.GOOD, missed_win=True))


def test_question_type_prefers_highlights_then_missed_chances() -> None:
    assert question_type(_entry(1, MoveClassification.BRILLIANT, missed_win=True)) == (
        "find_brilliant"
    )
    assert question_type(_entry(1, MoveClassification.MISTAKE, missed_win=True)) == "convert_win"
    assert question_type(_entry(1, MoveClassification.MISTAKE, missed_defense=True)) == (
        "find_defense"
    )
    assert question_type(_entry(1, MoveClassification.MISTAKE)) == "best_move"


def test_priority_by_classification_and_flags() -> None:
    assert review_priority(MoveClassification.BRILLIANT, "find_brilliant") == 6
    assert review_priority(MoveClassification.BLUNDER, "best_move") == 4
    assert review_priority(MoveClassification.INACCURACY, "best_move") == 3
    assert review_priority(MoveClassification.GOOD, "convert_win", missed_win=True) == 1


def test_tags_include_phase_motifs_and_missed_markers() -> None:
    entry = _entry(
        5,
        MoveClassification.MISTAKE,
        motifs=["fork"],
        missed_win=True,
    )

    assert review_tags(entry) == ["mistake", "opening", "fork", "missedWin"]


def test_build_review_position_schedules_first_review_a_day_later() -> None:
    entry = _entry(7, MoveClassification.BLUNDER, eval_diff=420, plan_hint="Slow down.")

    position = build_review_position("game-1", entry, NOW)

    assert position.game_id == "game-1"
    assert position.ply == 7
    assert position.question_type == "best_move"
    assert position.priority == 4
    assert position.loss == 420
    assert position.created_at == NOW
    assert position.next_review_at == NOW + timedelta(days=1)
    assert position.plan_hint == "Slow down."
    assert position.review_flag is False


def test_build_review_positions_filters_by_side() -> None:
    entries = [
        _entry(1, MoveClassification.BLUNDER, side="w"),
        _entry(2, MoveClassification.MISTAKE, side="b"),
        _entry(3, MoveClassification.BEST, side="w"),
    ]

    both = build_review_positions("game-1", entries, NOW)
    white_only = build_review_positions("game-1", entries, NOW, sides={"w"})

    assert [position.ply for position in both] == [1, 2]
    assert [position.ply for position in white_only] == [1]
    assert len({position.review_id for position in both}) == 2
