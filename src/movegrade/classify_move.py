"""Rule table mapping move facts to a classification."""

from __future__ import annotations

from movegrade import classification_thresholds as t
from movegrade.domain.game_phase import GamePhase
from movegrade.domain.move_classification import MoveClassification
from movegrade.MotifDetectionService import LINE_MOTIFS
from movegrade.MoveFacts import MoveFacts


def classify_move(facts: MoveFacts) -> MoveClassification:
    """Classify a move; rules are evaluated in precedence order."""
    loss = facts.eval_diff
    before = facts.score_before
    after = facts.score_after
    m = facts.multiplier

    if facts.move == facts.best_move or loss <= t.BEST_TOLERANCE:
        return classify_top_candidate(facts)
    if facts.both_mate_same_side:
        if loss <= t.MATE_SLIP_TOLERANCE:
            return MoveClassification.GOOD
        return MoveClassification.INACCURACY
    if before >= t.CLEARLY_WINNING and after >= t.MODERATELY_AHEAD:
        return _capped_tier(loss, m)
    if (
        before <= t.CLEARLY_LOSING
        and after <= t.CLEARLY_LOSING
        and facts.lookahead_delta > t.MAJOR_MATERIAL_LOSS
    ):
        return _capped_tier(loss, m)
    if _is_flip(before, after) or _is_major_loss(facts):
        return MoveClassification.BLUNDER
    if (
        facts.phase is GamePhase.OPENING
        and facts.lookahead_delta <= t.PIECE_SACRIFICE
        and after >= t.SOUND_AFTER
    ):
        return MoveClassification.GOOD
    if loss > t.BLUNDER_THRESHOLD * m and after <= t.NEAR_EQUAL:
        return MoveClassification.BLUNDER
    if loss > t.MISTAKE_THRESHOLD * m and (abs(before) > t.NEAR_EQUAL or abs(after) > t.NEAR_EQUAL):
        return MoveClassification.MISTAKE
    if loss > t.INACCURACY_THRESHOLD * m:
        return MoveClassification.INACCURACY
    return MoveClassification.GOOD


def _capped_tier(loss: int, m: float) -> MoveClassification:
    if loss > t.MISTAKE_THRESHOLD * m:
        return MoveClassification.MISTAKE
    if loss > t.INACCURACY_THRESHOLD * m:
        return MoveClassification.INACCURACY
    return MoveClassification.GOOD


def _is_flip(before: int, after: int) -> bool:
    return (before >= t.FLIP_THRESHOLD and after <= -t.FLIP_THRESHOLD) or (
        before <= -t.FLIP_THRESHOLD and after >= t.FLIP_THRESHOLD
    )


def _is_major_loss(facts: MoveFacts) -> bool:
    worst = min(facts.material_delta, facts.lookahead_delta)
    return worst <= t.MAJOR_MATERIAL_LOSS and facts.score_after <= t.LOSING_AFTER_MAJOR_LOSS


def classify_top_candidate(facts: MoveFacts) -> MoveClassification:
    if is_brilliant(facts):
        return MoveClassification.BRILLIANT
    if is_great(facts):
        return MoveClassification.GREAT
    return MoveClassification.BEST


def is_brilliant(facts: MoveFacts) -> bool:
    if facts.is_simple_recapture:
        return False
    if _is_delayed_major_sacrifice(facts):
        return True
    if not _is_sacrifice(facts):
        return False
    if facts.score_before >= t.OVERWHELMING and not facts.leads_to_mate:
        return False
    return facts.score_after >= t.SOUND_AFTER


def _is_sacrifice(facts: MoveFacts) -> bool:
    if facts.lookahead_delta <= t.PIECE_SACRIFICE:
        return True
    if facts.lookahead_delta > t.LESSER_SACRIFICE:
        return False
    has_motif = any(motif in LINE_MOTIFS for motif in facts.motifs)
    return has_motif or (facts.gap is not None and facts.gap >= t.BRILLIANT_GAP)


def _is_delayed_major_sacrifice(facts: MoveFacts) -> bool:
    if facts.material_delta < 0 or facts.lookahead_delta > t.MAJOR_MATERIAL_LOSS:
        return False
    if facts.leads_to_mate:
        return True
    return (
        facts.score_after >= t.STANDOUT_ADVANTAGE
        and facts.gap is not None
        and facts.gap >= t.BRILLIANT_GAP
    )


def is_great(facts: MoveFacts) -> bool:
    before = facts.score_before
    after = facts.score_after
    if before <= t.CLEARLY_LOSING and after >= t.SOUND_AFTER:
        return True
    if (
        facts.gap is not None
        and facts.second_value is not None
        and facts.gap >= t.ONLY_MOVE_GAP
        and facts.second_value <= t.ONLY_MOVE_SECOND_LINE
        and after >= t.ONLY_MOVE_AFTER
    ):
        return True
    if (
        abs(before) < t.NEAR_EQUAL
        and after >= t.CONVERSION_AFTER
        and facts.gap is not None
        and facts.gap >= t.CONVERSION_GAP
    ):
        return True
    return after - before >= t.GREAT_SWING and abs(before) < t.COMPLEX_POSITION


def missed_flags(score_before: int, loss: int) -> tuple[bool, bool]:
    """Return ``(missed_win, missed_defense)`` for a move."""
    slipped = loss > t.INACCURACY_THRESHOLD
    missed_win = slipped and score_before >= t.MISSED_FLAG_THRESHOLD
    missed_defense = slipped and score_before <= -t.MISSED_FLAG_THRESHOLD
    return missed_win, missed_defense
