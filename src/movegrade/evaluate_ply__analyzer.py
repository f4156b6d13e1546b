"""Evaluate and classify a single ply of a game."""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass

import chess

from movegrade import classification_thresholds as t
from movegrade.accuracy import MAX_COUNTED_LOSS, move_accuracy
from movegrade.AnalysisProfile import AnalysisProfile
from movegrade.board_state import apply_move, material, material_delta_after, position_key
from movegrade.book_moves import is_book_move
from movegrade.classify_move import classify_move, missed_flags
from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.evaluation import MATE_SCORE, EvaluationResult, PvLine
from movegrade.domain.game_phase import GamePhase
from movegrade.domain.move_classification import MoveClassification
from movegrade.engine_timeout import DEEP_PASS_TIMEOUT_MS
from movegrade.errors import EngineProcessError, EngineTimeout
from movegrade.MotifContext import MotifContext
from movegrade.MotifDetectionService import MotifDetectionService
from movegrade.move_commentary import explanation, plan_hint
from movegrade.MoveFacts import MoveFacts
from movegrade.ports.engine import PositionAnalyzer
from movegrade.utils.logger import get_logger

logger = get_logger(__name__)

BookLookup = Callable[[str | None, str], Collection[str]]

_MOTIF_SERVICE = MotifDetectionService()


@dataclass(frozen=True, slots=True)
class PlyInput:
    """One move to evaluate.

    ``ply`` is 1-based. ``previous_capture_square`` is the target square of the
    previous ply when it was a capture.
    """

    ply: int
    board: chess.Board
    move: chess.Move
    previous_capture_square: chess.Square | None = None
    eco: str | None = None


@dataclass(frozen=True, slots=True)
class PlyEvaluation:
    facts: MoveFacts
    classification: MoveClassification
    before: EvaluationResult
    book_move: bool = False


async def _score_after(
    engine: PositionAnalyzer,
    ply: PlyInput,
    board_after: chess.Board,
    before: EvaluationResult,
    profile: AnalysisProfile,
) -> tuple[int, list[str]]:
    """Mover-perspective score after the move and the continuation that follows."""
    uci = ply.move.uci()
    line = before.line_for(uci)
    if line is not None:
        return line.value, list(line.pv[1:])
    if board_after.is_checkmate():
        return MATE_SCORE, []
    if board_after.is_game_over():
        return 0, []
    after = await engine.analyze(
        board_after.fen(),
        profile.shallow_depth,
        1,
        move_time_ms=profile.move_time_ms,
    )
    top = after.top
    continuation = list(top.pv) if top is not None else []
    return -after.value, continuation


async def evaluate_ply(
    engine: PositionAnalyzer,
    ply: PlyInput,
    profile: AnalysisProfile,
    book_lookup: BookLookup | None = None,
    timeout_ms: int | None = None,
) -> PlyEvaluation:
    """Query the engine around one move and classify it."""
    board = ply.board
    move = ply.move
    mover = board.turn
    before = await engine.analyze(
        board.fen(),
        profile.depth,
        profile.multipv,
        move_time_ms=profile.move_time_ms,
        timeout_ms=timeout_ms,
    )
    board_after = apply_move(board, move)
    score_after, continuation = await _score_after(engine, ply, board_after, before, profile)
    score_before = before.value

    material_delta = (
        material(board_after).balance_for(mover) - material(board).balance_for(mover)
    )
    lookahead = [move, *continuation[: t.LOOKAHEAD_PLIES - 1]]
    lookahead_delta = material_delta_after(board, lookahead, mover)
    phase = GamePhase.resolve(ply.ply, material(board).total)
    motifs = _MOTIF_SERVICE.motifs(
        MotifContext(
            board_before=board,
            board_after=board_after,
            move=move,
            mover_color=mover,
            score_before=score_before,
            score_after=score_after,
            lookahead_delta=lookahead_delta,
        )
    )
    second = before.second
    uci = move.uci()
    facts = MoveFacts(
        move=uci,
        best_move=before.best_move,
        score_before=score_before,
        score_after=score_after,
        phase=phase,
        material_delta=material_delta,
        lookahead_delta=lookahead_delta,
        gap=before.gap,
        second_value=second.value if second is not None else None,
        motifs=tuple(motifs),
        is_top_candidate=before.top is not None and before.top.move == uci,
        is_simple_recapture=(
            ply.previous_capture_square == move.to_square and board.is_capture(move)
        ),
    )
    classification = classify_move(facts)
    book = False
    if phase is GamePhase.OPENING:
        known = book_lookup(ply.eco, position_key(board.fen())) if book_lookup else ()
        book = is_book_move(facts, known)
    if book:
        classification = MoveClassification.BOOK
    return PlyEvaluation(
        facts=facts,
        classification=classification,
        before=before,
        book_move=book,
    )


async def analyze_ply(
    engine: PositionAnalyzer,
    ply: PlyInput,
    profile: AnalysisProfile,
    book_lookup: BookLookup | None = None,
) -> AnalysisLogEntry:
    """Evaluate one ply, re-checking blunders at the deep depth when enabled."""
    evaluation = await evaluate_ply(engine, ply, profile, book_lookup)
    if profile.deep_enabled and evaluation.classification is MoveClassification.BLUNDER:
        try:
            evaluation = await evaluate_ply(
                engine,
                ply,
                profile.deep(),
                book_lookup,
                timeout_ms=DEEP_PASS_TIMEOUT_MS,
            )
        except (EngineTimeout, EngineProcessError) as exc:
            logger.warning(
                "Deep verification failed at ply %s (%s); keeping first pass",
                ply.ply,
                exc,
            )
    return build_log_entry(ply, evaluation, profile.multipv)


def _white_pov(value: int | None, mover: chess.Color) -> int | None:
    if value is None:
        return None
    return value if mover == chess.WHITE else -value


def _white_pov_line(line: PvLine, mover: chess.Color) -> PvLine:
    return line if mover == chess.WHITE else line.flipped()


def build_log_entry(
    ply: PlyInput,
    evaluation: PlyEvaluation,
    multipv: int,
) -> AnalysisLogEntry:
    board = ply.board
    mover = board.turn
    facts = evaluation.facts
    classification = evaluation.classification
    top = evaluation.before.top
    loss = min(facts.eval_diff, MAX_COUNTED_LOSS)
    missed_win, missed_defense = missed_flags(facts.score_before, loss)
    san = board.san(ply.move)
    best_san = _best_san(board, facts.best_move)
    score_before = facts.score_before
    mate = top.mate if top is not None else None
    return AnalysisLogEntry(
        ply=ply.ply,
        fen=board.fen(),
        move=facts.move,
        san=san,
        side="w" if mover == chess.WHITE else "b",
        best_move=facts.best_move,
        classification=classification,
        phase=facts.phase,
        score=_white_pov(score_before, mover),
        mate=_white_pov(mate, mover),
        score_after=_white_pov(facts.score_after, mover),
        eval_diff=loss,
        accuracy=move_accuracy(loss, classification),
        pv_lines=[
            _white_pov_line(line, mover) for line in evaluation.before.pv_lines[:multipv]
        ],
        motifs=list(facts.motifs),
        missed_win=missed_win,
        missed_defense=missed_defense,
        book_move=evaluation.book_move,
        plan_hint=plan_hint(facts.phase, facts.motifs, classification),
        explanation=explanation(classification, san, best_san),
    )


def _best_san(board: chess.Board, best_move: str | None) -> str | None:
    if not best_move:
        return None
    try:
        move = chess.Move.from_uci(best_move)
    except ValueError:
        return best_move
    if move not in board.legal_moves:
        return best_move
    return board.san(move)


__all__ = [
    "BookLookup",
    "PlyEvaluation",
    "PlyInput",
    "analyze_ply",
    "build_log_entry",
    "evaluate_ply",
]
