"""Decode python-chess engine info updates into typed evaluation values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import chess
import chess.engine

from movegrade.domain.evaluation import EvaluationResult, PvLine

MAX_ENGINE_MULTIPV = 8


def clamp_multipv(value: int | None) -> int:
    return max(1, min(MAX_ENGINE_MULTIPV, int(value or 1)))


def _resolve_relative_score(score: object) -> chess.engine.Score | None:
    if isinstance(score, chess.engine.PovScore):
        return score.relative
    if isinstance(score, chess.engine.Score):
        return score
    return None


def _rank_from_info(info: Mapping[str, object]) -> int:
    value = info.get("multipv")
    return int(value) if isinstance(value, int) and value > 0 else 1


def _depth_from_info(info: Mapping[str, object]) -> int:
    depth_value = info.get("depth")
    return int(depth_value) if isinstance(depth_value, (int, float)) else 0


def _pv_from_info(info: Mapping[str, object]) -> tuple[str, ...]:
    pv = info.get("pv")
    if not isinstance(pv, list):
        return ()
    return tuple(move.uci() for move in pv if isinstance(move, chess.Move))


def pv_line_from_info(info: Mapping[str, object]) -> PvLine | None:
    """Return the line carried by an info update, or None for progress-only updates.

    Scores are taken relative to the side to move of the searched position.
    """
    pv = _pv_from_info(info)
    score = _resolve_relative_score(info.get("score"))
    if not pv or score is None:
        return None
    return PvLine(
        move=pv[0],
        rank=_rank_from_info(info),
        score_cp=score.score(),
        mate=score.mate(),
        depth=_depth_from_info(info),
        pv=pv,
    )


def evaluation_from_lines(
    lines_by_rank: Mapping[int, PvLine],
    best_move: chess.Move | str | None,
    multipv: int,
) -> EvaluationResult:
    """Assemble the final result from the deepest line seen for each rank."""
    lines = [lines_by_rank[rank] for rank in sorted(lines_by_rank) if rank <= multipv]
    best = best_move.uci() if isinstance(best_move, chess.Move) else best_move
    if best is None and lines:
        best = lines[0].move
    depth = max((line.depth for line in lines), default=0)
    return EvaluationResult(best_move=best, pv_lines=lines, depth=depth)


def format_option_value(value: object) -> str | int | None:
    """Format a UCI option value; booleans become ``true``/``false`` and None stays bare."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return value
    return str(value)


def supported_options(
    options: Mapping[str, object],
    engine_options: Mapping[str, object],
    managed: Iterable[str],
) -> dict[str, str | int | None]:
    """Filter requested options down to those the engine advertises and does not manage."""
    managed_names = {name.lower() for name in managed}
    advertised = {name.lower(): name for name in engine_options}
    applied: dict[str, str | int | None] = {}
    for name, value in options.items():
        if name.lower() in managed_names or _is_option_managed(engine_options.get(name)):
            continue
        real_name = advertised.get(name.lower())
        if real_name is None:
            continue
        applied[real_name] = format_option_value(value)
    return applied


def _is_option_managed(option_meta: object) -> bool:
    if option_meta is None:
        return False
    is_managed_attr = getattr(option_meta, "is_managed", None)
    if is_managed_attr is not None:
        return is_managed_attr() if callable(is_managed_attr) else bool(is_managed_attr)
    return bool(getattr(option_meta, "managed", False))
