"""Context for motif detector evaluation."""

# pylint: disable=invalid-name

from __future__ import annotations

from dataclasses import dataclass

import chess


@dataclass(frozen=True)
class MotifContext:
    """Inputs used by motif detectors.

    Scores are from the mover's perspective and ``lookahead_delta`` is the
    mover's material balance change over the first plies of the best line.
    """

    board_before: chess.Board
    board_after: chess.Board
    move: chess.Move
    mover_color: bool
    score_before: int = 0
    score_after: int = 0
    lookahead_delta: int = 0
