"""Detector for skewer motifs."""

from __future__ import annotations

import chess

from movegrade._ray_pieces import SLIDER_STEPS, first_two_on_ray
from movegrade.BaseMotifDetector import BaseMotifDetector
from movegrade.MotifContext import MotifContext
from movegrade.MotifFinding import MotifFinding

_SKEWERED_PIECES = frozenset({chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN})


class SkewerDetector(BaseMotifDetector):
    """Detect a checking slider with a valuable enemy piece behind the king."""

    motif = "skewer"

    def detect(self, context: MotifContext) -> list[MotifFinding]:
        piece = self.moved_slider(context)
        if piece is None or not context.board_after.is_check():
            return []
        opponent = not context.mover_color
        for step in SLIDER_STEPS[piece.piece_type]:
            first, second = first_two_on_ray(context.board_after, context.move.to_square, step)
            if first is None or first.color != opponent or first.piece_type != chess.KING:
                continue
            if (
                second is not None
                and second.color == opponent
                and second.piece_type in _SKEWERED_PIECES
            ):
                return self.finding(context.move.to_square)
        return []
