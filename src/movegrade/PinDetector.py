"""Detector for pin motifs."""

from __future__ import annotations

import chess

from movegrade._ray_pieces import SLIDER_STEPS, first_two_on_ray
from movegrade.BaseMotifDetector import BaseMotifDetector
from movegrade.MotifContext import MotifContext
from movegrade.MotifFinding import MotifFinding


class PinDetector(BaseMotifDetector):
    """Detect a moved slider pinning an enemy piece against its king."""

    motif = "pin"

    def detect(self, context: MotifContext) -> list[MotifFinding]:
        piece = self.moved_slider(context)
        if piece is None:
            return []
        opponent = not context.mover_color
        for step in SLIDER_STEPS[piece.piece_type]:
            first, second = first_two_on_ray(context.board_after, context.move.to_square, step)
            if first is None or second is None:
                continue
            if first.color != opponent or first.piece_type == chess.KING:
                continue
            if second.color == opponent and second.piece_type == chess.KING:
                return self.finding(context.move.to_square)
        return []
