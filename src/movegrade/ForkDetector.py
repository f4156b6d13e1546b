"""Detector for fork motifs."""

from __future__ import annotations

from movegrade.BaseMotifDetector import HIGH_VALUE_PIECES, BaseMotifDetector
from movegrade.MotifContext import MotifContext
from movegrade.MotifFinding import MotifFinding

MIN_FORK_TARGETS = 2


class ForkDetector(BaseMotifDetector):
    """Detect a moved piece attacking two or more enemy pieces; the king counts."""

    motif = "fork"

    def detect(self, context: MotifContext) -> list[MotifFinding]:
        to_square = context.move.to_square
        if self.moved_piece(context) is None:
            return []
        targets = [
            piece
            for piece in self.iter_attacked_targets(
                context.board_after, to_square, context.mover_color
            )
            if piece.piece_type in HIGH_VALUE_PIECES
        ]
        if len(targets) >= MIN_FORK_TARGETS:
            return self.finding(to_square)
        return []
