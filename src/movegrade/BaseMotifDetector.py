"""Base helpers for motif detectors."""

from __future__ import annotations

from collections.abc import Iterable

import chess

from movegrade.MotifContext import MotifContext
from movegrade.MotifFinding import MotifFinding

HIGH_VALUE_PIECES = frozenset(
    {
        chess.QUEEN,
        chess.ROOK,
        chess.BISHOP,
        chess.KNIGHT,
        chess.KING,
    }
)

SLIDER_PIECES = frozenset(
    {
        chess.ROOK,
        chess.BISHOP,
        chess.QUEEN,
    }
)


class BaseMotifDetector:
    """Base class providing shared motif helper logic."""

    motif = "unknown"

    def detect(self, context: MotifContext) -> list[MotifFinding]:
        """Return findings for the played move."""
        raise NotImplementedError

    @staticmethod
    def moved_piece(context: MotifContext) -> chess.Piece | None:
        return context.board_after.piece_at(context.move.to_square)

    @classmethod
    def moved_slider(cls, context: MotifContext) -> chess.Piece | None:
        piece = cls.moved_piece(context)
        if piece is None or piece.piece_type not in SLIDER_PIECES:
            return None
        return piece

    @staticmethod
    def iter_attacked_targets(
        board: chess.Board,
        square: chess.Square,
        mover_color: bool,
    ) -> Iterable[chess.Piece]:
        for target in board.attacks(square):
            target_piece = board.piece_at(target)
            if target_piece and target_piece.color != mover_color:
                yield target_piece

    def finding(self, square: chess.Square | None = None) -> list[MotifFinding]:
        return [MotifFinding(motif=self.motif, square=square)]
