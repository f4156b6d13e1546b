"""Walk rays across the board for line motifs."""

from __future__ import annotations

from collections.abc import Iterable

import chess

BOARD_SQUARES = 64
ORTHOGONAL_STEPS = (1, -1, 8, -8)
DIAGONAL_STEPS = (7, -7, 9, -9)
SLIDER_STEPS = {
    chess.ROOK: ORTHOGONAL_STEPS,
    chess.BISHOP: DIAGONAL_STEPS,
    chess.QUEEN: ORTHOGONAL_STEPS + DIAGONAL_STEPS,
}
_STEP_RULES = {
    1: (1, 0),
    -1: (1, 0),
    8: (0, 1),
    -8: (0, 1),
    7: (1, 1),
    -7: (1, 1),
    9: (1, 1),
    -9: (1, 1),
}


def _step_square(square: chess.Square, step: int) -> chess.Square | None:
    next_square = square + step
    if not 0 <= next_square < BOARD_SQUARES:
        return None
    expected_file, expected_rank = _STEP_RULES[step]
    file_diff = abs(chess.square_file(next_square) - chess.square_file(square))
    rank_diff = abs(chess.square_rank(next_square) - chess.square_rank(square))
    if file_diff != expected_file or rank_diff != expected_rank:
        return None
    return chess.Square(next_square)


def iter_ray_pieces(
    board: chess.Board,
    start: chess.Square,
    step: int,
) -> Iterable[tuple[chess.Square, chess.Piece]]:
    """Yield occupied squares along a ray, nearest first."""
    current = start
    while True:
        next_square = _step_square(current, step)
        if next_square is None:
            return
        current = next_square
        piece = board.piece_at(current)
        if piece is not None:
            yield current, piece


def first_two_on_ray(
    board: chess.Board,
    start: chess.Square,
    step: int,
) -> tuple[chess.Piece | None, chess.Piece | None]:
    found: list[chess.Piece] = []
    for _, piece in iter_ray_pieces(board, start, step):
        found.append(piece)
        if len(found) == 2:
            return found[0], found[1]
    if found:
        return found[0], None
    return None, None
