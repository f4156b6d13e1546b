"""Board-state helpers over python-chess used by the move classifier."""

from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass

import chess
import chess.pgn

from movegrade.errors import InvalidGameRecord

PIECE_VALUES = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}


@dataclass(frozen=True, slots=True)
class Material:
    """Material per side in pawn units."""

    white: int
    black: int

    @property
    def total(self) -> int:
        return self.white + self.black

    def balance_for(self, color: chess.Color) -> int:
        """Mover's material minus the opponent's."""
        return self.white - self.black if color == chess.WHITE else self.black - self.white


def parse_game(pgn: str | None) -> chess.pgn.Game:
    if not pgn or not pgn.strip():
        raise InvalidGameRecord("Game has no move text")
    game = chess.pgn.read_game(io.StringIO(pgn))
    if game is None:
        raise InvalidGameRecord("Game move text could not be parsed")
    if game.errors:
        raise InvalidGameRecord(f"Game move text is invalid: {game.errors[0]}")
    return game


def load_game(pgn: str | None) -> tuple[chess.Board, list[chess.Move]]:
    """Return the starting board and the mainline moves of a PGN.

    Raises:
        InvalidGameRecord: the PGN is empty, unparsable or has no moves.
    """
    game = parse_game(pgn)
    moves = list(game.mainline_moves())
    if not moves:
        raise InvalidGameRecord("Game has no moves")
    return game.board(), moves


def apply_move(board: chess.Board, move: chess.Move) -> chess.Board:
    """Return a new board with ``move`` played; ``board`` is left untouched."""
    next_board = board.copy(stack=False)
    next_board.push(move)
    return next_board


def material(board: chess.Board) -> Material:
    white = 0
    black = 0
    for piece in board.piece_map().values():
        value = PIECE_VALUES[piece.piece_type]
        if piece.color == chess.WHITE:
            white += value
        else:
            black += value
    return Material(white=white, black=black)


def legal_captures(board: chess.Board, square: chess.Square) -> list[chess.Square]:
    """Squares of pieces that can legally capture on ``square``."""
    return [
        move.from_square
        for move in board.legal_moves
        if move.to_square == square and board.is_capture(move)
    ]


def position_key(fen: str) -> str:
    """FEN without the move clocks, for opening-book lookups."""
    return " ".join(fen.split()[:4])


def parse_uci(board: chess.Board, uci: str) -> chess.Move | None:
    """Return the legal move for ``uci`` on ``board`` or None."""
    try:
        move = chess.Move.from_uci(uci)
    except ValueError:
        return None
    return move if move in board.legal_moves else None


def material_delta_after(
    board: chess.Board,
    moves: Iterable[chess.Move | str],
    color: chess.Color,
) -> int:
    """Change in ``color``'s material balance after playing ``moves`` from ``board``.

    The walk stops at the first move that is not legal in the reached position.
    """
    start = material(board).balance_for(color)
    current = board.copy(stack=False)
    for item in moves:
        move = item if isinstance(item, chess.Move) else parse_uci(current, item)
        if move is None or move not in current.legal_moves:
            break
        current.push(move)
    return material(current).balance_for(color) - start
