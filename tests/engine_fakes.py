from __future__ import annotations

import asyncio
import io
from collections.abc import Iterable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import chess
import chess.engine
import chess.pgn

from movegrade.domain.evaluation import EvaluationResult, PvLine

SAMPLE_PGN = """[Event "Casual game"]
[Site "https://lichess.org/abcd1234"]
[White "alice"]
[Black "bob"]
[Result "1-0"]
[WhiteElo "1850"]
[BlackElo "1790"]
[TimeControl "300+3"]
[ECO "A00"]
[UTCDate "2024.03.05"]
[UTCTime "18:30:00"]

1. g3 g6 2. Bg2 Bg7 3. Nh3 Nh6 4. O-O O-O 5. d3 d6 6. Nc3 e5 7. Rb1 Re8
8. a3 Be6 9. b4 Qd7 10. Kh1 b6 11. Bxa8 c6 12. e4 f6 13. Be3 Nf7 14. Qd2 Kh8
15. f4 Qc7 16. Rbe1 Nd7 17. Ng1 Bf8 18. Nd5 Qd8 19. c4 Bg7 20. Nf3 Kg8 1-0
"""

BLUNDER_PLY = 20
BRILLIANT_PLY = 35
DEFAULT_SCORE_CP = 20


def replay(pgn: str = SAMPLE_PGN) -> tuple[list[chess.Board], list[chess.Move]]:
    """Boards before each mainline move and the moves themselves."""
    game = chess.pgn.read_game(io.StringIO(pgn))
    assert game is not None
    board = game.board()
    boards = []
    moves = list(game.mainline_moves())
    for move in moves:
        boards.append(board.copy(stack=False))
        board.push(move)
    return boards, moves


def single_line(
    move: str,
    score_cp: int | None = None,
    mate: int | None = None,
    pv: Iterable[str] = (),
) -> EvaluationResult:
    line = PvLine(
        move=move, rank=1, score_cp=score_cp, mate=mate, depth=12, pv=tuple(pv) or (move,)
    )
    return EvaluationResult(best_move=move, pv_lines=[line], depth=12)


def lines(*candidates: PvLine) -> EvaluationResult:
    ranked = [
        PvLine(
            move=line.move,
            rank=index + 1,
            score_cp=line.score_cp,
            mate=line.mate,
            depth=line.depth or 12,
            pv=line.pv or (line.move,),
        )
        for index, line in enumerate(candidates)
    ]
    return EvaluationResult(best_move=ranked[0].move, pv_lines=ranked, depth=12)


@dataclass
class ScriptedEngine:
    """Engine double answering from a table keyed by FEN.

    Unknown positions answer with the first legal move at a small edge for the
    side to move. Entries in ``failures`` are raised, one per call, before the
    scripted answer is used; a ``(fen, depth)`` key only fails searches at that
    depth.
    """

    responses: dict[str, EvaluationResult] = field(default_factory=dict)
    failures: dict[object, list[BaseException]] = field(default_factory=dict)
    calls: list[tuple[str, int, int, int | None]] = field(default_factory=list)
    options: list[dict[str, object]] = field(default_factory=list)

    @classmethod
    def playing_along(cls, pgn: str = SAMPLE_PGN) -> ScriptedEngine:
        """Every played move is the engine's only candidate at +20."""
        boards, moves = replay(pgn)
        engine = cls()
        for board, move in zip(boards, moves):
            engine.responses[board.fen()] = single_line(move.uci(), DEFAULT_SCORE_CP)
        return engine

    def script(self, fen: str, result: EvaluationResult) -> None:
        self.responses[fen] = result

    def fail(self, fen: str, *errors: BaseException, depth: int | None = None) -> None:
        key: object = fen if depth is None else (fen, depth)
        self.failures.setdefault(key, []).extend(errors)

    def calls_for(self, fen: str) -> int:
        return sum(1 for call in self.calls if call[0] == fen)

    async def analyze(
        self,
        fen: str,
        depth: int,
        multipv: int,
        move_time_ms: int | None = None,
        timeout_ms: int | None = None,
        on_update=None,
    ) -> EvaluationResult:
        self.calls.append((fen, depth, multipv, timeout_ms))
        pending = self.failures.get((fen, depth)) or self.failures.get(fen)
        if pending:
            raise pending.pop(0)
        if fen in self.responses:
            return self.responses[fen]
        board = chess.Board(fen)
        first = next(iter(board.legal_moves)).uci()
        return single_line(first, DEFAULT_SCORE_CP)

    async def set_options(self, options: Mapping[str, object]) -> bool:
        self.options.append(dict(options))
        return True


def sample_game_engine() -> ScriptedEngine:
    """Engine for SAMPLE_PGN with one black blunder and one white brilliancy.

    Before ply 20 the engine prefers ...a6 at +50 for Black, and after ...b6
    White wins the exchange at +400. At ply 35 Nd5 is the only winning move
    (mate in 3) and drops the knight for a pawn on the way.
    """
    boards, _moves = replay(SAMPLE_PGN)
    engine = ScriptedEngine.playing_along(SAMPLE_PGN)
    engine.script(boards[BLUNDER_PLY - 1].fen(), single_line("a7a6", 50))
    engine.script(boards[BLUNDER_PLY].fen(), single_line("g2a8", 400))
    engine.script(
        boards[BRILLIANT_PLY - 1].fen(),
        lines(
            PvLine(move="c3d5", rank=1, mate=3, pv=("c3d5", "c6d5")),
            PvLine(move="g1f3", rank=2, score_cp=80),
        ),
    )
    return engine


class FakeOrchestrator:
    """Stands in for the engine orchestrator in scheduler tests."""

    def __init__(self, engine: ScriptedEngine) -> None:
        self.engine = engine
        self.versions: list[str | None] = []
        self.stopped = 0
        self.terminated = 0

    async def init(self, version: str | None = None) -> None:
        self.versions.append(version)

    @asynccontextmanager
    async def lease(self):
        yield self.engine

    async def stop(self) -> None:
        self.stopped += 1

    async def terminate(self) -> None:
        self.terminated += 1


def info(
    move: str,
    score_cp: int | None = None,
    mate: int | None = None,
    rank: int = 1,
    depth: int = 10,
    pv: Iterable[str] = (),
) -> dict[str, object]:
    """python-chess style info update, score relative to White."""
    if mate is not None:
        score: chess.engine.Score = chess.engine.Mate(mate)
    else:
        score = chess.engine.Cp(score_cp or 0)
    moves = [chess.Move.from_uci(item) for item in (list(pv) or [move])]
    return {
        "multipv": rank,
        "depth": depth,
        "score": chess.engine.PovScore(score, chess.WHITE),
        "pv": moves,
    }


class FakeAnalysis:
    """Async iterator over scripted info updates.

    With ``hang=True`` iteration blocks after the scripted updates until
    :meth:`stop` is called.
    """

    def __init__(
        self,
        updates: Iterable[Mapping[str, object]],
        best: str | None,
        hang: bool = False,
    ) -> None:
        self._updates = list(updates)
        self._best = best
        self._hang = hang
        self._stopped = asyncio.Event()
        self.stop_calls = 0

    def stop(self) -> None:
        self.stop_calls += 1
        self._stopped.set()

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._updates:
            return self._updates.pop(0)
        if self._hang and not self._stopped.is_set():
            await self._stopped.wait()
        raise StopAsyncIteration

    async def wait(self) -> chess.engine.BestMove:
        move = chess.Move.from_uci(self._best) if self._best else None
        return chess.engine.BestMove(move, None)


def _option(name: str, kind: str, default: object) -> chess.engine.Option:
    return chess.engine.Option(name, kind, default, None, None, [])


DEFAULT_OPTIONS = {
    "Hash": _option("Hash", "spin", 16),
    "Threads": _option("Threads", "spin", 1),
    "MultiPV": _option("MultiPV", "spin", 1),
    "Use NNUE": _option("Use NNUE", "check", True),
}


class FakeUciProtocol:
    def __init__(self, analyses: Iterable[FakeAnalysis] = (), options=None) -> None:
        self.id = {"name": "Stockfish 17.1"}
        self.options = dict(DEFAULT_OPTIONS if options is None else options)
        self.analyses = list(analyses)
        self.searches: list[tuple[str, chess.engine.Limit, int]] = []
        self.configured: list[dict[str, object]] = []
        self.quit_calls = 0

    async def analysis(self, board, limit=None, multipv=None, game=None, **_kwargs):
        self.searches.append((board.fen(), limit, multipv))
        return self.analyses.pop(0)

    async def configure(self, options) -> None:
        self.configured.append(dict(options))

    async def quit(self) -> None:
        self.quit_calls += 1


class FakeTransport:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeEngineFactory:
    """Hands out scripted protocols in order, raising any queued start errors first."""

    def __init__(self, protocols: Iterable[FakeUciProtocol], errors: Iterable[BaseException] = ()):
        self.protocols = list(protocols)
        self.errors = list(errors)
        self.commands: list[str] = []
        self.transports: list[FakeTransport] = []

    async def __call__(self, command: str):
        self.commands.append(command)
        if self.errors:
            raise self.errors.pop(0)
        transport = FakeTransport()
        self.transports.append(transport)
        return transport, self.protocols.pop(0)
