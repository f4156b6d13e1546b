"""Per-game analysis loop with incremental persistence and resume."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import chess

from movegrade.AnalysisProfile import AnalysisProfile
from movegrade.board_state import load_game
from movegrade.config import Settings, get_settings
from movegrade.db.duckdb_store import DuckDbStore
from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.errors import EngineTimeout, InvalidGameRecord, NoTrackedParticipant
from movegrade.evaluate_ply__analyzer import BookLookup, PlyInput, analyze_ply
from movegrade.ports.engine import PositionAnalyzer
from movegrade.ports.repositories import (
    AnalysisLogRepository,
    GameRepository,
    OpeningBookRepository,
    ReviewPositionRepository,
)
from movegrade.review_positions import build_review_positions
from movegrade.RunningStats import RunningStats
from movegrade.tracked_players import tracked_sides
from movegrade.utils.logger import funclogger, get_logger
from movegrade.utils.now import Now

logger = get_logger(__name__)

CLEARED_MARKERS: dict[str, object] = {"started_at": None, "heartbeat_at": None}


def progress_percent(done: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(100 * done / total + 0.5)


def _replay_boards(board: chess.Board, moves: list[chess.Move]) -> list[chess.Board]:
    """Board before each move."""
    boards = []
    current = board.copy(stack=False)
    for move in moves:
        boards.append(current.copy(stack=False))
        current.push(move)
    return boards


class Analyzer:
    """Analyse one game at a time against an engine handle.

    Every ply is persisted as soon as it is classified, so an interrupted game
    resumes from its last stored ply. Review positions and summary statistics
    are written when the game completes or fails.
    """

    def __init__(
        self,
        games: GameRepository,
        analysis_log: AnalysisLogRepository,
        review_positions: ReviewPositionRepository,
        openings: OpeningBookRepository | None = None,
        settings: Settings | None = None,
        profile: AnalysisProfile | None = None,
        clock: Callable[[], datetime] = Now.as_datetime,
    ) -> None:
        self.settings = settings or get_settings()
        self.profile = profile or AnalysisProfile.from_settings(self.settings)
        self._games = games
        self._log = analysis_log
        self._reviews = review_positions
        self._openings = openings
        self._clock = clock

    @classmethod
    def from_store(
        cls,
        store: DuckDbStore,
        settings: Settings | None = None,
        **kwargs,
    ) -> Analyzer:
        return cls(
            store.games,
            store.analysis_log,
            store.review_positions,
            store.openings,
            settings=settings,
            **kwargs,
        )

    @property
    def _book_lookup(self) -> BookLookup | None:
        return self._openings.book_moves if self._openings is not None else None

    @funclogger
    async def process_game(
        self,
        game_id: str,
        engine: PositionAnalyzer,
    ) -> AnalysisStatus | None:
        """Analyse ``game_id`` and return the status it ends in.

        Returns None when the game does not exist.
        """
        record = self._games.get(game_id)
        if record is None:
            logger.warning("Game %s not found; skipping", game_id)
            return None
        if record.status is AnalysisStatus.COMPLETED:
            return AnalysisStatus.COMPLETED
        try:
            sides = tracked_sides(record, self.settings.tracked_players)
        except NoTrackedParticipant:
            logger.info("Game %s has no tracked participant; ignoring", game_id)
            self._games.update(game_id, {"status": AnalysisStatus.IGNORED, **CLEARED_MARKERS})
            return AnalysisStatus.IGNORED
        try:
            board, moves = load_game(record.pgn)
        except InvalidGameRecord as exc:
            logger.warning("Game %s cannot be analysed: %s", game_id, exc)
            self._games.update(
                game_id,
                {"status": AnalysisStatus.FAILED, "progress": 0, **CLEARED_MARKERS},
            )
            return AnalysisStatus.FAILED

        now = self._clock()
        self._games.update(
            game_id,
            {"status": AnalysisStatus.ANALYZING, "started_at": now, "heartbeat_at": now},
        )
        boards = _replay_boards(board, moves)
        entries = self._resume_prefix(game_id, boards, moves)
        stats = RunningStats.replay(entries)
        if entries:
            logger.info("Resuming game %s from ply %s", game_id, len(entries) + 1)

        try:
            await engine.set_options(self.profile.engine_options())
            await self._analyze_moves(
                game_id, record.eco, engine, boards, moves, entries, stats
            )
        except EngineTimeout as exc:
            return self._handle_timeout(
                game_id, record.retry_count, exc, entries, len(moves), sides
            )
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Analysis of game %s failed at ply %s", game_id, len(entries) + 1)
            self._fail(game_id, entries, len(moves), sides)
            return AnalysisStatus.FAILED

        self._complete(game_id, entries, stats, sides)
        return AnalysisStatus.COMPLETED

    def _resume_prefix(
        self,
        game_id: str,
        boards: list[chess.Board],
        moves: list[chess.Move],
    ) -> list[AnalysisLogEntry]:
        """Return the stored log prefix when it matches the replayed game."""
        entries = self._log.fetch(game_id)
        for index, entry in enumerate(entries):
            if (
                index >= len(moves)
                or entry.ply != index + 1
                or entry.move != moves[index].uci()
                or entry.fen != boards[index].fen()
            ):
                logger.warning("Stored analysis of game %s does not match; restarting", game_id)
                self._log.delete(game_id)
                return []
        return entries

    async def _analyze_moves(
        self,
        game_id: str,
        eco: str | None,
        engine: PositionAnalyzer,
        boards: list[chess.Board],
        moves: list[chess.Move],
        entries: list[AnalysisLogEntry],
        stats: RunningStats,
    ) -> None:
        total = len(moves)
        yield_s = self.settings.analysis.ply_yield_ms / 1000
        for index in range(len(entries), total):
            board = boards[index]
            move = moves[index]
            previous_capture = None
            if index > 0 and boards[index - 1].is_capture(moves[index - 1]):
                previous_capture = moves[index - 1].to_square
            entry = await analyze_ply(
                engine,
                PlyInput(
                    ply=index + 1,
                    board=board,
                    move=move,
                    previous_capture_square=previous_capture,
                    eco=eco,
                ),
                self.profile,
                self._book_lookup,
            )
            self._log.append(game_id, entry)
            entries.append(entry)
            stats.add(entry)
            self._games.update(
                game_id,
                {
                    "heartbeat_at": self._clock(),
                    "progress": progress_percent(len(entries), total),
                },
            )
            await asyncio.sleep(yield_s)

    def _handle_timeout(
        self,
        game_id: str,
        retry_count: int,
        exc: EngineTimeout,
        entries: list[AnalysisLogEntry],
        total: int,
        sides: set[str],
    ) -> AnalysisStatus:
        attempts = retry_count + 1
        if attempts < self.settings.max_attempts:
            logger.warning(
                "Engine timeout on game %s at ply %s (attempt %s/%s); requeueing",
                game_id,
                len(entries) + 1,
                attempts,
                self.settings.max_attempts,
            )
            self._games.update(
                game_id,
                {
                    "status": AnalysisStatus.PENDING,
                    "retry_count": attempts,
                    "progress": progress_percent(len(entries), total),
                    **CLEARED_MARKERS,
                },
            )
            return AnalysisStatus.PENDING
        logger.error(
            "Engine timeout on game %s; giving up after %s attempts (%s)", game_id, attempts, exc
        )
        self._fail(game_id, entries, total, sides, retry_count=attempts)
        return AnalysisStatus.FAILED

    def _write_review_positions(
        self,
        game_id: str,
        entries: list[AnalysisLogEntry],
        sides: set[str],
    ) -> None:
        self._reviews.delete_for_game(game_id)
        if not self.settings.review_positions_enabled:
            return
        positions = build_review_positions(game_id, entries, self._clock(), sides)
        self._reviews.bulk_insert(positions)
        self._reviews.evict_to_limit(self.settings.review_position_limit)

    def _fail(
        self,
        game_id: str,
        entries: list[AnalysisLogEntry],
        total: int,
        sides: set[str],
        retry_count: int | None = None,
    ) -> None:
        self._write_review_positions(game_id, entries, sides)
        changes: dict[str, object] = {
            "status": AnalysisStatus.FAILED,
            "progress": progress_percent(len(entries), total),
            **CLEARED_MARKERS,
        }
        if retry_count is not None:
            changes["retry_count"] = retry_count
        self._games.update(game_id, changes)

    def _complete(
        self,
        game_id: str,
        entries: list[AnalysisLogEntry],
        stats: RunningStats,
        sides: set[str],
    ) -> None:
        self._write_review_positions(game_id, entries, sides)
        self._games.update(
            game_id,
            {
                "status": AnalysisStatus.COMPLETED,
                "progress": 100,
                "analyzed_at": self._clock(),
                "retry_count": 0,
                **CLEARED_MARKERS,
                **stats.summary(),
            },
        )
        logger.info(
            "Completed game %s: %s plies, accuracy w=%s b=%s",
            game_id,
            len(entries),
            stats.white_accuracy,
            stats.black_accuracy,
        )
