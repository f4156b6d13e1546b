"""Queue draining, stale-work detection and user-triggered stop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from contextlib import suppress
from datetime import datetime

from movegrade.Analyzer import CLEARED_MARKERS, Analyzer
from movegrade.config import Settings
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.game_record import GameRecord
from movegrade.EngineOrchestrator import EngineOrchestrator
from movegrade.errors import StaleAnalysis
from movegrade.ports.repositories import GameRepository
from movegrade.utils.logger import get_logger
from movegrade.utils.now import Now

logger = get_logger(__name__)


class AnalysisScheduler:
    """Drain pending games one at a time under the engine lease.

    ``poll`` is single-flight: a call made while a drain is running returns
    immediately. Games stuck in ``analyzing`` past the stale budget are
    demoted to ``failed`` and only come back through :meth:`enqueue`.
    """

    def __init__(
        self,
        games: GameRepository,
        analyzer: Analyzer,
        orchestrator: EngineOrchestrator,
        clock: Callable[[], datetime] = Now.as_datetime,
    ) -> None:
        self._games = games
        self._analyzer = analyzer
        self._orchestrator = orchestrator
        self._clock = clock
        self._draining = False
        self._stop_requested = False
        self._wake = asyncio.Event()
        self._shutdown = asyncio.Event()
        self.current_game_id: str | None = None

    @property
    def settings(self) -> Settings:
        return self._analyzer.settings

    @property
    def is_processing(self) -> bool:
        return self._draining

    def check_heartbeat(self, record: GameRecord, now: datetime | None = None) -> None:
        """Raise :class:`StaleAnalysis` when the game's heartbeat is past the stale budget."""
        current = now or self._clock()
        stale_ms = self._analyzer.profile.stale_after_ms()
        elapsed = Now.elapsed_ms(record.heartbeat_at or record.started_at, current)
        if elapsed is None:
            raise StaleAnalysis(f"Game {record.game_id} is analyzing without a heartbeat")
        if elapsed > stale_ms:
            raise StaleAnalysis(
                f"Game {record.game_id} heartbeat is {elapsed}ms old (budget {stale_ms}ms)"
            )

    def _stale(self, now: datetime) -> list[tuple[GameRecord, StaleAnalysis]]:
        stale = []
        for record in self._games.list_by_status(AnalysisStatus.ANALYZING):
            if record.game_id == self.current_game_id:
                continue
            try:
                self.check_heartbeat(record, now)
            except StaleAnalysis as exc:
                stale.append((record, exc))
        return stale

    def stale_games(self, now: datetime | None = None) -> list[GameRecord]:
        """Analyzing games whose heartbeat is older than the stale budget."""
        return [record for record, _ in self._stale(now or self._clock())]

    def demote_stale(self, now: datetime | None = None) -> list[str]:
        demoted = []
        for record, reason in self._stale(now or self._clock()):
            logger.warning("Failing stalled analysis: %s", reason)
            self._games.update(
                record.game_id, {"status": AnalysisStatus.FAILED, **CLEARED_MARKERS}
            )
            demoted.append(record.game_id)
        return demoted

    async def poll(self) -> int:
        """Run one scheduling pass and return the number of games processed."""
        if self._draining:
            return 0
        self._draining = True
        self._stop_requested = False
        processed = 0
        try:
            pending = self._games.count_by_status(AnalysisStatus.PENDING)
            demoted = self.demote_stale()
            if not pending and not demoted:
                return 0
            logger.info("Analysis queue: %s pending, %s stale demoted", pending, len(demoted))
            processed = await self._drain()
        finally:
            self._draining = False
            self.current_game_id = None
        return processed

    async def _drain(self) -> int:
        processed = 0
        between_s = self.settings.scheduler.between_games_ms / 1000
        while not self._stop_requested:
            record = self._games.next_pending()
            if record is None:
                break
            await self._process(record.game_id)
            processed += 1
            await asyncio.sleep(between_s)
        return processed

    async def _process(self, game_id: str) -> None:
        self.current_game_id = game_id
        try:
            await self._orchestrator.init(self._analyzer.profile.version)
            async with self._orchestrator.lease() as handle:
                status = await self._analyzer.process_game(game_id, handle)
            logger.info("Game %s finished as %s", game_id, status)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected error while processing game %s", game_id)
            self._games.update(game_id, {"status": AnalysisStatus.FAILED, **CLEARED_MARKERS})
        finally:
            self.current_game_id = None

    def enqueue(self, game_ids: Iterable[str]) -> list[str]:
        """Queue games for analysis and wake the scheduler.

        The game currently being analysed is left alone and counts as queued.
        """
        queued = []
        for game_id in game_ids:
            if self._games.get(game_id) is None:
                logger.warning("Cannot enqueue unknown game %s", game_id)
                continue
            if game_id == self.current_game_id:
                logger.info("Game %s is already being analysed; not requeued", game_id)
                queued.append(game_id)
                continue
            self._games.update(
                game_id,
                {"status": AnalysisStatus.PENDING, "retry_count": 0, **CLEARED_MARKERS},
            )
            queued.append(game_id)
        if queued:
            self.notify()
        return queued

    def notify(self) -> None:
        self._wake.set()

    async def run_forever(self) -> None:
        """Poll every tick or whenever :meth:`notify` is called, until :meth:`shutdown`."""
        logger.info("Analysis scheduler started (tick %ss)", self.settings.scheduler_tick_s)
        while not self._shutdown.is_set():
            await self.poll()
            with suppress(TimeoutError):
                await asyncio.wait_for(self._wake.wait(), self.settings.scheduler_tick_s)
            self._wake.clear()
        logger.info("Analysis scheduler stopped")

    def shutdown(self) -> None:
        self._shutdown.set()
        self._wake.set()

    async def close(self) -> None:
        """Shut the engine process down."""
        await self._orchestrator.terminate()

    async def stop_analysis(self) -> list[str]:
        """Stop the engine, end the drain and fail in-flight games.

        Stopped games are not requeued and queued games go back to idle.
        """
        self._stop_requested = True
        await self._orchestrator.stop()
        await self._orchestrator.terminate()
        stopped = []
        for record in self._games.list_by_status(AnalysisStatus.ANALYZING):
            self._games.update(
                record.game_id, {"status": AnalysisStatus.FAILED, **CLEARED_MARKERS}
            )
            stopped.append(record.game_id)
        for record in self._games.list_by_status(AnalysisStatus.PENDING):
            self._games.update(record.game_id, {"status": AnalysisStatus.IDLE})
        if stopped:
            logger.info("Stopped analysis of %s", stopped)
        return stopped
