"""Single long-lived UCI engine process shared by the analysis pipeline."""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import chess
import chess.engine
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from movegrade.config import Settings, get_settings
from movegrade.domain.evaluation import EvaluationResult
from movegrade.engine_protocol import clamp_multipv, supported_options
from movegrade.engine_timeout import fallback_timeout_ms
from movegrade.EngineHandle import EngineHandle
from movegrade.EngineJob import EngineJob, UpdateCallback
from movegrade.errors import EngineProcessError, EngineTimeout
from movegrade.utils.generate_id import generate_id
from movegrade.utils.logger import get_logger
from movegrade.verify_stockfish_checksum import verify_stockfish_checksum

logger = get_logger(__name__)

EngineFactory = Callable[
    [str],
    Awaitable[tuple[asyncio.SubprocessTransport, chess.engine.UciProtocol]],
]

MANAGED_OPTIONS = ("MultiPV", "UCI_AnalyseMode", "Ponder", "UCI_Chess960", "UCI_Variant")
_QUIT_TIMEOUT_S = 2.0
_ENGINE_ERRORS = (chess.engine.EngineError, chess.engine.EngineTerminatedError)


@dataclass(frozen=True, slots=True)
class EngineCapabilities:
    nnue: bool = False
    multipv: bool = False


class EngineOrchestrator:
    """Owns the engine process, correlates searches and restarts on timeout.

    Only one search is outstanding at a time; starting a new one rejects the
    previous job. Option changes requested while a search is running, or just
    after one finished, are held back and applied before the next search.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        engine_factory: EngineFactory | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or get_settings()
        self._engine_factory = engine_factory or chess.engine.popen_uci
        self._clock = clock
        self._transport: asyncio.SubprocessTransport | None = None
        self._protocol: chess.engine.UciProtocol | None = None
        self._command: str | None = None
        self._version: str | None = None
        self._job: EngineJob | None = None
        self._analysis: chess.engine.AnalysisResult | None = None
        self._pending_options: dict[str, object] = {}
        self._last_job_finished_at: float | None = None
        self._lease_lock = asyncio.Lock()
        self.engine_name: str | None = None
        self.capabilities = EngineCapabilities()

    @property
    def is_running(self) -> bool:
        return self._protocol is not None

    @property
    def version(self) -> str | None:
        return self._version

    @property
    def busy(self) -> bool:
        return self._job is not None

    @property
    def pending_options(self) -> dict[str, object]:
        return dict(self._pending_options)

    def _resolve_command(self, version: str | None) -> str:
        configured = str(self.settings.stockfish.binary_for(version))
        if Path(configured).exists():
            return configured
        return shutil.which(configured) or configured

    async def init(self, version: str | None = None) -> None:
        """Start the engine, or restart it when a different version is requested."""
        version = version or self.settings.stockfish_version
        command = self._resolve_command(version)
        if self.is_running and self._command == command:
            self._version = version
            return
        if self.is_running:
            logger.info("Switching engine %s -> %s; restarting", self._version, version)
            await self.terminate()
        await self._start(command)
        self._version = version

    async def _start(self, command: str) -> None:
        if Path(command).exists():
            verify_stockfish_checksum(
                Path(command),
                self.settings.stockfish_checksum,
                self.settings.stockfish_checksum_mode,
            )
        logger.info("Starting Stockfish via %s", command)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.settings.stockfish_max_retries + 1)),
            wait=wait_exponential(multiplier=self.settings.stockfish_retry_backoff_ms / 1000),
            retry=retry_if_exception_type((OSError, chess.engine.EngineError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    transport, protocol = await self._engine_factory(command)
        except (OSError, chess.engine.EngineError) as exc:
            raise EngineProcessError(f"Failed to start engine: {command}") from exc
        self._transport = transport
        self._protocol = protocol
        self._command = command
        self.engine_name = protocol.id.get("name")
        self.capabilities = EngineCapabilities(
            nnue="Use NNUE" in protocol.options,
            multipv="MultiPV" in protocol.options,
        )
        logger.info("Engine ready: %s (%s)", self.engine_name or "unknown", self.capabilities)
        await self._flush_pending_options()

    def _require_protocol(self) -> chess.engine.UciProtocol:
        if self._protocol is None:
            raise EngineProcessError("Engine is not running")
        return self._protocol

    async def analyze(
        self,
        fen: str,
        depth: int,
        multipv: int,
        move_time_ms: int | None = None,
        timeout_ms: int | None = None,
        on_update: UpdateCallback | None = None,
    ) -> EvaluationResult:
        """Search ``fen`` and resolve with the engine's final answer.

        Raises:
            EngineTimeout: no best move before the deadline; the engine is restarted.
            EngineProcessError: the process failed or the job was rejected.
        """
        protocol = self._require_protocol()
        if self._job is not None:
            self._abandon_current_job(EngineProcessError("Superseded by a newer search"))
        await self._flush_pending_options()
        lines = clamp_multipv(multipv)
        job = EngineJob(job_id=generate_id("job-"), fen=fen, multipv=lines, on_update=on_update)
        self._job = job
        deadline_ms = timeout_ms or fallback_timeout_ms(depth, lines)
        try:
            return await asyncio.wait_for(
                self._run_job(protocol, job, depth, move_time_ms),
                deadline_ms / 1000,
            )
        except TimeoutError as exc:
            logger.warning("Engine job %s timed out after %sms", job.job_id, deadline_ms)
            await self._recover_from_timeout()
            raise EngineTimeout(job.job_id, deadline_ms) from exc
        except _ENGINE_ERRORS as exc:
            raise EngineProcessError(str(exc) or type(exc).__name__) from exc
        finally:
            if self._job is job:
                self._job = None
                self._analysis = None
                self._last_job_finished_at = self._clock()

    async def _run_job(
        self,
        protocol: chess.engine.UciProtocol,
        job: EngineJob,
        depth: int,
        move_time_ms: int | None,
    ) -> EvaluationResult:
        board = chess.Board(job.fen)
        limit = chess.engine.Limit(
            depth=depth,
            time=move_time_ms / 1000 if move_time_ms else None,
        )
        analysis = await protocol.analysis(board, limit, multipv=job.multipv, game=job.job_id)
        self._analysis = analysis
        try:
            async for info in analysis:
                job.record(info)
            best = await analysis.wait()
        except asyncio.CancelledError:
            analysis.stop()
            raise
        if job.rejection is not None:
            raise job.rejection
        return job.result(best.move)

    def _abandon_current_job(self, error: EngineProcessError) -> None:
        job = self._job
        if job is None:
            return
        logger.debug("Rejecting engine job %s: %s", job.job_id, error)
        job.reject(error)
        if self._analysis is not None:
            self._analysis.stop()

    async def _recover_from_timeout(self) -> None:
        try:
            await self.restart()
        except EngineProcessError:
            logger.exception("Engine restart after timeout failed")

    def _in_cooldown(self) -> bool:
        if self._last_job_finished_at is None:
            return False
        elapsed_ms = (self._clock() - self._last_job_finished_at) * 1000
        return elapsed_ms < self.settings.stockfish.option_cooldown_ms

    async def set_options(self, options: Mapping[str, object]) -> bool:
        """Apply engine options now if idle, otherwise defer them to the next search.

        Returns True when the options were sent to the engine immediately.
        """
        requested = dict(options)
        if not requested:
            return True
        if self._protocol is None or self._job is not None or self._in_cooldown():
            self._pending_options.update(requested)
            logger.debug("Deferring engine options: %s", sorted(requested))
            return False
        await self._configure(self._protocol, requested)
        return True

    async def _flush_pending_options(self) -> None:
        if not self._pending_options or self._protocol is None:
            return
        pending = self._pending_options
        self._pending_options = {}
        await self._configure(self._protocol, pending)

    async def _configure(
        self,
        protocol: chess.engine.UciProtocol,
        requested: Mapping[str, object],
    ) -> None:
        applied = supported_options(requested, protocol.options, MANAGED_OPTIONS)
        applied_names = {name.lower() for name in applied}
        skipped = sorted(name for name in requested if name.lower() not in applied_names)
        if skipped:
            logger.warning("Skipping unsupported or managed engine options: %s", skipped)
        if not applied:
            return
        try:
            await protocol.configure(applied)
        except _ENGINE_ERRORS as exc:
            raise EngineProcessError(f"Failed to configure engine: {exc}") from exc
        logger.info(
            "Stockfish configured (%s) with options: %s",
            self.engine_name or "unknown",
            applied,
        )

    async def stop(self) -> None:
        """Cancel the running search; the process stays up."""
        if self._analysis is not None:
            self._analysis.stop()

    async def terminate(self) -> None:
        """Kill the process and reject any outstanding job."""
        self._abandon_current_job(EngineProcessError("Engine terminated"))
        protocol, transport = self._protocol, self._transport
        self._protocol = None
        self._transport = None
        self._command = None
        self.engine_name = None
        self.capabilities = EngineCapabilities()
        if protocol is not None:
            try:
                await asyncio.wait_for(protocol.quit(), _QUIT_TIMEOUT_S)
            except (*_ENGINE_ERRORS, TimeoutError, OSError):
                logger.warning("Stockfish engine failed to quit cleanly")
        if transport is not None:
            transport.close()

    async def restart(self) -> None:
        version = self._version
        await self.stop()
        await self.terminate()
        await self.init(version)

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[EngineHandle]:
        """Exclusive engine access for one consumer at a time."""
        async with self._lease_lock:
            handle = EngineHandle(self)
            try:
                yield handle
            finally:
                handle.release()
