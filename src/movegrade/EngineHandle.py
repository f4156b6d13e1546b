from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from movegrade.domain.evaluation import EvaluationResult
from movegrade.EngineJob import UpdateCallback

if TYPE_CHECKING:
    from movegrade.EngineOrchestrator import EngineOrchestrator


class EngineHandle:
    """Engine access granted by :meth:`EngineOrchestrator.lease`.

    The handle stops working once the lease is released.
    """

    def __init__(self, orchestrator: EngineOrchestrator) -> None:
        self._orchestrator = orchestrator
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        self._released = True

    def _ensure_active(self) -> EngineOrchestrator:
        if self._released:
            raise RuntimeError("Engine lease has been released")
        return self._orchestrator

    async def analyze(
        self,
        fen: str,
        depth: int,
        multipv: int,
        move_time_ms: int | None = None,
        timeout_ms: int | None = None,
        on_update: UpdateCallback | None = None,
    ) -> EvaluationResult:
        orchestrator = self._ensure_active()
        return await orchestrator.analyze(
            fen,
            depth=depth,
            multipv=multipv,
            move_time_ms=move_time_ms,
            timeout_ms=timeout_ms,
            on_update=on_update,
        )

    async def set_options(self, options: Mapping[str, object]) -> bool:
        return await self._ensure_active().set_options(options)
