"""Engine port used by the analyzer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from movegrade.domain.evaluation import EvaluationResult
from movegrade.EngineJob import UpdateCallback


class PositionAnalyzer(Protocol):
    """Anything that can search a position, such as a leased engine handle."""

    async def analyze(
        self,
        fen: str,
        depth: int,
        multipv: int,
        move_time_ms: int | None = None,
        timeout_ms: int | None = None,
        on_update: UpdateCallback | None = None,
    ) -> EvaluationResult:
        """Return the engine's final answer for ``fen``."""

    async def set_options(self, options: Mapping[str, object]) -> bool:
        """Apply or defer UCI options for the next search."""
