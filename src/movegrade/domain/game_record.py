"""Persisted game metadata and analysis markers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import datetime

from movegrade.domain.analysis_status import AnalysisStatus


@dataclass(slots=True)
class GameRecord:
    game_id: str
    pgn: str | None = None
    white: str | None = None
    black: str | None = None
    white_rating: int | None = None
    black_rating: int | None = None
    result: str | None = None
    perf: str | None = None
    eco: str | None = None
    opening_name: str | None = None
    platform: str | None = None
    played_at: datetime | None = None
    status: AnalysisStatus = AnalysisStatus.IDLE
    started_at: datetime | None = None
    heartbeat_at: datetime | None = None
    progress: int = 0
    retry_count: int = 0
    analyzed_at: datetime | None = None
    white_accuracy: float | None = None
    black_accuracy: float | None = None
    avg_cp_loss: float | None = None
    max_accuracy_streak: int | None = None
    max_eval_swing: int | None = None
    created_at: datetime | None = None

    def to_row(self) -> dict[str, object]:
        row = {item.name: getattr(self, item.name) for item in fields(self)}
        row["status"] = str(self.status)
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> GameRecord:
        known = {item.name for item in fields(cls)}
        values = {key: value for key, value in row.items() if key in known}
        values["status"] = AnalysisStatus(str(values.get("status") or AnalysisStatus.IDLE))
        values["progress"] = int(values.get("progress") or 0)  # type: ignore[call-overload]
        values["retry_count"] = int(values.get("retry_count") or 0)  # type: ignore[call-overload]
        return cls(**values)  # type: ignore[arg-type]
