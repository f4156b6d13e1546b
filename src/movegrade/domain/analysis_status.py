from __future__ import annotations

from enum import StrEnum


class AnalysisStatus(StrEnum):
    """
    Lifecycle of a game in the analysis queue.

    Attributes:
        IDLE: Imported, never queued.
        PENDING: Waiting for the scheduler.
        ANALYZING: Holding the engine lease; at most one game at a time.
        COMPLETED: Every ply has a log entry and summary stats are stored.
        FAILED: Stopped early; the persisted log prefix is kept.
        IGNORED: No tracked player took part in the game.
    """

    IDLE = "idle"
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"
    IGNORED = "ignored"
