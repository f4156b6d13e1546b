"""Custom error types used in movegrade."""


class MovegradeError(Exception):
    """Base class for analysis pipeline errors."""


class EngineTimeout(MovegradeError, TimeoutError):
    """An engine search did not report a best move before its deadline."""

    def __init__(self, job_id: str | None = None, timeout_ms: int | None = None) -> None:
        self.job_id = job_id
        self.timeout_ms = timeout_ms
        super().__init__("Analysis timeout")


class EngineProcessError(MovegradeError):
    """The engine process crashed, could not start or violated the protocol."""


class InvalidGameRecord(MovegradeError):
    """A game record is missing its move text or the moves cannot be parsed."""


class NoTrackedParticipant(MovegradeError):
    """Neither side of the game belongs to a tracked player."""


class StaleAnalysis(MovegradeError):
    """A game stayed in the analyzing state longer than its stale budget."""


__all__ = [
    "EngineProcessError",
    "EngineTimeout",
    "InvalidGameRecord",
    "MovegradeError",
    "NoTrackedParticipant",
    "StaleAnalysis",
]
