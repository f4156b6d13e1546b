"""Engine search parameters applied to every ply of a game."""

from __future__ import annotations

from dataclasses import dataclass, replace

from movegrade.config import Settings
from movegrade.engine_timeout import fallback_timeout_ms, stale_after_ms

MIN_DEPTH = 8
MAX_DEPTH = 60
MIN_MULTIPV = 1
MAX_MULTIPV = 5
MAX_DEEP_DEPTH = 60
MAX_MOVE_TIME_MS = 60_000
MIN_HASH_MB = 16
MAX_HASH_MB = 2048
MAX_THREADS = 128
SHALLOW_DEPTH_OFFSET = 4


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


@dataclass(frozen=True, slots=True)
class AnalysisProfile:
    """Clamped engine profile.

    ``deep_depth`` of zero disables the deeper re-check of blunders and
    ``move_time_ms`` of zero or None searches by depth alone.
    """

    depth: int = 15
    multipv: int = 3
    deep_depth: int = 0
    move_time_ms: int | None = None
    hash_mb: int = 32
    threads: int = 1
    use_nnue: bool = True
    eval_file: str | None = None
    version: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "depth", _clamp(self.depth, MIN_DEPTH, MAX_DEPTH))
        object.__setattr__(self, "multipv", _clamp(self.multipv, MIN_MULTIPV, MAX_MULTIPV))
        object.__setattr__(self, "deep_depth", _clamp(self.deep_depth, 0, MAX_DEEP_DEPTH))
        move_time = self.move_time_ms
        if move_time is not None:
            move_time = _clamp(move_time, 0, MAX_MOVE_TIME_MS) or None
        object.__setattr__(self, "move_time_ms", move_time)
        object.__setattr__(self, "hash_mb", _clamp(self.hash_mb, MIN_HASH_MB, MAX_HASH_MB))
        object.__setattr__(self, "threads", _clamp(self.threads, 1, MAX_THREADS))

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalysisProfile:
        stockfish = settings.stockfish
        return cls(
            depth=stockfish.depth,
            multipv=stockfish.multipv,
            deep_depth=stockfish.deep_depth,
            move_time_ms=stockfish.movetime_ms,
            hash_mb=stockfish.hash_mb,
            threads=stockfish.threads,
            use_nnue=stockfish.use_nnue,
            eval_file=stockfish.eval_file,
            version=stockfish.version,
        )

    @property
    def shallow_depth(self) -> int:
        """Depth used for the post-move query when the played move was not a candidate."""
        return max(MIN_DEPTH, self.depth - SHALLOW_DEPTH_OFFSET)

    @property
    def deep_enabled(self) -> bool:
        return self.deep_depth > self.depth

    def deep(self) -> AnalysisProfile:
        """Return a copy searching at the deep verification depth."""
        return replace(self, depth=self.deep_depth, deep_depth=0)

    def per_move_budget_ms(self) -> int:
        return fallback_timeout_ms(max(self.depth, self.deep_depth), self.multipv)

    def stale_after_ms(self) -> int:
        return stale_after_ms(self.per_move_budget_ms())

    def engine_options(self) -> dict[str, object]:
        """UCI options this profile configures on the engine."""
        options: dict[str, object] = {
            "Hash": self.hash_mb,
            "Threads": self.threads,
            "Use NNUE": self.use_nnue,
        }
        if self.eval_file:
            options["EvalFile"] = self.eval_file
        return options
