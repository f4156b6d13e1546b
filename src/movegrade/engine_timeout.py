"""Depth-scaled deadlines for engine searches and stalled games."""

from __future__ import annotations

MIN_ENGINE_TIMEOUT_MS = 45_000
MAX_ENGINE_TIMEOUT_MS = 900_000
BASE_ENGINE_TIMEOUT_MS = 8_000
PER_DEPTH_TIMEOUT_MS = 5_000
PER_LINE_TIMEOUT_MS = 9_000
DEEP_PASS_TIMEOUT_MS = 12 * 60 * 1000

MIN_STALE_MS = 4 * 60 * 1000
MAX_STALE_MS = 30 * 60 * 1000
STALE_BUDGET_FACTOR = 3


def fallback_timeout_ms(depth: int, multipv: int) -> int:
    """Return the deadline for one search when the caller supplies none."""
    raw = BASE_ENGINE_TIMEOUT_MS + depth * PER_DEPTH_TIMEOUT_MS + multipv * PER_LINE_TIMEOUT_MS
    return min(MAX_ENGINE_TIMEOUT_MS, max(MIN_ENGINE_TIMEOUT_MS, raw))


def stale_after_ms(per_move_budget_ms: int) -> int:
    """Return how long a game may sit without a heartbeat before it is stale."""
    return min(MAX_STALE_MS, max(MIN_STALE_MS, per_move_budget_ms * STALE_BUDGET_FACTOR))
