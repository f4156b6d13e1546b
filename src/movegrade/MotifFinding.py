"""Domain finding for a detected motif."""

from __future__ import annotations

from dataclasses import dataclass

import chess


@dataclass(frozen=True)
class MotifFinding:
    """A detected tactical motif."""

    motif: str
    square: chess.Square | None = None
