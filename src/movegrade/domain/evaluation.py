"""Engine evaluation values in side-to-move perspective."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

MATE_SCORE = 100000
MATE_THRESHOLD = MATE_SCORE - 1000


def score_value(score_cp: int | None, mate: int | None) -> int:
    """Collapse a centipawn score or mate distance into one comparable integer.

    Mate in ``n`` for the side to move is ``MATE_SCORE - n``; being mated in
    ``n`` is the negation. ``mate == 0`` means the side to move is mated.
    """
    if mate is not None:
        if mate > 0:
            return MATE_SCORE - mate
        return -(MATE_SCORE + mate)
    return int(score_cp or 0)


def is_mate_value(value: int | None) -> bool:
    return value is not None and abs(value) >= MATE_THRESHOLD


@dataclass(frozen=True, slots=True)
class PvLine:
    """One candidate line reported by the engine, ranked by multipv."""

    move: str
    rank: int = 1
    score_cp: int | None = None
    mate: int | None = None
    depth: int = 0
    pv: tuple[str, ...] = ()

    @property
    def value(self) -> int:
        return score_value(self.score_cp, self.mate)

    def flipped(self) -> PvLine:
        """Return the line seen from the other side."""
        return replace(
            self,
            score_cp=None if self.score_cp is None else -self.score_cp,
            mate=None if self.mate is None else -self.mate,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "move": self.move,
            "rank": self.rank,
            "score_cp": self.score_cp,
            "mate": self.mate,
            "depth": self.depth,
            "pv": list(self.pv),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> PvLine:
        return cls(
            move=str(payload.get("move") or ""),
            rank=int(payload.get("rank") or 1),
            score_cp=_optional_int(payload.get("score_cp")),
            mate=_optional_int(payload.get("mate")),
            depth=int(payload.get("depth") or 0),
            pv=tuple(str(item) for item in payload.get("pv") or ()),
        )


@dataclass(slots=True)
class EvaluationResult:
    """Final answer of one engine search."""

    best_move: str | None
    pv_lines: list[PvLine] = field(default_factory=list)
    depth: int = 0

    @property
    def top(self) -> PvLine | None:
        return self.pv_lines[0] if self.pv_lines else None

    @property
    def value(self) -> int:
        top = self.top
        return top.value if top is not None else 0

    @property
    def second(self) -> PvLine | None:
        return self.pv_lines[1] if len(self.pv_lines) > 1 else None

    @property
    def gap(self) -> int | None:
        """Value lost by the second-best line, or None with a single line."""
        top = self.top
        second = self.second
        if top is None or second is None:
            return None
        return top.value - second.value

    def line_for(self, move: str) -> PvLine | None:
        return next((line for line in self.pv_lines if line.move == move), None)


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)  # type: ignore[call-overload]
