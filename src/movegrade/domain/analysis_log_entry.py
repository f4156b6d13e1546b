"""Per-ply record of the analysis trace."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field

from movegrade.domain.evaluation import PvLine
from movegrade.domain.game_phase import GamePhase
from movegrade.domain.move_classification import MoveClassification


@dataclass(slots=True)
class AnalysisLogEntry:
    """One analysed ply.

    ``score``/``mate`` are the evaluation before the move and ``score_after``
    the evaluation after it, all from White's point of view. ``eval_diff`` is
    the centipawn loss of the mover, capped at 1000, and ``pv_lines`` are the
    candidate lines of the pre-move search, also normalised to White.
    """

    ply: int
    fen: str
    move: str
    side: str
    classification: MoveClassification
    phase: GamePhase
    best_move: str | None = None
    san: str | None = None
    score: int | None = None
    mate: int | None = None
    score_after: int | None = None
    eval_diff: int = 0
    accuracy: int = 100
    pv_lines: list[PvLine] = field(default_factory=list)
    motifs: list[str] = field(default_factory=list)
    missed_win: bool = False
    missed_defense: bool = False
    book_move: bool = False
    plan_hint: str | None = None
    explanation: str | None = None

    @property
    def is_white(self) -> bool:
        return self.side == "w"

    def to_row(self, game_id: str) -> dict[str, object]:
        return {
            "game_id": game_id,
            "ply": self.ply,
            "fen": self.fen,
            "move": self.move,
            "san": self.san,
            "side": self.side,
            "best_move": self.best_move,
            "classification": str(self.classification),
            "phase": str(self.phase),
            "score": self.score,
            "mate": self.mate,
            "score_after": self.score_after,
            "eval_diff": self.eval_diff,
            "accuracy": self.accuracy,
            "pv_lines": json.dumps([line.to_dict() for line in self.pv_lines]),
            "motifs": json.dumps(list(self.motifs)),
            "missed_win": self.missed_win,
            "missed_defense": self.missed_defense,
            "book_move": self.book_move,
            "plan_hint": self.plan_hint,
            "explanation": self.explanation,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> AnalysisLogEntry:
        return cls(
            ply=int(row["ply"]),  # type: ignore[call-overload]
            fen=str(row["fen"]),
            move=str(row["move"]),
            san=_optional_str(row.get("san")),
            side=str(row["side"]),
            best_move=_optional_str(row.get("best_move")),
            classification=MoveClassification(str(row["classification"])),
            phase=GamePhase(str(row["phase"])),
            score=_optional_int(row.get("score")),
            mate=_optional_int(row.get("mate")),
            score_after=_optional_int(row.get("score_after")),
            eval_diff=int(row.get("eval_diff") or 0),  # type: ignore[call-overload]
            accuracy=int(row.get("accuracy") or 0),  # type: ignore[call-overload]
            pv_lines=[PvLine.from_dict(item) for item in _load_json(row.get("pv_lines"))],
            motifs=[str(item) for item in _load_json(row.get("motifs"))],
            missed_win=bool(row.get("missed_win")),
            missed_defense=bool(row.get("missed_defense")),
            book_move=bool(row.get("book_move")),
            plan_hint=_optional_str(row.get("plan_hint")),
            explanation=_optional_str(row.get("explanation")),
        )

    def to_payload(self) -> dict[str, object]:
        payload = self.to_row("")
        payload.pop("game_id")
        payload["pv_lines"] = [line.to_dict() for line in self.pv_lines]
        payload["motifs"] = list(self.motifs)
        return payload


def _load_json(value: object) -> list:
    if not value:
        return []
    if isinstance(value, str):
        return list(json.loads(value))
    return list(value)  # type: ignore[call-overload]


def _optional_int(value: object) -> int | None:
    return None if value is None else int(value)  # type: ignore[call-overload]


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)
