"""Critical positions harvested from a finished analysis for later drilling."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from movegrade.domain.move_classification import MoveClassification


@dataclass(slots=True)
class ReviewPosition:
    review_id: str
    game_id: str
    ply: int
    fen: str
    move: str
    best_move: str | None
    classification: MoveClassification
    question_type: str
    side: str
    phase: str
    priority: int
    created_at: datetime
    next_review_at: datetime
    score: int | None = None
    loss: int = 0
    tags: list[str] = field(default_factory=list)
    motifs: list[str] = field(default_factory=list)
    missed_win: bool = False
    missed_defense: bool = False
    plan_hint: str | None = None
    explanation: str | None = None
    last_seen_at: datetime | None = None
    review_flag: bool = False

    def to_row(self) -> dict[str, object]:
        return {
            "review_id": self.review_id,
            "game_id": self.game_id,
            "ply": self.ply,
            "fen": self.fen,
            "move": self.move,
            "best_move": self.best_move,
            "classification": str(self.classification),
            "question_type": self.question_type,
            "side": self.side,
            "phase": self.phase,
            "priority": self.priority,
            "score": self.score,
            "loss": self.loss,
            "tags": json.dumps(self.tags),
            "motifs": json.dumps(self.motifs),
            "missed_win": self.missed_win,
            "missed_defense": self.missed_defense,
            "plan_hint": self.plan_hint,
            "explanation": self.explanation,
            "created_at": self.created_at,
            "next_review_at": self.next_review_at,
            "last_seen_at": self.last_seen_at,
            "review_flag": self.review_flag,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> ReviewPosition:
        values = dict(row)
        values["classification"] = MoveClassification(str(values["classification"]))
        values["tags"] = json.loads(str(values.get("tags") or "[]"))
        values["motifs"] = json.loads(str(values.get("motifs") or "[]"))
        values["missed_win"] = bool(values.get("missed_win"))
        values["missed_defense"] = bool(values.get("missed_defense"))
        values["review_flag"] = bool(values.get("review_flag"))
        return cls(**values)  # type: ignore[arg-type]
