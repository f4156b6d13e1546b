"""Response model for review positions."""

from datetime import datetime

from pydantic import BaseModel, Field


class ReviewPositionModel(BaseModel):
    review_id: str
    game_id: str
    ply: int
    fen: str
    move: str
    best_move: str | None = None
    classification: str
    question_type: str
    side: str
    phase: str
    priority: int
    score: int | None = None
    loss: int = 0
    tags: list[str] = Field(default_factory=list)
    motifs: list[str] = Field(default_factory=list)
    missed_win: bool = False
    missed_defense: bool = False
    plan_hint: str | None = None
    explanation: str | None = None
    created_at: datetime
    next_review_at: datetime
    last_seen_at: datetime | None = None
    review_flag: bool = False


class DueReviewPositionsResponse(BaseModel):
    items: list[ReviewPositionModel] = Field(default_factory=list)
