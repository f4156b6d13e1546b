"""Response model for one analysed ply."""

from pydantic import BaseModel, Field


class PvLineModel(BaseModel):
    move: str
    rank: int
    score_cp: int | None = None
    mate: int | None = None
    depth: int = 0
    pv: list[str] = Field(default_factory=list)


class AnalysisLogEntryModel(BaseModel):
    """One ply of the analysis trace; scores are from White's point of view."""

    ply: int
    fen: str
    move: str
    san: str | None = None
    side: str
    best_move: str | None = None
    classification: str
    phase: str
    score: int | None = None
    mate: int | None = None
    score_after: int | None = None
    eval_diff: int
    accuracy: int
    pv_lines: list[PvLineModel] = Field(default_factory=list)
    motifs: list[str] = Field(default_factory=list)
    missed_win: bool = False
    missed_defense: bool = False
    book_move: bool = False
    plan_hint: str | None = None
    explanation: str | None = None
