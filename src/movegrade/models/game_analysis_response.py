"""Response model for a game's analysis state and trace."""

from datetime import datetime

from pydantic import BaseModel, Field

from movegrade.models.analysis_log_entry_model import AnalysisLogEntryModel


class GameAnalysisResponse(BaseModel):
    game_id: str
    status: str
    progress: int
    retry_count: int = 0
    analyzed_at: datetime | None = None
    white: str | None = None
    black: str | None = None
    result: str | None = None
    white_accuracy: float | None = None
    black_accuracy: float | None = None
    avg_cp_loss: float | None = None
    max_accuracy_streak: int | None = None
    max_eval_swing: int | None = None
    entries: list[AnalysisLogEntryModel] = Field(default_factory=list)
