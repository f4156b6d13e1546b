"""Response models for queue actions."""

from pydantic import BaseModel, Field


class EnqueueResponse(BaseModel):
    game_id: str
    status: str


class StopAnalysisResponse(BaseModel):
    status: str = "stopped"
    stopped: list[str] = Field(default_factory=list)
