"""Response model for the analysis queue summary."""

from pydantic import BaseModel


class QueueStatusResponse(BaseModel):
    """Game counts per analysis status plus the scheduler's current work."""

    idle: int = 0
    pending: int = 0
    analyzing: int = 0
    completed: int = 0
    failed: int = 0
    ignored: int = 0
    is_processing: bool = False
    current_game_id: str | None = None
