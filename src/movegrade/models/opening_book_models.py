"""Request and response models for opening book lines."""

from pydantic import BaseModel, Field


class OpeningBookRequest(BaseModel):
    name: str | None = None
    book_moves: list[str] = Field(default_factory=list)
    moves_by_position: dict[str, list[str]] = Field(default_factory=dict)


class OpeningBookResponse(BaseModel):
    eco: str
    book_moves: list[str] = Field(default_factory=list)
    positions: int = 0
