"""Response model for the health check."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "movegrade"
    version: str
    timestamp: str
