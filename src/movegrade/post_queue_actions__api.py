"""API handlers that change the analysis queue."""

from __future__ import annotations

from fastapi import HTTPException, Request

from movegrade.ApiContext import api_context
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.models import EnqueueResponse, StopAnalysisResponse


def enqueue_game(game_id: str, request: Request) -> EnqueueResponse:
    """Queue one game for analysis."""
    context = api_context(request)
    if not context.scheduler.enqueue([game_id]):
        raise HTTPException(status_code=404, detail="Game not found")
    return EnqueueResponse(game_id=game_id, status=str(AnalysisStatus.PENDING))


async def stop_analysis(request: Request) -> StopAnalysisResponse:
    """Stop the engine and fail whatever is being analysed."""
    stopped = await api_context(request).scheduler.stop_analysis()
    return StopAnalysisResponse(stopped=stopped)
