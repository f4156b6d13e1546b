"""API handler for the analysis queue summary."""

from __future__ import annotations

from fastapi import Request

from movegrade.ApiContext import api_context
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.models import QueueStatusResponse


def queue_status(request: Request) -> QueueStatusResponse:
    context = api_context(request)
    games = context.store.games
    counts = {str(status): games.count_by_status(status) for status in AnalysisStatus}
    return QueueStatusResponse(
        **counts,
        is_processing=context.scheduler.is_processing,
        current_game_id=context.scheduler.current_game_id,
    )
