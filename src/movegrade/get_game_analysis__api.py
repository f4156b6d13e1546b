"""API handler for a game's analysis trace."""

from __future__ import annotations

from fastapi import HTTPException, Request

from movegrade.ApiContext import api_context
from movegrade.models import AnalysisLogEntryModel, GameAnalysisResponse


def game_analysis(game_id: str, request: Request) -> GameAnalysisResponse:
    """Return status, summary stats and the per-ply log of one game."""
    store = api_context(request).store
    record = store.games.get(game_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Game not found")
    entries = store.analysis_log.fetch(game_id)
    return GameAnalysisResponse(
        game_id=record.game_id,
        status=str(record.status),
        progress=record.progress,
        retry_count=record.retry_count,
        analyzed_at=record.analyzed_at,
        white=record.white,
        black=record.black,
        result=record.result,
        white_accuracy=record.white_accuracy,
        black_accuracy=record.black_accuracy,
        avg_cp_loss=record.avg_cp_loss,
        max_accuracy_streak=record.max_accuracy_streak,
        max_eval_swing=record.max_eval_swing,
        entries=[AnalysisLogEntryModel.model_validate(entry.to_payload()) for entry in entries],
    )
