from movegrade.models.analysis_log_entry_model import AnalysisLogEntryModel, PvLineModel
from movegrade.models.game_analysis_response import GameAnalysisResponse
from movegrade.models.health_response import HealthResponse
from movegrade.models.opening_book_models import OpeningBookRequest, OpeningBookResponse
from movegrade.models.queue_action_response import EnqueueResponse, StopAnalysisResponse
from movegrade.models.queue_status_response import QueueStatusResponse
from movegrade.models.review_position_model import (
    DueReviewPositionsResponse,
    ReviewPositionModel,
)

__all__ = [
    "AnalysisLogEntryModel",
    "DueReviewPositionsResponse",
    "EnqueueResponse",
    "GameAnalysisResponse",
    "HealthResponse",
    "OpeningBookRequest",
    "OpeningBookResponse",
    "PvLineModel",
    "QueueStatusResponse",
    "ReviewPositionModel",
    "StopAnalysisResponse",
]
