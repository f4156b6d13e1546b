"""Core value types of the analysis pipeline."""

from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.evaluation import (
    MATE_SCORE,
    EvaluationResult,
    PvLine,
    is_mate_value,
    score_value,
)
from movegrade.domain.game_phase import GamePhase
from movegrade.domain.game_record import GameRecord
from movegrade.domain.move_classification import MoveClassification
from movegrade.domain.review_position import ReviewPosition

__all__ = [
    "MATE_SCORE",
    "AnalysisLogEntry",
    "AnalysisStatus",
    "EvaluationResult",
    "GamePhase",
    "GameRecord",
    "MoveClassification",
    "PvLine",
    "ReviewPosition",
    "is_mate_value",
    "score_value",
]
