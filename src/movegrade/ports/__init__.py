"""Port interfaces for engine and persistence boundaries."""

from movegrade.ports.engine import PositionAnalyzer  # noqa: F401
from movegrade.ports.repositories import (  # noqa: F401
    AnalysisLogRepository,
    GameRepository,
    OpeningBookRepository,
    ReviewPositionRepository,
)
