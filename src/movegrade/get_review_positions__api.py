"""API handlers for review positions due for drilling."""

from __future__ import annotations

from typing import Annotated

from fastapi import HTTPException, Query, Request

from movegrade.ApiContext import api_context
from movegrade.domain.review_position import ReviewPosition
from movegrade.models import DueReviewPositionsResponse, ReviewPositionModel
from movegrade.utils.now import Now


def _position_model(position: ReviewPosition) -> ReviewPositionModel:
    return ReviewPositionModel.model_validate(
        {**position.to_row(), "tags": position.tags, "motifs": position.motifs}
    )


def due_review_positions(
    request: Request,
    limit: Annotated[int, Query(ge=1, le=200)] = 20,
) -> DueReviewPositionsResponse:
    positions = api_context(request).store.review_positions.due(Now.as_datetime(), limit)
    return DueReviewPositionsResponse(items=[_position_model(position) for position in positions])


def flag_review_position(review_id: str, request: Request) -> ReviewPositionModel:
    """Flag a position for extra review."""
    position = api_context(request).store.review_positions.flag(review_id)
    if position is None:
        raise HTTPException(status_code=404, detail="Review position not found")
    return _position_model(position)
