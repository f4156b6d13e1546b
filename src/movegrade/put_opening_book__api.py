"""API handler that loads opening book lines."""

from __future__ import annotations

from fastapi import Request

from movegrade.ApiContext import api_context
from movegrade.models import OpeningBookRequest, OpeningBookResponse


def put_opening_book(
    eco: str,
    payload: OpeningBookRequest,
    request: Request,
) -> OpeningBookResponse:
    """Store or update the book moves for one ECO code.

    ``moves_by_position`` keys may be full FENs; they are stored without the
    move clocks.
    """
    openings = api_context(request).store.openings
    openings.upsert_opening(
        eco,
        name=payload.name,
        book_moves=payload.book_moves,
        moves_by_position=payload.moves_by_position,
    )
    return OpeningBookResponse(
        eco=eco,
        book_moves=payload.book_moves,
        positions=len(payload.moves_by_position),
    )
