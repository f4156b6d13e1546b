"""Request authentication for the analysis API."""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Request, status

from movegrade.ApiContext import api_context

PUBLIC_PATHS = frozenset({"/api/health"})


def request_token(request: Request) -> str | None:
    """Return the bearer token, falling back to the ``X-API-Key`` header."""
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.headers.get("x-api-key", "").strip() or None


def require_api_token(request: Request) -> None:
    """Raise HTTP 401 unless the request carries the configured token."""
    if request.url.path in PUBLIC_PATHS:
        return
    supplied = request_token(request)
    expected = api_context(request).settings.api_token
    if supplied is None or not secrets.compare_digest(supplied, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
