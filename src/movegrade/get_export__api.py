"""API handler for the analytics export bundle."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import Query, Request

from movegrade.analytics import ExportFilters, build_export_bundle
from movegrade.ApiContext import api_context


def export_bundle(
    request: Request,
    perf: Annotated[str | None, Query()] = None,
    platform: Annotated[str | None, Query()] = None,
    since: Annotated[datetime | None, Query()] = None,
) -> dict[str, object]:
    context = api_context(request)
    return build_export_bundle(
        context.store,
        context.settings.tracked_players,
        ExportFilters(perf=perf, platform=platform, since=since),
    )
