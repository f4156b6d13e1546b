"""Shared objects the HTTP handlers work against."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from movegrade.AnalysisScheduler import AnalysisScheduler
from movegrade.config import Settings
from movegrade.db.duckdb_store import DuckDbStore


@dataclass(slots=True)
class ApiContext:
    """Settings, store and scheduler for one application instance.

    ``run_scheduler`` starts the background polling loop with the app.
    """

    settings: Settings
    store: DuckDbStore
    scheduler: AnalysisScheduler
    run_scheduler: bool = False


def api_context(request: Request) -> ApiContext:
    return request.app.state.context
