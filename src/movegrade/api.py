"""FastAPI application exposing the analysis queue and its results."""

from __future__ import annotations

from typing import cast

from fastapi import Depends, FastAPI
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from movegrade import __version__
from movegrade.Analyzer import Analyzer
from movegrade.AnalysisScheduler import AnalysisScheduler
from movegrade.ApiContext import ApiContext
from movegrade.config import Settings, get_settings
from movegrade.db.duckdb_store import open_store
from movegrade.EngineOrchestrator import EngineOrchestrator
from movegrade.get_export__api import export_bundle
from movegrade.get_game_analysis__api import game_analysis
from movegrade.get_health__api import health
from movegrade.get_queue__api import queue_status
from movegrade.get_review_positions__api import due_review_positions, flag_review_position
from movegrade.manage_lifespan__fastapi import lifespan
from movegrade.post_queue_actions__api import enqueue_game, stop_analysis
from movegrade.put_opening_book__api import put_opening_book
from movegrade.require_api_token__request_auth import require_api_token


def build_app(context: ApiContext) -> FastAPI:
    """Create the application around an existing store and scheduler."""
    app = FastAPI(
        title="MOVEGRADE",
        version=__version__,
        lifespan=lifespan,
        dependencies=[Depends(require_api_token)],
        middleware=[
            Middleware(
                cast("type[object]", CORSMiddleware),
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            )
        ],
    )
    app.state.context = context
    app.add_api_route("/api/health", health, methods=["GET"])
    app.add_api_route("/api/queue", queue_status, methods=["GET"])
    app.add_api_route("/api/games/{game_id}/enqueue", enqueue_game, methods=["POST"])
    app.add_api_route("/api/analysis/stop", stop_analysis, methods=["POST"])
    app.add_api_route("/api/games/{game_id}/analysis", game_analysis, methods=["GET"])
    app.add_api_route("/api/review-positions/due", due_review_positions, methods=["GET"])
    app.add_api_route(
        "/api/review-positions/{review_id}/flag", flag_review_position, methods=["POST"]
    )
    app.add_api_route("/api/openings/{eco}", put_opening_book, methods=["PUT"])
    app.add_api_route("/api/export", export_bundle, methods=["GET"])
    return app


def create_app(settings: Settings | None = None, run_scheduler: bool = True) -> FastAPI:
    """Wire settings, DuckDB, the engine and the scheduler into an app.

    Suitable for ``uvicorn --factory movegrade.api:create_app``.
    """
    active = settings or get_settings()
    store = open_store(active.duckdb_path)
    orchestrator = EngineOrchestrator(active)
    analyzer = Analyzer.from_store(store, settings=active)
    scheduler = AnalysisScheduler(store.games, analyzer, orchestrator)
    return build_app(
        ApiContext(
            settings=active,
            store=store,
            scheduler=scheduler,
            run_scheduler=run_scheduler,
        )
    )
