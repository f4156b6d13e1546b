import pytest

from engine_fakes import (
    BLUNDER_PLY,
    BRILLIANT_PLY,
    SAMPLE_PGN,
    FakeOrchestrator,
    replay,
    sample_game_engine,
)
from movegrade.AnalysisProfile import AnalysisProfile
from movegrade.AnalysisScheduler import AnalysisScheduler
from movegrade.Analyzer import Analyzer
from movegrade.config import Settings
from movegrade.db.duckdb_store import open_store
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.move_classification import MoveClassification
from movegrade.errors import EngineTimeout
from movegrade.pgn_import import game_record_from_pgn

PROFILE = AnalysisProfile(depth=12, multipv=3)


def _settings(**overrides) -> Settings:
    values = {"tracked_players": [], "max_attempts": 3}
    values.update(overrides)
    settings = Settings(**values)
    settings.analysis.ply_yield_ms = 0
    settings.scheduler.between_games_ms = 0
    return settings


def _pipeline(engine, **overrides):
    store = open_store(":memory:")
    store.games.upsert(game_record_from_pgn(SAMPLE_PGN, game_id="game-1"))
    analyzer = Analyzer.from_store(store, settings=_settings(**overrides), profile=PROFILE)
    orchestrator = FakeOrchestrator(engine)
    scheduler = AnalysisScheduler(store.games, analyzer, orchestrator)
    return store, scheduler, orchestrator


@pytest.mark.asyncio
async def test_sample_game_is_classified_end_to_end() -> None:
    engine = sample_game_engine()
    store, scheduler, orchestrator = _pipeline(engine)

    assert scheduler.enqueue(["game-1"]) == ["game-1"]
    assert await scheduler.poll() == 1

    record = store.games.get("game-1")
    assert record.status is AnalysisStatus.COMPLETED
    assert record.progress == 100
    assert record.retry_count == 0
    assert record.analyzed_at is not None
    assert record.started_at is None
    assert record.heartbeat_at is None
    assert record.white_accuracy == 100
    assert record.black_accuracy == 96
    assert record.avg_cp_loss == 11
    assert record.max_accuracy_streak == 20
    assert record.max_eval_swing == 1020
    assert orchestrator.versions == [PROFILE.version]
    assert engine.options == [PROFILE.engine_options()]

    entries = store.analysis_log.fetch("game-1")
    assert [entry.ply for entry in entries] == list(range(1, 41))
    assert {entry.classification for entry in entries[: BLUNDER_PLY - 1]} == {
        MoveClassification.BOOK
    }

    blunder = entries[BLUNDER_PLY - 1]
    assert blunder.classification is MoveClassification.BLUNDER
    assert blunder.side == "b"
    assert blunder.san == "b6"
    assert blunder.best_move == "a7a6"
    assert blunder.score == -50
    assert blunder.score_after == 400
    assert blunder.eval_diff == 450
    assert blunder.accuracy == 16
    assert "a6" in blunder.explanation

    brilliant = entries[BRILLIANT_PLY - 1]
    assert brilliant.classification is MoveClassification.BRILLIANT
    assert brilliant.san == "Nd5"
    assert brilliant.mate == 3
    assert "sacrifice" in brilliant.motifs
    assert [line.move for line in brilliant.pv_lines] == ["c3d5", "g1f3"]

    others = {
        entry.classification
        for entry in entries[BLUNDER_PLY:]
        if entry.ply != BRILLIANT_PLY
    }
    assert others == {MoveClassification.BEST}

    reviews = store.review_positions.for_game("game-1")
    assert sorted((r.ply, r.priority, r.question_type, r.side) for r in reviews) == [
        (BLUNDER_PLY, 4, "best_move", "b"),
        (BRILLIANT_PLY, 6, "find_brilliant", "w"),
    ]
    store.close()


@pytest.mark.asyncio
async def test_engine_timeouts_requeue_and_resume_within_one_poll() -> None:
    boards, _moves = replay()
    engine = sample_game_engine()
    engine.fail(boards[4].fen(), EngineTimeout("job-1", 10), EngineTimeout("job-2", 10))
    store, scheduler, _orchestrator = _pipeline(engine)

    scheduler.enqueue(["game-1"])

    assert await scheduler.poll() == 3
    record = store.games.get("game-1")
    assert record.status is AnalysisStatus.COMPLETED
    assert record.retry_count == 0
    assert engine.calls_for(boards[4].fen()) == 3
    assert engine.calls_for(boards[0].fen()) == 1
    assert engine.calls_for(boards[3].fen()) == 1
    assert len(store.analysis_log.fetch("game-1")) == 40
    store.close()


@pytest.mark.asyncio
async def test_repeated_timeouts_fail_after_max_attempts() -> None:
    boards, _moves = replay()
    engine = sample_game_engine()
    engine.fail(boards[4].fen(), EngineTimeout("job-1", 10), EngineTimeout("job-2", 10))
    store, scheduler, _orchestrator = _pipeline(engine, max_attempts=2)

    scheduler.enqueue(["game-1"])

    assert await scheduler.poll() == 2
    record = store.games.get("game-1")
    assert record.status is AnalysisStatus.FAILED
    assert record.retry_count == 2
    assert record.progress == 10
    assert len(store.analysis_log.fetch("game-1")) == 4
    assert await scheduler.poll() == 0
    store.close()
