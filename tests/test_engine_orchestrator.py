import asyncio
from pathlib import Path

import chess
import pytest

from engine_fakes import FakeAnalysis, FakeEngineFactory, FakeUciProtocol, info
from movegrade.config import Settings
from movegrade.EngineOrchestrator import EngineCapabilities, EngineOrchestrator
from movegrade.errors import EngineProcessError, EngineTimeout

AFTER_E4 = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


def _settings() -> Settings:
    settings = Settings(
        stockfish_path="fake-stockfish",
        stockfish_max_retries=2,
        stockfish_retry_backoff_ms=0,
        stockfish_checksum=None,
    )
    settings.stockfish.versions = {}
    settings.stockfish.option_cooldown_ms = 250
    return settings


def _answer(best: str = "e2e4") -> FakeAnalysis:
    return FakeAnalysis(
        [
            info(best, score_cp=30, depth=12, pv=[best, "e7e5"]),
            info("d2d4", score_cp=20, rank=2, depth=12),
        ],
        best,
    )


async def _until(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.mark.asyncio
async def test_init_starts_engine_once() -> None:
    factory = FakeEngineFactory([FakeUciProtocol()])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=factory)

    await orchestrator.init()
    await orchestrator.init()

    assert orchestrator.is_running
    assert factory.commands == ["fake-stockfish"]
    assert orchestrator.engine_name == "Stockfish 17.1"
    assert orchestrator.capabilities == EngineCapabilities(nnue=True, multipv=True)


@pytest.mark.asyncio
async def test_init_with_other_version_restarts_engine() -> None:
    settings = _settings()
    settings.stockfish.versions = {"16": Path("sf16")}
    first = FakeUciProtocol()
    factory = FakeEngineFactory([first, FakeUciProtocol()])
    orchestrator = EngineOrchestrator(settings, engine_factory=factory)

    await orchestrator.init()
    await orchestrator.init("16")

    assert factory.commands == ["fake-stockfish", "sf16"]
    assert first.quit_calls == 1
    assert factory.transports[0].closed
    assert orchestrator.version == "16"


@pytest.mark.asyncio
async def test_start_retries_then_gives_up() -> None:
    recovering = FakeEngineFactory([FakeUciProtocol()], errors=[OSError("spawn failed")])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=recovering)
    await orchestrator.init()
    assert len(recovering.commands) == 2

    broken = FakeEngineFactory([], errors=[OSError("spawn failed")] * 3)
    orchestrator = EngineOrchestrator(_settings(), engine_factory=broken)
    with pytest.raises(EngineProcessError, match="Failed to start engine"):
        await orchestrator.init()
    assert len(broken.commands) == 3
    assert not orchestrator.is_running


@pytest.mark.asyncio
async def test_analyze_requires_running_engine() -> None:
    orchestrator = EngineOrchestrator(_settings(), engine_factory=FakeEngineFactory([]))

    with pytest.raises(EngineProcessError, match="not running"):
        await orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1)


@pytest.mark.asyncio
async def test_analyze_collects_lines_and_streams_updates() -> None:
    protocol = FakeUciProtocol([_answer()])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=FakeEngineFactory([protocol]))
    await orchestrator.init()
    updates = []

    result = await orchestrator.analyze(
        chess.STARTING_FEN, depth=12, multipv=2, on_update=updates.append
    )

    assert result.best_move == "e2e4"
    assert [line.move for line in result.pv_lines] == ["e2e4", "d2d4"]
    assert result.pv_lines[0].pv == ("e2e4", "e7e5")
    assert result.depth == 12
    assert len(updates) == 2
    fen, limit, multipv = protocol.searches[0]
    assert fen == chess.STARTING_FEN
    assert limit.depth == 12
    assert limit.time is None
    assert multipv == 2
    assert not orchestrator.busy


@pytest.mark.asyncio
async def test_timeout_restarts_engine_and_raises() -> None:
    hanging = FakeAnalysis([], None, hang=True)
    first = FakeUciProtocol([hanging])
    second = FakeUciProtocol([_answer()])
    factory = FakeEngineFactory([first, second])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=factory)
    await orchestrator.init()

    with pytest.raises(EngineTimeout) as raised:
        await orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1, timeout_ms=20)

    assert raised.value.timeout_ms == 20
    assert hanging.stop_calls >= 1
    assert first.quit_calls == 1
    assert len(factory.commands) == 2
    assert orchestrator.is_running
    assert not orchestrator.busy

    result = await orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1)
    assert result.best_move == "e2e4"


@pytest.mark.asyncio
async def test_new_search_supersedes_outstanding_job() -> None:
    hanging = FakeAnalysis([], None, hang=True)
    protocol = FakeUciProtocol([hanging, _answer("e7e5")])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=FakeEngineFactory([protocol]))
    await orchestrator.init()

    first = asyncio.create_task(
        orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1, timeout_ms=5000)
    )
    await _until(lambda: len(protocol.searches) == 1)
    second = await orchestrator.analyze(AFTER_E4, depth=12, multipv=1, timeout_ms=5000)

    with pytest.raises(EngineProcessError, match="Superseded"):
        await first
    assert second.best_move == "e7e5"
    assert hanging.stop_calls >= 1


@pytest.mark.asyncio
async def test_terminate_rejects_outstanding_job() -> None:
    protocol = FakeUciProtocol([FakeAnalysis([], None, hang=True)])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=FakeEngineFactory([protocol]))
    await orchestrator.init()

    search = asyncio.create_task(
        orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1, timeout_ms=5000)
    )
    await _until(lambda: orchestrator.busy and len(protocol.searches) == 1)
    await orchestrator.terminate()

    with pytest.raises(EngineProcessError, match="terminated"):
        await search
    assert protocol.quit_calls == 1
    assert not orchestrator.is_running


@pytest.mark.asyncio
async def test_options_are_deferred_during_cooldown_and_flushed_before_next_search() -> None:
    now = [0.0]
    protocol = FakeUciProtocol([_answer(), _answer()])
    orchestrator = EngineOrchestrator(
        _settings(),
        engine_factory=FakeEngineFactory([protocol]),
        clock=lambda: now[0],
    )

    assert await orchestrator.set_options({"Threads": 2}) is False
    await orchestrator.init()
    assert protocol.configured == [{"Threads": 2}]

    assert await orchestrator.set_options({"hash": 64, "MultiPV": 4, "Bogus": 1}) is True
    assert protocol.configured[-1] == {"Hash": 64}

    await orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1)
    assert await orchestrator.set_options({"Use NNUE": False}) is False
    assert orchestrator.pending_options == {"Use NNUE": False}

    await orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1)
    assert protocol.configured[-1] == {"Use NNUE": "false"}
    assert orchestrator.pending_options == {}

    now[0] = 10.0
    assert await orchestrator.set_options({"Hash": 128}) is True
    assert protocol.configured[-1] == {"Hash": 128}


@pytest.mark.asyncio
async def test_options_are_deferred_while_search_is_running() -> None:
    hanging = FakeAnalysis([info("e2e4", score_cp=30, depth=12)], "e2e4", hang=True)
    protocol = FakeUciProtocol([hanging, _answer("e7e5")])
    orchestrator = EngineOrchestrator(
        _settings(),
        engine_factory=FakeEngineFactory([protocol]),
        clock=lambda: 0.0,
    )
    await orchestrator.init()

    search = asyncio.create_task(
        orchestrator.analyze(chess.STARTING_FEN, depth=12, multipv=1, timeout_ms=5000)
    )
    await _until(lambda: orchestrator.busy and len(protocol.searches) == 1)

    assert await orchestrator.set_options({"Hash": 64}) is False
    assert protocol.configured == []
    assert orchestrator.pending_options == {"Hash": 64}

    await orchestrator.stop()
    first = await search
    assert first.best_move == "e2e4"
    assert protocol.configured == []

    second = await orchestrator.analyze(AFTER_E4, depth=12, multipv=1)
    assert protocol.configured == [{"Hash": 64}]
    assert orchestrator.pending_options == {}
    assert second.best_move == "e7e5"


@pytest.mark.asyncio
async def test_lease_is_exclusive_and_handle_expires() -> None:
    protocol = FakeUciProtocol([_answer()])
    orchestrator = EngineOrchestrator(_settings(), engine_factory=FakeEngineFactory([protocol]))
    await orchestrator.init()
    order = []

    async def hold(name: str) -> None:
        async with orchestrator.lease():
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(hold("a"), hold("b"))
    assert order == ["a-in", "a-out", "b-in", "b-out"]

    async with orchestrator.lease() as handle:
        result = await handle.analyze(chess.STARTING_FEN, depth=12, multipv=1)
    assert result.best_move == "e2e4"
    assert handle.released
    with pytest.raises(RuntimeError, match="released"):
        await handle.analyze(chess.STARTING_FEN, depth=12, multipv=1)
