"""Read-only projections over completed games for tracked players."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from movegrade.db.duckdb_store import DuckDbStore
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.game_record import GameRecord
from movegrade.errors import NoTrackedParticipant
from movegrade.tracked_players import tracked_sides
from movegrade.utils.now import Now

DEFAULT_TOP_WINS = 5

_WHITE_WINS = "1-0"
_BLACK_WINS = "0-1"


@dataclass(frozen=True, slots=True)
class ExportFilters:
    perf: str | None = None
    platform: str | None = None
    since: datetime | None = None


@dataclass(frozen=True, slots=True)
class TrackedGame:
    """A completed game seen from the tracked player's side."""

    record: GameRecord
    side: str

    @property
    def is_white(self) -> bool:
        return self.side == "w"

    @property
    def rating(self) -> int | None:
        return self.record.white_rating if self.is_white else self.record.black_rating

    @property
    def opponent(self) -> str | None:
        return self.record.black if self.is_white else self.record.white

    @property
    def opponent_rating(self) -> int | None:
        return self.record.black_rating if self.is_white else self.record.white_rating

    @property
    def accuracy(self) -> float | None:
        return self.record.white_accuracy if self.is_white else self.record.black_accuracy

    @property
    def outcome(self) -> str:
        result = self.record.result
        if result == _WHITE_WINS:
            return "win" if self.is_white else "loss"
        if result == _BLACK_WINS:
            return "loss" if self.is_white else "win"
        return "draw"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _sort_key(game: TrackedGame) -> tuple[datetime, str]:
    played = Now.to_utc(game.record.played_at or game.record.created_at)
    return (played or datetime.min.replace(tzinfo=UTC), game.record.game_id)


def _matches(record: GameRecord, filters: ExportFilters) -> bool:
    if filters.perf and record.perf != filters.perf:
        return False
    if filters.platform and record.platform != filters.platform:
        return False
    if filters.since is not None:
        played = Now.to_utc(record.played_at)
        if played is None or played < Now.to_utc(filters.since):
            return False
    return True


def tracked_games(
    records: Iterable[GameRecord],
    tracked_players: Sequence[str],
    filters: ExportFilters | None = None,
) -> list[TrackedGame]:
    """Pair each matching game with the tracked side, oldest first.

    When both players are tracked the game is counted for White.
    """
    active = filters or ExportFilters()
    games = []
    for record in records:
        if not _matches(record, active):
            continue
        try:
            sides = tracked_sides(record, tracked_players)
        except NoTrackedParticipant:
            continue
        games.append(TrackedGame(record=record, side="w" if "w" in sides else "b"))
    return sorted(games, key=_sort_key)


def rating_series(games: Sequence[TrackedGame]) -> list[dict[str, object]]:
    return [
        {
            "game_id": game.record.game_id,
            "played_at": _iso(game.record.played_at),
            "rating": game.rating,
        }
        for game in games
        if game.rating is not None
    ]


def accuracy_series(games: Sequence[TrackedGame]) -> list[dict[str, object]]:
    return [
        {
            "game_id": game.record.game_id,
            "played_at": _iso(game.record.played_at),
            "accuracy": game.accuracy,
        }
        for game in games
        if game.accuracy is not None
    ]


def opening_aggregates(games: Sequence[TrackedGame]) -> list[dict[str, object]]:
    """Per-ECO results, most played first."""
    buckets: dict[str, dict[str, object]] = {}
    accuracy: dict[str, list[float]] = {}
    for game in games:
        eco = game.record.eco or "?"
        bucket = buckets.setdefault(
            eco,
            {
                "eco": eco,
                "name": game.record.opening_name,
                "games": 0,
                "wins": 0,
                "draws": 0,
                "losses": 0,
            },
        )
        bucket["games"] = int(bucket["games"]) + 1  # type: ignore[call-overload]
        key = {"win": "wins", "draw": "draws", "loss": "losses"}[game.outcome]
        bucket[key] = int(bucket[key]) + 1  # type: ignore[call-overload]
        if game.accuracy is not None:
            accuracy.setdefault(eco, []).append(float(game.accuracy))
    rows = []
    for eco, bucket in buckets.items():
        played = int(bucket["games"])  # type: ignore[call-overload]
        wins = int(bucket["wins"])  # type: ignore[call-overload]
        values = accuracy.get(eco, [])
        bucket["win_rate"] = round(100 * wins / played) if played else 0
        bucket["avg_accuracy"] = round(sum(values) / len(values), 1) if values else None
        rows.append(bucket)
    rows.sort(key=lambda row: (-int(row["games"]), str(row["eco"])))  # type: ignore[call-overload]
    return rows


def top_wins(
    games: Sequence[TrackedGame],
    limit: int = DEFAULT_TOP_WINS,
) -> list[dict[str, object]]:
    """Wins against the highest-rated opponents."""
    wins = [game for game in games if game.outcome == "win" and game.opponent_rating is not None]
    wins.sort(key=lambda game: (-int(game.opponent_rating or 0), game.record.game_id))
    return [
        {
            "game_id": game.record.game_id,
            "opponent": game.opponent,
            "opponent_rating": game.opponent_rating,
            "played_at": _iso(game.record.played_at),
            "eco": game.record.eco,
        }
        for game in wins[:limit]
    ]


def build_export_bundle(
    store: DuckDbStore,
    tracked_players: Sequence[str],
    filters: ExportFilters | None = None,
) -> dict[str, object]:
    """JSON-serialisable summary of every completed game for the tracked players."""
    active = filters or ExportFilters()
    games = tracked_games(
        store.games.list_by_status(AnalysisStatus.COMPLETED), tracked_players, active
    )
    filter_payload = asdict(active)
    filter_payload["since"] = _iso(active.since)
    return {
        "generated_at": Now.as_datetime().isoformat(),
        "filters": filter_payload,
        "games": len(games),
        "rating_series": rating_series(games),
        "accuracy_series": accuracy_series(games),
        "openings": opening_aggregates(games),
        "top_wins": top_wins(games),
        "classification_counts": store.analysis_log.classification_counts(
            [game.record.game_id for game in games]
        ),
    }
