import unittest
from datetime import UTC, datetime

import chess

from movegrade.analytics import (
    ExportFilters,
    accuracy_series,
    build_export_bundle,
    opening_aggregates,
    rating_series,
    top_wins,
    tracked_games,
)
from movegrade.db.duckdb_store import open_store
from movegrade.domain.analysis_log_entry import AnalysisLogEntry
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.game_phase import GamePhase
from movegrade.domain.game_record import GameRecord
from movegrade.domain.move_classification import MoveClassification


def _completed(game_id: str, **values) -> GameRecord:
    return GameRecord(game_id=game_id, status=AnalysisStatus.COMPLETED, **values)


GAMES = [
    _completed(
        "g1",
        white="alice",
        black="bob",
        white_rating=1850,
        black_rating=1790,
        result="1-0",
        eco="C20",
        opening_name="King's Pawn Game",
        perf="blitz",
        platform="lichess",
        played_at=datetime(2024, 3, 1, tzinfo=UTC),
        white_accuracy=90.0,
        black_accuracy=80.0,
    ),
    _completed(
        "g2",
        white="carol",
        black="Alice",
        white_rating=2000,
        black_rating=1860,
        result="0-1",
        eco="C20",
        opening_name="King's Pawn Game",
        perf="blitz",
        platform="chesscom",
        played_at=datetime(2024, 3, 2, tzinfo=UTC),
        black_accuracy=85.0,
    ),
    _completed(
        "g3",
        white="alice",
        black="dave",
        white_rating=1800,
        black_rating=1700,
        result="1/2-1/2",
        eco="B01",
        opening_name="Scandinavian Defense",
        perf="rapid",
        platform="lichess",
        played_at=datetime(2024, 2, 1, tzinfo=UTC),
        white_accuracy=70.0,
    ),
    _completed("g4", white="erin", black="frank", result="1-0"),
]


class AnalyticsTests(unittest.TestCase):
    def test_tracked_games_pick_side_and_sort_by_date(self) -> None:
        games = tracked_games(GAMES, ["alice"])

        self.assertEqual([game.record.game_id for game in games], ["g3", "g1", "g2"])
        self.assertEqual([game.side for game in games], ["w", "w", "b"])
        self.assertEqual([game.outcome for game in games], ["draw", "win", "win"])

    def test_series_follow_the_tracked_side(self) -> None:
        games = tracked_games(GAMES, ["alice"])

        self.assertEqual(
            [point["rating"] for point in rating_series(games)], [1800, 1850, 1860]
        )
        self.assertEqual(
            [point["accuracy"] for point in accuracy_series(games)], [70.0, 90.0, 85.0]
        )

    def test_opening_aggregates_most_played_first(self) -> None:
        openings = opening_aggregates(tracked_games(GAMES, ["alice"]))

        self.assertEqual(
            openings[0],
            {
                "eco": "C20",
                "name": "King's Pawn Game",
                "games": 2,
                "wins": 2,
                "draws": 0,
                "losses": 0,
                "win_rate": 100,
                "avg_accuracy": 87.5,
            },
        )
        self.assertEqual(openings[1]["eco"], "B01")
        self.assertEqual(openings[1]["draws"], 1)
        self.assertEqual(openings[1]["win_rate"], 0)

    def test_top_wins_by_opponent_rating(self) -> None:
        wins = top_wins(tracked_games(GAMES, ["alice"]))

        self.assertEqual([win["game_id"] for win in wins], ["g2", "g1"])
        self.assertEqual(wins[0]["opponent"], "carol")
        self.assertEqual(top_wins(tracked_games(GAMES, ["alice"]), limit=1)[0]["game_id"], "g2")

    def test_filters(self) -> None:
        def ids(filters: ExportFilters) -> list[str]:
            return [game.record.game_id for game in tracked_games(GAMES, ["alice"], filters)]

        self.assertEqual(ids(ExportFilters(perf="rapid")), ["g3"])
        self.assertEqual(ids(ExportFilters(platform="chesscom")), ["g2"])
        self.assertEqual(ids(ExportFilters(since=datetime(2024, 3, 2, tzinfo=UTC))), ["g2"])

    def test_export_bundle_reads_completed_games_from_store(self) -> None:
        store = open_store(":memory:")
        for record in GAMES:
            store.games.upsert(record)
        store.games.upsert(GameRecord(game_id="g5", white="alice", status=AnalysisStatus.PENDING))
        for game_id, classification in (
            ("g1", MoveClassification.BLUNDER),
            ("g4", MoveClassification.BEST),
        ):
            store.analysis_log.append(
                game_id,
                AnalysisLogEntry(
                    ply=1,
                    fen=chess.STARTING_FEN,
                    move="e2e4",
                    side="w",
                    classification=classification,
                    phase=GamePhase.OPENING,
                ),
            )

        bundle = build_export_bundle(store, ["alice"], ExportFilters(perf="blitz"))

        self.assertEqual(bundle["games"], 2)
        self.assertEqual(bundle["filters"], {"perf": "blitz", "platform": None, "since": None})
        self.assertEqual(bundle["classification_counts"], {"blunder": 1})
        self.assertEqual([win["game_id"] for win in bundle["top_wins"]], ["g2", "g1"])
        self.assertIn("generated_at", bundle)
        store.close()


if __name__ == "__main__":
    unittest.main()
