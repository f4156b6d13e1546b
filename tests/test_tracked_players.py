import pytest

from movegrade.domain.game_record import GameRecord
from movegrade.errors import NoTrackedParticipant
from movegrade.tracked_players import tracked_sides


def _record(**overrides) -> GameRecord:
    values = {"game_id": "game-1", "white": "Alice", "black": "bob", "platform": "lichess"}
    values.update(overrides)
    return GameRecord(**values)


def test_no_tracked_players_means_both_sides() -> None:
    assert tracked_sides(_record(), []) == {"w", "b"}
    assert tracked_sides(_record(), ["  "]) == {"w", "b"}


def test_usernames_match_case_insensitively() -> None:
    assert tracked_sides(_record(), ["alice"]) == {"w"}
    assert tracked_sides(_record(), ["BOB", "carol"]) == {"b"}
    assert tracked_sides(_record(), ["alice", "bob"]) == {"w", "b"}


def test_platform_prefix_must_match() -> None:
    assert tracked_sides(_record(), ["lichess:bob"]) == {"b"}
    with pytest.raises(NoTrackedParticipant):
        tracked_sides(_record(), ["chesscom:bob"])


def test_untracked_game_raises() -> None:
    with pytest.raises(NoTrackedParticipant):
        tracked_sides(_record(), ["carol"])
