"""Match game participants against the configured tracked players."""

from __future__ import annotations

from collections.abc import Iterable

from movegrade.domain.game_record import GameRecord
from movegrade.errors import NoTrackedParticipant


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def _matches(entry: str, username: str | None, platform: str | None) -> bool:
    wanted_platform, sep, wanted_user = entry.partition(":")
    if not sep:
        return _normalize(entry) == _normalize(username)
    return _normalize(wanted_user) == _normalize(username) and (
        _normalize(wanted_platform) == _normalize(platform)
    )


def tracked_sides(record: GameRecord, tracked_players: Iterable[str]) -> set[str]:
    """Return the sides (``"w"``/``"b"``) played by tracked players.

    Entries are usernames or ``platform:username``, matched case-insensitively.
    With no tracked players configured every game is analysed for both sides.

    Raises:
        NoTrackedParticipant: neither player is tracked.
    """
    entries = [entry for entry in tracked_players if entry.strip()]
    if not entries:
        return {"w", "b"}
    sides = set()
    if any(_matches(entry, record.white, record.platform) for entry in entries):
        sides.add("w")
    if any(_matches(entry, record.black, record.platform) for entry in entries):
        sides.add("b")
    if not sides:
        raise NoTrackedParticipant(f"No tracked player in game {record.game_id}")
    return sides
