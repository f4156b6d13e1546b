"""Build game records from PGN text."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from movegrade.board_state import parse_game
from movegrade.domain.analysis_status import AnalysisStatus
from movegrade.domain.game_record import GameRecord
from movegrade.errors import InvalidGameRecord
from movegrade.ports.repositories import GameRepository
from movegrade.utils.logger import get_logger
from movegrade.utils.now import Now
from movegrade.utils.to_int import to_int

logger = get_logger(__name__)

_GAME_SPLIT_RE = re.compile(r"\n\s*\n(?=\s*\[)")
_UNKNOWN_HEADER_VALUES = {"", "?", "-"}

BULLET_LIMIT_S = 180
BLITZ_LIMIT_S = 600
RAPID_LIMIT_S = 1800


@dataclass(slots=True)
class ImportSummary:
    imported: int = 0
    skipped: int = 0
    errors: int = 0


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = (headers.get(name) or "").strip()
    if value in _UNKNOWN_HEADER_VALUES or "?" in value:
        return None
    return value


def split_pgn_text(raw: str | None) -> list[str]:
    """Split a multi-game PGN file on the blank line before each header block."""
    if not raw:
        return []
    normalized = raw.replace("\r\n", "\n").strip()
    if not normalized:
        return []
    return [chunk.strip() for chunk in _GAME_SPLIT_RE.split(normalized) if chunk.strip()]


def hash_pgn(pgn: str) -> str:
    return hashlib.sha256(pgn.strip().encode("utf-8")).hexdigest()[:16]


def classify_perf(time_control: str | None) -> str:
    """Speed category for a ``TimeControl`` header such as ``300+3`` or ``1/86400``."""
    if not time_control or time_control.strip() in _UNKNOWN_HEADER_VALUES:
        return "unknown"
    raw = time_control.strip()
    if raw.startswith("1/"):
        return "correspondence"
    base = to_int(raw.split("+", 1)[0])
    if base is None:
        return "unknown"
    if base < BULLET_LIMIT_S:
        return "bullet"
    if base < BLITZ_LIMIT_S:
        return "blitz"
    if base < RAPID_LIMIT_S:
        return "rapid"
    return "classical"


def parse_played_at(date: str | None, time: str | None = None) -> datetime | None:
    if not date:
        return None
    parts = date.replace("-", ".").split(".")
    if len(parts) < 3:
        return None
    clock = time or "00:00:00"
    try:
        parsed = datetime.strptime(f"{'.'.join(parts[:3])} {clock}", "%Y.%m.%d %H:%M:%S")
    except ValueError:
        return None
    return parsed.replace(tzinfo=UTC)


def resolve_platform(site: str | None) -> str:
    lowered = (site or "").lower()
    if "lichess.org" in lowered:
        return "lichess"
    if "chess.com" in lowered:
        return "chesscom"
    return "pgn"


def game_record_from_pgn(pgn: str, game_id: str | None = None) -> GameRecord:
    """Parse one PGN into an idle game record.

    Raises:
        InvalidGameRecord: the move text cannot be parsed.
    """
    game = parse_game(pgn)
    headers = game.headers
    played_at = parse_played_at(
        _header(headers, "UTCDate") or _header(headers, "Date"),
        _header(headers, "UTCTime") or _header(headers, "Time"),
    )
    return GameRecord(
        game_id=game_id or hash_pgn(pgn),
        pgn=pgn.strip(),
        white=_header(headers, "White") or "Unknown",
        black=_header(headers, "Black") or "Unknown",
        white_rating=to_int(_header(headers, "WhiteElo")),
        black_rating=to_int(_header(headers, "BlackElo")),
        result=_header(headers, "Result") or "*",
        perf=classify_perf(headers.get("TimeControl")),
        eco=_header(headers, "ECO"),
        opening_name=_header(headers, "Opening"),
        platform=resolve_platform(headers.get("Site")),
        played_at=played_at,
        status=AnalysisStatus.IDLE,
        created_at=Now.as_datetime(),
    )


def import_pgn_games(games: GameRepository, raw: str) -> ImportSummary:
    """Store every game in ``raw`` that is not already known."""
    summary = ImportSummary()
    for chunk in split_pgn_text(raw):
        try:
            record = game_record_from_pgn(chunk)
        except InvalidGameRecord as exc:
            logger.warning("Skipping invalid PGN: %s", exc)
            summary.errors += 1
            continue
        if games.get(record.game_id) is not None:
            summary.skipped += 1
            continue
        games.upsert(record)
        summary.imported += 1
    logger.info(
        "Imported %s games (%s skipped, %s errors)",
        summary.imported,
        summary.skipped,
        summary.errors,
    )
    return summary
