from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import duckdb

from movegrade.db.duckdb_analysis_log_repository import DuckDbAnalysisLogRepository
from movegrade.db.duckdb_game_repository import DuckDbGameRepository
from movegrade.db.duckdb_opening_book_repository import DuckDbOpeningBookRepository
from movegrade.db.duckdb_review_position_repository import DuckDbReviewPositionRepository
from movegrade.utils.logger import get_logger

logger = get_logger(__name__)

GAMES_SCHEMA = """
CREATE TABLE IF NOT EXISTS games (
    game_id TEXT PRIMARY KEY,
    pgn TEXT,
    white TEXT,
    black TEXT,
    white_rating INTEGER,
    black_rating INTEGER,
    result TEXT,
    perf TEXT,
    eco TEXT,
    opening_name TEXT,
    platform TEXT,
    played_at TIMESTAMP,
    status TEXT DEFAULT 'idle',
    started_at TIMESTAMP,
    heartbeat_at TIMESTAMP,
    progress INTEGER DEFAULT 0,
    retry_count INTEGER DEFAULT 0,
    analyzed_at TIMESTAMP,
    white_accuracy DOUBLE,
    black_accuracy DOUBLE,
    avg_cp_loss DOUBLE,
    max_accuracy_streak INTEGER,
    max_eval_swing INTEGER,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

ANALYSIS_LOG_SCHEMA = """
CREATE TABLE IF NOT EXISTS analysis_log (
    game_id TEXT,
    ply INTEGER,
    fen TEXT,
    move TEXT,
    san TEXT,
    side TEXT,
    best_move TEXT,
    classification TEXT,
    phase TEXT,
    score INTEGER,
    mate INTEGER,
    score_after INTEGER,
    eval_diff INTEGER,
    accuracy INTEGER,
    pv_lines TEXT,
    motifs TEXT,
    missed_win BOOLEAN,
    missed_defense BOOLEAN,
    book_move BOOLEAN,
    plan_hint TEXT,
    explanation TEXT,
    PRIMARY KEY (game_id, ply)
);
"""

REVIEW_POSITIONS_SCHEMA = """
CREATE TABLE IF NOT EXISTS review_positions (
    review_id TEXT PRIMARY KEY,
    game_id TEXT,
    ply INTEGER,
    fen TEXT,
    move TEXT,
    best_move TEXT,
    classification TEXT,
    question_type TEXT,
    side TEXT,
    phase TEXT,
    priority INTEGER,
    score INTEGER,
    loss INTEGER,
    tags TEXT,
    motifs TEXT,
    missed_win BOOLEAN,
    missed_defense BOOLEAN,
    plan_hint TEXT,
    explanation TEXT,
    created_at TIMESTAMP,
    next_review_at TIMESTAMP,
    last_seen_at TIMESTAMP
);
"""

OPENINGS_SCHEMA = """
CREATE TABLE IF NOT EXISTS openings (
    eco TEXT PRIMARY KEY,
    name TEXT,
    book_moves TEXT
);
"""

OPENING_POSITIONS_SCHEMA = """
CREATE TABLE IF NOT EXISTS opening_positions (
    position_key TEXT,
    move TEXT,
    eco TEXT,
    PRIMARY KEY (position_key, move)
);
"""

SCHEMA_VERSION_SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER,
    updated_at TIMESTAMP
);
"""

SCHEMA_VERSION = 3


@dataclass
class DuckDbStore:
    """Open DuckDB connection together with the repositories that share it."""

    conn: duckdb.DuckDBPyConnection
    games: DuckDbGameRepository = field(init=False)
    analysis_log: DuckDbAnalysisLogRepository = field(init=False)
    review_positions: DuckDbReviewPositionRepository = field(init=False)
    openings: DuckDbOpeningBookRepository = field(init=False)

    def __post_init__(self) -> None:
        self.games = DuckDbGameRepository(self.conn)
        self.analysis_log = DuckDbAnalysisLogRepository(self.conn)
        self.review_positions = DuckDbReviewPositionRepository(self.conn)
        self.openings = DuckDbOpeningBookRepository(self.conn)

    def close(self) -> None:
        self.conn.close()


def open_store(db_path: Path | str) -> DuckDbStore:
    """Connect to ``db_path`` (or ``:memory:``), migrate and return the store."""
    if str(db_path) == ":memory:":
        conn = duckdb.connect(":memory:")
    else:
        conn = get_connection(Path(db_path))
    init_schema(conn)
    return DuckDbStore(conn)


def get_connection(db_path: Path) -> duckdb.DuckDBPyConnection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Opening DuckDB at %s", db_path)
    try:
        return duckdb.connect(str(db_path))
    except duckdb.InternalException as exc:
        if not _should_attempt_wal_recovery(exc):
            raise
        wal_path = db_path.with_name(f"{db_path.name}.wal")
        if not wal_path.exists():
            raise
        logger.warning("Removing DuckDB WAL after replay error: %s", wal_path)
        try:
            wal_path.unlink()
        except OSError:
            logger.exception("Failed to remove WAL file: %s", wal_path)
            raise
        return duckdb.connect(str(db_path))


def init_schema(conn: duckdb.DuckDBPyConnection) -> None:
    migrate_schema(conn)


def migrate_schema(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute(SCHEMA_VERSION_SCHEMA)
    current_version = _get_schema_version(conn)
    _apply_schema_migrations(conn, current_version, SCHEMA_VERSION)


def _apply_schema_migrations(
    conn: duckdb.DuckDBPyConnection,
    current_version: int,
    max_target_version: int,
) -> None:
    version = current_version
    for target_version, migration in _SCHEMA_MIGRATIONS:
        if target_version > max_target_version or version >= target_version:
            continue
        logger.info("Applying DuckDB schema migration v%s", target_version)
        migration(conn)
        _set_schema_version(conn, target_version)
        version = target_version


def _should_attempt_wal_recovery(exc: Exception) -> bool:
    message = str(exc).lower()
    if "wal" not in message:
        return False
    if os.getenv("PYTEST_CURRENT_TEST"):
        return True
    env = os.getenv("MOVEGRADE_ENV", "").lower()
    if env in {"test", "dev"}:
        return True
    allow = os.getenv("MOVEGRADE_ALLOW_WAL_RECOVERY", "").lower()
    return allow in {"1", "true", "yes"}


def get_schema_version(conn: duckdb.DuckDBPyConnection) -> int:
    return _get_schema_version(conn)


def _get_schema_version(conn: duckdb.DuckDBPyConnection) -> int:
    row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
    if not row:
        return 0
    return int(row[0] or 0)


def _set_schema_version(conn: duckdb.DuckDBPyConnection, version: int) -> None:
    conn.execute("DELETE FROM schema_version")
    conn.execute("INSERT INTO schema_version VALUES (?, CURRENT_TIMESTAMP)", [version])


def _migration_base_tables(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute(GAMES_SCHEMA)
    conn.execute(ANALYSIS_LOG_SCHEMA)
    conn.execute(REVIEW_POSITIONS_SCHEMA)


def _migration_add_opening_book(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute(OPENINGS_SCHEMA)
    conn.execute(OPENING_POSITIONS_SCHEMA)


def _migration_add_review_flag(conn: duckdb.DuckDBPyConnection) -> None:
    _ensure_column(conn, "review_positions", "review_flag", "BOOLEAN DEFAULT FALSE")


_SCHEMA_MIGRATIONS = [
    (1, _migration_base_tables),
    (2, _migration_add_opening_book),
    (3, _migration_add_review_flag),
]


def _ensure_column(
    conn: duckdb.DuckDBPyConnection, table: str, column: str, definition: str
) -> None:
    columns = {row[1] for row in conn.execute(f"PRAGMA table_info('{table}')").fetchall()}
    if column not in columns:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
