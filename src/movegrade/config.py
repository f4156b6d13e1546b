from __future__ import annotations

import os
from dataclasses import MISSING, dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_MISSING = object()
_SETTINGS_ALIAS_FIELDS = (
    "stockfish_path",
    "stockfish_version",
    "stockfish_checksum",
    "stockfish_checksum_mode",
    "stockfish_threads",
    "stockfish_hash_mb",
    "stockfish_movetime_ms",
    "stockfish_depth",
    "stockfish_multipv",
    "stockfish_deep_depth",
    "stockfish_use_nnue",
    "stockfish_eval_file",
    "stockfish_max_retries",
    "stockfish_retry_backoff_ms",
    "tracked_players",
    "max_attempts",
    "review_positions_enabled",
    "review_position_limit",
    "scheduler_tick_s",
)

load_dotenv()

DEFAULT_DATA_DIR = Path(os.getenv("MOVEGRADE_DATA_DIR", "data"))
DEFAULT_STOCKFISH_VERSION = "17.1-single"
DEFAULT_REVIEW_POSITION_LIMIT = 5000


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str) -> list[str]:
    value = os.getenv(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_versions(value: str | None) -> dict[str, Path]:
    """Parse ``name=path,name=path`` into a version to binary mapping."""
    versions: dict[str, Path] = {}
    for item in (value or "").split(","):
        name, sep, path = item.partition("=")
        if sep and name.strip() and path.strip():
            versions[name.strip()] = Path(path.strip())
    return versions


def _field_value(name: str, field_info: object, kwargs: dict[str, object]) -> object:
    value = kwargs.pop(name, _MISSING)
    if value is not _MISSING:
        return value
    default_factory = getattr(field_info, "default_factory", MISSING)
    if default_factory is not MISSING:
        return default_factory()
    default = getattr(field_info, "default", MISSING)
    if default is not MISSING:
        return default
    raise TypeError(f"Missing required argument: {name}")


def _apply_settings_aliases(settings: Settings, kwargs: dict[str, object]) -> None:
    for alias in _SETTINGS_ALIAS_FIELDS:
        value = kwargs.pop(alias, _MISSING)
        if value is not _MISSING:
            setattr(settings, alias, value)


def _raise_on_unexpected_kwargs(kwargs: dict[str, object]) -> None:
    if kwargs:
        unexpected = next(iter(kwargs))
        raise TypeError(f"Settings.__init__() got an unexpected keyword argument '{unexpected}'")


@dataclass(slots=True)
class StockfishSettings:
    """Stockfish engine configuration."""

    path: Path = Path(os.getenv("STOCKFISH_PATH", "stockfish"))
    versions: dict[str, Path] = field(
        default_factory=lambda: parse_versions(os.getenv("STOCKFISH_VERSIONS"))
    )
    version: str = os.getenv("STOCKFISH_VERSION", DEFAULT_STOCKFISH_VERSION)
    checksum: str | None = os.getenv("STOCKFISH_SHA256") or os.getenv("STOCKFISH_CHECKSUM")
    checksum_mode: str = os.getenv("STOCKFISH_CHECKSUM_MODE", "warn")
    threads: int = _env_int("STOCKFISH_THREADS", 1)
    hash_mb: int = _env_int("STOCKFISH_HASH", 32)
    movetime_ms: int | None = _env_int("STOCKFISH_MOVETIME_MS", 0) or None
    depth: int = _env_int("STOCKFISH_DEPTH", 15)
    multipv: int = _env_int("STOCKFISH_MULTIPV", 3)
    deep_depth: int = _env_int("STOCKFISH_DEEP_DEPTH", 0)
    use_nnue: bool = _env_flag("STOCKFISH_USE_NNUE", True)
    eval_file: str | None = os.getenv("STOCKFISH_EVAL_FILE") or None
    max_retries: int = _env_int("STOCKFISH_MAX_RETRIES", 2)
    retry_backoff_ms: int = _env_int("STOCKFISH_RETRY_BACKOFF_MS", 250)
    option_cooldown_ms: int = _env_int("STOCKFISH_OPTION_COOLDOWN_MS", 250)

    def binary_for(self, version: str | None) -> Path:
        """Return the binary configured for ``version`` or the default path."""
        if version and version in self.versions:
            return self.versions[version]
        return self.path


@dataclass(slots=True)
class AnalysisSettings:
    """Per-game analysis behaviour."""

    tracked_players: list[str] = field(
        default_factory=lambda: _env_list("MOVEGRADE_TRACKED_PLAYERS")
    )
    max_attempts: int = _env_int("MOVEGRADE_MAX_ATTEMPTS", 3)
    ply_yield_ms: int = _env_int("MOVEGRADE_PLY_YIELD_MS", 10)
    review_positions_enabled: bool = _env_flag("MOVEGRADE_REVIEW_POSITIONS", True)
    review_position_limit: int = _env_int(
        "MOVEGRADE_REVIEW_POSITION_LIMIT", DEFAULT_REVIEW_POSITION_LIMIT
    )


@dataclass(slots=True)
class SchedulerSettings:
    """Queue polling cadence."""

    tick_s: float = float(os.getenv("MOVEGRADE_SCHEDULER_TICK_S", "15"))
    between_games_ms: int = _env_int("MOVEGRADE_BETWEEN_GAMES_MS", 50)


@dataclass(slots=True, init=False)
class Settings:
    """Central configuration for the engine, analyzer, scheduler and API."""

    api_token: str = os.getenv("MOVEGRADE_API_TOKEN", "local-dev-token")
    duckdb_path: Path = Path(
        os.getenv("MOVEGRADE_DUCKDB_PATH", DEFAULT_DATA_DIR / "movegrade.duckdb")
    )

    stockfish: StockfishSettings = field(default_factory=StockfishSettings)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    scheduler: SchedulerSettings = field(default_factory=SchedulerSettings)

    def __init__(self, **kwargs: object) -> None:
        for name, field_info in self.__dataclass_fields__.items():
            setattr(self, name, _field_value(name, field_info, kwargs))
        _apply_settings_aliases(self, kwargs)
        _raise_on_unexpected_kwargs(kwargs)

    @property
    def stockfish_path(self) -> Path:
        return self.stockfish.path

    @stockfish_path.setter
    def stockfish_path(self, value: Path | str) -> None:
        self.stockfish.path = Path(value)

    @property
    def stockfish_version(self) -> str:
        return self.stockfish.version

    @stockfish_version.setter
    def stockfish_version(self, value: str) -> None:
        self.stockfish.version = value

    @property
    def stockfish_checksum(self) -> str | None:
        return self.stockfish.checksum

    @stockfish_checksum.setter
    def stockfish_checksum(self, value: str | None) -> None:
        self.stockfish.checksum = value

    @property
    def stockfish_checksum_mode(self) -> str:
        return self.stockfish.checksum_mode

    @stockfish_checksum_mode.setter
    def stockfish_checksum_mode(self, value: str) -> None:
        self.stockfish.checksum_mode = value

    @property
    def stockfish_threads(self) -> int:
        return self.stockfish.threads

    @stockfish_threads.setter
    def stockfish_threads(self, value: int) -> None:
        self.stockfish.threads = value

    @property
    def stockfish_hash_mb(self) -> int:
        return self.stockfish.hash_mb

    @stockfish_hash_mb.setter
    def stockfish_hash_mb(self, value: int) -> None:
        self.stockfish.hash_mb = value

    @property
    def stockfish_movetime_ms(self) -> int | None:
        return self.stockfish.movetime_ms

    @stockfish_movetime_ms.setter
    def stockfish_movetime_ms(self, value: int | None) -> None:
        self.stockfish.movetime_ms = value

    @property
    def stockfish_depth(self) -> int:
        return self.stockfish.depth

    @stockfish_depth.setter
    def stockfish_depth(self, value: int) -> None:
        self.stockfish.depth = value

    @property
    def stockfish_multipv(self) -> int:
        return self.stockfish.multipv

    @stockfish_multipv.setter
    def stockfish_multipv(self, value: int) -> None:
        self.stockfish.multipv = value

    @property
    def stockfish_deep_depth(self) -> int:
        return self.stockfish.deep_depth

    @stockfish_deep_depth.setter
    def stockfish_deep_depth(self, value: int) -> None:
        self.stockfish.deep_depth = value

    @property
    def stockfish_use_nnue(self) -> bool:
        return self.stockfish.use_nnue

    @stockfish_use_nnue.setter
    def stockfish_use_nnue(self, value: bool) -> None:
        self.stockfish.use_nnue = value

    @property
    def stockfish_eval_file(self) -> str | None:
        return self.stockfish.eval_file

    @stockfish_eval_file.setter
    def stockfish_eval_file(self, value: str | None) -> None:
        self.stockfish.eval_file = value

    @property
    def stockfish_max_retries(self) -> int:
        return self.stockfish.max_retries

    @stockfish_max_retries.setter
    def stockfish_max_retries(self, value: int) -> None:
        self.stockfish.max_retries = value

    @property
    def stockfish_retry_backoff_ms(self) -> int:
        return self.stockfish.retry_backoff_ms

    @stockfish_retry_backoff_ms.setter
    def stockfish_retry_backoff_ms(self, value: int) -> None:
        self.stockfish.retry_backoff_ms = value

    @property
    def tracked_players(self) -> list[str]:
        return self.analysis.tracked_players

    @tracked_players.setter
    def tracked_players(self, value: list[str]) -> None:
        self.analysis.tracked_players = list(value)

    @property
    def max_attempts(self) -> int:
        return self.analysis.max_attempts

    @max_attempts.setter
    def max_attempts(self, value: int) -> None:
        self.analysis.max_attempts = value

    @property
    def review_positions_enabled(self) -> bool:
        return self.analysis.review_positions_enabled

    @review_positions_enabled.setter
    def review_positions_enabled(self, value: bool) -> None:
        self.analysis.review_positions_enabled = value

    @property
    def review_position_limit(self) -> int:
        return self.analysis.review_position_limit

    @review_position_limit.setter
    def review_position_limit(self, value: int) -> None:
        self.analysis.review_position_limit = value

    @property
    def scheduler_tick_s(self) -> float:
        return self.scheduler.tick_s

    @scheduler_tick_s.setter
    def scheduler_tick_s(self, value: float) -> None:
        self.scheduler.tick_s = value

    @property
    def data_dir(self) -> Path:
        return self.duckdb_path.parent

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)


def get_settings() -> Settings:
    load_dotenv()
    settings = Settings()
    settings.ensure_dirs()
    return settings
