from __future__ import annotations

import hashlib
from pathlib import Path

from movegrade.errors import EngineProcessError
from movegrade.utils.logger import get_logger

logger = get_logger(__name__)

_CHUNK_SIZE = 1024 * 1024


def _normalize_checksum(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = value.strip().lower()
    return cleaned or None


def _compute_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_stockfish_checksum(
    binary_path: Path,
    expected_checksum: str | None,
    mode: str = "warn",
) -> bool:
    """Compare the engine binary against a pinned sha256.

    ``mode="enforce"`` refuses to run a mismatching binary; any other mode only
    logs a warning. Returns True when no checksum is pinned or it matches.
    """
    normalized = _normalize_checksum(expected_checksum)
    if not normalized:
        return True
    actual = _compute_sha256(binary_path)
    if actual == normalized:
        return True
    message = "Stockfish checksum mismatch (expected=%s, actual=%s, path=%s)"
    if (mode or "warn").lower() == "enforce":
        raise EngineProcessError(message % (normalized, actual, binary_path))
    logger.warning(message, normalized, actual, binary_path)
    return False
