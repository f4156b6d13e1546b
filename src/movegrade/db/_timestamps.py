"""Timestamp conversion at the DuckDB boundary.

Timestamps are stored as naive UTC values and read back as aware UTC values.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from movegrade.utils.now import Now


def to_db_timestamp(value: datetime | None) -> datetime | None:
    utc = Now.to_utc(value)
    return None if utc is None else utc.replace(tzinfo=None)


def from_db_row(row: Mapping[str, object], columns: Iterable[str]) -> dict[str, object]:
    """Return a copy of ``row`` with the given timestamp columns made UTC-aware."""
    values = dict(row)
    for column in columns:
        value = values.get(column)
        if isinstance(value, datetime):
            values[column] = Now.to_utc(value)
    return values
