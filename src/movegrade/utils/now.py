from datetime import UTC, datetime


class Now:
    @staticmethod
    def as_datetime() -> datetime:
        """Return the current UTC time as a datetime object."""

        return datetime.now(UTC)

    @staticmethod
    def to_utc(dt: datetime | None) -> datetime | None:
        """Convert a datetime object to UTC timezone; naive values are taken as UTC."""

        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        return dt.astimezone(UTC)

    @staticmethod
    def elapsed_ms(since: datetime | None, now: datetime | None = None) -> int | None:
        """Return milliseconds elapsed since ``since`` or None when unknown."""

        start = Now.to_utc(since)
        if start is None:
            return None
        current = Now.to_utc(now) or datetime.now(UTC)
        return int((current - start).total_seconds() * 1000)
