# Standard library imports
from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

TIME_RANGE_DELTAS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}

HOUR_BUCKET_FORMAT = "%Y-%m-%d-%H"
DAY_BUCKET_FORMAT = "%Y-%m-%d"


def share(count: int, total: int) -> float:
    """Percentage of ``total`` held by ``count``, two decimals; 0 when nothing was cast."""
    if total <= 0:
        return 0.0
    return round(count / total * 100, 2)


def average(total: float, count: int) -> float:
    return round(total / count, 2) if count else 0.0


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def window_start(time_range: str, now: datetime | None = None) -> datetime:
    now = now or datetime.now(UTC)
    return now - TIME_RANGE_DELTAS[time_range]


def bucket_format(time_range: str) -> str:
    return HOUR_BUCKET_FORMAT if time_range == "24h" else DAY_BUCKET_FORMAT


def bucket_counts(timestamps: Iterable[datetime], fmt: str = DAY_BUCKET_FORMAT) -> list[tuple[str, int]]:
    """Group timestamps into sorted ``(bucket, count)`` pairs using ``fmt``."""
    counts = Counter(as_utc(ts).strftime(fmt) for ts in timestamps)
    return sorted(counts.items())


def hour_of_day_counts(timestamps: Iterable[datetime]) -> list[tuple[int, int]]:
    counts = Counter(as_utc(ts).hour for ts in timestamps)
    return sorted(counts.items())
