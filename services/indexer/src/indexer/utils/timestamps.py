"""Timestamp utilities for ledger close times (UTC)."""

from datetime import datetime, timezone


def iso_to_unix(value: str) -> int:
    """Convert an ISO-8601 timestamp (e.g. '2024-03-01T12:00:05Z') to unix seconds.

    Naive timestamps are taken as UTC.
    """
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def unix_to_datetime(ts: int) -> datetime:
    """Convert unix seconds to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(ts, tz=timezone.utc)
