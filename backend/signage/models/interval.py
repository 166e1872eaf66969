# backend/signage/models/interval.py

"""
Time windows for campaigns and ads.

An Interval is [start, end) with start < end, always timezone-aware.
Naive datetimes are read as UTC so that values coming from the database,
the API and the tests all compare against each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from signage.errors import ValidationError


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "start", as_utc(self.start))
        object.__setattr__(self, "end", as_utc(self.end))
        if self.start >= self.end:
            raise ValidationError(
                f"interval start ({self.start.isoformat()}) must be before end ({self.end.isoformat()})"
            )

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def overlaps(a: Interval, b: Interval) -> bool:
    """
    Strict overlap: the two windows share an open sub-interval.
    Windows that only touch (a.end == b.start) do not overlap.
    """
    return a.start < b.end and a.end > b.start


def contains(outer: Interval, inner: Interval) -> bool:
    return outer.start <= inner.start and outer.end >= inner.end


def clamp_to(inner: Interval, outer: Interval) -> Interval | None:
    """
    Intersection of the two windows.
    Returns None when the intersection is empty, i.e. "never active".
    """
    start = max(inner.start, outer.start)
    end = min(inner.end, outer.end)
    if start >= end:
        return None
    return Interval(start, end)


def covers(window: Interval, instant: datetime) -> bool:
    """Closed check used for display: start <= instant <= end."""
    instant = as_utc(instant)
    return window.start <= instant <= window.end
