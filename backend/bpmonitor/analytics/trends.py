"""
Daily trend series for the blood pressure line chart.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .averages import mean_half_up

TREND_WINDOWS = (7, 30, 90, 180, 365)


@dataclass(frozen=True)
class DatedAverage:
    date: date
    systolic: int
    diastolic: int
    pulse: Optional[int]
    count: int

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'pulse': self.pulse,
            'count': self.count,
        }


def as_utc(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; make them comparable with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_trend_series(readings, days: int, now: datetime = None, tz=None) -> list:
    """Average readings per calendar day over the last `days` days.

    Days are calendar dates in `tz` (UTC when not given). Days without
    readings are simply missing from the result; nothing is interpolated.
    Pulse is averaged over the readings that have one.
    """
    if days <= 0:
        raise ValueError('days must be positive')
    now = as_utc(now) if now else datetime.now(timezone.utc)
    tz = tz or timezone.utc
    cutoff = now - timedelta(days=days)

    in_window = [r for r in readings if as_utc(r.recorded_at) >= cutoff]
    in_window.sort(key=lambda r: as_utc(r.recorded_at))

    buckets = {}
    for reading in in_window:
        day = as_utc(reading.recorded_at).astimezone(tz).date()
        buckets.setdefault(day, []).append(reading)

    series = []
    for day, group in buckets.items():
        series.append(DatedAverage(
            date=day,
            systolic=mean_half_up(r.systolic for r in group),
            diastolic=mean_half_up(r.diastolic for r in group),
            pulse=mean_half_up(r.pulse for r in group if r.pulse is not None),
            count=len(group),
        ))
    return series
