"""
Filters for the readings list: patient name search, time period and
category.
"""
import calendar
from datetime import datetime, timedelta, timezone

from .categories import Category, categorize
from .trends import as_utc

PERIODS = ('all', 'today', 'week', 'month', '3months')


def _months_ago(moment, months):
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_cutoff(period: str, now: datetime = None):
    """Earliest timestamp included by a period filter, or None for 'all'."""
    now = as_utc(now) if now else datetime.now(timezone.utc)
    if period in (None, '', 'all'):
        return None
    if period == 'today':
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == 'week':
        return now - timedelta(days=7)
    if period == 'month':
        return _months_ago(now, 1)
    if period == '3months':
        return _months_ago(now, 3)
    raise ValueError(f'Unknown period: {period}')


def filter_readings(readings, search=None, period=None, category=None,
                    patient_names=None, now=None) -> list:
    """Apply the readings-list filters. Raises ValueError on unknown keys."""
    filtered = list(readings)

    if search:
        needle = search.strip().lower()
        names = patient_names or {}
        filtered = [r for r in filtered
                    if needle in (names.get(r.patient_id) or '').lower()]

    cutoff = period_cutoff(period, now)
    if cutoff is not None:
        filtered = [r for r in filtered if as_utc(r.recorded_at) >= cutoff]

    if category and category != 'all':
        wanted = Category.from_slug(category)
        if wanted is None:
            raise ValueError(f'Unknown category: {category}')
        filtered = [r for r in filtered if categorize(r.systolic, r.diastolic) == wanted]

    return filtered
