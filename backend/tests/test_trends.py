from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from bpmonitor.analytics import build_trend_series

from conftest import fake_reading

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_groups_by_day_in_order():
    readings = [
        fake_reading(130, 85, datetime(2026, 3, 9, 18, 0), pulse=70),
        fake_reading(120, 80, datetime(2026, 3, 8, 9, 0)),
        fake_reading(121, 81, datetime(2026, 3, 9, 7, 0), pulse=None),
    ]
    series = build_trend_series(readings, 7, now=NOW)
    assert [p.date.isoformat() for p in series] == ['2026-03-08', '2026-03-09']
    assert series[1].systolic == 126  # (130 + 121) / 2 = 125.5
    assert series[1].diastolic == 83
    assert series[1].pulse == 70
    assert series[1].count == 2
    assert series[0].pulse is None


def test_readings_outside_window_are_dropped():
    readings = [
        fake_reading(120, 80, datetime(2026, 3, 2, 11, 0)),
        fake_reading(140, 90, datetime(2026, 3, 4, 12, 0)),
    ]
    series = build_trend_series(readings, 7, now=NOW)
    assert len(series) == 1
    assert series[0].systolic == 140


def test_local_time_zone_moves_bucket():
    # 02:00 UTC on the 9th is still the 8th in New York
    readings = [fake_reading(120, 80, datetime(2026, 3, 9, 2, 0))]
    utc = build_trend_series(readings, 7, now=NOW)
    local = build_trend_series(readings, 7, now=NOW, tz=ZoneInfo('America/New_York'))
    assert utc[0].date.isoformat() == '2026-03-09'
    assert local[0].date.isoformat() == '2026-03-08'


def test_empty_input_and_bad_window():
    assert build_trend_series([], 30, now=NOW) == []
    with pytest.raises(ValueError):
        build_trend_series([], 0, now=NOW)


def test_to_dict():
    series = build_trend_series([fake_reading(120, 80, datetime(2026, 3, 9), pulse=60)], 7, now=NOW)
    assert series[0].to_dict() == {
        'date': '2026-03-09', 'systolic': 120, 'diastolic': 80, 'pulse': 60, 'count': 1,
    }
