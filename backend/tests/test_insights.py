from datetime import datetime, timedelta

from bpmonitor.analytics import Category, compute_insights, NO_INSIGHTS
from bpmonitor.analytics.averages import ratio_half_up, mean_half_up

from conftest import fake_reading


def _series(pairs):
    start = datetime(2026, 1, 1, 8, 0)
    return [fake_reading(s, d, recorded_at=start + timedelta(hours=i))
            for i, (s, d) in enumerate(pairs)]


def test_half_up_rounding():
    assert ratio_half_up(5, 2) == 3
    assert ratio_half_up(7, 2) == 4
    assert ratio_half_up(10, 3) == 3
    assert mean_half_up([120, 121]) == 121
    assert mean_half_up([]) is None


def test_empty_input_returns_sentinel():
    result = compute_insights([])
    assert result is NO_INSIGHTS
    assert result.to_dict()['has_data'] is False
    assert result.message == 'Need at least 5 readings to generate insights'


def test_small_history_has_no_trend():
    summary = compute_insights(_series([(120, 80), (130, 85), (125, 82)]))
    assert summary.total_readings == 3
    assert summary.avg_systolic == 125
    assert summary.avg_diastolic == 82
    assert summary.systolic_trend == 0
    assert summary.diastolic_trend == 0
    assert summary.meets_minimum is False


def test_histogram_lists_every_category():
    summary = compute_insights(_series([(110, 70)] * 5))
    assert summary.categories == {
        Category.NORMAL: 5, Category.ELEVATED: 0, Category.STAGE_1: 0, Category.STAGE_2: 0,
    }
    assert summary.risk_percentage == 0
    assert summary.overall_category is Category.NORMAL
    assert summary.meets_minimum is True
    assert sum(summary.to_dict()['categories'].values()) == 5


def test_trend_compares_last_ten_with_the_rest():
    readings = _series([(120, 78)] * 5 + [(140, 88)] * 10)
    summary = compute_insights(readings)
    assert summary.older_avg_systolic == 120
    assert summary.recent_avg_systolic == 140
    assert summary.systolic_trend == 20
    assert summary.diastolic_trend == 10
    titles = [r.title for r in summary.recommendations]
    assert 'Rising Systolic Trend' in titles
    assert 'Rising Diastolic Trend' in titles


def test_risk_percentage_rounds_half_up():
    # 1 of 8 high-risk readings is 12.5%
    summary = compute_insights(_series([(150, 95)] + [(110, 70)] * 7))
    assert summary.risk_percentage == 13


def test_to_dict_shape():
    data = compute_insights(_series([(135, 85)] * 6)).to_dict()
    assert data['has_data'] is True
    assert data['overall_category']['label'] == 'Stage 1'
    assert data['recommendations'][0]['title'] == 'Elevated Blood Pressure'


def test_two_reading_mean():
    summary = compute_insights(_series([(120, 80), (130, 90)]))
    assert (summary.avg_systolic, summary.avg_diastolic) == (125, 85)
    assert len(summary.recommendations) == 1
