"""
Insight summary over a patient's (or a clinician's whole) reading history.

Readings are expected oldest first. The summary compares the most recent
window of readings against everything before it to report a trend.
"""
from dataclasses import dataclass, field

from .averages import mean_half_up, percentage_half_up
from .categories import Category, categorize, category_to_dict
from .recommendations import generate_recommendations

RECENT_WINDOW = 10
MIN_READINGS_FOR_INSIGHTS = 5


@dataclass(frozen=True)
class NoInsights:
    """Returned instead of a summary when there are no readings."""
    message: str = f'Need at least {MIN_READINGS_FOR_INSIGHTS} readings to generate insights'
    total_readings: int = 0

    def to_dict(self):
        return {
            'has_data': False,
            'total_readings': self.total_readings,
            'message': self.message,
            'min_readings': MIN_READINGS_FOR_INSIGHTS,
        }


NO_INSIGHTS = NoInsights()


@dataclass(frozen=True)
class InsightSummary:
    total_readings: int
    avg_systolic: int
    avg_diastolic: int
    recent_avg_systolic: int
    recent_avg_diastolic: int
    older_avg_systolic: int
    older_avg_diastolic: int
    systolic_trend: int
    diastolic_trend: int
    categories: dict
    risk_percentage: int
    overall_category: Category
    recommendations: list = field(default_factory=list)

    @property
    def meets_minimum(self) -> bool:
        return self.total_readings >= MIN_READINGS_FOR_INSIGHTS

    def to_dict(self):
        return {
            'has_data': True,
            'total_readings': self.total_readings,
            'meets_minimum': self.meets_minimum,
            'min_readings': MIN_READINGS_FOR_INSIGHTS,
            'avg_systolic': self.avg_systolic,
            'avg_diastolic': self.avg_diastolic,
            'recent_avg_systolic': self.recent_avg_systolic,
            'recent_avg_diastolic': self.recent_avg_diastolic,
            'older_avg_systolic': self.older_avg_systolic,
            'older_avg_diastolic': self.older_avg_diastolic,
            'systolic_trend': self.systolic_trend,
            'diastolic_trend': self.diastolic_trend,
            'categories': {c.value: n for c, n in self.categories.items()},
            'risk_percentage': self.risk_percentage,
            'overall_category': category_to_dict(self.overall_category),
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


def category_counts(readings) -> dict:
    """Histogram of readings per category; every category is present."""
    counts = {category: 0 for category in Category}
    for reading in readings:
        counts[categorize(reading.systolic, reading.diastolic)] += 1
    return counts


def compute_insights(readings):
    """Summarize readings (oldest first).

    Returns NO_INSIGHTS for an empty sequence. Any non-empty sequence gets a
    full summary, even below MIN_READINGS_FOR_INSIGHTS.
    """
    readings = list(readings)
    total = len(readings)
    if total == 0:
        return NO_INSIGHTS

    avg_systolic = mean_half_up(r.systolic for r in readings)
    avg_diastolic = mean_half_up(r.diastolic for r in readings)

    recent = readings[-RECENT_WINDOW:]
    older = readings[:-RECENT_WINDOW]

    recent_sys = mean_half_up(r.systolic for r in recent)
    recent_dia = mean_half_up(r.diastolic for r in recent)
    # An empty older window falls back to the overall mean (no trend).
    older_sys = mean_half_up(r.systolic for r in older) if older else avg_systolic
    older_dia = mean_half_up(r.diastolic for r in older) if older else avg_diastolic

    systolic_trend = recent_sys - older_sys
    diastolic_trend = recent_dia - older_dia

    counts = category_counts(readings)
    high_risk = counts[Category.STAGE_1] + counts[Category.STAGE_2]

    return InsightSummary(
        total_readings=total,
        avg_systolic=avg_systolic,
        avg_diastolic=avg_diastolic,
        recent_avg_systolic=recent_sys,
        recent_avg_diastolic=recent_dia,
        older_avg_systolic=older_sys,
        older_avg_diastolic=older_dia,
        systolic_trend=systolic_trend,
        diastolic_trend=diastolic_trend,
        categories=counts,
        risk_percentage=percentage_half_up(high_risk, total),
        overall_category=categorize(avg_systolic, avg_diastolic),
        recommendations=generate_recommendations(
            avg_systolic, avg_diastolic, systolic_trend, diastolic_trend
        ),
    )
