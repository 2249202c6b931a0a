"""
Rule-based recommendations shown under the insight summary.

One recommendation always comes from the average-level rules, then at most
one each from the systolic and diastolic trend rules.
"""
from dataclasses import dataclass, asdict

from .categories import RECOMMENDATION_STYLES

SYSTOLIC_TREND_THRESHOLD = 5
DIASTOLIC_TREND_THRESHOLD = 3


@dataclass(frozen=True)
class Recommendation:
    kind: str  # success | warning | caution | info
    title: str
    message: str

    def to_dict(self):
        data = asdict(self)
        data['style'] = RECOMMENDATION_STYLES[self.kind]['color']
        return data


def _level_recommendation(avg_sys, avg_dia):
    if avg_sys >= 140 or avg_dia >= 90:
        return Recommendation(
            'warning',
            'High Blood Pressure Detected',
            'Your average readings indicate Stage 2 hypertension. '
            'Consult your healthcare provider immediately.',
        )
    if avg_sys >= 130 or avg_dia >= 80:
        return Recommendation(
            'caution',
            'Elevated Blood Pressure',
            'Your readings show Stage 1 hypertension. '
            'Consider lifestyle modifications and regular monitoring.',
        )
    if avg_sys >= 120:
        return Recommendation(
            'info',
            'Elevated Systolic Pressure',
            'Your systolic pressure is elevated. Focus on heart-healthy lifestyle choices.',
        )
    return Recommendation(
        'success',
        'Normal Blood Pressure',
        'Your average blood pressure is within the normal range. Keep up the good work!',
    )


def generate_recommendations(avg_sys: int, avg_dia: int, sys_trend: int, dia_trend: int) -> list:
    """Return the ordered recommendation list (1 to 3 items)."""
    recommendations = [_level_recommendation(avg_sys, avg_dia)]

    if sys_trend > SYSTOLIC_TREND_THRESHOLD:
        recommendations.append(Recommendation(
            'warning',
            'Rising Systolic Trend',
            f'Your systolic pressure has increased by {sys_trend} mmHg recently. Monitor closely.',
        ))
    elif sys_trend < -SYSTOLIC_TREND_THRESHOLD:
        recommendations.append(Recommendation(
            'success',
            'Improving Systolic Trend',
            f'Your systolic pressure has decreased by {abs(sys_trend)} mmHg recently. Great progress!',
        ))

    if dia_trend > DIASTOLIC_TREND_THRESHOLD:
        recommendations.append(Recommendation(
            'warning',
            'Rising Diastolic Trend',
            f'Your diastolic pressure has increased by {dia_trend} mmHg recently. '
            'Consider lifestyle changes.',
        ))
    elif dia_trend < -DIASTOLIC_TREND_THRESHOLD:
        recommendations.append(Recommendation(
            'success',
            'Improving Diastolic Trend',
            f'Your diastolic pressure has decreased by {abs(dia_trend)} mmHg recently. Excellent!',
        ))

    return recommendations
