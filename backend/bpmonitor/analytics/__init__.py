from .categories import Category, categorize, is_high_risk, CATEGORY_STYLES, RECOMMENDATION_STYLES
from .insights import compute_insights, InsightSummary, NO_INSIGHTS, MIN_READINGS_FOR_INSIGHTS
from .recommendations import generate_recommendations, Recommendation
from .trends import build_trend_series, DatedAverage, TREND_WINDOWS
from .distribution import category_distribution, CategoryShare
from .filters import filter_readings, PERIODS
