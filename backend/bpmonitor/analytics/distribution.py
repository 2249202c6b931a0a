"""Category breakdown for the distribution (pie) chart."""
from dataclasses import dataclass

from .averages import percentage_half_up
from .categories import Category, CATEGORY_STYLES
from .insights import category_counts


@dataclass(frozen=True)
class CategoryShare:
    category: Category
    count: int
    percentage: int

    def to_dict(self):
        return {
            'name': self.category.value,
            'value': self.count,
            'percentage': self.percentage,
            'color': CATEGORY_STYLES[self.category]['color'],
        }


def category_distribution(readings) -> list:
    """One share per category that occurs, in category order."""
    readings = list(readings)
    if not readings:
        return []
    total = len(readings)
    return [
        CategoryShare(category, count, percentage_half_up(count, total))
        for category, count in category_counts(readings).items()
        if count > 0
    ]
