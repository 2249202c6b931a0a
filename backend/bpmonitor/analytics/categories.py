"""
Blood pressure category classification and the display style tables
shared by every view and export.
"""
import enum


class Category(str, enum.Enum):
    NORMAL = 'Normal'
    ELEVATED = 'Elevated'
    STAGE_1 = 'Stage 1'
    STAGE_2 = 'Stage 2'

    @property
    def slug(self) -> str:
        """Filter key used by the readings list (e.g. 'stage1')."""
        return self.value.lower().replace(' ', '')

    @classmethod
    def from_slug(cls, slug: str):
        for category in cls:
            if category.slug == slug:
                return category
        return None


# Badge colours keyed by category. Views and exports look colours up here
# instead of keeping their own copies.
CATEGORY_STYLES = {
    Category.NORMAL: {'color': 'green', 'badge': 'bg-green-100 text-green-800'},
    Category.ELEVATED: {'color': 'yellow', 'badge': 'bg-yellow-100 text-yellow-800'},
    Category.STAGE_1: {'color': 'orange', 'badge': 'bg-orange-100 text-orange-800'},
    Category.STAGE_2: {'color': 'red', 'badge': 'bg-red-100 text-red-800'},
}

RECOMMENDATION_STYLES = {
    'success': {'color': 'green', 'panel': 'border-green-200 bg-green-50'},
    'warning': {'color': 'red', 'panel': 'border-red-200 bg-red-50'},
    'caution': {'color': 'orange', 'panel': 'border-orange-200 bg-orange-50'},
    'info': {'color': 'blue', 'panel': 'border-blue-200 bg-blue-50'},
}

# Report PDFs use hex colours rather than badge classes.
CATEGORY_HEX = {
    Category.NORMAL: '#16a34a',
    Category.ELEVATED: '#ca8a04',
    Category.STAGE_1: '#ea580c',
    Category.STAGE_2: '#dc2626',
}


def categorize(systolic: int, diastolic: int) -> Category:
    """Classify a reading. Rules are evaluated in order; first match wins.

    Note the third rule uses OR, so a systolic of 140+ with a diastolic
    under 90 lands in Stage 1 rather than Stage 2.
    """
    if systolic < 120 and diastolic < 80:
        return Category.NORMAL
    if systolic < 130 and diastolic < 80:
        return Category.ELEVATED
    if systolic < 140 or diastolic < 90:
        return Category.STAGE_1
    return Category.STAGE_2


def is_high_risk(systolic: int, diastolic: int) -> bool:
    """Flag used on the doctor dashboard for a patient's latest reading."""
    return systolic >= 140 or diastolic >= 90


def category_to_dict(category: Category) -> dict:
    return {
        'label': category.value,
        'slug': category.slug,
        'color': CATEGORY_STYLES[category]['color'],
    }
