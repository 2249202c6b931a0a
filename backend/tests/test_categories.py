import pytest

from bpmonitor.analytics import Category, categorize, is_high_risk, CATEGORY_STYLES
from bpmonitor.analytics.categories import category_to_dict


@pytest.mark.parametrize('systolic,diastolic,expected', [
    (110, 70, Category.NORMAL),
    (119, 79, Category.NORMAL),
    (120, 79, Category.ELEVATED),
    (129, 70, Category.ELEVATED),
    (125, 78, Category.ELEVATED),
    (145, 85, Category.STAGE_1),
    (150, 95, Category.STAGE_2),
    (125, 80, Category.STAGE_1),
    (135, 85, Category.STAGE_1),
    (130, 75, Category.STAGE_1),
    (150, 85, Category.STAGE_1),
    (135, 95, Category.STAGE_1),
    (140, 90, Category.STAGE_2),
    (180, 120, Category.STAGE_2),
])
def test_categorize_rules_in_order(systolic, diastolic, expected):
    assert categorize(systolic, diastolic) is expected


def test_high_systolic_with_low_diastolic_is_stage_1():
    # Rule three is an OR: 160/85 never reaches Stage 2.
    assert categorize(160, 85) is Category.STAGE_1


def test_every_category_has_a_style():
    assert set(CATEGORY_STYLES) == set(Category)


def test_slugs_round_trip():
    assert Category.STAGE_1.slug == 'stage1'
    assert Category.from_slug('elevated') is Category.ELEVATED
    assert Category.from_slug('nope') is None


def test_category_to_dict():
    assert category_to_dict(Category.STAGE_2) == {
        'label': 'Stage 2', 'slug': 'stage2', 'color': 'red',
    }


@pytest.mark.parametrize('systolic,diastolic,expected', [
    (139, 89, False),
    (140, 70, True),
    (120, 90, True),
])
def test_is_high_risk(systolic, diastolic, expected):
    assert is_high_risk(systolic, diastolic) is expected


def test_every_valid_reading_gets_one_label():
    labels = set(Category)
    seen = set()
    for systolic in range(70, 251):
        for diastolic in range(40, min(systolic, 151)):
            category = categorize(systolic, diastolic)
            assert category in labels
            assert categorize(systolic, diastolic) is category
            seen.add(category)
    assert seen == labels
