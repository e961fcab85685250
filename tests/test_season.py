"""
Season resolver tests
"""
from datetime import date

import pytest

from app.season import current_season, season_label


@pytest.mark.parametrize("month", range(1, 9))
def test_january_to_august_is_previous_season(month):
    assert current_season(date(2025, month, 15)) == "20242025"


@pytest.mark.parametrize("month", range(9, 13))
def test_september_to_december_is_new_season(month):
    assert current_season(date(2025, month, 1)) == "20252026"


def test_boundary_days():
    assert current_season(date(2024, 8, 31)) == "20232024"
    assert current_season(date(2024, 9, 1)) == "20242025"
    assert current_season(date(2000, 1, 1)) == "19992000"


def test_defaults_to_today():
    today = date.today()
    assert current_season() == current_season(today)


def test_season_label():
    assert season_label("20242025") == "2024-25"
    assert season_label("19992000") == "1999-00"
    assert season_label("bogus") == "bogus"
