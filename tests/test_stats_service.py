"""Tests for dashboard statistics."""

import random
from datetime import date, timedelta
from uuid import uuid4

import pytest

from nutrition_planner.domain.meals import Meal, MealType
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.domain.stats import TimeWindow, WindowKind
from nutrition_planner.services.stats import (
    StatsService,
    macro_distribution,
    resolve_window,
    summarize_meals,
)
from tests.conftest import InMemoryMealRepository

TODAY = date(2024, 5, 15)
JAN_2 = date(2024, 1, 2)


def _meal(
    day: date,
    calories: float,
    completed: bool = False,
    user_id: str = "user-1",
    **nutrients: float,
) -> Meal:
    return Meal(
        id=uuid4(),
        user_id=user_id,
        date=day,
        type=MealType.LUNCH,
        items=(),
        completed=completed,
        totals=NutrientProfile(calories=calories, **nutrients),
    )


def test_average_uses_days_with_meals() -> None:
    meals = [
        _meal(TODAY - timedelta(days=4), 100),
        _meal(TODAY - timedelta(days=2), 120),
        _meal(TODAY - timedelta(days=2), 80),
        _meal(TODAY, 300),
    ]

    summary = summarize_meals(meals, TimeWindow(WindowKind.WEEK), TODAY)

    assert summary.totals.calories == 600
    assert summary.averages.calories == 200
    assert len(summary.daily) == 3


def test_empty_window_is_all_zero() -> None:
    summary = summarize_meals([], TimeWindow(WindowKind.MONTH), TODAY)

    assert summary.totals == NutrientProfile.zero()
    assert summary.averages == NutrientProfile.zero()
    assert summary.daily == []
    assert summary.meal_count == 0
    assert summary.completion_rate == 0
    assert summary.macros.protein_pct == 0
    assert summary.macros.carbs_pct == 0
    assert summary.macros.fat_pct == 0


def test_completion_rate() -> None:
    meals = [
        _meal(TODAY, 100, completed=True),
        _meal(TODAY, 100, completed=True),
        _meal(TODAY, 100),
        _meal(TODAY - timedelta(days=1), 100),
    ]

    summary = summarize_meals(meals, TimeWindow(WindowKind.WEEK), TODAY)

    assert summary.meal_count == 4
    assert summary.completed_count == 2
    assert summary.completion_rate == 50


def test_macro_distribution_percentages() -> None:
    macros = macro_distribution(
        NutrientProfile(calories=1000, protein_g=50, carbs_g=100, fat_g=40)
    )

    assert macros.protein_kcal == 200
    assert macros.carbs_kcal == 400
    assert macros.fat_kcal == 360
    assert macros.protein_pct == 20
    assert macros.carbs_pct == 40
    assert macros.fat_pct == 36


def test_macro_distribution_without_calories_is_zero() -> None:
    macros = macro_distribution(NutrientProfile(protein_g=10))

    assert macros.protein_kcal == 40
    assert macros.protein_pct == 0


def test_daily_series_sorted_regardless_of_input_order() -> None:
    meals = [
        _meal(TODAY - timedelta(days=offset), 10 * offset) for offset in range(7)
    ]
    random.Random(7).shuffle(meals)

    summary = summarize_meals(meals, TimeWindow(WindowKind.WEEK), TODAY)

    days = [entry.day for entry in summary.daily]
    assert days == sorted(days)
    assert days[0] == TODAY - timedelta(days=6)


def test_window_bounds_are_inclusive() -> None:
    inside_first = _meal(TODAY - timedelta(days=6), 10)
    outside = _meal(TODAY - timedelta(days=7), 1000)
    future = _meal(TODAY + timedelta(days=1), 1000)

    summary = summarize_meals(
        [inside_first, outside, future, _meal(TODAY, 5)],
        TimeWindow(WindowKind.WEEK),
        TODAY,
    )

    assert summary.totals.calories == 15


@pytest.mark.parametrize(
    ("window", "expected"),
    [
        (TimeWindow(WindowKind.DAY), (TODAY, TODAY)),
        (TimeWindow(WindowKind.DAY, JAN_2), (JAN_2, JAN_2)),
        (TimeWindow(WindowKind.WEEK), (date(2024, 5, 9), TODAY)),
        (TimeWindow(WindowKind.ROLLING_MONTH), (date(2024, 4, 16), TODAY)),
        (TimeWindow(WindowKind.MONTH), (date(2024, 5, 1), date(2024, 5, 31))),
        (
            TimeWindow(WindowKind.MONTH, date(2024, 2, 10)),
            (date(2024, 2, 1), date(2024, 2, 29)),
        ),
        (
            TimeWindow(WindowKind.MONTH, date(2023, 12, 3)),
            (date(2023, 12, 1), date(2023, 12, 31)),
        ),
    ],
)
def test_resolve_window(window: TimeWindow, expected: tuple[date, date]) -> None:
    assert resolve_window(window, TODAY) == expected


def test_stats_service_filters_by_user_and_day() -> None:
    repo = InMemoryMealRepository()
    service = StatsService(repo, user_id="user-1")
    today = service.today()
    for meal in [
        _meal(today, 500, protein_g=30),
        _meal(today - timedelta(days=1), 200),
        _meal(today, 999, user_id="someone-else"),
    ]:
        repo.create_meal(meal)

    summary = service.get_day()

    assert summary.totals.calories == 500
    assert summary.totals.protein_g == 30
    assert summary.start == summary.end == today


def test_stats_service_week_and_month() -> None:
    repo = InMemoryMealRepository()
    service = StatsService(repo, user_id="user-1", timezone_name="Europe/Rome")
    today = service.today()
    repo.create_meal(_meal(today, 400, completed=True))
    repo.create_meal(_meal(today - timedelta(days=3), 600))

    week = service.get_week()
    month = service.get_month()

    assert week.totals.calories == 1000
    assert week.averages.calories == 500
    assert week.completion_rate == 50
    assert month.start == today.replace(day=1)
