"""Statistics service for scheduled meals."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from nutrition_planner.domain.meals import Meal
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.domain.stats import (
    DailyTotals,
    MacroDistribution,
    PeriodSummary,
    TimeWindow,
    WindowKind,
)
from nutrition_planner.services.aggregation import sum_profiles

DECEMBER = 12
WEEK_DAYS = 7
ROLLING_MONTH_DAYS = 30
PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9


class StatsRepository(Protocol):
    """Persistence interface for meal statistics."""

    def list_meals_between(self, user_id: str, start: date, end: date) -> list[Meal]:
        """Return meals dated within the inclusive range."""


@dataclass
class StatsService:
    """Service for computing dashboard stats in the configured timezone."""

    repository: StatsRepository
    user_id: str
    timezone_name: str = "UTC"

    def today(self) -> date:
        """Return today's date in the configured timezone."""
        return datetime.now(tz=ZoneInfo(self.timezone_name)).date()

    def get_summary(self, window: TimeWindow) -> PeriodSummary:
        """Return the summary for ``window``."""
        today = self.today()
        start, end = resolve_window(window, today)
        meals = self.repository.list_meals_between(self.user_id, start, end)
        return summarize_meals(meals, window, today)

    def get_day(self, on: date | None = None) -> PeriodSummary:
        """Return totals for a single day, today by default."""
        return self.get_summary(TimeWindow(WindowKind.DAY, on))

    def get_week(self) -> PeriodSummary:
        """Return totals for the last seven days."""
        return self.get_summary(TimeWindow(WindowKind.WEEK))

    def get_month(self) -> PeriodSummary:
        """Return totals for the current calendar month."""
        return self.get_summary(TimeWindow(WindowKind.MONTH))


def resolve_window(window: TimeWindow, today: date) -> tuple[date, date]:
    """Return the inclusive start and end dates of ``window``."""
    if window.kind == WindowKind.DAY:
        day = window.on or today
        return day, day
    if window.kind == WindowKind.WEEK:
        return today - timedelta(days=WEEK_DAYS - 1), today
    if window.kind == WindowKind.ROLLING_MONTH:
        return today - timedelta(days=ROLLING_MONTH_DAYS - 1), today
    anchor = window.on or today
    start = anchor.replace(day=1)
    if start.month == DECEMBER:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, next_month - timedelta(days=1)


def summarize_meals(
    meals: Iterable[Meal], window: TimeWindow, today: date
) -> PeriodSummary:
    """Aggregate meals falling inside ``window`` as seen from ``today``."""
    start, end = resolve_window(window, today)
    selected = [meal for meal in meals if start <= meal.date <= end]

    by_day: dict[date, list[Meal]] = {}
    for meal in selected:
        by_day.setdefault(meal.date, []).append(meal)
    daily = [
        DailyTotals(
            day=day,
            nutrients=sum_profiles(meal.totals for meal in day_meals),
            meal_count=len(day_meals),
            completed_count=sum(1 for meal in day_meals if meal.completed),
        )
        for day, day_meals in sorted(by_day.items(), key=lambda entry: entry[0])
    ]

    totals = sum_profiles(entry.nutrients for entry in daily)
    averages = totals.divided(len(daily)) if daily else NutrientProfile.zero()
    meal_count = len(selected)
    completed_count = sum(entry.completed_count for entry in daily)
    return PeriodSummary(
        start=start,
        end=end,
        totals=totals,
        averages=averages,
        daily=daily,
        meal_count=meal_count,
        completed_count=completed_count,
        completion_rate=_percentage(completed_count, meal_count),
        macros=macro_distribution(totals),
    )


def macro_distribution(totals: NutrientProfile) -> MacroDistribution:
    """Split total calories between protein, carbs and fat."""
    protein_kcal = totals.protein_g * PROTEIN_KCAL_PER_G
    carbs_kcal = totals.carbs_g * CARBS_KCAL_PER_G
    fat_kcal = totals.fat_g * FAT_KCAL_PER_G
    return MacroDistribution(
        protein_kcal=protein_kcal,
        carbs_kcal=carbs_kcal,
        fat_kcal=fat_kcal,
        protein_pct=_percentage(protein_kcal, totals.calories),
        carbs_pct=_percentage(carbs_kcal, totals.calories),
        fat_pct=_percentage(fat_kcal, totals.calories),
    )


def _percentage(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return part / whole * 100
