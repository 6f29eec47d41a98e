"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from nutrition_planner.domain.nutrition import NutrientProfile


class WindowKind(StrEnum):
    """Supported dashboard time windows."""

    DAY = "day"
    WEEK = "week"
    ROLLING_MONTH = "rolling_month"
    MONTH = "month"


@dataclass(frozen=True)
class TimeWindow:
    """A time window; ``on`` is the explicit day or month anchor."""

    kind: WindowKind
    on: date | None = None


@dataclass(frozen=True)
class DailyTotals:
    """Totals for one day that has at least one meal."""

    day: date
    nutrients: NutrientProfile
    meal_count: int
    completed_count: int


@dataclass(frozen=True)
class MacroDistribution:
    """Calories contributed by each macronutrient."""

    protein_kcal: float
    carbs_kcal: float
    fat_kcal: float
    protein_pct: float
    carbs_pct: float
    fat_pct: float


@dataclass(frozen=True)
class PeriodSummary:
    """Aggregated totals and derived statistics for a window."""

    start: date
    end: date
    totals: NutrientProfile
    averages: NutrientProfile
    daily: list[DailyTotals]
    meal_count: int
    completed_count: int
    completion_rate: float
    macros: MacroDistribution
