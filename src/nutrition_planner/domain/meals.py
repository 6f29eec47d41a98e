"""Domain models for meals."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from nutrition_planner.domain.nutrition import NutrientProfile


class MealType(StrEnum):
    """Slot of the day a meal belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class MealItem:
    """One food-plus-quantity line within a meal.

    ``calculated_nutrients`` caches the food profile scaled to ``grams``.
    """

    food_id: UUID
    food_name: str
    grams: float
    calculated_nutrients: NutrientProfile | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Meal:
    """A scheduled meal; ``totals`` is derived from ``items``."""

    id: UUID
    user_id: str
    date: date
    type: MealType
    items: tuple[MealItem, ...]
    completed: bool = False
    completed_at: datetime | None = None
    notes: str | None = None
    totals: NutrientProfile = field(default_factory=NutrientProfile)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class AggregationWarning:
    """A meal item that could not be resolved and contributed nothing."""

    food_id: UUID
    food_name: str
    reason: str
