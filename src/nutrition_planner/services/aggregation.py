"""Nutrient scaling and meal aggregation.

Everything here is pure: inputs are never mutated, nothing is cached between
calls, and food data arrives through an explicit lookup callable.
"""

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import replace
from uuid import UUID

from nutrition_planner.domain.foods import Food
from nutrition_planner.domain.meals import AggregationWarning, Meal, MealItem
from nutrition_planner.domain.nutrition import NutrientProfile

FoodLookup = Callable[[UUID], Food | None]

REASON_NOT_FOUND = "food not found"
REASON_MISSING_PROFILE = "missing nutrient profile"

_logger = logging.getLogger(__name__)


class InvalidQuantityError(ValueError):
    """Raised when a gram quantity is negative, non-finite or not a number."""


def validate_grams(grams: object) -> float:
    """Return ``grams`` as a float or raise ``InvalidQuantityError``."""
    if isinstance(grams, bool) or not isinstance(grams, int | float):
        raise InvalidQuantityError(f"Quantity must be a number, got {grams!r}")
    value = float(grams)
    if not math.isfinite(value):
        raise InvalidQuantityError(f"Quantity must be finite, got {grams!r}")
    if value < 0:
        raise InvalidQuantityError(f"Quantity must not be negative, got {grams!r}")
    return value


def scale_profile(profile: NutrientProfile, grams: float) -> NutrientProfile:
    """Scale a per-100g profile to ``grams``; no rounding is applied."""
    value = validate_grams(grams)
    if value == 0:
        return NutrientProfile.zero()
    return profile.scaled(value / 100.0)


def sum_profiles(profiles: Iterable[NutrientProfile]) -> NutrientProfile:
    """Return the field-wise sum of profiles, zero for no input."""
    total = NutrientProfile.zero()
    for profile in profiles:
        total = total.plus(profile)
    return total


def aggregate_items(
    items: Iterable[MealItem], lookup: FoodLookup
) -> tuple[list[MealItem], NutrientProfile, list[AggregationWarning]]:
    """Rebuild each item's scaled nutrients and sum them.

    Items whose food is gone or has no profile contribute zero and are
    reported as warnings instead of failing the whole meal.
    """
    resolved: list[MealItem] = []
    warnings: list[AggregationWarning] = []
    for item in items:
        food = lookup(item.food_id)
        reason = None
        if food is None:
            reason = REASON_NOT_FOUND
        elif food.per100g is None:
            reason = REASON_MISSING_PROFILE

        if reason is not None:
            _logger.warning(
                "Degraded meal aggregation: food=%s id=%s reason=%s",
                item.food_name,
                item.food_id,
                reason,
            )
            warnings.append(
                AggregationWarning(
                    food_id=item.food_id, food_name=item.food_name, reason=reason
                )
            )
            resolved.append(replace(item, calculated_nutrients=NutrientProfile.zero()))
            continue

        nutrients = scale_profile(food.per100g, item.grams)
        resolved.append(replace(item, calculated_nutrients=nutrients))

    total = sum_profiles(
        item.calculated_nutrients or NutrientProfile.zero() for item in resolved
    )
    return resolved, total, warnings


def recompute_meal(
    meal: Meal, lookup: FoodLookup
) -> tuple[Meal, list[AggregationWarning]]:
    """Return a copy of ``meal`` whose item caches and totals match its items."""
    items, totals, warnings = aggregate_items(meal.items, lookup)
    return replace(meal, items=tuple(items), totals=totals), warnings
