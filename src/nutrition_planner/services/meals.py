"""Meal scheduling service."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from nutrition_planner.domain.meals import AggregationWarning, Meal, MealItem, MealType
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.services.aggregation import recompute_meal, validate_grams
from nutrition_planner.services.foods import FoodService
from nutrition_planner.services.recurrence import (
    DEFAULT_HORIZON_DAYS,
    RecurrenceRule,
    expand_recurrence,
)

UNKNOWN_FOOD_NAME = "Unknown food"
_EDITABLE_FIELDS = frozenset({"date", "type", "notes"})

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def list_meals(self, user_id: str) -> list[Meal]:
        """Return all meals of a user."""

    def list_meals_between(self, user_id: str, start: date, end: date) -> list[Meal]:
        """Return meals dated within the inclusive range."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""

    def create_meal(self, meal: Meal) -> Meal:
        """Persist a new meal and return it."""

    def update_meal(self, meal: Meal) -> Meal:
        """Persist changes to an existing meal and return it."""

    def delete_meal(self, meal_id: UUID) -> bool:
        """Delete a meal; False when it did not exist."""

    def delete_all_meals(self, user_id: str) -> int:
        """Delete every meal of a user and return the count."""


@dataclass(frozen=True)
class MealItemInput:
    """Requested food and quantity for a meal item."""

    food_id: UUID
    grams: float
    notes: str | None = None


@dataclass(frozen=True)
class MealResult:
    """A persisted meal plus any degraded-aggregation warnings."""

    meal: Meal
    warnings: list[AggregationWarning]


@dataclass
class MealService:
    """Service that keeps meal totals derived from items on every change."""

    food_service: FoodService
    repository: MealRepository
    user_id: str
    horizon_days: int = DEFAULT_HORIZON_DAYS

    def list_meals(self, on: date | None = None) -> list[Meal]:
        """Return meals, optionally restricted to one date, ordered by date."""
        if on is None:
            meals = self.repository.list_meals(self.user_id)
        else:
            meals = self.repository.list_meals_between(self.user_id, on, on)
        return sorted(meals, key=lambda meal: meal.date)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        return self.repository.get_meal(meal_id)

    def create_meal(
        self,
        meal_date: date,
        meal_type: MealType,
        items: list[MealItemInput],
        notes: str | None = None,
    ) -> MealResult:
        """Create a meal with its totals computed from ``items``."""
        now = datetime.now(tz=UTC)
        draft = Meal(
            id=uuid4(),
            user_id=self.user_id,
            date=meal_date,
            type=meal_type,
            items=tuple(self._build_item(item) for item in items),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        meal, warnings = recompute_meal(draft, self.food_service.lookup)
        saved = self.repository.create_meal(meal)
        _logger.info(
            "Created meal id=%s date=%s items=%s",
            saved.id,
            saved.date,
            len(saved.items),
        )
        return MealResult(meal=saved, warnings=warnings)

    def add_item(self, meal_id: UUID, item: MealItemInput) -> MealResult | None:
        """Append an item and refresh totals."""
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        return self._save_items(meal, (*meal.items, self._build_item(item)))

    def remove_item(self, meal_id: UUID, index: int) -> MealResult | None:
        """Remove the item at ``index`` and refresh totals."""
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        _check_index(meal, index)
        items = meal.items[:index] + meal.items[index + 1 :]
        return self._save_items(meal, items)

    def resize_item(
        self, meal_id: UUID, index: int, grams: float
    ) -> MealResult | None:
        """Change the quantity of the item at ``index`` and refresh totals."""
        value = validate_grams(grams)
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        _check_index(meal, index)
        items = list(meal.items)
        items[index] = replace(items[index], grams=value)
        return self._save_items(meal, tuple(items))

    def edit_meal(
        self,
        meal_id: UUID,
        details: dict[str, object],
        items: list[MealItemInput] | None = None,
    ) -> MealResult | None:
        """Apply detail changes and, when given, a new item list in one save.

        ``details`` holds only the fields the caller set. ``date`` and ``type``
        cannot be cleared; an explicit ``notes`` of None removes the notes.
        """
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        changes = {
            key: value
            for key, value in details.items()
            if key in _EDITABLE_FIELDS and (key == "notes" or value is not None)
        }
        draft = replace(meal, **changes)  # type: ignore[arg-type]
        if items is not None:
            return self._save_items(
                draft, tuple(self._build_item(item) for item in items)
            )
        saved = self.repository.update_meal(
            replace(draft, updated_at=datetime.now(tz=UTC))
        )
        _logger.info("Edited meal id=%s fields=%s", saved.id, sorted(changes))
        return MealResult(meal=saved, warnings=[])

    def set_completed(
        self, meal_id: UUID, completed: bool, now: datetime | None = None
    ) -> Meal | None:
        """Mark a meal as eaten or not; nutrient totals do not change."""
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        stamp = now or datetime.now(tz=UTC)
        updated = replace(
            meal,
            completed=completed,
            completed_at=stamp if completed else None,
            updated_at=stamp,
        )
        return self.repository.update_meal(updated)

    def toggle_completed(
        self, meal_id: UUID, now: datetime | None = None
    ) -> Meal | None:
        """Flip the completion flag of a meal."""
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            return None
        return self.set_completed(meal_id, not meal.completed, now=now)

    def assign_recurring(  # noqa: PLR0913
        self,
        meal_id: UUID,
        start: date,
        rule: RecurrenceRule,
        end: date | None = None,
        custom_days: tuple[int, ...] = (),
        meal_type: MealType | None = None,
    ) -> list[MealResult] | None:
        """Copy a meal onto every date produced by ``rule``.

        Each copy is an independent, not-yet-completed meal with its own
        aggregation warnings.
        """
        template = self.repository.get_meal(meal_id)
        if template is None:
            return None
        dates = expand_recurrence(
            start,
            rule,
            end=end,
            custom_days=custom_days,
            horizon_days=self.horizon_days,
        )
        created: list[MealResult] = []
        for day in dates:
            now = datetime.now(tz=UTC)
            copy = replace(
                template,
                id=uuid4(),
                user_id=self.user_id,
                date=day,
                type=meal_type or template.type,
                completed=False,
                completed_at=None,
                created_at=now,
                updated_at=now,
            )
            meal, warnings = recompute_meal(copy, self.food_service.lookup)
            saved = self.repository.create_meal(meal)
            created.append(MealResult(meal=saved, warnings=warnings))
        _logger.info(
            "Assigned meal id=%s rule=%s copies=%s", meal_id, rule.value, len(created)
        )
        return created

    def delete_meal(self, meal_id: UUID) -> bool:
        """Delete a meal."""
        return self.repository.delete_meal(meal_id)

    def delete_all_meals(self) -> int:
        """Delete every meal of the current user."""
        return self.repository.delete_all_meals(self.user_id)

    def _build_item(self, item: MealItemInput) -> MealItem:
        grams = validate_grams(item.grams)
        food = self.food_service.lookup(item.food_id)
        return MealItem(
            food_id=item.food_id,
            food_name=food.name if food else UNKNOWN_FOOD_NAME,
            grams=grams,
            calculated_nutrients=NutrientProfile.zero(),
            notes=item.notes,
        )

    def _save_items(self, meal: Meal, items: tuple[MealItem, ...]) -> MealResult:
        draft = replace(meal, items=items, updated_at=datetime.now(tz=UTC))
        recomputed, warnings = recompute_meal(draft, self.food_service.lookup)
        saved = self.repository.update_meal(recomputed)
        return MealResult(meal=saved, warnings=warnings)


def _check_index(meal: Meal, index: int) -> None:
    if not 0 <= index < len(meal.items):
        raise IndexError(f"Meal {meal.id} has no item at index {index}")
