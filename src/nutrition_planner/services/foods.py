"""Services for managing the food catalog."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol
from uuid import UUID

from nutrition_planner.domain.foods import Food, FoodLookupResult


class FoodRepository(Protocol):
    """Persistence interface for catalog foods."""

    def list_foods(self) -> list[Food]:
        """Return every food in the catalog."""

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""

    def create_food(self, payload: dict[str, object]) -> Food:
        """Create a food and return it."""

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food | None:
        """Apply a partial update; None when the food does not exist."""

    def delete_food(self, food_id: UUID) -> bool:
        """Delete a food; False when it did not exist."""

    def delete_all_foods(self) -> int:
        """Delete every food and return how many were removed."""


class MacroFilter(StrEnum):
    """Macronutrient a food is dominated by."""

    PROTEIN = "protein"
    CARBS = "carbs"
    FAT = "fat"
    FIBER = "fiber"


class FoodSort(StrEnum):
    """Sort keys for catalog listings."""

    NAME = "name"
    CALORIES = "calories"
    PROTEIN = "protein_g"
    CARBS = "carbs_g"
    FAT = "fat_g"


@dataclass(frozen=True)
class FoodFilters:
    """Catalog search criteria."""

    search: str | None = None
    category: str | None = None
    macro: MacroFilter | None = None
    sort_by: FoodSort = FoodSort.NAME
    descending: bool = False


@dataclass
class FoodService:
    """Application service for catalog operations."""

    repository: FoodRepository

    def list_foods(self) -> list[Food]:
        """Return all foods."""
        return self.repository.list_foods()

    def lookup(self, food_id: UUID) -> Food | None:
        """Return a food by id; usable as the aggregation lookup."""
        return self.repository.get_food(food_id)

    def create_food(self, payload: dict[str, object]) -> Food:
        """Create a food from a validated payload."""
        return self.repository.create_food(payload)

    def create_from_lookup(self, result: FoodLookupResult) -> Food:
        """Store an external lookup result as a catalog food."""
        return self.repository.create_food(
            {
                "name": result.name,
                "brand": result.brand,
                "category": result.category,
                "barcode": result.barcode,
                "per100g": result.per100g.to_dict(),
                "tags": list(result.tags),
            }
        )

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food | None:
        """Apply a partial update to a food."""
        return self.repository.update_food(food_id, payload)

    def delete_food(self, food_id: UUID) -> bool:
        """Delete a food."""
        return self.repository.delete_food(food_id)

    def delete_all_foods(self) -> int:
        """Delete the whole catalog."""
        return self.repository.delete_all_foods()

    def search(self, filters: FoodFilters) -> list[Food]:
        """Filter and sort the catalog."""
        foods = self.repository.list_foods()
        if filters.search:
            needle = filters.search.strip().lower()
            foods = [food for food in foods if _matches_text(food, needle)]
        if filters.category:
            category = filters.category.lower()
            foods = [food for food in foods if food.category.lower() == category]
        if filters.macro:
            foods = [food for food in foods if dominant_macro(food) == filters.macro]
        return sorted(
            foods,
            key=lambda food: _sort_key(food, filters.sort_by),
            reverse=filters.descending,
        )


def dominant_macro(food: Food) -> MacroFilter | None:
    """Return the macronutrient with the most grams per 100g."""
    if food.per100g is None:
        return None
    amounts = {
        MacroFilter.PROTEIN: food.per100g.protein_g,
        MacroFilter.CARBS: food.per100g.carbs_g,
        MacroFilter.FAT: food.per100g.fat_g,
        MacroFilter.FIBER: food.per100g.fiber_g,
    }
    macro, amount = max(amounts.items(), key=lambda entry: entry[1])
    return macro if amount > 0 else None


def _matches_text(food: Food, needle: str) -> bool:
    haystack = [food.name, food.brand or "", *food.tags]
    return any(needle in value.lower() for value in haystack)


def _sort_key(food: Food, sort_by: FoodSort) -> tuple[object, ...]:
    if sort_by == FoodSort.NAME:
        return (food.name.lower(),)
    profile = food.per100g
    value = getattr(profile, sort_by.value) if profile is not None else 0.0
    return (value, food.name.lower())
