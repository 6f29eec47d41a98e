"""Supabase repository for scheduled meals."""

from dataclasses import dataclass, fields
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from nutrition_planner.domain.meals import Meal, MealItem, MealType
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.services.meals import MealRepository
from nutrition_planner.services.stats import StatsRepository

_TABLE = "meals"
_TOTAL_COLUMNS = tuple(field.name for field in fields(NutrientProfile))


@dataclass
class SupabaseMealRepository(MealRepository, StatsRepository):
    """Supabase implementation for meals; totals are stored unrounded."""

    client: Client

    def list_meals(self, user_id: str) -> list[Meal]:
        """Return all meals of a user ordered by date."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("date", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def list_meals_between(self, user_id: str, start: date, end: date) -> list[Meal]:
        """Return meals dated within the inclusive range."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def create_meal(self, meal: Meal) -> Meal:
        """Insert a meal row."""
        response = self.client.table(_TABLE).insert(_to_row(meal)).execute()
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def update_meal(self, meal: Meal) -> Meal:
        """Overwrite a meal row."""
        response = (
            self.client.table(_TABLE)
            .update(_to_row(meal))
            .eq("id", str(meal.id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update meal")
        return _parse_meal(response.data[0])

    def delete_meal(self, meal_id: UUID) -> bool:
        """Delete a meal by id."""
        response = self.client.table(_TABLE).delete().eq("id", str(meal_id)).execute()
        return bool(response.data)

    def delete_all_meals(self, user_id: str) -> int:
        """Delete every meal of a user."""
        response = self.client.table(_TABLE).delete().eq("user_id", user_id).execute()
        return len(response.data or [])


def _to_row(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "user_id": meal.user_id,
        "date": meal.date.isoformat(),
        "type": meal.type.value,
        "items": [_item_to_json(item) for item in meal.items],
        "completed": meal.completed,
        "completed_at": _isoformat(meal.completed_at),
        "notes": meal.notes,
        "created_at": _isoformat(meal.created_at),
        "updated_at": _isoformat(meal.updated_at),
        **meal.totals.to_dict(),
    }


def _item_to_json(item: MealItem) -> dict[str, object]:
    nutrients = item.calculated_nutrients
    return {
        "food_id": str(item.food_id),
        "food_name": item.food_name,
        "grams": item.grams,
        "notes": item.notes,
        "calculated_nutrients": nutrients.to_dict() if nutrients else None,
    }


def _parse_meal(row: dict[str, object]) -> Meal:
    """Parse a meal row into a domain model."""
    return Meal(
        id=UUID(str(row["id"])),
        user_id=str(row.get("user_id") or ""),
        date=date.fromisoformat(str(row["date"])[:10]),
        type=MealType(str(row.get("type") or MealType.SNACK.value)),
        items=tuple(_parse_item(item) for item in row.get("items") or []),
        completed=bool(row.get("completed", False)),
        completed_at=_parse_datetime(row.get("completed_at")),
        notes=row.get("notes") or None,
        totals=NutrientProfile.from_mapping(
            {column: row.get(column) for column in _TOTAL_COLUMNS}
        ),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _parse_item(raw: dict[str, object]) -> MealItem:
    nutrients = raw.get("calculated_nutrients")
    return MealItem(
        food_id=UUID(str(raw["food_id"])),
        food_name=str(raw.get("food_name") or ""),
        grams=float(raw.get("grams") or 0.0),
        calculated_nutrients=(
            NutrientProfile.from_mapping(nutrients)
            if isinstance(nutrients, dict)
            else None
        ),
        notes=raw.get("notes") or None,
    )


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
