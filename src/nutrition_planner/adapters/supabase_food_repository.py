"""Supabase implementation for the food catalog."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrition_planner.domain.foods import Food
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.services.foods import FoodRepository

_TABLE = "foods"
_NIL_ID = "00000000-0000-0000-0000-000000000000"


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed repository for catalog foods."""

    client: Client

    def list_foods(self) -> list[Food]:
        """Return every food ordered by name."""
        response = self.client.table(_TABLE).select("*").order("name").execute()
        return [_parse_food(row) for row in response.data or []]

    def get_food(self, food_id: UUID) -> Food | None:
        """Return a food by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(food_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def create_food(self, payload: dict[str, object]) -> Food:
        """Create a food and return it."""
        response = self.client.table(_TABLE).insert(_to_row(payload)).execute()
        if not response.data:
            raise RuntimeError("Failed to create food")
        return _parse_food(response.data[0])

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food | None:
        """Apply a partial update to a food."""
        response = (
            self.client.table(_TABLE)
            .update(_to_row(payload))
            .eq("id", str(food_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def delete_food(self, food_id: UUID) -> bool:
        """Delete a food by id."""
        response = self.client.table(_TABLE).delete().eq("id", str(food_id)).execute()
        return bool(response.data)

    def delete_all_foods(self) -> int:
        """Delete every food."""
        response = self.client.table(_TABLE).delete().neq("id", _NIL_ID).execute()
        return len(response.data or [])


def _to_row(payload: dict[str, object]) -> dict[str, object]:
    row = dict(payload)
    per100g = row.get("per100g")
    if isinstance(per100g, NutrientProfile):
        row["per100g"] = per100g.to_dict()
    if "tags" in row and row["tags"] is not None:
        row["tags"] = list(row["tags"])  # type: ignore[call-overload]
    return row


def _parse_food(row: dict[str, object]) -> Food:
    """Parse a food row into a domain model."""
    per100g_raw = row.get("per100g")
    created_raw = row.get("created_at")
    return Food(
        id=UUID(str(row["id"])),
        name=str(row.get("name") or ""),
        brand=row.get("brand") or None,
        category=str(row.get("category") or ""),
        barcode=row.get("barcode") or None,
        per100g=(
            NutrientProfile.from_mapping(per100g_raw)
            if isinstance(per100g_raw, dict)
            else None
        ),
        tags=tuple(str(tag) for tag in row.get("tags") or []),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
