"""Domain models for the food catalog."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from nutrition_planner.domain.nutrition import NutrientProfile

NEEDS_REVIEW_TAG = "needs-review"


@dataclass(frozen=True)
class Food:
    """Represents a food stored in the catalog.

    ``per100g`` is None when the stored record carries no nutrient profile.
    """

    id: UUID
    name: str
    brand: str | None
    category: str
    barcode: str | None
    per100g: NutrientProfile | None
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None


@dataclass(frozen=True)
class FoodLookupResult:
    """Best-effort match from an external nutrition database."""

    name: str
    brand: str | None
    category: str
    barcode: str | None
    per100g: NutrientProfile
    tags: tuple[str, ...]
    source: str
    needs_review: bool = False
    image_url: str | None = None
    nutrition_grade: str | None = None
    nova_group: int | None = None
