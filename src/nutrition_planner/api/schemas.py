"""Pydantic models for API request payloads."""

from datetime import date as Date  # noqa: N812
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nutrition_planner.domain.meals import MealType
from nutrition_planner.services.recurrence import RecurrenceRule


class NutrientProfileIn(BaseModel):
    """Per-100g nutrient values; missing fields default to zero."""

    model_config = ConfigDict(allow_inf_nan=False)

    calories: float = Field(default=0.0, ge=0)
    protein_g: float = Field(default=0.0, ge=0)
    carbs_g: float = Field(default=0.0, ge=0)
    fat_g: float = Field(default=0.0, ge=0)
    fiber_g: float = Field(default=0.0, ge=0)
    sodium_mg: float = Field(default=0.0, ge=0)
    potassium_mg: float = Field(default=0.0, ge=0)
    calcium_mg: float = Field(default=0.0, ge=0)
    iron_mg: float = Field(default=0.0, ge=0)
    vitamin_c_mg: float = Field(default=0.0, ge=0)
    vitamin_d_ug: float = Field(default=0.0, ge=0)


class FoodCreate(BaseModel):
    """Payload for a new catalog food."""

    name: str = Field(min_length=1)
    brand: str | None = None
    category: str = "General"
    barcode: str | None = None
    per100g: NutrientProfileIn = Field(default_factory=NutrientProfileIn)
    tags: list[str] = Field(default_factory=list)


class FoodUpdate(BaseModel):
    """Partial update for a catalog food."""

    name: str | None = Field(default=None, min_length=1)
    brand: str | None = None
    category: str | None = None
    barcode: str | None = None
    per100g: NutrientProfileIn | None = None
    tags: list[str] | None = None


class MealItemIn(BaseModel):
    """Food and quantity for a meal item."""

    model_config = ConfigDict(allow_inf_nan=False)

    food_id: UUID
    grams: float = Field(ge=0)
    notes: str | None = None


class MealCreate(BaseModel):
    """Payload for a new meal."""

    date: Date
    type: MealType
    items: list[MealItemIn] = Field(default_factory=list)
    notes: str | None = None


class MealUpdate(BaseModel):
    """Partial update for a meal; ``items`` replaces the whole list."""

    date: Date | None = None
    type: MealType | None = None
    notes: str | None = None
    items: list[MealItemIn] | None = None


class ItemResize(BaseModel):
    """New quantity for an existing item."""

    model_config = ConfigDict(allow_inf_nan=False)

    grams: float = Field(ge=0)


class CompletionIn(BaseModel):
    """Explicit completion state; omitted means toggle."""

    completed: bool | None = None


class RecurrenceIn(BaseModel):
    """Recurring assignment of an existing meal."""

    start: Date
    rule: RecurrenceRule = RecurrenceRule.NONE
    end: Date | None = None
    custom_days: list[Annotated[int, Field(ge=0, le=6)]] = Field(default_factory=list)
    type: MealType | None = None
