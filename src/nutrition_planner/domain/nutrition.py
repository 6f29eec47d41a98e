"""Nutrition domain models."""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from decimal import ROUND_HALF_UP, Decimal

# Wire names used by the JSON store and front-end, mapped onto field names.
_ALIASES = {
    "kcal": "calories",
    "energy": "calories",
    "protein": "protein_g",
    "carbs": "carbs_g",
    "fats": "fat_g",
    "fat": "fat_g",
    "fiber": "fiber_g",
    "sodium": "sodium_mg",
    "potassium": "potassium_mg",
    "calcium": "calcium_mg",
    "iron": "iron_mg",
    "vitaminC": "vitamin_c_mg",
    "vitaminD": "vitamin_d_ug",
}


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts for a fixed quantity of food (per 100g for catalog foods)."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    sodium_mg: float = 0.0
    potassium_mg: float = 0.0
    calcium_mg: float = 0.0
    iron_mg: float = 0.0
    vitamin_c_mg: float = 0.0
    vitamin_d_ug: float = 0.0

    @classmethod
    def zero(cls) -> "NutrientProfile":
        """Return the all-zero profile."""
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "NutrientProfile":
        """Build a profile from a mapping, defaulting unknown values to zero.

        Both field names (``protein_g``) and the store's wire names
        (``protein``, ``fats``, ``vitaminC``) are accepted.
        """
        values = {
            field.name: _to_amount(data[field.name])
            for field in fields(cls)
            if field.name in data
        }
        for alias, name in _ALIASES.items():
            if alias in data and name not in values:
                values[name] = _to_amount(data[alias])
        return cls(**values)

    def plus(self, other: "NutrientProfile") -> "NutrientProfile":
        """Return the field-wise sum of two profiles."""
        return NutrientProfile(
            **{
                field.name: getattr(self, field.name) + getattr(other, field.name)
                for field in fields(self)
            }
        )

    def scaled(self, factor: float) -> "NutrientProfile":
        """Return a profile with every field multiplied by ``factor``."""
        return NutrientProfile(
            **{field.name: getattr(self, field.name) * factor for field in fields(self)}
        )

    def divided(self, divisor: float) -> "NutrientProfile":
        """Return a profile with every field divided by ``divisor``."""
        return NutrientProfile(
            **{item.name: getattr(self, item.name) / divisor for item in fields(self)}
        )

    def to_dict(self) -> dict[str, float]:
        """Return the profile as a plain dict keyed by field name."""
        return asdict(self)


def round_profile(profile: NutrientProfile) -> NutrientProfile:
    """Round for display or persistence: whole kcal, one decimal elsewhere."""
    rounded = {
        field.name: round_half_up(getattr(profile, field.name), 1)
        for field in fields(profile)
    }
    rounded["calories"] = round_half_up(profile.calories, 0)
    return replace(profile, **rounded)


def round_half_up(value: float, digits: int) -> float:
    """Round half away from zero, unlike the builtin banker's rounding."""
    exponent = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def _to_amount(raw: object) -> float:
    if isinstance(raw, bool):
        return 0.0
    if isinstance(raw, int | float):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value
