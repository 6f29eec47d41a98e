"""Nutrition lookup service backed by Open Food Facts."""

import logging
from dataclasses import dataclass

from nutrition_planner.adapters.openfoodfacts_client import OpenFoodFactsClient
from nutrition_planner.domain.foods import NEEDS_REVIEW_TAG, FoodLookupResult
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.services.cache import Cache

SOURCE_OPENFOODFACTS = "openfoodfacts"
SOURCE_PLACEHOLDER = "placeholder"
DEFAULT_CATEGORY = "General"
KJ_PER_KCAL = 4.184
MG_PER_G = 1000
UG_PER_G = 1_000_000

_logger = logging.getLogger(__name__)


@dataclass
class NutritionLookupService:
    """Resolve food names or barcodes to per-100g profiles, with caching."""

    client: OpenFoodFactsClient
    cache: Cache
    ttl_seconds: int = 86400

    async def search_by_name(self, name: str) -> FoodLookupResult | None:
        """Return the most popular match for ``name``, if any."""
        query = name.strip()
        if not query:
            return None
        cache_key = f"off:name:{query.lower()}"
        if self.cache.contains(cache_key):
            return self.cache.get(cache_key)  # type: ignore[return-value]

        payload = await self.client.search(query)
        products = payload.get("products") or []
        result = parse_product(products[0]) if products else None
        if result is None:
            _logger.info("No Open Food Facts match: name=%s", query)
        self.cache.set(cache_key, result, ttl_seconds=self.ttl_seconds)
        return result

    async def search_by_barcode(self, barcode: str) -> FoodLookupResult | None:
        """Return the product registered under ``barcode``, if any."""
        code = barcode.strip()
        if not code:
            return None
        cache_key = f"off:barcode:{code}"
        if self.cache.contains(cache_key):
            return self.cache.get(cache_key)  # type: ignore[return-value]

        product = await self.client.get_product(code)
        result = parse_product(product) if product else None
        if result is None:
            _logger.info("No Open Food Facts match: barcode=%s", code)
        self.cache.set(cache_key, result, ttl_seconds=self.ttl_seconds)
        return result

    async def resolve(
        self, name: str | None = None, barcode: str | None = None
    ) -> FoodLookupResult:
        """Look up by barcode first, then name; fall back to a placeholder."""
        result = None
        if barcode:
            result = await self.search_by_barcode(barcode)
        if result is None and name:
            result = await self.search_by_name(name)
        if result is None:
            return placeholder_result(name or barcode or "Unknown food", barcode)
        return result


def placeholder_result(name: str, barcode: str | None = None) -> FoodLookupResult:
    """Return a zero profile tagged for manual review."""
    return FoodLookupResult(
        name=name,
        brand=None,
        category=DEFAULT_CATEGORY,
        barcode=barcode,
        per100g=NutrientProfile.zero(),
        tags=(NEEDS_REVIEW_TAG,),
        source=SOURCE_PLACEHOLDER,
        needs_review=True,
    )


def parse_product(product: dict[str, object]) -> FoodLookupResult:
    """Convert an Open Food Facts product into a lookup result."""
    nutriments = product.get("nutriments") or {}
    calories = _first_amount(nutriments, "energy-kcal_100g", "energy_kcal_100g")
    if calories is None:
        energy_kj = _first_amount(nutriments, "energy_100g")
        if energy_kj is not None:
            calories = energy_kj / KJ_PER_KCAL

    per100g = NutrientProfile.from_mapping(
        {
            "calories": calories,
            "protein_g": _first_amount(nutriments, "proteins_100g"),
            "carbs_g": _first_amount(nutriments, "carbohydrates_100g"),
            "fat_g": _first_amount(nutriments, "fat_100g"),
            "fiber_g": _first_amount(nutriments, "fiber_100g"),
            "sodium_mg": _converted(nutriments, "sodium_100g", MG_PER_G),
            "potassium_mg": _converted(nutriments, "potassium_100g", MG_PER_G),
            "calcium_mg": _converted(nutriments, "calcium_100g", MG_PER_G),
            "iron_mg": _converted(nutriments, "iron_100g", MG_PER_G),
            "vitamin_c_mg": _converted(nutriments, "vitamin-c_100g", MG_PER_G),
            "vitamin_d_ug": _converted(nutriments, "vitamin-d_100g", UG_PER_G),
        }
    )

    brand = _first_brand(product.get("brands"))
    grade = product.get("nutrition_grades")
    needs_review = calories is None
    tags: list[str] = []
    if brand:
        tags.append(brand.lower())
    if isinstance(grade, str) and grade:
        tags.append(f"nutriscore-{grade.lower()}")
    if needs_review:
        tags.append(NEEDS_REVIEW_TAG)

    nova_group = product.get("nova_group")
    barcode = product.get("code")
    return FoodLookupResult(
        name=str(product.get("product_name") or "Unknown product"),
        brand=brand,
        category=_extract_category(product.get("categories")),
        barcode=str(barcode) if barcode else None,
        per100g=per100g,
        tags=tuple(tags),
        source=SOURCE_OPENFOODFACTS,
        needs_review=needs_review,
        image_url=product.get("image_url"),
        nutrition_grade=grade if isinstance(grade, str) else None,
        nova_group=int(nova_group) if isinstance(nova_group, int | float) else None,
    )


def _first_amount(nutriments: dict[str, object], *keys: str) -> float | None:
    for key in keys:
        value = nutriments.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int | float):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                continue
    return None


def _converted(nutriments: dict[str, object], key: str, factor: float) -> float | None:
    amount = _first_amount(nutriments, key)
    return None if amount is None else amount * factor


def _first_brand(raw: object) -> str | None:
    if not isinstance(raw, str):
        return None
    brand = raw.split(",")[0].strip()
    return brand or None


def _extract_category(raw: object) -> str:
    if not isinstance(raw, str):
        return DEFAULT_CATEGORY
    for chunk in raw.split(","):
        category = chunk.strip()
        if category:
            return category
    return DEFAULT_CATEGORY
