"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import date
from uuid import UUID, uuid4

import pytest

from nutrition_planner.adapters.openfoodfacts_client import OpenFoodFactsClient
from nutrition_planner.config import Settings
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.foods import Food
from nutrition_planner.domain.meals import Meal
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.services.cache import InMemoryCache
from nutrition_planner.services.foods import FoodRepository, FoodService
from nutrition_planner.services.lookup import NutritionLookupService
from nutrition_planner.services.meals import MealRepository, MealService
from nutrition_planner.services.stats import StatsRepository, StatsService


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    foods: dict[UUID, Food] = field(default_factory=dict)

    def add(self, food: Food) -> Food:
        self.foods[food.id] = food
        return food

    def list_foods(self) -> list[Food]:
        return list(self.foods.values())

    def get_food(self, food_id: UUID) -> Food | None:
        return self.foods.get(food_id)

    def create_food(self, payload: dict[str, object]) -> Food:
        food = Food(
            id=uuid4(),
            name=str(payload.get("name", "")),
            brand=payload.get("brand"),
            category=str(payload.get("category") or "General"),
            barcode=payload.get("barcode"),
            per100g=NutrientProfile.from_mapping(payload.get("per100g") or {}),
            tags=tuple(payload.get("tags") or ()),
        )
        return self.add(food)

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> Food | None:
        current = self.foods.get(food_id)
        if current is None:
            return None
        changes = dict(payload)
        if isinstance(changes.get("per100g"), dict):
            changes["per100g"] = NutrientProfile.from_mapping(changes["per100g"])
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"] or ())
        return self.add(replace(current, **changes))

    def delete_food(self, food_id: UUID) -> bool:
        return self.foods.pop(food_id, None) is not None

    def delete_all_foods(self) -> int:
        count = len(self.foods)
        self.foods.clear()
        return count


@dataclass
class InMemoryMealRepository(MealRepository, StatsRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, Meal] = field(default_factory=dict)
    update_count: int = 0

    def list_meals(self, user_id: str) -> list[Meal]:
        return [meal for meal in self.meals.values() if meal.user_id == user_id]

    def list_meals_between(self, user_id: str, start: date, end: date) -> list[Meal]:
        return [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id and start <= meal.date <= end
        ]

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.meals.get(meal_id)

    def create_meal(self, meal: Meal) -> Meal:
        self.meals[meal.id] = meal
        return meal

    def update_meal(self, meal: Meal) -> Meal:
        self.update_count += 1
        self.meals[meal.id] = meal
        return meal

    def delete_meal(self, meal_id: UUID) -> bool:
        return self.meals.pop(meal_id, None) is not None

    def delete_all_meals(self, user_id: str) -> int:
        doomed = [meal.id for meal in self.meals.values() if meal.user_id == user_id]
        for meal_id in doomed:
            del self.meals[meal_id]
        return len(doomed)


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with in-memory responses."""

    products: list[dict[str, object]] = field(
        default_factory=lambda: [
            {
                "code": "8001505005707",
                "product_name": "Fette biscottate",
                "brands": "Mulino Bianco, Barilla",
                "categories": "Breakfasts, Rusks",
                "nutrition_grades": "b",
                "nutriments": {
                    "energy-kcal_100g": 410,
                    "proteins_100g": 11.5,
                    "carbohydrates_100g": 72,
                    "fat_100g": 6.8,
                    "fiber_100g": 5.5,
                    "sodium_100g": 0.48,
                },
            }
        ]
    )
    search_calls: int = 0
    barcode_calls: int = 0

    async def search(self, query: str, page_size: int = 20) -> dict[str, object]:
        self.search_calls += 1
        return {"products": self.products, "count": len(self.products)}

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        self.barcode_calls += 1
        for product in self.products:
            if product.get("code") == barcode:
                return product
        return None


def make_food(
    name: str = "Rice",
    per100g: NutrientProfile | None = None,
    category: str = "Carbs",
    **kwargs: object,
) -> Food:
    return Food(
        id=uuid4(),
        name=name,
        brand=kwargs.get("brand"),  # type: ignore[arg-type]
        category=category,
        barcode=None,
        per100g=per100g if per100g is not None else NutrientProfile(calories=130),
        tags=tuple(kwargs.get("tags", ())),  # type: ignore[arg-type]
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
    )


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def container(
    settings: Settings,
    food_repository: InMemoryFoodRepository,
    meal_repository: InMemoryMealRepository,
    off_client: FakeOpenFoodFactsClient,
) -> AppContainer:
    food_service = FoodService(food_repository)
    meal_service = MealService(
        food_service=food_service,
        repository=meal_repository,
        user_id=settings.default_user_id,
    )
    stats_service = StatsService(
        repository=meal_repository,
        user_id=settings.default_user_id,
        timezone_name=settings.timezone,
    )
    lookup_service = NutritionLookupService(client=off_client, cache=InMemoryCache())

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        food_service=food_service,
        meal_service=meal_service,
        stats_service=stats_service,
        lookup_service=lookup_service,
        close_resources=close_resources,
    )
