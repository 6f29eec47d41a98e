"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_planner.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from nutrition_planner.adapters.supabase_food_repository import SupabaseFoodRepository
from nutrition_planner.adapters.supabase_meal_repository import SupabaseMealRepository
from nutrition_planner.config import Settings
from nutrition_planner.services.cache import InMemoryCache
from nutrition_planner.services.foods import FoodService
from nutrition_planner.services.lookup import NutritionLookupService
from nutrition_planner.services.meals import MealService
from nutrition_planner.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_service: FoodService
    meal_service: MealService
    stats_service: StatsService
    lookup_service: NutritionLookupService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)
    food_service = FoodService(food_repository)
    meal_service = MealService(
        food_service=food_service,
        repository=meal_repository,
        user_id=resolved_settings.default_user_id,
        horizon_days=resolved_settings.recurrence_horizon_days,
    )
    stats_service = StatsService(
        repository=meal_repository,
        user_id=resolved_settings.default_user_id,
        timezone_name=resolved_settings.timezone,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        resolved_settings.openfoodfacts_base_url
    )
    lookup_service = NutritionLookupService(
        client=off_client,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.lookup_ttl_seconds,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        food_service=food_service,
        meal_service=meal_service,
        stats_service=stats_service,
        lookup_service=lookup_service,
        close_resources=close_resources,
    )
