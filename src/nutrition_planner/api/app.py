"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, Response

from nutrition_planner.api.schemas import (
    CompletionIn,
    FoodCreate,
    FoodUpdate,
    ItemResize,
    MealCreate,
    MealItemIn,
    MealUpdate,
    RecurrenceIn,
)
from nutrition_planner.app_logging import configure_logging
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.foods import Food, FoodLookupResult
from nutrition_planner.domain.meals import Meal, MealItem
from nutrition_planner.domain.nutrition import (
    NutrientProfile,
    round_half_up,
    round_profile,
)
from nutrition_planner.domain.stats import PeriodSummary, TimeWindow, WindowKind
from nutrition_planner.services.aggregation import InvalidQuantityError
from nutrition_planner.services.foods import FoodFilters, FoodSort, MacroFilter
from nutrition_planner.services.meals import MealItemInput, MealResult
from nutrition_planner.services.recurrence import RecurrenceRule, expand_recurrence

_UNPROCESSABLE = 422


def create_app(container: AppContainer) -> FastAPI:  # noqa: C901, PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Nutrition Planner", lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidQuantityError)
    async def invalid_quantity(
        request: Request, exc: InvalidQuantityError
    ) -> JSONResponse:
        logger.warning("Rejected quantity on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=_UNPROCESSABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods")
    async def list_foods(  # noqa: PLR0913
        request: Request,
        search: str | None = None,
        category: str | None = None,
        macro: MacroFilter | None = None,
        sort_by: FoodSort = FoodSort.NAME,
        order: str = Query(default="asc", pattern="^(asc|desc)$"),
    ) -> list[dict[str, object]]:
        """List catalog foods with optional filters."""
        state_container: AppContainer = request.app.state.container
        foods = state_container.food_service.search(
            FoodFilters(
                search=search,
                category=category,
                macro=macro,
                sort_by=sort_by,
                descending=order == "desc",
            )
        )
        return [_serialize_food(food) for food in foods]

    @app.get("/foods/lookup")
    async def lookup_food(
        request: Request, name: str | None = None, barcode: str | None = None
    ) -> dict[str, object]:
        """Resolve a name or barcode; a miss returns a review placeholder."""
        if not name and not barcode:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Provide a name or a barcode",
            )
        state_container: AppContainer = request.app.state.container
        lookup_service = state_container.lookup_service
        result = await lookup_service.resolve(name=name, barcode=barcode)
        return _serialize_lookup(result)

    @app.post("/foods/import", status_code=status.HTTP_201_CREATED)
    async def import_food(
        request: Request, name: str | None = None, barcode: str | None = None
    ) -> dict[str, object]:
        """Look up a food externally and store the result in the catalog."""
        if not name and not barcode:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Provide a name or a barcode",
            )
        state_container: AppContainer = request.app.state.container
        lookup_service = state_container.lookup_service
        result = await lookup_service.resolve(name=name, barcode=barcode)
        food = state_container.food_service.create_from_lookup(result)
        return {**_serialize_food(food), "needs_review": result.needs_review}

    @app.get("/foods/{food_id}")
    async def get_food(food_id: UUID, request: Request) -> dict[str, object]:
        """Return one food."""
        state_container: AppContainer = request.app.state.container
        food = state_container.food_service.lookup(food_id)
        if food is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_food(food)

    @app.post("/foods", status_code=status.HTTP_201_CREATED)
    async def create_food(payload: FoodCreate, request: Request) -> dict[str, object]:
        """Create a catalog food."""
        state_container: AppContainer = request.app.state.container
        food = state_container.food_service.create_food(payload.model_dump())
        return _serialize_food(food)

    @app.patch("/foods/{food_id}")
    async def update_food(
        food_id: UUID, payload: FoodUpdate, request: Request
    ) -> dict[str, object]:
        """Partially update a catalog food."""
        state_container: AppContainer = request.app.state.container
        food = state_container.food_service.update_food(
            food_id, payload.model_dump(exclude_unset=True)
        )
        if food is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_food(food)

    @app.delete("/foods/{food_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_food(food_id: UUID, request: Request) -> Response:
        """Delete a catalog food."""
        state_container: AppContainer = request.app.state.container
        if not state_container.food_service.delete_food(food_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/foods")
    async def delete_all_foods(request: Request) -> dict[str, int]:
        """Delete the whole catalog."""
        state_container: AppContainer = request.app.state.container
        return {"deleted": state_container.food_service.delete_all_foods()}

    @app.get("/meals")
    async def list_meals(
        request: Request, on: date | None = Query(default=None, alias="date")
    ) -> list[dict[str, object]]:
        """List meals, optionally for a single date."""
        state_container: AppContainer = request.app.state.container
        meals = state_container.meal_service.list_meals(on)
        return [_serialize_meal(meal) for meal in meals]

    @app.get("/meals/{meal_id}")
    async def get_meal(meal_id: UUID, request: Request) -> dict[str, object]:
        """Return one meal."""
        state_container: AppContainer = request.app.state.container
        meal = state_container.meal_service.get_meal(meal_id)
        if meal is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_meal(meal)

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def create_meal(payload: MealCreate, request: Request) -> dict[str, object]:
        """Create a meal; totals are computed from its items."""
        state_container: AppContainer = request.app.state.container
        result = state_container.meal_service.create_meal(
            meal_date=payload.date,
            meal_type=payload.type,
            items=[_to_item_input(item) for item in payload.items],
            notes=payload.notes,
        )
        return _serialize_result(result)

    @app.patch("/meals/{meal_id}")
    async def update_meal(
        meal_id: UUID, payload: MealUpdate, request: Request
    ) -> dict[str, object]:
        """Edit meal details and, when given, replace its items."""
        state_container: AppContainer = request.app.state.container
        items = None
        if payload.items is not None:
            items = [_to_item_input(item) for item in payload.items]
        result = state_container.meal_service.edit_meal(
            meal_id, payload.model_dump(exclude_unset=True, exclude={"items"}), items
        )
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_result(result)

    @app.delete("/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_meal(meal_id: UUID, request: Request) -> Response:
        """Delete a meal."""
        state_container: AppContainer = request.app.state.container
        if not state_container.meal_service.delete_meal(meal_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/meals")
    async def delete_all_meals(request: Request) -> dict[str, int]:
        """Delete every meal of the current user."""
        state_container: AppContainer = request.app.state.container
        return {"deleted": state_container.meal_service.delete_all_meals()}

    @app.post("/meals/{meal_id}/items", status_code=status.HTTP_201_CREATED)
    async def add_item(
        meal_id: UUID, payload: MealItemIn, request: Request
    ) -> dict[str, object]:
        """Append an item to a meal."""
        state_container: AppContainer = request.app.state.container
        result = state_container.meal_service.add_item(meal_id, _to_item_input(payload))
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_result(result)

    @app.patch("/meals/{meal_id}/items/{index}")
    async def resize_item(
        meal_id: UUID, index: int, payload: ItemResize, request: Request
    ) -> dict[str, object]:
        """Change the quantity of an item."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.meal_service.resize_item(
                meal_id, index, payload.grams
            )
        except IndexError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_result(result)

    @app.delete("/meals/{meal_id}/items/{index}")
    async def remove_item(
        meal_id: UUID, index: int, request: Request
    ) -> dict[str, object]:
        """Remove an item from a meal."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.meal_service.remove_item(meal_id, index)
        except IndexError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_result(result)

    @app.post("/meals/{meal_id}/complete")
    async def complete_meal(
        meal_id: UUID, request: Request, payload: CompletionIn | None = None
    ) -> dict[str, object]:
        """Set or toggle the completion flag of a meal."""
        state_container: AppContainer = request.app.state.container
        service = state_container.meal_service
        if payload is None or payload.completed is None:
            meal = service.toggle_completed(meal_id)
        else:
            meal = service.set_completed(meal_id, payload.completed)
        if meal is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _serialize_meal(meal)

    @app.post("/meals/{meal_id}/assign", status_code=status.HTTP_201_CREATED)
    async def assign_meal(
        meal_id: UUID, payload: RecurrenceIn, request: Request
    ) -> dict[str, object]:
        """Copy a meal onto the dates of a recurrence rule."""
        state_container: AppContainer = request.app.state.container
        created = state_container.meal_service.assign_recurring(
            meal_id,
            start=payload.start,
            rule=payload.rule,
            end=payload.end,
            custom_days=tuple(payload.custom_days),
            meal_type=payload.type,
        )
        if created is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {
            "created": len(created),
            "meals": [_serialize_result(result) for result in created],
        }

    @app.get("/schedule/preview")
    async def preview_schedule(  # noqa: PLR0913
        request: Request,
        start: date,
        rule: RecurrenceRule = RecurrenceRule.NONE,
        end: date | None = None,
        custom_days: list[int] = Query(default=[]),  # noqa: B008
    ) -> dict[str, object]:
        """Return the dates a recurring assignment would produce."""
        state_container: AppContainer = request.app.state.container
        try:
            dates = expand_recurrence(
                start,
                rule,
                end=end,
                custom_days=custom_days,
                horizon_days=state_container.settings.recurrence_horizon_days,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=_UNPROCESSABLE, detail=str(exc)
            ) from exc
        return {"dates": [day.isoformat() for day in dates]}

    @app.get("/stats")
    async def stats(
        request: Request,
        window: WindowKind = WindowKind.WEEK,
        on: date | None = Query(default=None, alias="date"),
    ) -> dict[str, object]:
        """Return dashboard totals, averages and distributions for a window."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.stats_service.get_summary(TimeWindow(window, on))
        return _serialize_summary(summary)

    return app


def _to_item_input(item: MealItemIn) -> MealItemInput:
    return MealItemInput(food_id=item.food_id, grams=item.grams, notes=item.notes)


def _serialize_profile(profile: NutrientProfile | None) -> dict[str, float] | None:
    if profile is None:
        return None
    return round_profile(profile).to_dict()


def _serialize_food(food: Food) -> dict[str, object]:
    return {
        "id": str(food.id),
        "name": food.name,
        "brand": food.brand,
        "category": food.category,
        "barcode": food.barcode,
        "per100g": _serialize_profile(food.per100g),
        "tags": list(food.tags),
    }


def _serialize_lookup(result: FoodLookupResult) -> dict[str, object]:
    return {
        "name": result.name,
        "brand": result.brand,
        "category": result.category,
        "barcode": result.barcode,
        "per100g": _serialize_profile(result.per100g),
        "tags": list(result.tags),
        "source": result.source,
        "needs_review": result.needs_review,
        "image_url": result.image_url,
        "nutrition_grade": result.nutrition_grade,
        "nova_group": result.nova_group,
    }


def _serialize_item(item: MealItem) -> dict[str, object]:
    return {
        "food_id": str(item.food_id),
        "food_name": item.food_name,
        "grams": item.grams,
        "notes": item.notes,
        "calculated_nutrients": _serialize_profile(item.calculated_nutrients),
    }


def _serialize_meal(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "user_id": meal.user_id,
        "date": meal.date.isoformat(),
        "type": meal.type.value,
        "items": [_serialize_item(item) for item in meal.items],
        "completed": meal.completed,
        "completed_at": meal.completed_at.isoformat() if meal.completed_at else None,
        "notes": meal.notes,
        "totals": _serialize_profile(meal.totals),
    }


def _serialize_result(result: MealResult) -> dict[str, object]:
    return {
        "meal": _serialize_meal(result.meal),
        "warnings": [
            {
                "food_id": str(warning.food_id),
                "food_name": warning.food_name,
                "reason": warning.reason,
            }
            for warning in result.warnings
        ],
    }


def _serialize_summary(summary: PeriodSummary) -> dict[str, object]:
    macros = summary.macros
    return {
        "start": summary.start.isoformat(),
        "end": summary.end.isoformat(),
        "totals": _serialize_profile(summary.totals),
        "averages": _serialize_profile(summary.averages),
        "meal_count": summary.meal_count,
        "completed_count": summary.completed_count,
        "completion_rate": round_half_up(summary.completion_rate, 1),
        "macros": {
            "protein_kcal": round_half_up(macros.protein_kcal, 1),
            "carbs_kcal": round_half_up(macros.carbs_kcal, 1),
            "fat_kcal": round_half_up(macros.fat_kcal, 1),
            "protein_pct": round_half_up(macros.protein_pct, 1),
            "carbs_pct": round_half_up(macros.carbs_pct, 1),
            "fat_pct": round_half_up(macros.fat_pct, 1),
        },
        "daily": [
            {
                "date": entry.day.isoformat(),
                "nutrients": _serialize_profile(entry.nutrients),
                "meal_count": entry.meal_count,
                "completed_count": entry.completed_count,
            }
            for entry in summary.daily
        ],
    }
