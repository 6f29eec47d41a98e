"""Tests for the nutrition lookup service."""

import asyncio

import pytest

from nutrition_planner.domain.foods import NEEDS_REVIEW_TAG
from nutrition_planner.domain.nutrition import NutrientProfile
from nutrition_planner.services.cache import InMemoryCache
from nutrition_planner.services.lookup import (
    SOURCE_OPENFOODFACTS,
    SOURCE_PLACEHOLDER,
    NutritionLookupService,
    parse_product,
)
from tests.conftest import FakeOpenFoodFactsClient


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def service(client: FakeOpenFoodFactsClient) -> NutritionLookupService:
    return NutritionLookupService(client=client, cache=InMemoryCache())


def test_parse_product_converts_units() -> None:
    result = parse_product(
        {
            "code": "123",
            "product_name": "Fortified milk",
            "brands": "Granarolo",
            "categories": ", Dairies, Milks",
            "nova_group": 1,
            "nutriments": {
                "energy_100g": 200.84,
                "proteins_100g": "3.3",
                "sodium_100g": 0.044,
                "calcium_100g": 0.12,
                "vitamin-c_100g": 0.002,
                "vitamin-d_100g": 0.0000015,
            },
        }
    )

    assert result.per100g.calories == pytest.approx(48)
    assert result.per100g.protein_g == 3.3
    assert result.per100g.sodium_mg == pytest.approx(44)
    assert result.per100g.calcium_mg == pytest.approx(120)
    assert result.per100g.vitamin_c_mg == pytest.approx(2)
    assert result.per100g.vitamin_d_ug == pytest.approx(1.5)
    assert result.per100g.fat_g == 0
    assert result.category == "Dairies"
    assert result.brand == "Granarolo"
    assert result.nova_group == 1
    assert result.needs_review is False
    assert result.source == SOURCE_OPENFOODFACTS


def test_parse_product_without_energy_needs_review() -> None:
    result = parse_product({"product_name": "Mystery bar", "nutriments": {}})

    assert result.needs_review is True
    assert NEEDS_REVIEW_TAG in result.tags
    assert result.per100g == NutrientProfile.zero()
    assert result.category == "General"
    assert result.barcode is None


def test_search_by_name_uses_first_product(
    service: NutritionLookupService, client: FakeOpenFoodFactsClient
) -> None:
    result = asyncio.run(service.search_by_name("fette biscottate"))

    assert result is not None
    assert result.name == "Fette biscottate"
    assert result.brand == "Mulino Bianco"
    assert result.category == "Breakfasts"
    assert result.per100g.calories == 410
    assert result.per100g.sodium_mg == pytest.approx(480)
    assert result.tags == ("mulino bianco", "nutriscore-b")
    assert client.search_calls == 1


def test_repeat_lookups_hit_the_cache(
    service: NutritionLookupService, client: FakeOpenFoodFactsClient
) -> None:
    async def run() -> None:
        await service.search_by_name("Fette Biscottate")
        await service.search_by_name("fette biscottate ")
        await service.search_by_barcode("8001505005707")
        await service.search_by_barcode("8001505005707")

    asyncio.run(run())

    assert client.search_calls == 1
    assert client.barcode_calls == 1


def test_misses_are_cached_until_expiry(client: FakeOpenFoodFactsClient) -> None:
    clock = _FakeClock()
    service = NutritionLookupService(
        client=client, cache=InMemoryCache(clock=clock), ttl_seconds=60
    )

    assert asyncio.run(service.search_by_barcode("000")) is None
    assert asyncio.run(service.search_by_barcode("000")) is None
    assert client.barcode_calls == 1

    clock.now += 61
    asyncio.run(service.search_by_barcode("000"))
    assert client.barcode_calls == 2


def test_empty_query_skips_the_client(
    service: NutritionLookupService, client: FakeOpenFoodFactsClient
) -> None:
    assert asyncio.run(service.search_by_name("   ")) is None
    assert client.search_calls == 0


def test_resolve_prefers_barcode(
    service: NutritionLookupService, client: FakeOpenFoodFactsClient
) -> None:
    result = asyncio.run(service.resolve(name="anything", barcode="8001505005707"))

    assert result.barcode == "8001505005707"
    assert client.search_calls == 0


def test_resolve_falls_back_to_placeholder(client: FakeOpenFoodFactsClient) -> None:
    client.products = []
    service = NutritionLookupService(client=client, cache=InMemoryCache())

    result = asyncio.run(service.resolve(name="Nonna's lasagna", barcode="999"))

    assert result.source == SOURCE_PLACEHOLDER
    assert result.name == "Nonna's lasagna"
    assert result.barcode == "999"
    assert result.needs_review is True
    assert result.per100g == NutrientProfile.zero()
    assert client.barcode_calls == 1
    assert client.search_calls == 1
