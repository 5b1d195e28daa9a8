"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from ingredient_resolver.adapters.fdc_client import FdcClient
from ingredient_resolver.config import Settings
from ingredient_resolver.containers import AppContainer
from ingredient_resolver.domain.foods import (
    FoodCandidate,
    FoodServing,
    FoodSource,
    MacroProfile,
    PortionOverride,
    Verification,
)
from ingredient_resolver.services.cache import LruTtlCache
from ingredient_resolver.services.candidates import CandidateSource, FoodCorpus
from ingredient_resolver.services.external_search import FdcSearchService
from ingredient_resolver.services.rate_limit import TokenBucketLimiter
from ingredient_resolver.services.resolver import IngredientResolver
from ingredient_resolver.text import normalize_text


def make_food(  # noqa: PLR0913
    food_id: str,
    name: str,
    *,
    brand: str | None = None,
    verification: Verification = Verification.VERIFIED,
    kcal: float = 100.0,
    density_gml: float | None = None,
    category_id: str | None = None,
    popularity: float = 10.0,
    aliases: tuple[str, ...] = (),
    barcodes: tuple[str, ...] = (),
    servings: tuple[tuple[str, float], ...] = (),
    portion_overrides: tuple[PortionOverride, ...] = (),
    source: FoodSource = FoodSource.LOCAL,
) -> FoodCandidate:
    return FoodCandidate(
        id=food_id,
        name=name,
        brand=brand,
        source=source,
        verification=verification,
        macros=MacroProfile(calories=kcal, protein_g=0.0, fat_g=0.0, carbs_g=0.0),
        density_gml=density_gml,
        category_id=category_id,
        popularity=popularity,
        aliases=aliases,
        barcodes=barcodes,
        servings=tuple(FoodServing(label=label, grams=grams) for label, grams in servings),
        portion_overrides=portion_overrides,
    )


@dataclass
class InMemoryFoodCorpus(FoodCorpus):
    """In-memory corpus for tests."""

    foods: list[FoodCandidate] = field(default_factory=list)
    aliases: dict[str, tuple[str, ...]] = field(default_factory=dict)
    queries: list[list[str]] = field(default_factory=list)
    alias_requests: list[list[str]] = field(default_factory=list)

    def find_candidates(self, tokens: list[str], limit: int) -> list[FoodCandidate]:
        self.queries.append(list(tokens))
        matches = []
        for food in self.foods:
            fields = [normalize_text(food.name), normalize_text(food.brand)]
            fields.extend(normalize_text(alias) for alias in self.aliases.get(food.id, ()))
            if all(any(token in value for value in fields) for token in tokens):
                matches.append(food)
        return matches[:limit]

    def batch_fetch_aliases(self, food_ids: list[str]) -> dict[str, tuple[str, ...]]:
        self.alias_requests.append(list(food_ids))
        return {food_id: self.aliases[food_id] for food_id in food_ids if food_id in self.aliases}


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client returning a fixed payload and recording calls."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 169704,
                    "description": "Rice, brown, long-grain, cooked",
                    "dataType": "SR Legacy",
                    "foodNutrients": [
                        {"nutrientId": 1008, "value": 123},
                        {"nutrientId": 1003, "value": 2.7},
                        {"nutrientId": 1004, "value": 1.0},
                        {"nutrientId": 1005, "value": 25.6},
                    ],
                    "foodMeasures": [{"disseminationText": "1 cup", "gramWeight": 195}],
                }
            ]
        }
    )
    calls: list[tuple[str, int, list[str] | None]] = field(default_factory=list)

    async def search_foods(
        self, query: str, page_size: int = 10, data_types: list[str] | None = None
    ) -> dict[str, object]:
        self.calls.append((query, page_size, data_types))
        return self.payload


def make_fdc_search(
    client: FdcClient | None = None,
    requests_per_hour: float = 36000,
    **kwargs: object,
) -> FdcSearchService:
    return FdcSearchService(
        fdc_client=client,
        cache=LruTtlCache(max_entries=200),
        limiter=TokenBucketLimiter(requests_per_hour),
        **kwargs,
    )


def sample_foods() -> list[FoodCandidate]:
    return [
        make_food(
            "rice-brown-cooked",
            "Rice, brown, long-grain, cooked",
            kcal=123,
            category_id="grain",
            popularity=40,
            servings=(("cup", 195),),
        ),
        make_food(
            "rice-brown-raw",
            "Rice, brown, long-grain, raw",
            kcal=367,
            category_id="grain",
            popularity=20,
            servings=(("cup", 185),),
        ),
        make_food(
            "flour-wheat",
            "Flour, wheat, all-purpose",
            kcal=364,
            category_id="flour",
            popularity=30,
            servings=(("1 cup", 125),),
        ),
        make_food(
            "olive-oil",
            "Olive oil",
            kcal=884,
            density_gml=0.91,
            category_id="oil",
            popularity=80,
        ),
        make_food(
            "garlic-raw",
            "Garlic, raw",
            kcal=149,
            category_id="veg",
            popularity=15,
        ),
        make_food(
            "garlic-powder",
            "Garlic powder",
            kcal=331,
            category_id="spices",
            popularity=12,
        ),
        make_food(
            "egg-whole",
            "Egg, whole, raw",
            kcal=143,
            category_id="protein",
            popularity=50,
            servings=(("large", 50),),
        ),
        make_food(
            "egg-white",
            "Egg, white, raw",
            kcal=52,
            category_id="protein",
            popularity=20,
            servings=(("large", 33),),
        ),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url=None,
        supabase_service_key=None,
        corpus_snapshot_path=None,
        fdc_api_key="fdc-key",
    )


@pytest.fixture
def corpus() -> InMemoryFoodCorpus:
    return InMemoryFoodCorpus(foods=sample_foods())


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def container(
    settings: Settings,
    corpus: InMemoryFoodCorpus,
    fdc_client: FakeFdcClient,
) -> AppContainer:
    fdc_search = make_fdc_search(fdc_client)
    candidate_source = CandidateSource(corpus=corpus, external=fdc_search)
    resolver = IngredientResolver(candidates=candidate_source)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        corpus=corpus,
        fdc_search=fdc_search,
        candidate_source=candidate_source,
        resolver=resolver,
        close_resources=close_resources,
    )
