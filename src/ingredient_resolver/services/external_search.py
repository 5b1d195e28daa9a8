"""Rate-limited, cached food search against USDA FDC."""

import logging
from dataclasses import dataclass, field

import httpx

from ingredient_resolver.adapters.fdc_client import FdcClient
from ingredient_resolver.domain.foods import (
    FoodCandidate,
    FoodServing,
    FoodSource,
    MacroProfile,
    Verification,
)
from ingredient_resolver.errors import ExternalApiUnavailable
from ingredient_resolver.services.cache import Cache
from ingredient_resolver.services.rate_limit import TokenBucketLimiter
from ingredient_resolver.text import normalize_text

_NUTRIENT_IDS = {
    "calories": 1008,
    "protein": 1003,
    "fat": 1004,
    "carbs": 1005,
}

BRANDED_DATA_TYPES = ["Branded"]
ALL_DATA_TYPES = ["Branded", "Foundation", "SR Legacy"]
_CURATED_DATA_TYPES = frozenset({"Foundation", "SR Legacy", "Survey (FNDDS)"})

_logger = logging.getLogger(__name__)


@dataclass
class FdcSearchService:
    """FDC search that degrades to ``None`` instead of raising.

    A missing client means no API key was configured; the service then
    no-ops so callers fall back to local candidates only.
    """

    fdc_client: FdcClient | None
    cache: Cache
    limiter: TokenBucketLimiter
    enable_branded_search: bool = False
    cache_ttl_seconds: int = 86400
    max_wait_seconds: float = 5.0
    _warned_missing_key: bool = field(default=False, init=False, repr=False)

    @property
    def enabled(self) -> bool:
        return self.fdc_client is not None

    async def search(self, query: str, page_size: int = 10) -> list[FoodCandidate] | None:
        """Search FDC for candidates; ``None`` when unavailable."""
        if self.fdc_client is None:
            if not self._warned_missing_key:
                _logger.warning("FDC API key not configured; external search disabled")
                self._warned_missing_key = True
            return None

        normalized = normalize_text(query)
        if not normalized:
            return []
        cache_key = f"fdc:search:{normalized}:{page_size}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        try:
            await self.limiter.acquire(self.max_wait_seconds)
            payload = await self.fdc_client.search_foods(
                normalized, page_size=page_size, data_types=self.data_types
            )
            candidates = parse_search_payload(payload)
        except (httpx.HTTPError, ExternalApiUnavailable, ValueError) as exc:
            _logger.warning(
                "FDC search failed: query=%s status=%s error=%s",
                normalized,
                _status_code_from_exception(exc),
                exc,
            )
            return None

        self.cache.set(cache_key, candidates, ttl_seconds=self.cache_ttl_seconds)
        _logger.debug("FDC search: query=%s results=%s", normalized, len(candidates))
        return candidates

    @property
    def data_types(self) -> list[str]:
        return list(BRANDED_DATA_TYPES if self.enable_branded_search else ALL_DATA_TYPES)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def parse_search_payload(payload: object) -> list[FoodCandidate]:
    """Convert an FDC ``/foods/search`` body into candidates.

    Raises ``ValueError`` when the body is not shaped like a search result.
    """
    if not isinstance(payload, dict):
        raise ValueError("FDC search payload is not an object")
    foods = payload.get("foods", [])
    if not isinstance(foods, list):
        raise ValueError("FDC search payload has no food list")
    candidates = []
    for food in foods:
        if not isinstance(food, dict) or "fdcId" not in food:
            continue
        candidates.append(_candidate_from_food(food))
    return candidates


def _candidate_from_food(food: dict[str, object]) -> FoodCandidate:
    data_type = str(food.get("dataType") or "")
    brand = food.get("brandName") or food.get("brandOwner")
    return FoodCandidate(
        id=f"fdc:{food['fdcId']}",
        name=str(food.get("description") or "").strip(),
        brand=str(brand).strip() if brand else None,
        source=FoodSource.EXTERNAL,
        verification=(
            Verification.VERIFIED if data_type in _CURATED_DATA_TYPES else Verification.UNVERIFIED
        ),
        macros=_extract_macros(food.get("foodNutrients")),
        barcodes=(str(food["gtinUpc"]),) if food.get("gtinUpc") else (),
        servings=_extract_servings(food),
    )


def _extract_macros(food_nutrients: object) -> MacroProfile:
    """Extract calories, protein, fat, carbs from FDC nutrients; malformed entries are skipped."""
    values: dict[str, float] = {
        "calories": 0.0,
        "protein": 0.0,
        "fat": 0.0,
        "carbs": 0.0,
    }
    ids_to_key = {nutrient_id: key for key, nutrient_id in _NUTRIENT_IDS.items()}
    for nutrient in food_nutrients if isinstance(food_nutrients, list) else []:
        if not isinstance(nutrient, dict):
            continue
        nutrient_info = nutrient.get("nutrient")
        if not isinstance(nutrient_info, dict):
            nutrient_info = {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("value", nutrient.get("amount"))
        key = ids_to_key.get(nutrient_id) if isinstance(nutrient_id, int) else None
        if key is not None and isinstance(amount, (int, float)):
            values[key] = float(amount)

    return MacroProfile(
        calories=values["calories"],
        protein_g=values["protein"],
        fat_g=values["fat"],
        carbs_g=values["carbs"],
    )


def _extract_servings(food: dict[str, object]) -> tuple[FoodServing, ...]:
    servings: list[FoodServing] = []
    measures = food.get("foodMeasures")
    for measure in measures if isinstance(measures, list) else []:
        if not isinstance(measure, dict):
            continue
        label = str(measure.get("disseminationText") or "").strip()
        grams = measure.get("gramWeight")
        if label and isinstance(grams, (int, float)) and grams > 0:
            servings.append(FoodServing(label=label, grams=float(grams)))

    size = food.get("servingSize")
    size_unit = str(food.get("servingSizeUnit") or "").lower()
    if isinstance(size, (int, float)) and size > 0 and size_unit in {"g", "grm"}:
        label = str(food.get("householdServingFullText") or "serving").strip()
        servings.append(FoodServing(label=label, grams=float(size)))
    return tuple(servings)
