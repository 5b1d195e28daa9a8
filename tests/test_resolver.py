"""End-to-end tests for ingredient resolution."""

import asyncio

import pytest

from ingredient_resolver.containers import AppContainer
from ingredient_resolver.domain.foods import PortionOverride
from ingredient_resolver.domain.resolution import PortionSource, ResolutionFailure
from ingredient_resolver.services.candidates import CandidateSource
from ingredient_resolver.services.provisional import (
    CATEGORY_DEFAULT,
    DENSITY_FALLBACK,
    LOW_MATCH_CONFIDENCE,
    NO_LABELED_SERVING,
)
from ingredient_resolver.services.resolver import IngredientResolver
from tests.conftest import (
    FakeFdcClient,
    InMemoryFoodCorpus,
    make_fdc_search,
    make_food,
    sample_foods,
)


def test_cooked_rice_resolves_to_labeled_cup(container: AppContainer) -> None:
    resolution = asyncio.run(container.resolver.resolve_line("2 cups brown rice, cooked"))

    assert resolution.failure is None
    assert resolution.parsed is not None
    assert resolution.parsed.qualifiers == ("cooked",)
    resolved = resolution.resolved
    assert resolved is not None
    assert resolved.food.id == "rice-brown-cooked"
    assert resolved.grams == 390
    assert resolved.portion.tier == 1
    assert not resolved.provisional
    assert resolved.provisional_reasons == ()
    assert resolved.confidence == 0.95
    assert resolution.ranked[0].candidate.id == "rice-brown-cooked"


def test_unparseable_line_reports_parse_failure(container: AppContainer) -> None:
    resolution = asyncio.run(container.resolver.resolve_line("salt to taste"))

    assert resolution.failure is ResolutionFailure.PARSE_FAILURE
    assert resolution.parsed is None
    assert resolution.resolved is None
    assert asyncio.run(container.resolver.resolve("salt to taste")) is None


def test_no_candidates_reports_failure() -> None:
    client = FakeFdcClient(payload={"foods": []})
    resolver = IngredientResolver(
        candidates=CandidateSource(
            corpus=InMemoryFoodCorpus(foods=sample_foods()),
            external=make_fdc_search(client),
        )
    )

    resolution = asyncio.run(resolver.resolve_line("1 cup unobtainium"))

    assert resolution.failure is ResolutionFailure.NO_CANDIDATES
    assert resolution.parsed is not None
    assert resolution.ranked == ()
    assert client.calls[0][0] == "unobtainium"


def test_garlic_cloves_use_heuristic_and_are_provisional(container: AppContainer) -> None:
    resolved = asyncio.run(container.resolver.resolve("3 cloves garlic, minced"))

    assert resolved is not None
    assert resolved.food.id == "garlic-raw"
    assert resolved.grams == 9
    assert resolved.portion.source is PortionSource.HEURISTIC
    assert resolved.provisional
    assert resolved.provisional_reasons == (NO_LABELED_SERVING, CATEGORY_DEFAULT)
    assert resolved.confidence == 0.5


def test_density_fallback_and_user_override(container: AppContainer) -> None:
    density = asyncio.run(container.resolver.resolve("1 cup olive oil"))
    overridden = asyncio.run(
        container.resolver.resolve_line(
            "1 cup olive oil", user_overrides=[PortionOverride(unit="cup", grams=200)]
        )
    )

    assert density is not None
    assert density.food.id == "olive-oil"
    assert round(density.grams or 0, 1) == 218.4
    assert density.provisional_reasons == (NO_LABELED_SERVING, DENSITY_FALLBACK)

    assert overridden.resolved is not None
    assert overridden.resolved.grams == 200
    assert overridden.resolved.portion.source is PortionSource.USER_OVERRIDE
    assert not overridden.resolved.provisional


def test_ambiguous_match_is_flagged_low_confidence() -> None:
    corpus = InMemoryFoodCorpus(
        foods=[
            make_food("quinoa-1", "Quinoa", brand="Acme", servings=(("1 cup", 185),)),
            make_food("quinoa-2", "Quinoa", brand="Bobs", servings=(("1 cup", 185),)),
        ]
    )
    resolver = IngredientResolver(
        candidates=CandidateSource(corpus=corpus), low_confidence_threshold=0.8
    )

    resolved = asyncio.run(resolver.resolve("1 cup quinoa"))

    assert resolved is not None
    assert resolved.food.id == "quinoa-1"
    assert resolved.grams == 185
    assert resolved.ranking_confidence == pytest.approx(0.75)
    assert resolved.provisional_reasons == (LOW_MATCH_CONFIDENCE,)
    assert resolved.confidence == pytest.approx(0.75)
