import asyncio

from ingredient_resolver.domain.foods import FoodSource, Verification
from ingredient_resolver.services.candidates import CandidateSource
from tests.conftest import (
    FakeFdcClient,
    InMemoryFoodCorpus,
    make_fdc_search,
    make_food,
    sample_foods,
)


def test_local_candidates_are_deduplicated_against_external() -> None:
    corpus = InMemoryFoodCorpus(foods=sample_foods())
    client = FakeFdcClient()
    source = CandidateSource(corpus=corpus, external=make_fdc_search(client))

    results = asyncio.run(source.find("brown rice"))

    assert [food.id for food in results] == ["rice-brown-cooked", "rice-brown-raw"]
    assert corpus.queries == [["brown", "rice"]]
    assert client.calls == [("brown rice", 10, ["Branded", "Foundation", "SR Legacy"])]


def test_external_results_fill_sparse_local_matches() -> None:
    corpus = InMemoryFoodCorpus(foods=sample_foods())
    client = FakeFdcClient(
        payload={
            "foods": [
                {"fdcId": 1, "description": "Quinoa, cooked", "dataType": "SR Legacy"},
            ]
        }
    )
    source = CandidateSource(corpus=corpus, external=make_fdc_search(client))

    results = asyncio.run(source.find("quinoa"))

    assert [food.id for food in results] == ["fdc:1"]
    assert results[0].source is FoodSource.EXTERNAL


def test_external_search_skipped_when_local_is_enough() -> None:
    corpus = InMemoryFoodCorpus(foods=sample_foods())
    client = FakeFdcClient()
    source = CandidateSource(
        corpus=corpus, external=make_fdc_search(client), external_min_local=2
    )

    results = asyncio.run(source.find("eggs"))

    assert [food.id for food in results] == ["egg-whole", "egg-white"]
    assert client.calls == []


def test_missing_external_service_uses_local_only() -> None:
    source = CandidateSource(corpus=InMemoryFoodCorpus(foods=sample_foods()))

    assert [food.id for food in asyncio.run(source.find("olive oil"))] == ["olive-oil"]
    assert asyncio.run(source.find("unobtainium")) == []


def test_candidates_sorted_by_trust_then_popularity_and_capped() -> None:
    corpus = InMemoryFoodCorpus(
        foods=[
            make_food("oats-suspect", "Oats", verification=Verification.SUSPECT, popularity=999),
            make_food("oats-b", "Oats, rolled", popularity=5),
            make_food("oats-a", "Oats, steel cut", popularity=5),
            make_food("oats-popular", "Oats, instant", popularity=50),
        ]
    )
    source = CandidateSource(corpus=corpus, candidate_limit=3)

    results = asyncio.run(source.find("oats"))

    assert [food.id for food in results] == ["oats-popular", "oats-a", "oats-b"]


def test_aliases_are_attached_in_one_batch() -> None:
    corpus = InMemoryFoodCorpus(
        foods=sample_foods(),
        aliases={"olive-oil": ("evoo",), "garlic-raw": ("fresh garlic",)},
    )
    source = CandidateSource(corpus=corpus)

    results = asyncio.run(source.find("evoo"))

    assert results[0].aliases == ("evoo",)
    assert corpus.alias_requests == [["olive-oil"]]


def test_stopword_only_query_returns_nothing() -> None:
    corpus = InMemoryFoodCorpus(foods=sample_foods())
    source = CandidateSource(corpus=corpus)

    assert asyncio.run(source.find("of the")) == []
    assert corpus.queries == []
