"""Multi-signal candidate ranking."""

import math
import re
from dataclasses import dataclass

from rapidfuzz import fuzz

from ingredient_resolver.domain.foods import FoodCandidate, Verification
from ingredient_resolver.domain.resolution import RankedCandidate, RankQuery
from ingredient_resolver.services.plausibility import (
    category_agreement,
    infer_query_category,
    kcal_band_penalty,
)
from ingredient_resolver.services.qualifiers import (
    COOKED_WORDS,
    EGG_PART_HINTS,
    MEASURE_WORDS,
    PREP_WORDS,
    RAW_WORDS,
)
from ingredient_resolver.text import normalize_text, query_tokens, singularize, token_set

MIN_BARCODE_DIGITS = 8

DERIVATIVE_WORDS = frozenset(
    {
        "powder",
        "sauce",
        "ketchup",
        "paste",
        "juice",
        "oil",
        "syrup",
        "jam",
        "jelly",
        "chip",
        "soup",
        "dressing",
        "spread",
        "butter",
        "extract",
        "flavored",
        "candy",
        "pickled",
        "puree",
        "concentrate",
        "seasoning",
        "cracker",
        "drink",
    }
)

COMPOSITE_WORDS = frozenset(
    {
        "with",
        "salad",
        "sandwich",
        "casserole",
        "pizza",
        "burrito",
        "stew",
        "pie",
        "muffin",
        "cake",
        "cookie",
        "mix",
        "meal",
        "entree",
        "dish",
    }
)

# Hints that describe fresh produce, so raw forms are preferred.
_RAW_HINTS = frozenset({"leaf", "clove", "stalk"})

_VERIFICATION_SIGNAL = {
    Verification.VERIFIED: 1.0,
    Verification.UNVERIFIED: 0.6,
    Verification.SUSPECT: 0.2,
}

_PENALTY_SIGNALS = frozenset({"derivative", "composite", "kcal_band"})


@dataclass(frozen=True)
class RankingWeights:
    """Weights for each ranking signal plus confidence calibration."""

    barcode: float = 25.0
    exact_name: float = 2.0
    exact_alias: float = 1.5
    brand: float = 0.5
    token_coverage: float = 1.5
    fuzzy: float = 2.0
    leading_noun: float = 0.8
    verification: float = 0.8
    popularity: float = 0.6
    state: float = 1.0
    unit_hint: float = 1.2
    qualifier: float = 0.6
    derivative: float = 1.5
    composite: float = 1.0
    category: float = 1.0
    kcal_band: float = 1.0
    confidence_scale: float = 6.0
    margin_scale: float = 1.0
    ambiguity_weight: float = 0.25
    popularity_cap: float = 1000.0

    def weight(self, signal: str) -> float:
        return float(getattr(self, signal))


DEFAULT_WEIGHTS = RankingWeights()


def rank_candidates(
    candidates: list[FoodCandidate],
    query: RankQuery,
    weights: RankingWeights = DEFAULT_WEIGHTS,
) -> list[RankedCandidate]:
    """Score and sort candidates; ties fall back to trust, popularity, id."""
    if not candidates:
        return []
    context = _QueryContext.build(query)
    scored = []
    for candidate in candidates:
        signals = _signals(candidate, context, weights)
        scored.append((candidate, _combine(signals, weights), signals))

    scored.sort(
        key=lambda item: (
            -round(item[1], 9),
            item[0].verification.rank,
            -item[0].popularity,
            item[0].id,
        )
    )

    ranked = []
    for index, (candidate, score, signals) in enumerate(scored):
        others = [other for position, (_, other, _) in enumerate(scored) if position != index]
        gap = score - max(others) if others else weights.margin_scale
        ranked.append(
            RankedCandidate(
                candidate=candidate,
                score=score,
                confidence=_confidence(score, gap, weights),
                signals=signals,
            )
        )
    return ranked


def _confidence(score: float, gap: float, weights: RankingWeights) -> float:
    base = _clamp(score / weights.confidence_scale)
    margin = _clamp(gap / weights.margin_scale)
    return _clamp(base * (1.0 - weights.ambiguity_weight * (1.0 - margin)))


def _combine(signals: dict[str, float], weights: RankingWeights) -> float:
    total = 0.0
    for name, value in signals.items():
        contribution = weights.weight(name) * value
        total += -contribution if name in _PENALTY_SIGNALS else contribution
    return total


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class _QueryContext:
    query: RankQuery
    text: str
    tokens: frozenset[str]
    token_list: tuple[str, ...]
    digits: str
    category: str | None
    wants_cooked: frozenset[str]
    wants_raw: bool
    implied_raw: bool
    descriptive: tuple[str, ...]

    @classmethod
    def build(cls, query: RankQuery) -> "_QueryContext":
        text = normalize_text(query.query)
        token_list = tuple(query_tokens(query.query))
        qualifier_words = set()
        for qualifier in query.qualifiers:
            qualifier_words.update(normalize_text(qualifier).split())
        state_words = qualifier_words | set(text.split())
        descriptive = tuple(
            normalize_text(qualifier)
            for qualifier in query.qualifiers
            if normalize_text(qualifier)
            and normalize_text(qualifier) not in COOKED_WORDS | RAW_WORDS | PREP_WORDS | MEASURE_WORDS
        )
        return cls(
            query=query,
            text=text,
            tokens=frozenset(token_list),
            token_list=token_list,
            digits=re.sub(r"\D", "", query.query),
            category=infer_query_category(query.query),
            wants_cooked=frozenset(state_words & COOKED_WORDS),
            wants_raw=bool(state_words & RAW_WORDS),
            implied_raw=bool(
                {normalize_text(q) for q in query.qualifiers} & PREP_WORDS
                or query.unit_hint in _RAW_HINTS
            ),
            descriptive=descriptive,
        )


def _signals(
    candidate: FoodCandidate, context: _QueryContext, weights: RankingWeights
) -> dict[str, float]:
    name_tokens = token_set(candidate.name)
    all_tokens = set(name_tokens) | token_set(candidate.brand)
    for alias in candidate.aliases:
        all_tokens |= token_set(alias)

    return {
        "barcode": _barcode(candidate, context),
        "exact_name": float(
            bool(context.tokens) and frozenset(query_tokens(candidate.name)) == context.tokens
        ),
        "exact_alias": _exact_alias(candidate, context),
        "brand": _brand(candidate, context),
        "token_coverage": _coverage(all_tokens, context),
        "fuzzy": _fuzzy(candidate, context),
        "leading_noun": _leading_noun(candidate, context),
        "verification": _VERIFICATION_SIGNAL[candidate.verification],
        "popularity": _clamp(
            math.log1p(max(candidate.popularity, 0.0)) / math.log1p(weights.popularity_cap)
        ),
        "state": _state(all_tokens, context),
        "unit_hint": _unit_hint(candidate, all_tokens, context),
        "qualifier": _qualifier(all_tokens, context),
        "derivative": float(bool((name_tokens & DERIVATIVE_WORDS) - set(context.tokens))),
        "composite": float(bool((name_tokens & COMPOSITE_WORDS) - set(context.tokens))),
        "category": category_agreement(context.category, candidate.category_id),
        "kcal_band": kcal_band_penalty(candidate.macros.calories, context.query.kcal_band),
    }


def _barcode(candidate: FoodCandidate, context: _QueryContext) -> float:
    if len(context.digits) < MIN_BARCODE_DIGITS:
        return 0.0
    barcodes = {re.sub(r"\D", "", barcode) for barcode in candidate.barcodes}
    return float(context.digits in barcodes)


def _exact_alias(candidate: FoodCandidate, context: _QueryContext) -> float:
    for alias in candidate.aliases:
        if normalize_text(alias) == context.text:
            return 1.0
        if context.tokens and frozenset(query_tokens(alias)) == context.tokens:
            return 1.0
    return 0.0


def _brand(candidate: FoodCandidate, context: _QueryContext) -> float:
    brand = normalize_text(candidate.brand)
    if not brand:
        return 0.0
    return float(f" {brand} " in f" {context.text} ")


def _coverage(candidate_tokens: set[str], context: _QueryContext) -> float:
    if not context.tokens:
        return 0.0
    hits = sum(1 for token in context.tokens if token in candidate_tokens)
    return hits / len(context.tokens)


def _fuzzy(candidate: FoodCandidate, context: _QueryContext) -> float:
    if not context.text:
        return 0.0
    texts = [candidate.name, candidate.display_name, *candidate.aliases]
    best = max(fuzz.token_set_ratio(context.text, normalize_text(text)) for text in texts)
    return best / 100.0


def _head_noun(candidate: FoodCandidate) -> str | None:
    segment = normalize_text(candidate.name.split(",")[0]).split()
    return singularize(segment[-1]) if segment else None


def _leading_noun(candidate: FoodCandidate, context: _QueryContext) -> float:
    return float(_head_noun(candidate) in context.tokens)


def _state(candidate_tokens: set[str], context: _QueryContext) -> float:
    cooked = candidate_tokens & COOKED_WORDS
    raw = bool(candidate_tokens & RAW_WORDS)
    if context.wants_cooked:
        if cooked & context.wants_cooked:
            return 1.0
        if cooked:
            return 0.5
        return -1.0 if raw else 0.0
    if context.wants_raw:
        if raw:
            return 1.0
        return -1.0 if cooked else 0.0
    if context.implied_raw:
        if raw and not cooked:
            return 0.5
        return -0.5 if cooked else 0.0
    return 0.0


def _unit_hint(
    candidate: FoodCandidate, candidate_tokens: set[str], context: _QueryContext
) -> float:
    hint = context.query.unit_hint
    parts = candidate_tokens & EGG_PART_HINTS
    if hint in EGG_PART_HINTS:
        if hint in candidate_tokens:
            return 1.0
        return -1.0 if parts else 0.0
    if hint is None:
        # A generic egg query should not land on a yolk or white.
        return -1.0 if "egg" in context.tokens and parts else 0.0
    if hint in candidate_tokens and _head_noun(candidate) in context.tokens:
        return 1.0
    return 0.0


def _qualifier(candidate_tokens: set[str], context: _QueryContext) -> float:
    if not context.descriptive:
        return 0.0
    hits = sum(
        1
        for qualifier in context.descriptive
        if all(word in candidate_tokens for word in qualifier.split())
    )
    return hits / len(context.descriptive)
