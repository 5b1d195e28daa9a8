"""Tiered conversion of a parsed quantity into grams for one food."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ingredient_resolver.domain.foods import FoodCandidate, FoodServing, PortionOverride
from ingredient_resolver.domain.parsing import ParsedIngredientLine, UnitKind
from ingredient_resolver.domain.resolution import PortionResolution, PortionSource
from ingredient_resolver.services.plausibility import canonical_category
from ingredient_resolver.services.servings import ServingLabel, parse_serving_label
from ingredient_resolver.services.units import (
    DEFAULT_COUNT_WORDS,
    GRAMS_PER_MASS_UNIT,
    mass_to_grams,
    unit_kind,
    volume_to_ml,
)
from ingredient_resolver.text import normalize_text, token_set

EXACT_CONFIDENCE = 1.0
LABELED_CONFIDENCE = 0.95
UNIT_TABLE_CONFIDENCE = 0.85
DENSITY_CONFIDENCE = 0.7
HEURISTIC_CONFIDENCE = 0.5
CATEGORY_DEFAULT_CONFIDENCE = 0.4


@dataclass(frozen=True)
class HeuristicRule:
    """Grams per unit for a common piece-like ingredient."""

    keywords: frozenset[str]
    grams_per_unit: float
    notes: str
    label_keywords: frozenset[str] = frozenset()


HEURISTIC_RULES = (
    HeuristicRule(frozenset({"clove", "garlic"}), 4, "large garlic clove", frozenset({"large"})),
    HeuristicRule(frozenset({"clove", "garlic"}), 2, "small garlic clove", frozenset({"small"})),
    HeuristicRule(frozenset({"clove", "garlic"}), 3, "garlic clove"),
    HeuristicRule(frozenset({"stalk", "celery"}), 40, "celery stalk"),
    HeuristicRule(frozenset({"leaf", "basil"}), 0.6, "fresh basil leaf"),
    HeuristicRule(frozenset({"leaf", "spinach"}), 3, "spinach leaf"),
    HeuristicRule(frozenset({"piece", "ginger"}), 11, "ginger 1-inch piece", frozenset({"inch"})),
    HeuristicRule(frozenset({"slice", "tomato"}), 15, "tomato slice"),
    HeuristicRule(frozenset({"avocado"}), 136, "whole avocado"),
)

# Grams for "one" of a food when only its category is known.
CATEGORY_DEFAULT_GRAMS = {
    "fruit": 120.0,
    "vegetable": 85.0,
    "protein": 113.0,
    "cheese": 28.0,
    "nut": 28.0,
    "seed": 9.0,
    "grain": 45.0,
    "legume": 90.0,
    "condiment": 15.0,
    "beverage": 240.0,
}

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _LineTokens:
    unit_tokens: frozenset[str]
    qualifier_tokens: frozenset[str]
    all_tokens: frozenset[str]

    @classmethod
    def build(cls, parsed: ParsedIngredientLine) -> "_LineTokens":
        unit_tokens = set()
        for value in (parsed.unit, parsed.raw_unit_text, parsed.unit_hint):
            unit_tokens |= token_set(value)
        qualifier_tokens = set()
        for qualifier in parsed.qualifiers:
            qualifier_tokens |= token_set(qualifier)
        all_tokens = token_set(parsed.name) | unit_tokens | qualifier_tokens
        return cls(
            unit_tokens=frozenset(unit_tokens),
            qualifier_tokens=frozenset(qualifier_tokens),
            all_tokens=frozenset(all_tokens),
        )


def resolve_portion(
    parsed: ParsedIngredientLine,
    food: FoodCandidate,
    user_overrides: Iterable[PortionOverride] | None = None,
) -> PortionResolution:
    """Convert the parsed quantity into grams using the strongest evidence."""
    qty = parsed.effective_qty
    if qty <= 0:
        return _unresolved("non-positive quantity")

    if parsed.unit_kind is UnitKind.MASS and parsed.unit in GRAMS_PER_MASS_UNIT:
        return PortionResolution(
            grams=mass_to_grams(qty, parsed.unit),
            tier=1,
            confidence=EXACT_CONFIDENCE,
            source=PortionSource.DIRECT_MASS,
            matched_label=parsed.unit,
        )

    tokens = _LineTokens.build(parsed)
    for overrides, source, confidence in (
        (user_overrides, PortionSource.USER_OVERRIDE, EXACT_CONFIDENCE),
        (food.portion_overrides, PortionSource.PORTION_OVERRIDE, LABELED_CONFIDENCE),
    ):
        override = _match_override(overrides or (), parsed, tokens)
        if override is not None:
            return PortionResolution(
                grams=override.grams * qty,
                tier=1,
                confidence=confidence,
                source=source,
                matched_label=override.label or override.unit,
            )

    resolution = (
        _labeled_serving(food, parsed, tokens, qty)
        or _unit_table(food, parsed, qty)
        or _density(food, parsed, qty)
        or _heuristic(food, parsed, tokens, qty)
    )
    if resolution is not None:
        return resolution
    _logger.debug("Portion unresolved: food=%s unit=%s", food.id, parsed.unit)
    return _unresolved("no serving, density or heuristic applies")


def _unresolved(notes: str) -> PortionResolution:
    return PortionResolution(
        grams=None, tier=5, confidence=0.0, source=PortionSource.UNRESOLVED, notes=notes
    )


def _matches_unit(unit: str, parsed: ParsedIngredientLine, tokens: _LineTokens) -> bool:
    if unit == parsed.unit or unit in tokens.unit_tokens:
        return True
    if unit in DEFAULT_COUNT_WORDS:
        return not tokens.unit_tokens
    return False


def _match_override(
    overrides: Iterable[PortionOverride], parsed: ParsedIngredientLine, tokens: _LineTokens
) -> PortionOverride | None:
    for override in overrides:
        unit = normalize_text(override.unit)
        if not unit or override.grams <= 0:
            continue
        label = normalize_text(override.label)
        label_matches = not label or label in tokens.qualifier_tokens or label in tokens.all_tokens
        if _matches_unit(unit, parsed, tokens) and label_matches:
            return override
    return None


def _score_label(
    label: ServingLabel, parsed: ParsedIngredientLine, tokens: _LineTokens
) -> int:
    score = 0
    if parsed.unit is not None and label.unit == parsed.unit:
        score += 4
    score += 2 * sum(
        1
        for token in tokens.unit_tokens
        if token != parsed.unit and len(token) > 1 and token in label.words
    )
    # Size-only labels ("1 medium") stand for one of the food, never a slice or can of it.
    counting = (
        not tokens.unit_tokens
        or parsed.unit in DEFAULT_COUNT_WORDS
        or parsed.unit in token_set(parsed.name)
    )
    if counting and label.words & DEFAULT_COUNT_WORDS and label.unit is None:
        score += 1
    if score == 0:
        return 0
    score += sum(1 for token in tokens.qualifier_tokens if len(token) > 1 and token in label.words)
    return score


def _labeled_serving(
    food: FoodCandidate, parsed: ParsedIngredientLine, tokens: _LineTokens, qty: float
) -> PortionResolution | None:
    best: tuple[int, FoodServing, ServingLabel] | None = None
    for serving in food.servings:
        if serving.grams <= 0:
            continue
        label = parse_serving_label(serving.label)
        score = _score_label(label, parsed, tokens)
        if score > 0 and (best is None or score > best[0]):
            best = (score, serving, label)
    if best is None:
        return None
    _, serving, label = best
    return PortionResolution(
        grams=serving.grams / label.qty * qty,
        tier=1,
        confidence=LABELED_CONFIDENCE,
        source=PortionSource.LABELED_SERVING,
        matched_label=serving.label,
    )


def _unit_table(
    food: FoodCandidate, parsed: ParsedIngredientLine, qty: float
) -> PortionResolution | None:
    """Convert through a declared serving of the same unit kind."""
    if parsed.unit_kind not in (UnitKind.VOLUME, UnitKind.COUNT):
        return None
    for serving in food.servings:
        if serving.grams <= 0:
            continue
        label = parse_serving_label(serving.label)
        if label.unit is None or unit_kind(label.unit) is not parsed.unit_kind:
            continue
        per_label_unit = serving.grams / label.qty
        if parsed.unit_kind is UnitKind.VOLUME:
            grams = per_label_unit / volume_to_ml(1, label.unit) * volume_to_ml(qty, parsed.unit)
        else:
            grams = per_label_unit * qty
        return PortionResolution(
            grams=grams,
            tier=2,
            confidence=UNIT_TABLE_CONFIDENCE,
            source=PortionSource.UNIT_TABLE,
            matched_label=serving.label,
            notes=f"converted from {label.unit}",
        )
    return None


def _density(
    food: FoodCandidate, parsed: ParsedIngredientLine, qty: float
) -> PortionResolution | None:
    if parsed.unit_kind is not UnitKind.VOLUME or parsed.unit is None:
        return None
    if food.density_gml is None or food.density_gml <= 0:
        return None
    return PortionResolution(
        grams=volume_to_ml(qty, parsed.unit) * food.density_gml,
        tier=3,
        confidence=DENSITY_CONFIDENCE,
        source=PortionSource.DENSITY,
        matched_label=parsed.unit,
        notes=f"density:{food.density_gml:.3f}",
    )


def _heuristic(
    food: FoodCandidate, parsed: ParsedIngredientLine, tokens: _LineTokens, qty: float
) -> PortionResolution | None:
    if parsed.unit_kind not in (None, UnitKind.COUNT):
        return None
    context = tokens.all_tokens | token_set(food.name)
    for rule in HEURISTIC_RULES:
        if not rule.keywords <= context:
            continue
        if rule.label_keywords and not rule.label_keywords & context:
            continue
        return PortionResolution(
            grams=rule.grams_per_unit * qty,
            tier=4,
            confidence=HEURISTIC_CONFIDENCE,
            source=PortionSource.HEURISTIC,
            notes=rule.notes,
        )

    category = canonical_category(food.category_id)
    grams = CATEGORY_DEFAULT_GRAMS.get(category or "")
    if grams is None:
        return None
    return PortionResolution(
        grams=grams * qty,
        tier=4,
        confidence=CATEGORY_DEFAULT_CONFIDENCE,
        source=PortionSource.CATEGORY_DEFAULT,
        notes=f"category:{category}",
    )
