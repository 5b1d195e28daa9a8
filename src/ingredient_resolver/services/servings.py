"""Serving label parsing and serving-option derivation."""

from dataclasses import dataclass

from ingredient_resolver.domain.foods import FoodCandidate, ServingOption
from ingredient_resolver.errors import NoQuantity
from ingredient_resolver.services.quantity import parse_quantity
from ingredient_resolver.services.units import label_unit, mass_to_grams, volume_to_ml
from ingredient_resolver.text import normalize_text, token_set


@dataclass(frozen=True)
class ServingLabel:
    """A declared serving label split into quantity, unit and words."""

    qty: float
    unit: str | None
    words: frozenset[str]


def parse_serving_label(label: str) -> ServingLabel:
    """Parse ``"1 cup"``, ``"½ cup, chopped"`` or ``"large"``."""
    tokens = label.replace(",", " ").replace("(", " ").replace(")", " ").split()
    qty = 1.0
    rest = tokens
    if tokens:
        try:
            match = parse_quantity(tokens)
        except NoQuantity:
            match = None
        if match is not None and match.qty > 0:
            qty = match.qty
            rest = tokens[match.consumed :]

    unit = None
    # "fl" precedes "oz", so fluid ounces resolve before mass ounces.
    for word in normalize_text(" ".join(rest)).split():
        unit = label_unit(word)
        if unit is not None:
            break
    return ServingLabel(qty=qty, unit=unit, words=frozenset(token_set(" ".join(rest))))


def derive_serving_options(food: FoodCandidate) -> list[ServingOption]:
    """List selectable servings: declared units, mass presets, density volumes."""
    options: list[ServingOption] = []
    for serving in food.servings:
        if serving.grams <= 0:
            continue
        options.append(ServingOption(label=serving.label, grams=serving.grams))
        options.append(ServingOption(label=f"½ {serving.label}", grams=serving.grams / 2))
        options.append(ServingOption(label=f"2 × {serving.label}", grams=serving.grams * 2))

    options.extend(
        [
            ServingOption(label="100 g", grams=100.0),
            ServingOption(label="1 oz", grams=mass_to_grams(1, "oz")),
            ServingOption(label="4 oz", grams=mass_to_grams(4, "oz")),
        ]
    )

    density = food.density_gml
    if density is not None and density > 0:
        per_cup = volume_to_ml(1, "cup") * density
        options.extend(
            [
                ServingOption(label="1 tbsp", grams=volume_to_ml(1, "tbsp") * density),
                ServingOption(label="1 tsp", grams=volume_to_ml(1, "tsp") * density),
                ServingOption(label="¼ cup", grams=per_cup / 4),
                ServingOption(label="1 cup", grams=per_cup),
            ]
        )

    seen: set[str] = set()
    unique = []
    for option in options:
        if option.label in seen:
            continue
        seen.add(option.label)
        unique.append(option)
    return unique
