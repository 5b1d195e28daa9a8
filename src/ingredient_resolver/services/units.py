"""Unit normalization and conversion tables."""

from ingredient_resolver.domain.parsing import NormalizedUnit, UnitKind

MASS_UNITS = {
    "g": "g",
    "gram": "g",
    "grams": "g",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "pound": "lb",
    "pounds": "lb",
}

VOLUME_UNITS = {
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tbsp": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "cup": "cup",
    "cups": "cup",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "floz": "floz",
    "fl oz": "floz",
    "fluid ounce": "floz",
    "fluid ounces": "floz",
    "pinch": "pinch",
    "pinches": "pinch",
    "dash": "dash",
    "dashes": "dash",
}

COUNT_UNITS = {
    "piece": "piece",
    "pieces": "piece",
    "bar": "bar",
    "bars": "bar",
    "scoop": "scoop",
    "scoops": "scoop",
    "slice": "slice",
    "slices": "slice",
    "egg": "egg",
    "eggs": "egg",
    "can": "can",
    "cans": "can",
    "block": "block",
    "blocks": "block",
}

MULTIPLIERS = {
    "half": 0.5,
    "quarter": 0.25,
    "third": 1 / 3,
    "½": 0.5,
    "¼": 0.25,
    "⅓": 1 / 3,
}

GRAMS_PER_MASS_UNIT = {
    "g": 1.0,
    "oz": 28.349523125,
    "lb": 453.59237,
}

ML_PER_VOLUME_UNIT = {
    "ml": 1.0,
    "tsp": 4.92892159375,
    "tbsp": 14.78676478125,
    "cup": 240.0,
    "floz": 29.5735295625,
    "pinch": 0.308057599609375,
    "dash": 0.61611519921875,
}

# Serving-label spellings outside the parser's own table.
LABEL_UNIT_SYNONYMS = {
    "tbs": "tbsp",
    "tbl": "tbsp",
    "tblsp": "tbsp",
    "millilitre": "ml",
    "millilitres": "ml",
    "fl": "floz",
    "pc": "piece",
    "pcs": "piece",
    "package": "block",
    "pkg": "block",
    "grm": "g",
}

# Label words that stand for "one of the thing" when no unit was given.
DEFAULT_COUNT_WORDS = frozenset(
    {"whole", "piece", "each", "count", "unit", "item", "medium", "large", "small", "serving"}
)


def normalize_unit_token(token: str) -> NormalizedUnit:
    """Classify a token into exactly one unit kind; never raises."""
    value = token.lower().strip()
    if value in MASS_UNITS:
        return NormalizedUnit(kind=UnitKind.MASS, unit=MASS_UNITS[value])
    if value in VOLUME_UNITS:
        return NormalizedUnit(kind=UnitKind.VOLUME, unit=VOLUME_UNITS[value])
    if value in COUNT_UNITS:
        return NormalizedUnit(kind=UnitKind.COUNT, unit=COUNT_UNITS[value])
    if value in MULTIPLIERS:
        return NormalizedUnit(kind=UnitKind.MULTIPLIER, factor=MULTIPLIERS[value])
    return NormalizedUnit(kind=UnitKind.UNKNOWN, raw=value)


def label_unit(token: str) -> str | None:
    """Return the canonical unit for a word in a serving label."""
    normalized = normalize_unit_token(token)
    if normalized.is_measure:
        return normalized.unit
    return LABEL_UNIT_SYNONYMS.get(token.lower().strip())


def unit_kind(unit: str | None) -> UnitKind | None:
    """Return the kind of a canonical unit string."""
    if unit is None:
        return None
    if unit in GRAMS_PER_MASS_UNIT:
        return UnitKind.MASS
    if unit in ML_PER_VOLUME_UNIT:
        return UnitKind.VOLUME
    if unit in set(COUNT_UNITS.values()):
        return UnitKind.COUNT
    return None


def mass_to_grams(qty: float, unit: str) -> float:
    return qty * GRAMS_PER_MASS_UNIT[unit]


def volume_to_ml(qty: float, unit: str) -> float:
    return qty * ML_PER_VOLUME_UNIT[unit]
