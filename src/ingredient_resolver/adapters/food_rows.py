"""Parsing of corpus food rows shared by the corpus adapters."""

from ingredient_resolver.domain.foods import (
    FoodCandidate,
    FoodServing,
    FoodSource,
    MacroProfile,
    PortionOverride,
    Verification,
)


def parse_food_row(row: dict[str, object]) -> FoodCandidate:
    """Parse a food row, with optional nested units, barcodes and aliases."""
    return FoodCandidate(
        id=str(row["id"]),
        name=str(row.get("name") or "").strip(),
        brand=_optional_str(row.get("brand")),
        source=_parse_source(row.get("source")),
        verification=Verification.parse(row.get("verification")),
        macros=MacroProfile(
            calories=_float(row.get("kcal100")),
            protein_g=_float(row.get("protein100")),
            fat_g=_float(row.get("fat100")),
            carbs_g=_float(row.get("carbs100")),
        ),
        density_gml=_optional_float(row.get("density_gml")),
        category_id=_optional_str(row.get("category_id")),
        popularity=_float(row.get("popularity")),
        aliases=_strings(row.get("aliases"), row.get("food_aliases"), "alias"),
        barcodes=_strings(row.get("barcodes"), row.get("food_barcodes"), "gtin"),
        servings=tuple(
            FoodServing(label=str(unit["label"]), grams=float(unit["grams"]))
            for unit in _rows(row.get("units") or row.get("food_units"))
            if unit.get("label") and _float(unit.get("grams")) > 0
        ),
        portion_overrides=tuple(
            PortionOverride(
                unit=str(override["unit"]),
                grams=float(override["grams"]),
                label=_optional_str(override.get("label")),
            )
            for override in _rows(row.get("portion_overrides"))
            if override.get("unit") and _float(override.get("grams")) > 0
        ),
    )


def _parse_source(value: object) -> FoodSource:
    return FoodSource.EXTERNAL if str(value or "").lower() in {"external", "fdc", "usda"} else FoodSource.LOCAL


def _rows(value: object) -> list[dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _strings(flat: object, nested: object, key: str) -> tuple[str, ...]:
    values: list[str] = []
    if isinstance(flat, list):
        values.extend(str(item) for item in flat if item)
    values.extend(str(item[key]) for item in _rows(nested) if item.get(key))
    return tuple(dict.fromkeys(values))


def _float(value: object) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)


def _optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
