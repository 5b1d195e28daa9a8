import pytest

from ingredient_resolver.domain.foods import PortionOverride
from ingredient_resolver.domain.resolution import PortionSource
from ingredient_resolver.services.ingredient_line import parse_ingredient_line
from ingredient_resolver.services.portion import resolve_portion
from tests.conftest import make_food, sample_foods


def _food(food_id: str):
    return next(food for food in sample_foods() if food.id == food_id)


def _parse(line: str):
    parsed = parse_ingredient_line(line)
    assert parsed is not None
    return parsed


def test_mass_units_convert_directly() -> None:
    result = resolve_portion(_parse("200 g chicken breast"), make_food("chicken", "Chicken"))

    assert result.grams == 200
    assert result.tier == 1
    assert result.confidence == 1.0
    assert result.source is PortionSource.DIRECT_MASS

    pound = resolve_portion(_parse("1 lb ground beef"), make_food("beef", "Beef, ground"))
    assert pound.grams == pytest.approx(453.59237)


def test_labeled_cup_serving() -> None:
    sugar = make_food("sugar", "Sugar, granulated", servings=(("1 cup", 240),))

    result = resolve_portion(_parse("1 cup sugar"), sugar)

    assert result.grams == 240
    assert result.tier == 1
    assert result.source is PortionSource.LABELED_SERVING
    assert result.matched_label == "1 cup"


def test_labeled_serving_scales_by_quantity_and_multiplier() -> None:
    rice = _food("rice-brown-cooked")

    assert resolve_portion(_parse("2 cups brown rice, cooked"), rice).grams == 390
    milk = make_food("milk", "Milk, whole", servings=(("1 cup", 244),))
    assert resolve_portion(_parse("2 half cups milk"), milk).grams == 244


def test_default_count_label_for_counted_food() -> None:
    egg = _food("egg-whole")

    result = resolve_portion(_parse("2 eggs"), egg)

    assert result.grams == 100
    assert result.tier == 1
    assert result.matched_label == "large"


def test_size_word_selects_matching_label() -> None:
    egg = make_food("egg", "Egg, whole, raw", servings=(("small", 38), ("large", 50)))

    result = resolve_portion(_parse("2 large eggs"), egg)

    assert result.grams == 100
    assert result.matched_label == "large"


def test_unit_table_converts_between_volume_units() -> None:
    flour = _food("flour-wheat")

    result = resolve_portion(_parse("2 tbsp flour"), flour)

    assert result.tier == 2
    assert result.source is PortionSource.UNIT_TABLE
    assert result.grams == pytest.approx(125 / 240 * 2 * 14.78676478125)
    assert result.confidence == 0.85


def test_density_fallback() -> None:
    result = resolve_portion(_parse("1 cup olive oil"), _food("olive-oil"))

    assert result.tier == 3
    assert result.source is PortionSource.DENSITY
    assert result.grams == pytest.approx(240 * 0.91)
    assert result.notes == "density:0.910"


def test_garlic_clove_heuristic() -> None:
    garlic = _food("garlic-raw")

    result = resolve_portion(_parse("3 cloves garlic"), garlic)

    assert result.tier == 4
    assert result.source is PortionSource.HEURISTIC
    assert result.grams == 9
    assert result.confidence == 0.5

    large = resolve_portion(_parse("2 large cloves garlic"), garlic)
    assert large.grams == 8


def test_explicit_unit_does_not_match_size_only_label() -> None:
    tomato = make_food("tomato", "Tomatoes, red, raw", servings=(("1 medium", 123),))

    result = resolve_portion(_parse("2 slices tomato"), tomato)

    assert result.tier == 4
    assert result.source is PortionSource.HEURISTIC
    assert result.grams == 30
    assert result.notes == "tomato slice"
    assert result.matched_label is None

    pieces = resolve_portion(_parse("2 pieces tomato"), tomato)
    assert pieces.tier == 1
    assert pieces.matched_label == "1 medium"
    assert pieces.grams == 246


def test_category_default_for_unlabeled_count() -> None:
    banana = make_food("banana", "Bananas, raw", category_id="fruit")

    result = resolve_portion(_parse("1 medium banana"), banana)

    assert result.tier == 4
    assert result.source is PortionSource.CATEGORY_DEFAULT
    assert result.grams == 120
    assert result.confidence == 0.4


def test_volume_without_serving_or_density_is_unresolved() -> None:
    spinach = make_food("spinach", "Spinach, raw", category_id="veg")

    result = resolve_portion(_parse("1 cup spinach"), spinach)

    assert result.grams is None
    assert result.tier == 5
    assert result.source is PortionSource.UNRESOLVED
    assert not result.resolved


def test_user_override_wins_over_food_data() -> None:
    whey = make_food(
        "whey",
        "Whey protein powder",
        servings=(("1 scoop", 31),),
        portion_overrides=(PortionOverride(unit="scoop", grams=33),),
    )
    parsed = _parse("2 scoops whey protein")

    user = resolve_portion(parsed, whey, [PortionOverride(unit="scoop", grams=30)])
    curated = resolve_portion(parsed, whey)

    assert user.grams == 60
    assert user.source is PortionSource.USER_OVERRIDE
    assert user.confidence == 1.0
    assert curated.grams == 66
    assert curated.source is PortionSource.PORTION_OVERRIDE
    assert curated.confidence == 0.95


def test_labeled_override_requires_its_label() -> None:
    bread = make_food(
        "bread",
        "Bread, whole wheat",
        portion_overrides=(PortionOverride(unit="slice", grams=45, label="thick"),),
        servings=(("1 slice", 28),),
    )

    assert resolve_portion(_parse("2 slices bread"), bread).grams == 56
    assert resolve_portion(_parse("2 slices bread, thick"), bread).grams == 90
