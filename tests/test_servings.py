import pytest

from ingredient_resolver.services.servings import derive_serving_options, parse_serving_label
from tests.conftest import make_food


def test_parse_serving_label() -> None:
    cup = parse_serving_label("1 cup")
    assert (cup.qty, cup.unit) == (1.0, "cup")

    chopped = parse_serving_label("½ cup, chopped")
    assert chopped.qty == 0.5
    assert chopped.unit == "cup"
    assert "chopped" in chopped.words

    large = parse_serving_label("large")
    assert (large.qty, large.unit) == (1.0, None)
    assert large.words == frozenset({"large"})


def test_parse_serving_label_spellings() -> None:
    assert parse_serving_label("8 fl oz").unit == "floz"
    assert parse_serving_label("8 fl oz").qty == 8
    assert parse_serving_label("1 oz").unit == "oz"
    assert parse_serving_label("2 tbs").unit == "tbsp"
    assert parse_serving_label("1 package (227g)").unit == "block"


def test_options_from_declared_servings() -> None:
    rice = make_food("rice", "Rice, cooked", servings=(("cup", 195),))

    options = derive_serving_options(rice)

    assert [option.label for option in options] == [
        "cup",
        "½ cup",
        "2 × cup",
        "100 g",
        "1 oz",
        "4 oz",
    ]
    assert [option.grams for option in options[:3]] == [195, 97.5, 390]
    assert options[4].grams == pytest.approx(28.349523125)


def test_options_from_density_keep_first_label() -> None:
    oil = make_food("oil", "Olive oil", density_gml=0.91, servings=(("1 cup", 216),))

    options = {option.label: option.grams for option in derive_serving_options(oil)}

    assert options["1 cup"] == 216
    assert options["1 tbsp"] == pytest.approx(14.78676478125 * 0.91)
    assert options["¼ cup"] == pytest.approx(60 * 0.91)


def test_options_skip_non_positive_servings() -> None:
    food = make_food("x", "Mystery", servings=(("1 piece", 0),))

    labels = [option.label for option in derive_serving_options(food)]

    assert labels == ["100 g", "1 oz", "4 oz"]
