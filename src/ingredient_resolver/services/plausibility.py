"""Query category inference and caloric plausibility bands."""

from ingredient_resolver.domain.resolution import KcalBand
from ingredient_resolver.text import query_tokens

PREPARED_DISH = "prepared_dish"

# First match wins, so multi-word and more specific entries come first.
_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("nut", ("peanut butter", "almond butter")),
    ("beverage", ("almond milk", "oat milk", "soy milk", "coconut milk")),
    ("whey", ("whey", "protein powder")),
    ("vegetable", ("sweet potato",)),
    ("oil", ("oil",)),
    ("flour", ("flour",)),
    ("starch", ("starch", "cornstarch")),
    ("sugar", ("sugar", "honey", "syrup")),
    ("cheese", ("cheese", "cheddar", "mozzarella", "parmesan", "feta", "ricotta")),
    ("rice", ("rice",)),
    ("oats", ("oat", "oatmeal")),
    ("nut", ("almond", "walnut", "pecan", "cashew", "peanut", "pistachio", "hazelnut")),
    ("dairy", ("milk", "yogurt", "cream", "butter")),
    (
        "protein",
        (
            "chicken",
            "beef",
            "pork",
            "turkey",
            "salmon",
            "tuna",
            "fish",
            "shrimp",
            "egg",
            "tofu",
            "lamb",
            "bacon",
            "steak",
        ),
    ),
    ("legume", ("bean", "lentil", "chickpea", "pea")),
    ("seed", ("seed", "chia", "flax", "sesame")),
    ("grain", ("pasta", "quinoa", "bread", "barley", "couscous", "noodle", "tortilla")),
    (
        "fruit",
        (
            "apple",
            "banana",
            "berry",
            "strawberry",
            "blueberry",
            "orange",
            "lemon",
            "lime",
            "avocado",
            "mango",
            "grape",
            "pear",
            "peach",
        ),
    ),
    (
        "vegetable",
        (
            "onion",
            "garlic",
            "spinach",
            "carrot",
            "celery",
            "tomato",
            "pepper",
            "broccoli",
            "potato",
            "lettuce",
            "kale",
            "cucumber",
            "zucchini",
            "mushroom",
            "basil",
            "ginger",
            "cabbage",
        ),
    ),
    ("condiment", ("ketchup", "mustard", "mayonnaise", "sauce", "vinegar", "salsa", "dressing")),
    ("beverage", ("coffee", "tea", "juice", "soda", "water", "wine", "beer")),
)

_CATEGORY_ALIASES = {
    "veg": "vegetable",
    "vegetables": "vegetable",
    "veggie": "vegetable",
    "veggies": "vegetable",
    "herb": "vegetable",
    "herbs": "vegetable",
    "meat": "protein",
    "meats": "protein",
    "poultry": "protein",
    "seafood": "protein",
    "fish": "protein",
    "egg": "protein",
    "eggs": "protein",
    "fruits": "fruit",
    "nuts": "nut",
    "seeds": "seed",
    "grains": "grain",
    "cereal": "grain",
    "cereals": "grain",
    "bread": "grain",
    "pasta": "grain",
    "legumes": "legume",
    "beans": "legume",
    "milk": "dairy",
    "cheeses": "cheese",
    "oils": "oil",
    "fat": "oil",
    "fats": "oil",
    "sweetener": "sugar",
    "sweeteners": "sugar",
    "sweets": "sugar",
    "spice": "condiment",
    "spices": "condiment",
    "sauce": "condiment",
    "sauces": "condiment",
    "condiments": "condiment",
    "drink": "beverage",
    "drinks": "beverage",
    "beverages": "beverage",
    "prepared": PREPARED_DISH,
    "dish": PREPARED_DISH,
    "dishes": PREPARED_DISH,
    "meal": PREPARED_DISH,
    "recipe": PREPARED_DISH,
}

_COMPATIBLE_GROUPS = (
    frozenset({"grain", "rice", "oats", "flour", "starch"}),
    frozenset({"dairy", "cheese", "whey"}),
    frozenset({"nut", "seed"}),
    frozenset({"vegetable", "fruit", "legume"}),
    frozenset({"sugar", "condiment"}),
)

_KCAL_BANDS: tuple[tuple[tuple[str, ...], KcalBand], ...] = (
    (("peanut butter",), KcalBand(low=560, high=620)),
    (("oil",), KcalBand(low=800, high=900)),
    (("butter",), KcalBand(low=650, high=760)),
    (("sugar",), KcalBand(low=370, high=400)),
    (("honey",), KcalBand(low=290, high=330)),
    (("flour",), KcalBand(low=330, high=380)),
    (("whey",), KcalBand(low=350, high=420)),
    (("spinach",), KcalBand(low=15, high=40)),
    (("lettuce",), KcalBand(low=10, high=25)),
    (("kale",), KcalBand(low=25, high=55)),
)


def _matches(tokens: list[str], phrase: str) -> bool:
    return all(word in tokens for word in phrase.split())


def infer_query_category(query: str) -> str | None:
    """Guess the food category a query refers to."""
    tokens = query_tokens(query)
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(_matches(tokens, keyword) for keyword in keywords):
            return category
    return None


def canonical_category(category_id: str | None) -> str | None:
    """Map stored category ids such as ``veg`` or ``Meat`` onto query categories."""
    if not category_id:
        return None
    key = category_id.strip().lower().replace("-", "_").replace(" ", "_")
    return _CATEGORY_ALIASES.get(key, key)


def category_agreement(query_category: str | None, candidate_category: str | None) -> float:
    """Return 1 for a match, 0.5 when compatible, -1 on conflict, 0 when unknown."""
    candidate = canonical_category(candidate_category)
    if query_category is None or candidate is None:
        return 0.0
    if candidate == query_category:
        return 1.0
    if candidate == PREPARED_DISH:
        return -1.0
    if any(query_category in group and candidate in group for group in _COMPATIBLE_GROUPS):
        return 0.5
    return -1.0


def kcal_band_for_query(query: str) -> KcalBand | None:
    """Return the expected kcal-per-100g range for well-known foods."""
    tokens = query_tokens(query)
    for phrases, band in _KCAL_BANDS:
        if any(_matches(tokens, phrase) for phrase in phrases):
            return band
    return None


def kcal_band_penalty(kcal_per_100g: float, band: KcalBand | None) -> float:
    """Relative distance outside the band, clamped to [0, 1]."""
    if band is None:
        return 0.0
    if kcal_per_100g < band.low:
        return min(1.0, (band.low - kcal_per_100g) / max(band.low, 1.0))
    if kcal_per_100g > band.high:
        return min(1.0, (kcal_per_100g - band.high) / max(band.high, 1.0))
    return 0.0
