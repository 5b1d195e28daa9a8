"""Qualifier and unit-hint extraction from ingredient names."""

import re

from ingredient_resolver.text import STOPWORDS, normalize_text, singularize, word_tokens

SIZE_WORDS = frozenset({"large", "small", "medium", "jumbo", "extra large"})

COOKED_WORDS = frozenset(
    {
        "cooked",
        "boiled",
        "baked",
        "roasted",
        "grilled",
        "fried",
        "steamed",
        "sauteed",
        "braised",
        "broiled",
        "poached",
        "toasted",
        "scrambled",
        "stewed",
        "microwaved",
    }
)

RAW_WORDS = frozenset({"raw", "uncooked"})

PREP_WORDS = frozenset(
    {
        "diced",
        "chopped",
        "minced",
        "sliced",
        "grated",
        "shredded",
        "halved",
        "quartered",
        "peeled",
        "unpeeled",
        "seeded",
        "unseeded",
        "stemmed",
        "destemmed",
        "crushed",
        "julienned",
        "cubed",
        "trimmed",
        "finely chopped",
        "finely minced",
        "coarsely chopped",
        "roughly chopped",
    }
)

MEASURE_WORDS = frozenset({"packed", "loose", "heaping", "level", "finely", "coarsely", "roughly"})

DESCRIPTIVE_WORDS = frozenset(
    {
        "boneless",
        "skinless",
        "bone in",
        "skin on",
        "fresh",
        "frozen",
        "dried",
        "canned",
        "whole",
        "lean",
        "unsalted",
        "salted",
        "unsweetened",
        "sweetened",
        "nonfat",
        "lowfat",
        "low fat",
        "reduced fat",
        "light",
    }
)

QUALIFIERS = SIZE_WORDS | COOKED_WORDS | RAW_WORDS | PREP_WORDS | MEASURE_WORDS | DESCRIPTIVE_WORDS

MULTI_WORD_QUALIFIERS = tuple(sorted((q for q in QUALIFIERS if " " in q), key=len, reverse=True))

_IGNORED_NOTES = frozenset(
    {"to taste", "optional", "divided", "for garnish", "or to taste", "plus more", "as needed"}
)

_PARENTHESES = re.compile(r"\(([^)]*)\)")

# Surface word -> canonical hint, in priority order.
UNIT_HINT_WORDS = (
    ("yolk", ("yolk", "yolks")),
    ("white", ("white", "whites")),
    ("leaf", ("leaf", "leaves")),
    ("clove", ("clove", "cloves")),
    ("sheet", ("sheet", "sheets")),
    ("stalk", ("stalk", "stalks")),
    ("slice", ("slice", "slices")),
    ("piece", ("piece", "pieces")),
)

EGG_PART_HINTS = frozenset({"yolk", "white"})
_EGG_WORDS = frozenset({"egg", "eggs"})


def split_notes(name: str) -> tuple[str, list[str]]:
    """Split a name into its head and its parenthesised and comma notes."""
    notes: list[str] = []
    for content in _PARENTHESES.findall(name):
        notes.extend(part.strip() for part in content.split(","))
    head, *trailing = _PARENTHESES.sub(" ", name).split(",")
    notes.extend(part.strip() for part in trailing)
    return head.strip(), [note for note in notes if note]


def extract_qualifiers(name: str, raw_unit_text: str | None = None) -> tuple[str, ...]:
    """Collect qualifier words and short notes from an ingredient name."""
    head, notes = split_notes(name)
    found: list[str] = []

    def add(value: str) -> None:
        if value and value not in found:
            found.append(value)

    for text in [raw_unit_text or "", head, *notes]:
        for qualifier in _vocabulary_qualifiers(normalize_text(text)):
            add(qualifier)
    for note in notes:
        normalized = normalize_text(note)
        if normalized in _IGNORED_NOTES or not normalized:
            continue
        if len(normalized.split()) <= 3 and not _vocabulary_qualifiers(normalized):
            add(normalized)
    return tuple(found)


def _vocabulary_qualifiers(normalized: str) -> list[str]:
    return [phrase for _, _, phrase in _qualifier_spans(normalized.split())]


def _qualifier_spans(tokens: list[str]) -> list[tuple[int, int, str]]:
    """Find qualifier phrases as (start, end, phrase), multi-word first."""
    spans: list[tuple[int, int, str]] = []
    index = 0
    while index < len(tokens):
        for phrase in MULTI_WORD_QUALIFIERS:
            words = phrase.split()
            if tokens[index : index + len(words)] == words:
                spans.append((index, index + len(words), phrase))
                index += len(words)
                break
        else:
            if tokens[index] in QUALIFIERS:
                spans.append((index, index + 1, tokens[index]))
            index += 1
    return spans


def extract_unit_hint(name: str, raw_unit_text: str | None = None) -> str | None:
    """Return a piece-like hint such as ``clove`` or ``yolk``."""
    tokens = set(word_tokens(name)) | set(word_tokens(raw_unit_text))
    for hint, surfaces in UNIT_HINT_WORDS:
        if not tokens.intersection(surfaces):
            continue
        if hint in EGG_PART_HINTS and not tokens.intersection(_EGG_WORDS):
            continue
        return hint
    return None


def core_name_tokens(name: str, unit_hint: str | None = None) -> list[str]:
    """Return food-name tokens without qualifiers, hint words or stopwords."""
    head, _ = split_notes(name)
    tokens = word_tokens(head) or word_tokens(name)
    hint_surfaces: set[str] = set()
    for hint, surfaces in UNIT_HINT_WORDS:
        if hint == unit_hint:
            hint_surfaces.update(surfaces)

    qualifier_positions: set[int] = set()
    for start, end, _ in _qualifier_spans(tokens):
        qualifier_positions.update(range(start, end))

    core = [
        token
        for position, token in enumerate(tokens)
        if position not in qualifier_positions
        and token not in hint_surfaces
        and token not in STOPWORDS
    ]
    if unit_hint in EGG_PART_HINTS and not any(singularize(t) == "egg" for t in core):
        core.insert(0, "egg")
    return core or [token for token in tokens if token not in STOPWORDS] or tokens
