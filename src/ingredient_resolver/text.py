"""Text normalization helpers shared by parsing, search and ranking."""

import re

_NON_WORD = re.compile(r"[^a-z0-9%\s]+")
_WHITESPACE = re.compile(r"\s+")

STOPWORDS = frozenset({"a", "an", "and", "the", "of", "or", "for", "to", "in", "with"})

_IRREGULAR_SINGULARS = {
    "cloves": "clove",
    "leaves": "leaf",
    "whites": "white",
    "yolks": "yolk",
    "pieces": "piece",
    "slices": "slice",
    "stalks": "stalk",
    "ounces": "ounce",
    "tomatoes": "tomato",
    "potatoes": "potato",
    "molasses": "molasses",
    "hummus": "hummus",
    "couscous": "couscous",
    "asparagus": "asparagus",
    "swiss": "swiss",
}


def normalize_text(value: str | None) -> str:
    """Lower-case, replace punctuation with spaces and collapse whitespace."""
    if not value:
        return ""
    cleaned = _NON_WORD.sub(" ", value.lower().replace("-", " "))
    return _WHITESPACE.sub(" ", cleaned).strip()


def singularize(token: str) -> str:
    """Return a naive singular form of an English token."""
    if token in _IRREGULAR_SINGULARS:
        return _IRREGULAR_SINGULARS[token]
    if token.endswith("ies") and len(token) > 4:
        return f"{token[:-3]}y"
    if token.endswith(("ches", "shes", "sses", "xes")) and len(token) > 4:
        return token[:-2]
    if token.endswith("s") and not token.endswith("ss") and len(token) > 2:
        return token[:-1]
    return token


def word_tokens(value: str | None) -> list[str]:
    """Split normalized text into tokens, keeping stopwords."""
    normalized = normalize_text(value)
    return normalized.split() if normalized else []


def query_tokens(value: str | None) -> list[str]:
    """Return de-duplicated singular search tokens without stopwords."""
    tokens: list[str] = []
    for token in word_tokens(value):
        if token in STOPWORDS:
            continue
        singular = singularize(token)
        if singular not in tokens:
            tokens.append(singular)
    return tokens


def token_set(value: str | None) -> set[str]:
    """Return both surface and singular forms of every token."""
    result: set[str] = set()
    for token in word_tokens(value):
        result.add(token)
        result.add(singularize(token))
    return result
