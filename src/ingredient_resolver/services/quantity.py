"""Quantity parsing for the leading tokens of an ingredient line."""

import math
import re

from ingredient_resolver.domain.parsing import QuantityMatch
from ingredient_resolver.errors import NoQuantity

UNICODE_FRACTIONS = {
    "½": 0.5,
    "¼": 0.25,
    "¾": 0.75,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}

WORD_FRACTIONS = {
    "half": 0.5,
    "quarter": 0.25,
    "third": 1 / 3,
}

_NUMBER = re.compile(r"^(?:\d+(?:\.\d+)?|\.\d+)$")
_ATTACHED_FRACTION = re.compile(r"^(\d+(?:\.\d+)?)([" + "".join(UNICODE_FRACTIONS) + r"])$")
_RANGE_TOKEN = re.compile(r"^([^-–—]+)[-–—]([^-–—]+)$")
_RANGE_SEPARATORS = frozenset({"-", "–", "—", "to"})


def parse_quantity(tokens: list[str]) -> QuantityMatch:
    """Parse the leading quantity and report how many tokens it used.

    Rules are tried in a fixed order and the first match wins. Raises
    ``NoQuantity`` when no rule recognizes a number.
    """
    if not tokens:
        raise NoQuantity("no tokens")

    first = tokens[0].strip()
    lowered = [token.strip().lower() for token in tokens]

    range_match = _parse_range(tokens)
    if range_match is not None:
        return range_match

    if first in UNICODE_FRACTIONS:
        return QuantityMatch(qty=UNICODE_FRACTIONS[first], consumed=1)

    if lowered[0] in WORD_FRACTIONS:
        return QuantityMatch(qty=WORD_FRACTIONS[lowered[0]], consumed=1)

    if lowered[:4] == ["one", "and", "a", "half"]:
        return QuantityMatch(qty=1.5, consumed=4)

    whole = _parse_number(first)
    if whole is not None:
        if len(tokens) >= 3 and lowered[1] == "and" and lowered[2] == "1/2":
            return QuantityMatch(qty=whole + 0.5, consumed=3)
        if len(tokens) >= 2 and lowered[1] == "1/2":
            return QuantityMatch(qty=whole + 0.5, consumed=2)

    mixed = _parse_mixed(first)
    if mixed is not None:
        return QuantityMatch(qty=mixed, consumed=1)
    if whole is not None and len(tokens) >= 2 and tokens[1].strip() in UNICODE_FRACTIONS:
        return QuantityMatch(qty=whole + UNICODE_FRACTIONS[tokens[1].strip()], consumed=2)

    fraction = _parse_fraction(first)
    if fraction is not None:
        return QuantityMatch(qty=fraction, consumed=1)

    if whole is not None:
        return QuantityMatch(qty=whole, consumed=1)

    raise NoQuantity(f"no quantity in {tokens[0]!r}")


def _parse_number(token: str) -> float | None:
    if not _NUMBER.match(token):
        return None
    value = float(token)
    return value if math.isfinite(value) else None


def _parse_mixed(token: str) -> float | None:
    """Parse ``2½`` style numbers with an attached unicode fraction."""
    match = _ATTACHED_FRACTION.match(token)
    if match is None:
        return None
    return float(match.group(1)) + UNICODE_FRACTIONS[match.group(2)]


def _parse_fraction(token: str) -> float | None:
    parts = token.split("/")
    if len(parts) != 2:
        return None
    numerator = _parse_number(parts[0])
    denominator = _parse_number(parts[1])
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def _parse_amount(token: str) -> float | None:
    """Parse one side of a range."""
    token = token.strip()
    if token in UNICODE_FRACTIONS:
        return UNICODE_FRACTIONS[token]
    for parser in (_parse_mixed, _parse_fraction, _parse_number):
        value = parser(token)
        if value is not None:
            return value
    return None


def _parse_range(tokens: list[str]) -> QuantityMatch | None:
    """Parse ``2-3``, ``2 - 3`` and ``2 to 3`` as the midpoint."""
    first = tokens[0].strip()
    match = _RANGE_TOKEN.match(first)
    if match is not None:
        low = _parse_amount(match.group(1))
        high = _parse_amount(match.group(2))
        if low is not None and high is not None:
            return QuantityMatch(qty=(low + high) / 2, consumed=1)
        return None

    if len(tokens) < 3 or tokens[1].strip().lower() not in _RANGE_SEPARATORS:
        return None
    low = _parse_amount(first)
    high = _parse_amount(tokens[2])
    if low is None or high is None:
        return None
    return QuantityMatch(qty=(low + high) / 2, consumed=3)
