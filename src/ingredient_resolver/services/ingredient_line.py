"""Free-text ingredient line parser."""

import logging
import re

from ingredient_resolver.domain.parsing import MEASURE_KINDS, ParsedIngredientLine, UnitKind
from ingredient_resolver.errors import ParseFailure
from ingredient_resolver.services.qualifiers import (
    core_name_tokens,
    extract_qualifiers,
    extract_unit_hint,
)
from ingredient_resolver.services.quantity import parse_quantity
from ingredient_resolver.services.units import normalize_unit_token

_UNICODE_SPACES = re.compile("[\u2009\u00a0\u2000\u2001\u2002\u2003\u202f]")
_UNIT_LOOKAHEAD = 2

_logger = logging.getLogger(__name__)


def parse_ingredient_line(line: str | None) -> ParsedIngredientLine | None:
    """Parse ``"1 1/2 cups flour"`` style lines; None when unparseable."""
    if not line or not line.strip():
        return None
    tokens = _UNICODE_SPACES.sub(" ", line).split()
    if not tokens:
        return None

    try:
        quantity = parse_quantity(tokens)
    except ParseFailure as exc:
        _logger.debug("Ingredient line has no quantity: line=%r reason=%s", line, exc)
        return None
    if quantity.qty <= 0:
        return None

    index = quantity.consumed
    multiplier = 1.0
    unit: str | None = None
    kind: UnitKind | None = None
    raw_unit_text: str | None = None

    if index < len(tokens):
        token = tokens[index]
        normalized = normalize_unit_token(token)
        if normalized.kind is UnitKind.MULTIPLIER:
            multiplier *= normalized.factor or 1.0
            index += 1
            for offset in range(_UNIT_LOOKAHEAD):
                position = index + offset
                if position >= len(tokens):
                    break
                candidate = normalize_unit_token(tokens[position])
                if candidate.kind in MEASURE_KINDS:
                    unit, kind, raw_unit_text = candidate.unit, candidate.kind, tokens[position]
                    # A unit that is also the last token stays in the name.
                    if position + 1 < len(tokens):
                        index = position + 1
                    break
        elif normalized.kind in MEASURE_KINDS:
            unit, kind, raw_unit_text = normalized.unit, normalized.kind, token
            if index + 1 < len(tokens):
                index += 1
        else:
            raw_unit_text = token
            index += 1

    name = " ".join(tokens[index:]).strip()
    if not name:
        _logger.debug("Ingredient line has no name: line=%r", line)
        return None

    return ParsedIngredientLine(
        qty=quantity.qty,
        multiplier=multiplier,
        unit=unit,
        unit_kind=kind,
        raw_unit_text=raw_unit_text,
        name=name,
        unit_hint=extract_unit_hint(name, raw_unit_text),
        qualifiers=extract_qualifiers(name, raw_unit_text if kind is None else None),
    )


def search_query(parsed: ParsedIngredientLine) -> str:
    """Return the core food name used for candidate lookup and ranking."""
    return " ".join(core_name_tokens(parsed.name, parsed.unit_hint))
