"""Domain models for parsed ingredient lines."""

from dataclasses import dataclass, field
from enum import Enum


class UnitKind(Enum):
    """Classification of a single unit token."""

    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"
    MULTIPLIER = "multiplier"
    UNKNOWN = "unknown"


MEASURE_KINDS = frozenset({UnitKind.MASS, UnitKind.VOLUME, UnitKind.COUNT})


@dataclass(frozen=True)
class NormalizedUnit:
    """Result of normalizing one unit token."""

    kind: UnitKind
    unit: str | None = None
    factor: float | None = None
    raw: str | None = None

    @property
    def is_measure(self) -> bool:
        """Return True for mass, volume and count units."""
        return self.kind in MEASURE_KINDS


@dataclass(frozen=True)
class QuantityMatch:
    """Parsed quantity and the number of tokens it consumed."""

    qty: float
    consumed: int


@dataclass(frozen=True)
class ParsedIngredientLine:
    """Structured parse of a free-text ingredient line."""

    qty: float
    name: str
    multiplier: float = 1.0
    unit: str | None = None
    unit_kind: UnitKind | None = None
    raw_unit_text: str | None = None
    unit_hint: str | None = None
    qualifiers: tuple[str, ...] = field(default_factory=tuple)

    @property
    def effective_qty(self) -> float:
        """Quantity after applying the multiplier."""
        return self.qty * self.multiplier
