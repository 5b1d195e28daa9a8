"""Ranking, portion and resolution results."""

from dataclasses import dataclass, field
from enum import Enum

from ingredient_resolver.domain.foods import FoodCandidate
from ingredient_resolver.domain.parsing import ParsedIngredientLine


@dataclass(frozen=True)
class KcalBand:
    """Plausible kcal-per-100g range for a query."""

    low: float
    high: float


@dataclass(frozen=True)
class RankQuery:
    """Inputs that steer candidate ranking."""

    query: str
    unit_hint: str | None = None
    qualifiers: tuple[str, ...] = field(default_factory=tuple)
    kcal_band: KcalBand | None = None


@dataclass(frozen=True)
class RankedCandidate:
    """A candidate with its score, confidence and per-signal breakdown."""

    candidate: FoodCandidate
    score: float
    confidence: float
    signals: dict[str, float] = field(default_factory=dict, compare=False)


class PortionSource(Enum):
    """Evidence used to convert a quantity into grams."""

    DIRECT_MASS = "direct_mass"
    USER_OVERRIDE = "user_override"
    PORTION_OVERRIDE = "portion_override"
    LABELED_SERVING = "labeled_serving"
    UNIT_TABLE = "unit_table"
    DENSITY = "density"
    HEURISTIC = "heuristic"
    CATEGORY_DEFAULT = "category_default"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class PortionResolution:
    """Gram weight for a parsed line against one food."""

    grams: float | None
    tier: int
    confidence: float
    source: PortionSource
    matched_label: str | None = None
    notes: str | None = None

    @property
    def resolved(self) -> bool:
        return self.grams is not None


@dataclass(frozen=True)
class ProvisionalVerdict:
    """Final trust verdict for a resolution."""

    provisional: bool
    reasons: tuple[str, ...]
    confidence: float


@dataclass(frozen=True)
class ResolvedIngredient:
    """Matched food, grams and trust verdict for one ingredient line."""

    food: FoodCandidate
    grams: float | None
    confidence: float
    provisional: bool
    provisional_reasons: tuple[str, ...]
    ranking_confidence: float
    portion: PortionResolution


class ResolutionFailure(Enum):
    """Why a line produced no resolved ingredient."""

    PARSE_FAILURE = "parse_failure"
    NO_CANDIDATES = "no_candidates"


@dataclass(frozen=True)
class LineResolution:
    """Full trace of resolving one raw ingredient line."""

    raw_line: str
    parsed: ParsedIngredientLine | None
    ranked: tuple[RankedCandidate, ...] = field(default_factory=tuple)
    resolved: ResolvedIngredient | None = None
    failure: ResolutionFailure | None = None
