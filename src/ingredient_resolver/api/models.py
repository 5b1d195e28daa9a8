"""Pydantic models for the resolution API."""

from pydantic import BaseModel, Field

from ingredient_resolver.domain.foods import FoodCandidate, PortionOverride, ServingOption
from ingredient_resolver.domain.resolution import LineResolution, RankedCandidate


class PortionOverridePayload(BaseModel):
    """User-provided grams for a unit."""

    unit: str = Field(min_length=1)
    grams: float = Field(gt=0)
    label: str | None = None

    def to_domain(self) -> PortionOverride:
        return PortionOverride(unit=self.unit, grams=self.grams, label=self.label)


class ResolveRequest(BaseModel):
    """Body of ``POST /resolve``."""

    line: str
    user_overrides: list[PortionOverridePayload] | None = None


class MacroPayload(BaseModel):
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


class FoodPayload(BaseModel):
    """Food record as returned to clients."""

    id: str
    name: str
    brand: str | None = None
    source: str
    verification: str
    category_id: str | None = None
    macros_per_100g: MacroPayload

    @classmethod
    def from_domain(cls, food: FoodCandidate) -> "FoodPayload":
        return cls(
            id=food.id,
            name=food.name,
            brand=food.brand,
            source=food.source.value,
            verification=food.verification.value,
            category_id=food.category_id,
            macros_per_100g=MacroPayload(
                calories=food.macros.calories,
                protein_g=food.macros.protein_g,
                fat_g=food.macros.fat_g,
                carbs_g=food.macros.carbs_g,
            ),
        )


class ServingOptionPayload(BaseModel):
    label: str
    grams: float

    @classmethod
    def from_domain(cls, option: ServingOption) -> "ServingOptionPayload":
        return cls(label=option.label, grams=round(option.grams, 2))


class ParsedLinePayload(BaseModel):
    qty: float
    multiplier: float
    unit: str | None = None
    unit_kind: str | None = None
    raw_unit_text: str | None = None
    name: str
    unit_hint: str | None = None
    qualifiers: list[str] = Field(default_factory=list)


class PortionPayload(BaseModel):
    grams: float | None = None
    tier: int
    confidence: float
    source: str
    matched_label: str | None = None
    notes: str | None = None


class ResolveResponse(BaseModel):
    """Resolved ingredient with its trust verdict."""

    status: str = "resolved"
    line: str
    parsed: ParsedLinePayload
    food: FoodPayload
    grams: float | None = None
    confidence: float
    ranking_confidence: float
    provisional: bool
    provisional_reasons: list[str]
    portion: PortionPayload

    @classmethod
    def from_resolution(cls, resolution: LineResolution) -> "ResolveResponse":
        parsed = resolution.parsed
        resolved = resolution.resolved
        if parsed is None or resolved is None:
            raise ValueError("resolution has no resolved ingredient")
        portion = resolved.portion
        return cls(
            line=resolution.raw_line,
            parsed=ParsedLinePayload(
                qty=parsed.qty,
                multiplier=parsed.multiplier,
                unit=parsed.unit,
                unit_kind=parsed.unit_kind.value if parsed.unit_kind else None,
                raw_unit_text=parsed.raw_unit_text,
                name=parsed.name,
                unit_hint=parsed.unit_hint,
                qualifiers=list(parsed.qualifiers),
            ),
            food=FoodPayload.from_domain(resolved.food),
            grams=None if resolved.grams is None else round(resolved.grams, 2),
            confidence=round(resolved.confidence, 4),
            ranking_confidence=round(resolved.ranking_confidence, 4),
            provisional=resolved.provisional,
            provisional_reasons=list(resolved.provisional_reasons),
            portion=PortionPayload(
                grams=None if portion.grams is None else round(portion.grams, 2),
                tier=portion.tier,
                confidence=portion.confidence,
                source=portion.source.value,
                matched_label=portion.matched_label,
                notes=portion.notes,
            ),
        )


class UnresolvedResponse(BaseModel):
    status: str = "unresolved"
    line: str
    reason: str


class SearchResult(BaseModel):
    """One ranked candidate in a food search."""

    food: FoodPayload
    score: float
    confidence: float
    serving_options: list[ServingOptionPayload]

    @classmethod
    def from_ranked(
        cls, ranked: RankedCandidate, options: list[ServingOption]
    ) -> "SearchResult":
        return cls(
            food=FoodPayload.from_domain(ranked.candidate),
            score=round(ranked.score, 4),
            confidence=round(ranked.confidence, 4),
            serving_options=[ServingOptionPayload.from_domain(option) for option in options],
        )


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult]
