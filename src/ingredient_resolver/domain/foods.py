"""Food corpus domain models."""

from dataclasses import dataclass, field
from enum import Enum


class Verification(Enum):
    """Trust tier of a corpus food, strongest first."""

    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    SUSPECT = "suspect"

    @property
    def rank(self) -> int:
        """Sort rank where lower is more trusted."""
        return _VERIFICATION_RANK[self]

    @classmethod
    def parse(cls, value: object) -> "Verification":
        """Parse a stored verification value, defaulting to unverified."""
        if isinstance(value, Verification):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNVERIFIED


_VERIFICATION_RANK = {
    Verification.VERIFIED: 0,
    Verification.UNVERIFIED: 1,
    Verification.SUSPECT: 2,
}


class FoodSource(Enum):
    """Where a candidate came from."""

    LOCAL = "local"
    EXTERNAL = "external"


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient profile per 100 g."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


@dataclass(frozen=True)
class FoodServing:
    """A labeled serving declared by the corpus, e.g. ``1 cup`` = 195 g."""

    label: str
    grams: float


@dataclass(frozen=True)
class PortionOverride:
    """Curated or user-provided gram weight for a unit."""

    unit: str
    grams: float
    label: str | None = None


@dataclass(frozen=True)
class FoodCandidate:
    """A food record that may match an ingredient line."""

    id: str
    name: str
    macros: MacroProfile
    brand: str | None = None
    source: FoodSource = FoodSource.LOCAL
    verification: Verification = Verification.UNVERIFIED
    density_gml: float | None = None
    category_id: str | None = None
    popularity: float = 0.0
    aliases: tuple[str, ...] = field(default_factory=tuple)
    barcodes: tuple[str, ...] = field(default_factory=tuple)
    servings: tuple[FoodServing, ...] = field(default_factory=tuple)
    portion_overrides: tuple[PortionOverride, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        """Brand and name joined for display and evaluation."""
        return f"{self.brand} {self.name}".strip() if self.brand else self.name


@dataclass(frozen=True)
class ServingOption:
    """A selectable serving derived from units, density and category."""

    label: str
    grams: float
