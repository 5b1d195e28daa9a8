"""Provisional flagging for resolved ingredients."""

from ingredient_resolver.domain.resolution import PortionResolution, PortionSource, ProvisionalVerdict

LOW_MATCH_CONFIDENCE = "low match confidence"
NO_LABELED_SERVING = "no labeled serving matched unit"
DENSITY_FALLBACK = "density fallback used"
CATEGORY_DEFAULT = "category default used"
PORTION_UNRESOLVED = "portion unresolved"

DEFAULT_THRESHOLD = 0.5


def flag_provisional(
    ranking_confidence: float,
    portion: PortionResolution,
    threshold: float = DEFAULT_THRESHOLD,
) -> ProvisionalVerdict:
    """Merge match confidence and portion evidence into a trust verdict."""
    reasons: list[str] = []
    if ranking_confidence < threshold:
        reasons.append(LOW_MATCH_CONFIDENCE)
    if portion.tier != 1:
        reasons.append(NO_LABELED_SERVING)
    if portion.source is PortionSource.DENSITY:
        reasons.append(DENSITY_FALLBACK)
    if portion.tier == 4:
        reasons.append(CATEGORY_DEFAULT)
    if portion.grams is None:
        reasons.append(PORTION_UNRESOLVED)

    return ProvisionalVerdict(
        provisional=bool(reasons),
        reasons=tuple(reasons),
        confidence=min(ranking_confidence, portion.confidence),
    )
