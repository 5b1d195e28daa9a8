"""End-to-end resolution of one ingredient line."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ingredient_resolver.domain.foods import PortionOverride
from ingredient_resolver.domain.resolution import (
    LineResolution,
    RankQuery,
    ResolutionFailure,
    ResolvedIngredient,
)
from ingredient_resolver.services.candidates import CandidateSource
from ingredient_resolver.services.ingredient_line import parse_ingredient_line, search_query
from ingredient_resolver.services.plausibility import kcal_band_for_query
from ingredient_resolver.services.portion import resolve_portion
from ingredient_resolver.services.provisional import DEFAULT_THRESHOLD, flag_provisional
from ingredient_resolver.services.ranking import DEFAULT_WEIGHTS, RankingWeights, rank_candidates

_logger = logging.getLogger(__name__)


@dataclass
class IngredientResolver:
    """Parse, search, rank, portion and flag a single ingredient line."""

    candidates: CandidateSource
    weights: RankingWeights = DEFAULT_WEIGHTS
    low_confidence_threshold: float = DEFAULT_THRESHOLD

    async def resolve_line(
        self, line: str, user_overrides: Iterable[PortionOverride] | None = None
    ) -> LineResolution:
        """Resolve a line, reporting why it failed instead of raising."""
        parsed = parse_ingredient_line(line)
        if parsed is None:
            _logger.debug("Unparseable ingredient line: %r", line)
            return LineResolution(
                raw_line=line, parsed=None, failure=ResolutionFailure.PARSE_FAILURE
            )

        query = search_query(parsed)
        found = await self.candidates.find(query, parsed.unit_hint, parsed.qualifiers)
        ranked = rank_candidates(
            found,
            RankQuery(
                query=query,
                unit_hint=parsed.unit_hint,
                qualifiers=parsed.qualifiers,
                kcal_band=kcal_band_for_query(query),
            ),
            self.weights,
        )
        if not ranked:
            _logger.debug("No candidates for ingredient: query=%s", query)
            return LineResolution(
                raw_line=line, parsed=parsed, failure=ResolutionFailure.NO_CANDIDATES
            )

        top = ranked[0]
        portion = resolve_portion(parsed, top.candidate, user_overrides)
        verdict = flag_provisional(top.confidence, portion, self.low_confidence_threshold)
        resolved = ResolvedIngredient(
            food=top.candidate,
            grams=portion.grams,
            confidence=verdict.confidence,
            provisional=verdict.provisional,
            provisional_reasons=verdict.reasons,
            ranking_confidence=top.confidence,
            portion=portion,
        )
        return LineResolution(
            raw_line=line, parsed=parsed, ranked=tuple(ranked), resolved=resolved
        )

    async def resolve(self, line: str) -> ResolvedIngredient | None:
        """Return the resolved ingredient, or None when the line has no match."""
        return (await self.resolve_line(line)).resolved
