"""Candidate lookup across the local corpus and FDC."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Protocol

from ingredient_resolver.domain.foods import FoodCandidate
from ingredient_resolver.services.external_search import FdcSearchService
from ingredient_resolver.text import normalize_text, query_tokens

_logger = logging.getLogger(__name__)

# Corpus rows fetched per kept candidate; storage order is not trust order.
CORPUS_OVERFETCH = 4


class FoodCorpus(Protocol):
    """Read-only access to the food corpus."""

    def find_candidates(self, tokens: list[str], limit: int) -> list[FoodCandidate]:
        """Return foods whose name, brand or alias contains every token."""

    def batch_fetch_aliases(self, food_ids: list[str]) -> dict[str, tuple[str, ...]]:
        """Return aliases keyed by food id."""


@dataclass
class CandidateSource:
    """Bounded, de-duplicated candidate lists for a query."""

    corpus: FoodCorpus
    external: FdcSearchService | None = None
    candidate_limit: int = 50
    external_min_local: int = 3
    external_page_size: int = 10

    async def find(
        self,
        query: str,
        unit_hint: str | None = None,
        qualifiers: Iterable[str] = (),
    ) -> list[FoodCandidate]:
        """Return candidates for ``query`` pre-sorted by trust then popularity."""
        tokens = query_tokens(query)
        if not tokens:
            return []

        local = self.corpus.find_candidates(tokens, self.candidate_limit * CORPUS_OVERFETCH)
        local = self._attach_aliases(local)

        external: list[FoodCandidate] = []
        if len(local) < self.external_min_local and self.external is not None:
            found = await self.external.search(" ".join(tokens), self.external_page_size)
            external = found or []

        candidates = sort_candidates(_dedupe([*local, *external]))[: self.candidate_limit]
        _logger.debug(
            "Candidates: query=%s hint=%s qualifiers=%s local=%s external=%s kept=%s",
            query,
            unit_hint,
            list(qualifiers),
            len(local),
            len(external),
            len(candidates),
        )
        return candidates

    def _attach_aliases(self, candidates: list[FoodCandidate]) -> list[FoodCandidate]:
        missing = [candidate.id for candidate in candidates if not candidate.aliases]
        if not missing:
            return candidates
        aliases = self.corpus.batch_fetch_aliases(missing)
        return [
            replace(candidate, aliases=aliases[candidate.id])
            if not candidate.aliases and aliases.get(candidate.id)
            else candidate
            for candidate in candidates
        ]


def _dedupe(candidates: list[FoodCandidate]) -> list[FoodCandidate]:
    """Drop repeats by id and by normalized (brand, name); first one wins."""
    seen_ids: set[str] = set()
    seen_names: set[tuple[str, str]] = set()
    unique: list[FoodCandidate] = []
    for candidate in candidates:
        name_key = (normalize_text(candidate.brand), normalize_text(candidate.name))
        if candidate.id in seen_ids or name_key in seen_names:
            continue
        seen_ids.add(candidate.id)
        seen_names.add(name_key)
        unique.append(candidate)
    return unique


def sort_candidates(candidates: list[FoodCandidate]) -> list[FoodCandidate]:
    """Order by verification tier, then popularity, then id."""
    return sorted(
        candidates,
        key=lambda candidate: (
            candidate.verification.rank,
            -candidate.popularity,
            candidate.id,
        ),
    )
