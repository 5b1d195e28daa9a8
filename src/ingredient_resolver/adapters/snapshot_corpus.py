"""Food corpus backed by a JSON snapshot file."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from ingredient_resolver.adapters.food_rows import parse_food_row
from ingredient_resolver.domain.foods import FoodCandidate
from ingredient_resolver.errors import CorpusUnavailableError
from ingredient_resolver.services.candidates import FoodCorpus, sort_candidates
from ingredient_resolver.text import normalize_text

_logger = logging.getLogger(__name__)


@dataclass
class SnapshotFoodCorpus(FoodCorpus):
    """In-memory corpus loaded once from a snapshot for reproducible runs."""

    foods: list[FoodCandidate]

    @classmethod
    def load(cls, path: str | Path) -> "SnapshotFoodCorpus":
        """Load ``[{...}]`` or ``{"foods": [{...}]}`` from a JSON file."""
        snapshot = Path(path)
        try:
            payload = json.loads(snapshot.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CorpusUnavailableError(f"Cannot read corpus snapshot {snapshot}: {exc}") from exc
        rows = payload.get("foods", []) if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise CorpusUnavailableError(f"Corpus snapshot {snapshot} has no food list")
        foods = [parse_food_row(row) for row in rows if isinstance(row, dict) and row.get("id")]
        _logger.info("Loaded corpus snapshot: path=%s foods=%s", snapshot, len(foods))
        return cls(foods=foods)

    def find_candidates(self, tokens: list[str], limit: int) -> list[FoodCandidate]:
        """Best-ranked foods where every token is a substring of name, brand or an alias."""
        if not tokens:
            return []
        matches = []
        for food in self.foods:
            fields = [normalize_text(food.name), normalize_text(food.brand)]
            fields.extend(normalize_text(alias) for alias in food.aliases)
            if all(any(token in field for field in fields) for token in tokens):
                matches.append(food)
        return sort_candidates(matches)[:limit]

    def batch_fetch_aliases(self, food_ids: list[str]) -> dict[str, tuple[str, ...]]:
        wanted = set(food_ids)
        return {food.id: food.aliases for food in self.foods if food.id in wanted and food.aliases}
