"""Supabase implementation of the food corpus."""

from dataclasses import dataclass

from supabase import Client

from ingredient_resolver.adapters.food_rows import parse_food_row
from ingredient_resolver.domain.foods import FoodCandidate
from ingredient_resolver.services.candidates import FoodCorpus, sort_candidates

_FOOD_COLUMNS = (
    "*, food_units(label, grams), food_barcodes(gtin), portion_overrides(unit, grams, label)"
)


@dataclass
class SupabaseFoodRepository(FoodCorpus):
    """Supabase-backed food corpus."""

    client: Client

    def find_candidates(self, tokens: list[str], limit: int) -> list[FoodCandidate]:
        """Foods whose name or brand contains every token, plus alias hits."""
        if not tokens:
            return []
        query = self.client.table("foods").select(_FOOD_COLUMNS)
        for token in tokens:
            query = query.or_(f"name.ilike.%{token}%,brand.ilike.%{token}%")
        response = query.order("popularity", desc=True).limit(limit).execute()
        foods = [parse_food_row(row) for row in response.data or []]

        known = {food.id for food in foods}
        alias_ids = [food_id for food_id in self._alias_matches(tokens, limit) if food_id not in known]
        if alias_ids:
            alias_response = (
                self.client.table("foods")
                .select(_FOOD_COLUMNS)
                .in_("id", alias_ids)
                .execute()
            )
            foods.extend(parse_food_row(row) for row in alias_response.data or [])
        return sort_candidates(foods)[:limit]

    def batch_fetch_aliases(self, food_ids: list[str]) -> dict[str, tuple[str, ...]]:
        """Return aliases for the given foods."""
        if not food_ids:
            return {}
        response = (
            self.client.table("food_aliases")
            .select("food_id, alias")
            .in_("food_id", food_ids)
            .execute()
        )
        aliases: dict[str, list[str]] = {}
        for row in response.data or []:
            if row.get("alias"):
                aliases.setdefault(str(row["food_id"]), []).append(str(row["alias"]))
        return {food_id: tuple(values) for food_id, values in aliases.items()}

    def _alias_matches(self, tokens: list[str], limit: int) -> list[str]:
        response = (
            self.client.table("food_aliases")
            .select("food_id, alias")
            .ilike("alias", f"%{tokens[0]}%")
            .limit(limit)
            .execute()
        )
        matches: list[str] = []
        for row in response.data or []:
            alias = str(row.get("alias") or "").lower()
            food_id = str(row["food_id"])
            if all(token in alias for token in tokens) and food_id not in matches:
                matches.append(food_id)
        return matches
