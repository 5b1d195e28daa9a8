"""Replay a labeled gold dataset through the resolver and score it."""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ingredient_resolver.services.resolver import IngredientResolver

REQUIRED_COLUMNS = ("id", "raw_line", "expected_food_name", "expected_grams")
SAMPLE_SIZE = 20

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoldRow:
    """One hand-labeled ingredient line."""

    id: str
    raw_line: str
    expected_food_name: str
    expected_grams: float
    expected_food_id_hint: str | None = None


@dataclass(frozen=True)
class RowOutcome:
    """Resolver output for one gold row."""

    id: str
    raw_line: str
    expected_food_name: str
    expected_grams: float
    resolved_food: str | None
    resolved_grams: float | None
    correct: bool
    gram_error: float
    provisional: bool
    provisional_reasons: list[str]
    failure: str | None


@dataclass(frozen=True)
class EvaluationMetrics:
    p_at_1: float
    mae: float
    provisional_rate: float


@dataclass(frozen=True)
class EvaluationResult:
    """Aggregate metrics and per-row outcomes."""

    total: int
    resolved: int
    correct: int
    provisional: int
    metrics: EvaluationMetrics
    outcomes: list[RowOutcome]


def load_gold_csv(path: str | Path) -> list[GoldRow]:
    """Read gold rows; raises ``ValueError`` when required columns are missing.

    Rows without a line or a numeric ``expected_grams`` are skipped with a warning.
    """
    frame = pd.read_csv(path, dtype={"id": str, "raw_line": str, "expected_food_name": str})
    missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise ValueError(f"Gold file {path} is missing columns: {', '.join(missing)}")
    has_hint = "expected_food_id_hint" in frame.columns
    frame["expected_grams"] = pd.to_numeric(frame["expected_grams"], errors="coerce")
    incomplete = frame["expected_grams"].isna() | frame["raw_line"].isna()
    if incomplete.any():
        _logger.warning(
            "Skipping incomplete gold rows: path=%s ids=%s",
            path,
            ", ".join(str(value) for value in frame.loc[incomplete, "id"]),
        )
        frame = frame.loc[~incomplete]

    rows = []
    for record in frame.to_dict(orient="records"):
        hint = record.get("expected_food_id_hint") if has_hint else None
        rows.append(
            GoldRow(
                id=str(record["id"]),
                raw_line=str(record["raw_line"]),
                expected_food_name=str(record["expected_food_name"]),
                expected_grams=float(record["expected_grams"]),
                expected_food_id_hint=None if pd.isna(hint) else str(hint).strip() or None,
            )
        )
    return rows


def matches_expected(display_name: str, row: GoldRow) -> bool:
    """Regex or substring match of the hint, else substring match of the name."""
    haystack = display_name.lower()
    hint = row.expected_food_id_hint
    if hint:
        if "|" in hint or ".*" in hint:
            try:
                return re.search(hint, display_name, flags=re.IGNORECASE) is not None
            except re.error:
                _logger.warning("Invalid gold hint regex: id=%s hint=%s", row.id, hint)
        return hint.lower() in haystack
    return row.expected_food_name.lower() in haystack


async def run_evaluation(resolver: IngredientResolver, rows: list[GoldRow]) -> EvaluationResult:
    """Resolve every gold row in order and aggregate P@1, MAE and provisional rate."""
    outcomes = []
    for row in rows:
        resolution = await resolver.resolve_line(row.raw_line)
        resolved = resolution.resolved
        if resolved is None:
            outcomes.append(
                RowOutcome(
                    id=row.id,
                    raw_line=row.raw_line,
                    expected_food_name=row.expected_food_name,
                    expected_grams=row.expected_grams,
                    resolved_food=None,
                    resolved_grams=None,
                    correct=False,
                    gram_error=abs(row.expected_grams),
                    provisional=False,
                    provisional_reasons=[],
                    failure=resolution.failure.value if resolution.failure else None,
                )
            )
            continue
        display_name = resolved.food.display_name
        gram_error = (
            abs(row.expected_grams)
            if resolved.grams is None
            else abs(resolved.grams - row.expected_grams)
        )
        outcomes.append(
            RowOutcome(
                id=row.id,
                raw_line=row.raw_line,
                expected_food_name=row.expected_food_name,
                expected_grams=row.expected_grams,
                resolved_food=display_name,
                resolved_grams=resolved.grams,
                correct=matches_expected(display_name, row),
                gram_error=gram_error,
                provisional=resolved.provisional,
                provisional_reasons=list(resolved.provisional_reasons),
                failure=None,
            )
        )

    total = len(outcomes)
    resolved_count = sum(1 for outcome in outcomes if outcome.resolved_food is not None)
    correct = sum(1 for outcome in outcomes if outcome.correct)
    provisional = sum(1 for outcome in outcomes if outcome.provisional)
    metrics = EvaluationMetrics(
        p_at_1=correct / total if total else 0.0,
        mae=sum(outcome.gram_error for outcome in outcomes) / total if total else 0.0,
        provisional_rate=provisional / resolved_count if resolved_count else 0.0,
    )
    _logger.info(
        "Evaluation finished: rows=%s p_at_1=%.3f mae=%.2f provisional_rate=%.3f",
        total,
        metrics.p_at_1,
        metrics.mae,
        metrics.provisional_rate,
    )
    return EvaluationResult(
        total=total,
        resolved=resolved_count,
        correct=correct,
        provisional=provisional,
        metrics=metrics,
        outcomes=outcomes,
    )


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def build_report(
    result: EvaluationResult, gold_name: str, now: Callable[[], datetime] = _utc_now
) -> dict[str, object]:
    return {
        "gold": gold_name,
        "timestamp": now().isoformat(),
        "totals": {
            "rows": result.total,
            "resolved": result.resolved,
            "correct": result.correct,
            "provisional": result.provisional,
        },
        "metrics": asdict(result.metrics),
        "samples": [asdict(outcome) for outcome in result.outcomes[:SAMPLE_SIZE]],
    }


def write_report(
    result: EvaluationResult,
    gold_path: str | Path,
    reports_dir: str | Path,
    now: Callable[[], datetime] = _utc_now,
) -> Path:
    """Write ``eval-YYYYMMDD.json`` into ``reports_dir`` and return its path."""
    timestamp = now()
    directory = Path(reports_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"eval-{timestamp:%Y%m%d}.json"
    report = build_report(result, Path(gold_path).name, now=lambda: timestamp)
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    return path
