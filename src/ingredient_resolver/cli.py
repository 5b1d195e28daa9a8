"""Command-line entrypoint for the gold-set evaluation harness.

Usage:
    ingredient-resolver-eval --gold data/gold.csv --corpus data/corpus.json
    ingredient-resolver-eval --gold data/gold.csv --reports reports --verbose
"""

import argparse
import asyncio
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ingredient_resolver.app_logging import configure_logging
from ingredient_resolver.config import Settings
from ingredient_resolver.containers import build_container
from ingredient_resolver.errors import CorpusUnavailableError
from ingredient_resolver.evaluation import (
    EvaluationResult,
    load_gold_csv,
    run_evaluation,
    write_report,
)

console = Console()


def _print_summary(result: EvaluationResult, report_path: Path) -> None:
    table = Table(show_header=True, header_style="bold", padding=(0, 1))
    table.add_column("Metric", min_width=18)
    table.add_column("Value", justify="right", min_width=10)
    table.add_row("Rows", str(result.total))
    table.add_row("Resolved", str(result.resolved))
    table.add_row("P@1", f"{result.metrics.p_at_1:.3f}")
    table.add_row("MAE (g)", f"{result.metrics.mae:.2f}")
    table.add_row("Provisional rate", f"{result.metrics.provisional_rate:.3f}")
    console.print(table)

    misses = [outcome for outcome in result.outcomes if not outcome.correct]
    if misses:
        console.print(f"\n[yellow]Misses ({len(misses)}):[/yellow]")
        for outcome in misses[:10]:
            found = outcome.resolved_food or f"[red]{outcome.failure or 'unresolved'}[/red]"
            console.print(f"  [dim]{outcome.id}[/dim] {outcome.raw_line} -> {found}")
    console.print(f"\n[dim]Report written to {report_path}[/dim]")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay a gold ingredient dataset and report P@1, MAE and provisional rate",
    )
    parser.add_argument("--gold", required=True, help="Path to the gold CSV file")
    parser.add_argument(
        "--corpus",
        default=None,
        help="Corpus snapshot JSON (default: configured corpus)",
    )
    parser.add_argument("--reports", default="reports", help="Directory for JSON reports")
    parser.add_argument(
        "--with-external",
        action="store_true",
        help="Allow FDC lookups (results then depend on the live API)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    overrides: dict[str, object] = {}
    if args.corpus:
        overrides.update(corpus_snapshot_path=args.corpus, supabase_url=None)
    if not args.with_external:
        overrides["fdc_api_key"] = None
    settings = Settings(**overrides)

    try:
        rows = load_gold_csv(args.gold)
        container = build_container(settings)
    except (OSError, ValueError, CorpusUnavailableError) as exc:
        console.print(f"[red]{exc}[/red]")
        return 1

    console.print(f"[bold]Ingredient resolver evaluation[/bold]  ({len(rows)} rows)\n")

    async def _run() -> EvaluationResult:
        try:
            return await run_evaluation(container.resolver, rows)
        finally:
            await container.close_resources()

    result = asyncio.run(_run())
    report_path = write_report(result, args.gold, args.reports)
    _print_summary(result, report_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
