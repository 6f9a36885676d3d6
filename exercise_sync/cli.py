"""Command line interface for the exercise log.

Resolution state lives in memory only, so `resolve` runs a local
reconciliation pass first and applies the choice to the first group.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from exercise_sync.bootstrap import build_pipeline
from exercise_sync.config.settings import settings
from exercise_sync.core.logger import setup_logger
from exercise_sync.errors import InvalidSurvivorError, ManualEntryError
from exercise_sync.reconciliation.conflicts import ConflictGroup
from exercise_sync.reconciliation.pipeline import SyncResult, SyncStatus
from exercise_sync.records.manual import ManualEntry
from exercise_sync.records.models import ExerciseRecord

console = Console()

app = typer.Typer(
    name="exercise-sync",
    help="Log exercise sessions and reconcile them with device health data",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    debug_step: Optional[List[str]] = typer.Option(None, "--debug-step", help="Log one pipeline step (SYNC, DEDUP, CONFLICTS, RESOLUTION, STORE) at debug level"),
) -> None:
    setup_logger(
        level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        debug_steps=debug_step or (),
    )


def _records_table(records: list[ExerciseRecord], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Type")
    table.add_column("Start")
    table.add_column("Minutes", justify="right")
    table.add_column("Source")
    table.add_column("Distance (km)", justify="right")
    table.add_column("Calories", justify="right")
    table.add_column("Notes")
    for record in records:
        table.add_row(
            record.id,
            record.exercise_type.value,
            record.start_time.strftime("%Y-%m-%d %H:%M"),
            str(record.duration_minutes),
            record.source.display_name,
            "" if record.distance_km is None else f"{record.distance_km:g}",
            "" if record.calories is None else str(record.calories),
            record.notes or "",
        )
    return table


def _print_group(group: ConflictGroup | None) -> None:
    if group is None:
        console.print("[green]No conflicts[/green]")
        return
    console.print(_records_table(list(group), title="Overlapping exercises - keep one"))


def _print_result(result: SyncResult) -> None:
    console.print(
        f"Synced: fetched={result.fetched_count} stored={len(result.records)} "
        f"duplicates_dropped={len(result.discarded_ids)} conflict_groups={len(result.groups)}"
    )
    if result.fetch_failed:
        console.print("[yellow]Could not read provider data; reconciled stored records only[/yellow]")
    _print_group(result.current_group)


@app.command()
def sync() -> None:
    """Fetch the trailing window from the provider and reconcile."""
    result = asyncio.run(build_pipeline(settings).sync())
    if result.status is SyncStatus.UNAVAILABLE:
        console.print("[yellow]Provider unavailable; nothing synced[/yellow]")
        return
    if result.status is SyncStatus.NEEDS_AUTHORIZATION:
        console.print("[red]Provider access has not been granted[/red]")
        raise typer.Exit(code=2)
    _print_result(result)


@app.command(name="list")
def list_exercises() -> None:
    """Show every stored exercise, newest first."""
    records = asyncio.run(build_pipeline(settings).store.list_all())
    console.print(_records_table(records, title="Exercises"))


@app.command()
def add(
    exercise_type: str = typer.Argument(..., help="Running, Walking, Swimming, Yoga, Hiking or Other"),
    duration: str = typer.Argument(..., help="Duration in minutes"),
    start: Optional[datetime] = typer.Option(None, "--start", help="Start time (defaults to now)"),
    distance: Optional[str] = typer.Option(None, "--distance", help="Distance in km"),
    calories: Optional[str] = typer.Option(None, "--calories"),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """Log an exercise manually."""
    entry = ManualEntry(
        exercise_type=exercise_type,
        duration_minutes=duration,
        start_time=start,
        distance_km=distance,
        calories=calories,
        notes=notes,
    )
    try:
        record, result = asyncio.run(build_pipeline(settings).add_manual(entry))
    except ManualEntryError as e:
        for field, message in e.field_errors.items():
            console.print(f"[red]{field}: {message}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"Saved {record.describe()}")
    _print_group(result.current_group)


@app.command()
def conflicts() -> None:
    """Show the first group of overlapping exercises."""
    result = asyncio.run(build_pipeline(settings).refresh())
    console.print(f"{len(result.groups)} conflict group(s)")
    _print_group(result.current_group)


@app.command()
def resolve(survivor_id: str = typer.Argument(..., help="ID of the exercise to keep")) -> None:
    """Keep one exercise of the first conflict group and delete the others."""

    async def _resolve():
        pipeline = build_pipeline(settings)
        result = await pipeline.refresh()
        if result.current_group is None:
            return None, None
        decision = await pipeline.resolve(survivor_id)
        return decision, pipeline.session.current_group

    try:
        decision, next_group = asyncio.run(_resolve())
    except InvalidSurvivorError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    if decision is None:
        console.print("[green]No conflicts to resolve[/green]")
        return
    console.print(f"Kept {decision.survivor_id}, deleted {', '.join(decision.deleted_ids)}")
    _print_group(next_group)


@app.command()
def delete(
    record_id: Optional[str] = typer.Argument(None, help="ID of the exercise to delete"),
    all_records: bool = typer.Option(False, "--all", help="Delete every stored exercise"),
) -> None:
    """Delete one exercise, or all of them with --all."""
    pipeline = build_pipeline(settings)
    if all_records:
        asyncio.run(pipeline.delete_all())
        console.print("Deleted all exercises")
        return
    if record_id is None:
        console.print("[red]Pass an exercise ID or --all[/red]")
        raise typer.Exit(code=1)
    asyncio.run(pipeline.delete_record(record_id))
    console.print(f"Deleted {record_id}")


if __name__ == "__main__":
    app()
