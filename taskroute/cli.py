"""taskroute CLI: Typer + Rich terminal interface.

Commands: profiles, providers, recommend, select, stats, record.
All output is Rich-powered tables and panels.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from taskroute import __version__
from taskroute.errors import TaskRouteError
from taskroute.keys import load_keys_env, missing_keys
from taskroute.persistence.store import SQLiteStore
from taskroute.presets import context_for
from taskroute.providers.registry import unknown_candidates
from taskroute.routing.engine import TaskRouter
from taskroute.schemas.performance import TaskPerformanceMetrics
from taskroute.schemas.routing import ModelSelection
from taskroute.schemas.task import (
    Accuracy,
    Complexity,
    CostTier,
    PartialRequirements,
    Speed,
    Urgency,
    Volume,
)

E = TypeVar("E", bound=StrEnum)

DEFAULT_DB_PATH = "~/.taskroute/history.db"

console = Console()

app = typer.Typer(
    name="taskroute",
    help="Pick the right AI model for each CRM analysis task.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"taskroute {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log scoring details to stderr.",
    ),
) -> None:
    """Requirement-aware model routing for CRM tasks."""
    load_keys_env()
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# ── Helpers ──────────────────────────────────────────────────────


def _build_router(store: SQLiteStore | None = None) -> TaskRouter:
    """Load the packaged configuration, exit on error."""
    try:
        return TaskRouter.from_config(store=store)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _parse_option(enum_cls: type[E], value: str, label: str) -> E | None:
    """Convert a CLI string to an enum member; empty means unset."""
    if not value:
        return None
    try:
        return enum_cls(value.lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        console.print(f"[red]Invalid {label}:[/red] '{value}'. Choose from: {choices}")
        raise typer.Exit(1) from None


def _score_style(score: float) -> str:
    if score >= 80:
        return "bold green"
    if score >= 50:
        return "yellow"
    return "red"


def _render_selection(selection: ModelSelection) -> None:
    style = _score_style(selection.confidence_score)
    console.print(Panel(
        f"[bold]{selection.model_key}[/bold]\n"
        f"Score: [{style}]{selection.confidence_score:.1f}[/{style}]  "
        f"Est. cost: ${selection.expected_cost:.5f}  "
        f"Est. latency: {selection.expected_latency:.0f}ms\n\n"
        f"{escape(selection.reasoning)}",
        title="Selected Model",
        border_style="green",
    ))

    table = Table(title="Score Breakdown")
    table.add_column("Step", style="bold", no_wrap=True)
    table.add_column("Kind", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("base", "", f"{selection.breakdown.base_score:g}")
    for adj in selection.breakdown.adjustments:
        value = f"{adj.value:+g}" if adj.kind == "additive" else f"x{adj.value:g}"
        table.add_row(adj.name, adj.kind.value, value)
    table.add_row("final", "", f"{selection.breakdown.final_score:.1f}", style="bold")
    console.print(table)

    if selection.fallback_options:
        fallbacks = Table(title="Fallbacks")
        fallbacks.add_column("#", justify="right", style="dim")
        fallbacks.add_column("Model", style="cyan", no_wrap=True)
        fallbacks.add_column("Reasoning")
        for i, option in enumerate(selection.fallback_options, 1):
            fallbacks.add_row(str(i), option.model_key, escape(option.reasoning))
        console.print(fallbacks)


# ── taskroute profiles ───────────────────────────────────────────


@app.command()
def profiles() -> None:
    """Show every task profile with its default requirements."""
    router = _build_router()

    table = Table(title="Task Profiles", show_lines=True)
    table.add_column("Task Type", style="bold cyan", no_wrap=True)
    table.add_column("Accuracy")
    table.add_column("Speed")
    table.add_column("Cost")
    table.add_column("Complexity")
    table.add_column("Volume")
    table.add_column("Candidates", justify="right")

    for task_type, profile in router.profiles.items():
        req = profile.default_requirements
        table.add_row(
            task_type,
            req.accuracy.value,
            req.speed.value,
            req.cost.value,
            req.complexity.value,
            req.volume.value,
            str(sum(1 for _ in profile.iter_candidates())),
        )

    console.print(table)
    unknown = unknown_candidates(router.providers, router.profiles)
    if unknown:
        console.print(
            f"\n[yellow]Unknown models in profiles:[/yellow] {escape(', '.join(unknown))}"
        )


# ── taskroute providers ──────────────────────────────────────────


@app.command()
def providers() -> None:
    """Show configured providers and whether they can be used."""
    router = _build_router()

    table = Table(title="Providers")
    table.add_column("Provider", style="bold cyan", no_wrap=True)
    table.add_column("Pool")
    table.add_column("Enabled")
    table.add_column("Key Env", style="dim")
    table.add_column("Models", justify="right")
    table.add_column("Status", no_wrap=True)

    for name, cfg in router.providers.items():
        status = "[green]available[/green]" if cfg.is_available else "[red]unavailable[/red]"
        table.add_row(
            name,
            cfg.pool.value,
            "yes" if cfg.enabled else "no",
            cfg.api_key_env or "-",
            str(len(cfg.models)),
            status,
        )

    console.print(table)
    missing = missing_keys(router.providers)
    if missing:
        names = ", ".join(f"{p} ({env})" for p, env in missing.items())
        console.print(f"\n[yellow]Missing credentials:[/yellow] {names}")


# ── taskroute recommend ──────────────────────────────────────────


@app.command()
def recommend(
    task_type: str = typer.Argument(..., help="Task type, e.g. contact_scoring"),
) -> None:
    """Show the static recommendation for a task type (ignores availability)."""
    router = _build_router()
    rec = router.get_task_recommendations(task_type)
    if rec is None:
        console.print(f"[red]Unknown task type:[/red] '{task_type}'")
        console.print(f"[dim]Available: {', '.join(router.profiles)}[/dim]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold]{rec.recommended_provider}/{rec.recommended_model}[/bold]\n{escape(rec.reasoning)}",
        title=f"Recommendation: {task_type}",
        border_style="blue",
    ))
    for alt in rec.alternatives:
        console.print(f"  [cyan]{alt.model_key}[/cyan] [dim]{escape(alt.reasoning)}[/dim]")


# ── taskroute select ─────────────────────────────────────────────


@app.command()
def select(
    task_type: str = typer.Argument(..., help="Task type, e.g. contact_scoring"),
    accuracy: str = typer.Option("", "--accuracy", help="low, medium, high, critical"),
    speed: str = typer.Option("", "--speed", help="slow, medium, fast, realtime"),
    cost: str = typer.Option("", "--cost", help="high, medium, low, free"),
    complexity: str = typer.Option(
        "", "--complexity", help="simple, medium, complex, expert",
    ),
    volume: str = typer.Option("", "--volume", help="single, batch, bulk, streaming"),
    urgency: str = typer.Option(
        "", "--urgency",
        help="low, medium, high, critical; derives requirements from urgency",
    ),
    batch_size: int = typer.Option(1, "--batch-size", min=1, help="Records in this task"),
    db: str = typer.Option(DEFAULT_DB_PATH, "--db", help="Performance history database"),
) -> None:
    """Select the best available model for a task.

    With --urgency, requirements are derived from the urgency level and
    explicit requirement flags still win.
    """
    context = context_for(
        task_type,
        urgency=_parse_option(Urgency, urgency, "urgency"),
        overrides=PartialRequirements(
            accuracy=_parse_option(Accuracy, accuracy, "accuracy"),
            speed=_parse_option(Speed, speed, "speed"),
            cost=_parse_option(CostTier, cost, "cost"),
            complexity=_parse_option(Complexity, complexity, "complexity"),
            volume=_parse_option(Volume, volume, "volume"),
        ),
        batch_size=batch_size,
    )

    async def _select() -> ModelSelection:
        async with SQLiteStore(db) as store:
            router = _build_router(store)
            return await router.select_optimal_model(context)

    try:
        selection = asyncio.run(_select())
    except TaskRouteError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    _render_selection(selection)


# ── taskroute stats ──────────────────────────────────────────────


@app.command()
def stats(
    db: str = typer.Option(DEFAULT_DB_PATH, "--db", help="Performance history database"),
) -> None:
    """Show recorded task performance per model."""

    async def _stats():
        async with SQLiteStore(db) as store:
            router = _build_router(store)
            await router.tracker.load()
            return router.get_performance_stats()

    result = asyncio.run(_stats())

    if result.total_tasks == 0:
        console.print("[dim]No task outcomes recorded yet.[/dim]")
        return

    console.print(
        f"[bold]{result.total_tasks}[/bold] tasks, "
        f"success rate [bold]{result.overall_success_rate:.1%}[/bold], "
        f"avg response [bold]{result.avg_response_time:.0f}ms[/bold]"
    )

    table = Table(title="Model Performance")
    table.add_column("Model", style="bold cyan", no_wrap=True)
    table.add_column("Samples", justify="right")
    table.add_column("Success", justify="right")
    table.add_column("Avg Time", justify="right")
    table.add_column("Avg Cost", justify="right")

    for perf in sorted(result.model_performance, key=lambda p: p.model):
        table.add_row(
            perf.model,
            str(perf.samples),
            f"{perf.success_rate:.1%}",
            f"{perf.avg_time:.0f}ms",
            f"${perf.avg_cost:.5f}",
        )
    console.print(table)


# ── taskroute record ─────────────────────────────────────────────


@app.command()
def record(
    task_type: str = typer.Argument(..., help="Task type the outcome belongs to"),
    model_key: str = typer.Argument(..., help="provider/model that ran the task"),
    time_ms: float = typer.Option(..., "--time", min=0, help="Execution time in ms"),
    cost: float = typer.Option(0.0, "--cost", min=0, help="Actual cost in USD"),
    accuracy: float = typer.Option(0.8, "--accuracy", min=0, max=1, help="Accuracy estimate"),
    failed: bool = typer.Option(False, "--failed", help="Mark the task as failed"),
    db: str = typer.Option(DEFAULT_DB_PATH, "--db", help="Performance history database"),
) -> None:
    """Record a task outcome so future selections adapt."""
    if "/" not in model_key:
        console.print(f"[red]Model key must be provider/model:[/red] '{model_key}'")
        raise typer.Exit(1)

    metrics = TaskPerformanceMetrics(
        task_type=task_type,
        model_used=model_key,
        execution_time=time_ms,
        accuracy=accuracy,
        cost=cost,
        success=not failed,
    )

    async def _record() -> int:
        async with SQLiteStore(db) as store:
            router = _build_router(store)
            await router.record_task_performance(metrics)
            return router.get_performance_stats().total_tasks

    total = asyncio.run(_record())
    outcome = "[red]failure[/red]" if failed else "[green]success[/green]"
    console.print(f"Recorded {outcome} for {model_key} ({total} tasks in history)")
