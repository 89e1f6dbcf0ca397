"""Rich display components for the fixturecast CLI."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from fixturecast.config.settings import RateLimitConfig
from fixturecast.models import ModelPredictionResult
from fixturecast.models import PredictionRequest
from fixturecast.models import RateLimitStatus
from fixturecast.models import UnifiedResult
from fixturecast.models import format_wait


def _pct(value: float) -> str:
    return f"{value:g}%"


def result_row(result: ModelPredictionResult) -> tuple[Text, Text, Text, Text]:
    """Format one provider result as table cells."""
    provider = Text(result.provider, style="cyan")
    timing = Text(f"{result.response_time_ms / 1000:.1f}s", style="dim")

    if result.prediction is None:
        return provider, Text("failed", style="red"), Text(result.error or ""), timing

    p = result.prediction
    outcome = Text(
        f"{_pct(p.home_win_probability)} / {_pct(p.draw_probability)} / "
        f"{_pct(p.away_win_probability)}"
    )
    detail = Text(f"{p.predicted_scoreline} ({p.confidence or 'n/a'})")
    return provider, outcome, detail, timing


def display_unified_result(
    console: Console,
    request: PredictionRequest,
    result: UnifiedResult,
    quiet: bool = False,
) -> None:
    """Show a prediction result, with the comparison in dual mode."""
    if quiet:
        for r in result.results():
            state = "ok" if r.success else "failed"
            console.print(f"{request.key} {r.provider}: {state}")
        return

    table = Table(title=request.display_name, show_header=True, header_style="bold")
    table.add_column("Provider")
    table.add_column("Home / Draw / Away")
    table.add_column("Scoreline")
    table.add_column("Time", justify="right")

    for r in result.results():
        table.add_row(*result_row(r))
    console.print(table)

    if result.comparison is not None:
        if result.comparison.agrees_within_tolerance:
            console.print("[green]Providers agree within tolerance[/green]")
        else:
            console.print("[yellow]Providers disagree[/yellow]")
        for difference in result.comparison.differences:
            console.print(f"  [dim]•[/dim] {difference}")


def display_status_table(
    console: Console,
    statuses: dict[str, RateLimitStatus],
    limits: dict[str, RateLimitConfig],
    available: dict[str, bool] | None = None,
    quiet: bool = False,
) -> None:
    """Show rate limit usage for each provider."""
    available = available or {}

    if quiet:
        for provider, status in statuses.items():
            state = "ready" if status.can_admit else f"wait {format_wait(status.wait_time_ms)}"
            console.print(f"{provider}: {state}")
        return

    table = Table(title="Rate Limits", show_header=True, header_style="bold")
    table.add_column("Provider", style="cyan")
    table.add_column("API key")
    table.add_column("This minute", justify="right")
    table.add_column("Today", justify="right")
    table.add_column("Spacing", justify="right", style="dim")
    table.add_column("Status")

    for provider, status in statuses.items():
        limit = limits.get(provider)
        key_cell = (
            Text("✓", style="green") if available.get(provider) else Text("missing", style="red")
        )
        if status.can_admit:
            state = Text("ready", style="green")
        elif status.wait_time_ms:
            state = Text(f"blocked {format_wait(status.wait_time_ms)}", style="yellow")
        else:
            state = Text("at limit", style="yellow")

        table.add_row(
            provider,
            key_cell,
            f"{status.requests_this_minute}/{limit.max_requests_per_minute}" if limit else "-",
            f"{status.requests_today}/{limit.max_requests_per_day}" if limit else "-",
            f"{limit.effective_min_interval_ms / 1000:.1f}s" if limit else "-",
            state,
        )

    console.print(table)
