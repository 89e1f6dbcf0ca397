"""Predict command for fixturecast."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import msgspec
import typer
from rich.console import Console

from fixturecast.cli.app import ExitCode
from fixturecast.cli.app import app
from fixturecast.cli.display import display_unified_result
from fixturecast.config.settings import get_config
from fixturecast.core.http import cleanup
from fixturecast.core.orchestrator import create_orchestrator
from fixturecast.errors.types import ConfigurationError
from fixturecast.errors.types import ErrorCategory
from fixturecast.models import PredictionRequest
from fixturecast.models import UnifiedResult


def load_requests(path: Path) -> list[PredictionRequest]:
    """Load one request object, or a list of them, from a JSON file.

    Raises:
        OSError: If the file cannot be read
        msgspec.ValidationError: If the content is not a request or list
        ValueError: If two requests share a key
    """
    data = path.read_bytes()
    decoded = msgspec.json.decode(data, type=PredictionRequest | list[PredictionRequest])
    if isinstance(decoded, PredictionRequest):
        return [decoded]

    seen: set[str] = set()
    for request in decoded:
        if request.key in seen:
            raise ValueError(f"Duplicate request key: {request.key}")
        seen.add(request.key)
    return decoded


async def run_predictions(
    requests: list[PredictionRequest],
    mode: str | None = None,
) -> dict[str, UnifiedResult]:
    """Run every request through one orchestrator.

    Requests are submitted together; each provider's queue keeps them in
    order and spaced out.
    """
    config = get_config()
    mode = mode or config.orchestrator.default_mode
    orchestrator = create_orchestrator(config)
    try:
        mode = orchestrator.check_mode(mode)
        results = await asyncio.gather(
            *(orchestrator.get_prediction(r, mode) for r in requests)
        )
    finally:
        await cleanup()
    return {r.key: result for r, result in zip(requests, results)}


def exit_code_for(results: dict[str, UnifiedResult]) -> ExitCode:
    """Pick an exit code from a batch of results."""
    outcomes = [r for unified in results.values() for r in unified.results()]
    failures = [r for r in outcomes if not r.success]
    if not failures:
        return ExitCode.SUCCESS
    if len(failures) < len(outcomes):
        return ExitCode.PARTIAL_FAILURE

    categories = {r.error_category for r in failures}
    if categories == {ErrorCategory.RATE_LIMITED.value}:
        return ExitCode.RATE_LIMITED
    if categories == {ErrorCategory.TRANSIENT_NETWORK.value}:
        return ExitCode.NETWORK_ERROR
    if categories == {ErrorCategory.CONFIGURATION.value}:
        return ExitCode.CONFIG_ERROR
    return ExitCode.GENERAL_ERROR


@app.command("predict")
def predict_command(
    ctx: typer.Context,
    request_file: Path = typer.Argument(
        ..., help="JSON file with a request object or a list of them"
    ),
    mode: str | None = typer.Option(
        None,
        "--mode",
        "-m",
        help="Provider to use (gemini, deepseek) or 'both' to compare",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Request predictions for one or more matches."""
    console = Console()
    quiet = ctx.meta.get("quiet", False)
    verbose = ctx.meta.get("verbose", False)
    json_mode = json_output or ctx.meta.get("json", False)

    try:
        requests = load_requests(request_file)
    except (OSError, ValueError, msgspec.DecodeError) as e:
        console.print(f"[red]Could not read requests:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from e

    start_time = time.monotonic()
    try:
        results = asyncio.run(run_predictions(requests, mode))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from e
    duration_ms = (time.monotonic() - start_time) * 1000

    if json_mode:
        from fixturecast.display.json import output_json_pretty

        output_json_pretty(results)
    else:
        for request in requests:
            display_unified_result(console, request, results[request.key], quiet=quiet)
        if verbose:
            console.print(f"\n[dim]Finished in {duration_ms:.0f}ms[/dim]")

    code = exit_code_for(results)
    if code != ExitCode.SUCCESS:
        raise typer.Exit(code)
