"""Retry command: re-request predictions that are missing or incomplete."""

from __future__ import annotations

import asyncio
from pathlib import Path

import msgspec
import typer
from rich.console import Console

from fixturecast.cli.app import ExitCode
from fixturecast.cli.app import app
from fixturecast.cli.commands.predict import load_requests
from fixturecast.config.settings import get_config
from fixturecast.core.http import cleanup
from fixturecast.core.orchestrator import Orchestrator
from fixturecast.core.orchestrator import create_orchestrator
from fixturecast.core.retry import RetryDriver
from fixturecast.core.retry import RetryReport
from fixturecast.errors.types import ConfigurationError
from fixturecast.models import PredictionRequest
from fixturecast.models import UnifiedResult
from fixturecast.models import is_prediction_complete


def load_predictions(path: Path) -> dict[str, dict]:
    """Load stored predictions keyed by request key.

    A missing file means nothing has been predicted yet.
    """
    if not path.exists():
        return {}
    return msgspec.json.decode(path.read_bytes(), type=dict[str, dict])


def save_predictions(path: Path, predictions: dict[str, dict]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(msgspec.json.format(msgspec.json.encode(predictions), indent=2))


async def run_retry(
    requests: list[PredictionRequest],
    predictions: dict[str, dict],
    store: Path,
    *,
    mode: str | None = None,
    delay_ms: float | None = None,
    orchestrator: Orchestrator | None = None,
) -> RetryReport:
    """Retry incomplete predictions and write successes back to `store`."""
    config = get_config()
    orchestrator = orchestrator or create_orchestrator(config)
    driver = RetryDriver(
        orchestrator,
        delay_ms=config.retry.delay_ms if delay_ms is None else delay_ms,
    )

    def is_complete(request: PredictionRequest) -> bool:
        return is_prediction_complete(predictions.get(request.key))

    def on_result(request: PredictionRequest, result: UnifiedResult) -> None:
        prediction = orchestrator.get_best_result(result)
        if prediction is None:
            return
        predictions[request.key] = msgspec.to_builtins(prediction)
        save_predictions(store, predictions)

    try:
        mode = orchestrator.check_mode(mode or config.orchestrator.default_mode)
        return await driver.run(
            requests,
            is_complete,
            mode=mode,
            on_result=on_result,
        )
    finally:
        await cleanup()


@app.command("retry")
def retry_command(
    ctx: typer.Context,
    request_file: Path = typer.Argument(
        ..., help="JSON file with a request object or a list of them"
    ),
    predictions_file: Path = typer.Option(
        ...,
        "--predictions",
        "-p",
        help="JSON file of stored predictions keyed by request key",
    ),
    mode: str | None = typer.Option(
        None,
        "--mode",
        "-m",
        help="Provider to use (gemini, deepseek) or 'both' to compare",
    ),
    delay_ms: int | None = typer.Option(
        None,
        "--delay-ms",
        help="Pause after each attempted item (default from config)",
    ),
) -> None:
    """Re-request predictions that are missing or incomplete, one at a time."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    quiet = ctx.meta.get("quiet", False)

    try:
        requests = load_requests(request_file)
        predictions = load_predictions(predictions_file)
    except (OSError, ValueError, msgspec.DecodeError) as e:
        console.print(f"[red]Could not read input:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from e

    try:
        report = asyncio.run(
            run_retry(requests, predictions, predictions_file, mode=mode, delay_ms=delay_ms)
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from e

    if json_mode:
        from fixturecast.display.json import output_json_pretty

        output_json_pretty(
            {
                "attempted": report.attempted,
                "succeeded": report.succeeded,
                "failed": report.failed,
                "skipped": report.skipped,
            }
        )
    elif not quiet:
        console.print(
            f"Retried [bold]{report.attempted}[/bold] predictions: "
            f"[green]{report.succeeded} succeeded[/green], "
            f"[red]{report.failed} failed[/red], "
            f"[dim]{report.skipped} already complete[/dim]"
        )

    if not report.all_succeeded:
        code = ExitCode.PARTIAL_FAILURE if report.succeeded else ExitCode.GENERAL_ERROR
        raise typer.Exit(code)
