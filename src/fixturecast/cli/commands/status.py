"""Rate limit status command for fixturecast."""

from __future__ import annotations

import typer
from rich.console import Console

from fixturecast.cli.app import app
from fixturecast.cli.display import display_status_table
from fixturecast.core.orchestrator import create_orchestrator


@app.command("status")
def status_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Show configured quotas, current usage and API key availability."""
    console = Console()
    quiet = ctx.meta.get("quiet", False)

    orchestrator = create_orchestrator()
    statuses = orchestrator.status_all()
    available = orchestrator.available_providers()

    if json_output or ctx.meta.get("json", False):
        from fixturecast.display.json import output_json_pretty

        output_json_pretty(
            {
                provider: {
                    "status": status,
                    "api_key": available.get(provider, False),
                    "limits": orchestrator.limiter.config_for(provider),
                }
                for provider, status in statuses.items()
            }
        )
        return

    limits = {p: orchestrator.limiter.config_for(p) for p in statuses}
    display_status_table(
        console,
        statuses,
        {p: limit for p, limit in limits.items() if limit is not None},
        available,
        quiet=quiet,
    )
