"""Main CLI application for fixturecast."""

from __future__ import annotations

from enum import IntEnum

import typer

# Create the main app
app = typer.Typer(
    name="fixturecast",
    help="Rate-limited football match predictions from LLM providers",
    add_completion=True,
    no_args_is_help=True,
)


class ExitCode(IntEnum):
    """Exit codes for fixturecast."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    RATE_LIMITED = 2
    NETWORK_ERROR = 3
    CONFIG_ERROR = 4
    PARTIAL_FAILURE = 5


def _version_callback(value: bool) -> None:
    if value:
        from fixturecast import __version__

        typer.echo(f"fixturecast {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", "-j", help="Enable JSON output mode"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Enable quiet mode"),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Fixturecast - Football predictions from Gemini and DeepSeek."""
    from fixturecast.log import configure_logging

    # verbose and quiet are mutually exclusive, quiet takes precedence
    if verbose and quiet:
        verbose = False

    ctx.meta["json"] = json
    ctx.meta["verbose"] = verbose
    ctx.meta["quiet"] = quiet

    configure_logging(verbose=verbose, quiet=quiet or json)


def run_app() -> None:
    """Run the CLI app."""
    app()


# Import command modules - they register themselves via @app.command() decorators
from fixturecast.cli.commands import predict  # noqa: E402,F401
from fixturecast.cli.commands import retry  # noqa: E402,F401
from fixturecast.cli.commands import status  # noqa: E402,F401
from fixturecast.cli.commands import config as config_cmd  # noqa: E402

app.add_typer(config_cmd.config_app, name="config")
