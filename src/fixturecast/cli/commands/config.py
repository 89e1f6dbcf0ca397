"""Config management commands for fixturecast."""

from __future__ import annotations

import tomli_w
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from fixturecast.config.paths import config_dir
from fixturecast.config.paths import config_file
from fixturecast.config.paths import credentials_dir
from fixturecast.config.settings import Config
from fixturecast.config.settings import config_to_dict
from fixturecast.config.settings import get_config

config_app = typer.Typer(help="Manage configuration settings.")


def effective_config_dict(config: Config) -> dict:
    """Config as a dict, with the rate limits actually in effect filled in."""
    data = config_to_dict(config)
    providers = data.setdefault("providers", {})
    for provider_id, limits in config.rate_limits().items():
        provider = providers.setdefault(provider_id, {})
        provider["limits"] = config_to_dict(limits)
    return data


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Display current settings, including effective rate limits."""
    console = Console()

    config = get_config()
    config_path = config_file()
    json_mode = ctx.meta.get("json", False)
    verbose = ctx.meta.get("verbose", False)
    quiet = ctx.meta.get("quiet", False)

    data = effective_config_dict(config)

    if json_mode:
        from fixturecast.display.json import output_json_pretty

        output_json_pretty({**data, "path": str(config_path)})
        return

    if quiet:
        console.print(str(config_path))
        return

    console.print(
        Panel(Syntax(tomli_w.dumps(data), "toml"), title=f"Config: {config_path}")
    )

    if verbose:
        if config_path.exists():
            console.print(f"[dim]File size: {config_path.stat().st_size} bytes[/dim]")
        else:
            console.print(
                "[dim]Using default configuration (file not created yet)[/dim]"
            )


@config_app.command("path")
def config_path_command(
    ctx: typer.Context,
    credentials: bool = typer.Option(
        False, "--credentials", "-r", help="Show credentials directory"
    ),
) -> None:
    """Show directory paths used by fixturecast."""
    console = Console()
    json_mode = ctx.meta.get("json", False)

    if json_mode:
        from fixturecast.display.json import output_json_pretty

        if credentials:
            output_json_pretty({"credentials_dir": str(credentials_dir())})
        else:
            output_json_pretty(
                {
                    "config_dir": str(config_dir()),
                    "config_file": str(config_file()),
                    "credentials_dir": str(credentials_dir()),
                }
            )
        return

    console.print(str(credentials_dir() if credentials else config_dir()))
