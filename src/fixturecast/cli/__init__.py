"""CLI for fixturecast."""

from fixturecast.cli.app import ExitCode
from fixturecast.cli.app import app
from fixturecast.cli.app import run_app

__all__ = ["app", "run_app", "ExitCode"]
