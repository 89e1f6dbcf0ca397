"""CLI commands for fixturecast."""
