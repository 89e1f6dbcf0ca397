"""API key lookup for fixturecast providers."""

from __future__ import annotations

import os
from pathlib import Path

from fixturecast.config.paths import credentials_dir

# Environment variables checked before credential files
API_KEY_ENV_VARS: dict[str, tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "deepseek": ("DEEPSEEK_API_KEY",),
}


def credential_path(provider_id: str) -> Path:
    """Get the path for a provider's API key file."""
    return credentials_dir() / provider_id / "api_key.txt"


def read_api_key(provider_id: str) -> str | None:
    """Load a provider API key from the environment or its credential file.

    Returns:
        The key, or None when none is configured
    """
    for env_var in API_KEY_ENV_VARS.get(provider_id, (f"{provider_id.upper()}_API_KEY",)):
        if api_key := os.environ.get(env_var, "").strip():
            return api_key

    path = credential_path(provider_id)
    if path.exists():
        api_key = path.read_text().strip()
        return api_key or None

    return None


def has_api_key(provider_id: str) -> bool:
    """Check whether a provider has an API key configured."""
    return read_api_key(provider_id) is not None
