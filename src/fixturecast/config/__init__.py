"""Configuration management for fixturecast."""

from fixturecast.config.credentials import (
    credential_path,
    has_api_key,
    read_api_key,
)
from fixturecast.config.paths import (
    config_dir,
    config_file,
    credentials_dir,
    ensure_directories,
)
from fixturecast.config.settings import (
    DEFAULT_RATE_LIMITS,
    Config,
    HttpConfig,
    OrchestratorConfig,
    ProviderConfig,
    RateLimitConfig,
    RetryConfig,
    SerializerConfig,
    get_config,
    load_config,
    reload_config,
    save_config,
)

__all__ = [
    # paths
    "config_dir",
    "config_file",
    "credentials_dir",
    "ensure_directories",
    # settings
    "Config",
    "RateLimitConfig",
    "DEFAULT_RATE_LIMITS",
    "ProviderConfig",
    "SerializerConfig",
    "OrchestratorConfig",
    "RetryConfig",
    "HttpConfig",
    "get_config",
    "load_config",
    "reload_config",
    "save_config",
    # credentials
    "credential_path",
    "read_api_key",
    "has_api_key",
]
