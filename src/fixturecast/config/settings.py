"""Configuration structures and loading for fixturecast."""

import logging
import math
import os
from pathlib import Path

import msgspec

logger = logging.getLogger(__name__)


# Default values
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MAX_WAIT_MS = 120_000
DEFAULT_RETRY_DELAY_MS = 60_000
DEFAULT_OUTCOME_TOLERANCE = 10.0
MIN_INTERVAL_BUFFER_MS = 250


# Rate limit configuration
class RateLimitConfig(msgspec.Struct, frozen=True, omit_defaults=True):
    """Static request quota for one provider."""

    max_requests_per_minute: int
    max_requests_per_day: int
    base_backoff_ms: int
    max_backoff_ms: int
    min_interval_ms: int | None = None

    def __post_init__(self) -> None:
        for name in (
            "max_requests_per_minute",
            "max_requests_per_day",
            "base_backoff_ms",
            "max_backoff_ms",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be greater than 0")
        if self.min_interval_ms is not None and self.min_interval_ms <= 0:
            raise ValueError("min_interval_ms must be greater than 0")
        if (
            self.min_interval_ms is not None
            and self.min_interval_ms < self.rpm_interval_ms
        ):
            logger.warning(
                "min_interval_ms=%d is below 60000/%d rpm; using %dms",
                self.min_interval_ms,
                self.max_requests_per_minute,
                self.rpm_interval_ms,
            )

    @property
    def rpm_interval_ms(self) -> int:
        """Smallest spacing that keeps any 60s span within the RPM cap."""
        return math.ceil(60_000 / self.max_requests_per_minute)

    @property
    def effective_min_interval_ms(self) -> int:
        """Spacing between calls; defaults to spreading the RPM evenly.

        An explicit interval is never allowed below rpm_interval_ms.
        """
        if self.min_interval_ms is not None:
            return max(self.min_interval_ms, self.rpm_interval_ms)
        return self.rpm_interval_ms + MIN_INTERVAL_BUFFER_MS


# Conservative defaults for the lower subscription tiers
DEFAULT_RATE_LIMITS: dict[str, RateLimitConfig] = {
    "gemini": RateLimitConfig(
        max_requests_per_minute=4,
        max_requests_per_day=500,
        base_backoff_ms=1_500,
        max_backoff_ms=90_000,
    ),
    "deepseek": RateLimitConfig(
        max_requests_per_minute=8,
        max_requests_per_day=800,
        base_backoff_ms=2_000,
        max_backoff_ms=120_000,
    ),
}


# Per-provider configuration
class ProviderConfig(msgspec.Struct, omit_defaults=True):
    """Configuration for a specific provider."""

    enabled: bool = True
    model: str | None = None
    limits: RateLimitConfig | None = None


# Serializer configuration
class SerializerConfig(msgspec.Struct, omit_defaults=True):
    """Admission waiting behavior."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    max_wait_ms: int = DEFAULT_MAX_WAIT_MS


# Orchestrator configuration
class OrchestratorConfig(msgspec.Struct, omit_defaults=True):
    """Provider selection and comparison settings."""

    primary: str = "gemini"
    secondary: str = "deepseek"
    default_mode: str = "gemini"
    outcome_tolerance: float = DEFAULT_OUTCOME_TOLERANCE


# Retry driver configuration
class RetryConfig(msgspec.Struct, omit_defaults=True):
    """Batch retry settings."""

    delay_ms: int = DEFAULT_RETRY_DELAY_MS


# HTTP configuration
class HttpConfig(msgspec.Struct, omit_defaults=True):
    """HTTP client settings."""

    timeout: float = DEFAULT_TIMEOUT


# Main configuration
class Config(msgspec.Struct, omit_defaults=True):
    """Main configuration structure."""

    providers: dict[str, ProviderConfig] = msgspec.field(default_factory=dict)
    serializer: SerializerConfig = msgspec.field(default_factory=SerializerConfig)
    orchestrator: OrchestratorConfig = msgspec.field(
        default_factory=OrchestratorConfig
    )
    retry: RetryConfig = msgspec.field(default_factory=RetryConfig)
    http: HttpConfig = msgspec.field(default_factory=HttpConfig)

    def get_provider_config(self, provider_id: str) -> ProviderConfig:
        """Get config for a provider, with defaults."""
        return self.providers.get(provider_id, ProviderConfig())

    def is_provider_enabled(self, provider_id: str) -> bool:
        """Check if a provider is enabled."""
        return self.get_provider_config(provider_id).enabled

    def rate_limit_config(self, provider_id: str) -> RateLimitConfig | None:
        """Get the rate limit for a provider.

        Explicit config wins over built-in defaults. Returns None for providers
        with neither.
        """
        provider_cfg = self.get_provider_config(provider_id)
        if provider_cfg.limits is not None:
            return provider_cfg.limits
        return DEFAULT_RATE_LIMITS.get(provider_id)

    def rate_limits(self) -> dict[str, RateLimitConfig]:
        """Get rate limits for every known provider."""
        provider_ids = list(DEFAULT_RATE_LIMITS) + [
            pid for pid in self.providers if pid not in DEFAULT_RATE_LIMITS
        ]
        limits = {}
        for provider_id in provider_ids:
            if (limit := self.rate_limit_config(provider_id)) is not None:
                limits[provider_id] = limit
        return limits


def _load_from_toml(path: Path) -> dict:
    """Load configuration from TOML file."""
    import tomllib

    if not path.exists():
        return {}

    with path.open("rb") as f:
        return tomllib.load(f)


def _save_to_toml(data: dict, path: Path) -> None:
    """Save configuration to TOML file."""
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)


def convert_config(data: dict) -> Config:
    """Convert raw dict to Config struct."""
    return msgspec.convert(data, type=Config)


def _to_positive_int(value: str | None, fallback: int | None) -> int | None:
    """Parse an environment value, keeping the fallback if it is not > 0."""
    if value is None:
        return fallback
    try:
        number = int(float(value))
    except ValueError:
        return fallback
    return number if number > 0 else fallback


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config.

    FIXTURECAST_<PROVIDER>_RPM: Requests per minute
    FIXTURECAST_<PROVIDER>_DAILY: Requests per day
    FIXTURECAST_<PROVIDER>_MIN_INTERVAL_MS: Minimum spacing between calls
    """
    providers = dict(config.providers)

    for provider_id, limits in config.rate_limits().items():
        prefix = f"FIXTURECAST_{provider_id.upper()}_"
        rpm = _to_positive_int(
            os.environ.get(prefix + "RPM"), limits.max_requests_per_minute
        )
        daily = _to_positive_int(
            os.environ.get(prefix + "DAILY"), limits.max_requests_per_day
        )
        min_interval = _to_positive_int(
            os.environ.get(prefix + "MIN_INTERVAL_MS"), limits.min_interval_ms
        )
        if (rpm, daily, min_interval) == (
            limits.max_requests_per_minute,
            limits.max_requests_per_day,
            limits.min_interval_ms,
        ):
            continue

        # Rebuilt rather than replaced so the interval check runs again
        updated = RateLimitConfig(
            max_requests_per_minute=rpm,
            max_requests_per_day=daily,
            base_backoff_ms=limits.base_backoff_ms,
            max_backoff_ms=limits.max_backoff_ms,
            min_interval_ms=min_interval,
        )
        provider_cfg = config.get_provider_config(provider_id)
        providers[provider_id] = msgspec.structs.replace(provider_cfg, limits=updated)

    return msgspec.structs.replace(config, providers=providers)


# Config state storage
_config: Config | None = None


def get_config() -> Config:
    """Get the current configuration (singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = load_config()
    return _config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file with defaults."""
    from .paths import config_file

    config_path = path or config_file()

    raw_data = _load_from_toml(config_path)
    if not raw_data:
        config = Config()
    else:
        config = convert_config(raw_data)

    return _apply_env_overrides(config)


def config_to_dict(config: Config) -> dict:
    """Convert config to a TOML-ready dict (no None values)."""
    data = msgspec.to_builtins(config)

    def clean_none(d: dict) -> dict:
        return {
            k: clean_none(v) if isinstance(v, dict) else v
            for k, v in d.items()
            if v is not None
        }

    return clean_none(data)


def save_config(config: Config, path: Path | None = None) -> None:
    """Save configuration to file."""
    from .paths import config_file

    config_path = path or config_file()
    _save_to_toml(config_to_dict(config), config_path)

    global _config
    _config = config
