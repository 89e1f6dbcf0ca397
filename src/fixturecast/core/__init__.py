"""Core orchestration and utilities for fixturecast."""

from fixturecast.core.clock import Clock, SystemClock
from fixturecast.core.compare import (
    MARKET_TOLERANCE,
    MAX_MINOR_DIFFERENCES,
    compare_predictions,
)
from fixturecast.core.http import cleanup, get_http_client, get_timeout_config
from fixturecast.core.limiter import (
    DAY_MS,
    MINUTE_MS,
    RateLimiter,
    RateLimitState,
)
from fixturecast.core.orchestrator import BOTH, Orchestrator, create_orchestrator
from fixturecast.core.retry import RetryDriver, RetryReport
from fixturecast.core.serializer import CallSerializer

__all__ = [
    # clock
    "Clock",
    "SystemClock",
    # http
    "get_http_client",
    "cleanup",
    "get_timeout_config",
    # limiter
    "RateLimiter",
    "RateLimitState",
    "MINUTE_MS",
    "DAY_MS",
    # serializer
    "CallSerializer",
    # compare
    "compare_predictions",
    "MARKET_TOLERANCE",
    "MAX_MINOR_DIFFERENCES",
    # orchestrator
    "BOTH",
    "Orchestrator",
    "create_orchestrator",
    # retry
    "RetryDriver",
    "RetryReport",
]
