"""Orchestration of single and dual provider predictions."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from typing import Mapping

from fixturecast.config.settings import Config
from fixturecast.config.settings import DEFAULT_OUTCOME_TOLERANCE
from fixturecast.core.clock import Clock
from fixturecast.core.clock import SystemClock
from fixturecast.core.compare import compare_predictions
from fixturecast.core.limiter import RateLimiter
from fixturecast.core.serializer import CallSerializer
from fixturecast.errors.classify import classify_exception
from fixturecast.errors.messages import user_facing_message
from fixturecast.errors.types import ConfigurationError
from fixturecast.errors.types import PredictionUnavailableError
from fixturecast.models import ModelPredictionResult
from fixturecast.models import Prediction
from fixturecast.models import PredictionRequest
from fixturecast.models import RateLimitStatus
from fixturecast.models import UnifiedResult

if TYPE_CHECKING:
    from fixturecast.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

BOTH = "both"


class Orchestrator:
    """Public entry point for predictions.

    Each provider call goes through the CallSerializer (FIFO + pacing), the
    RateLimiter (admission) and finally the provider's adapter. Construct one
    per process and share it between callers.
    """

    def __init__(
        self,
        adapters: Mapping[str, ProviderAdapter],
        limiter: RateLimiter,
        serializer: CallSerializer | None = None,
        *,
        primary: str = "gemini",
        secondary: str = "deepseek",
        outcome_tolerance: float = DEFAULT_OUTCOME_TOLERANCE,
        clock: Clock | None = None,
    ) -> None:
        self.adapters = dict(adapters)
        self.limiter = limiter
        self._clock = clock or SystemClock()
        self.serializer = serializer or CallSerializer(limiter, self._clock)
        self.primary = primary
        self.secondary = secondary
        self.outcome_tolerance = outcome_tolerance

    def _adapter(self, provider: str) -> ProviderAdapter:
        adapter = self.adapters.get(provider)
        if adapter is None:
            raise ConfigurationError(f"Unknown provider: {provider}", provider)
        return adapter

    def check_mode(self, mode: str | None) -> str:
        """Resolve `mode` and make sure every provider it needs is registered.

        Raises:
            ConfigurationError: If `mode` names an unknown or disabled provider
        """
        mode = mode or self.primary
        if mode == BOTH:
            self._adapter(self.primary)
            self._adapter(self.secondary)
        else:
            self._adapter(mode)
        return mode

    async def get_prediction(
        self,
        request: PredictionRequest,
        mode: str | None = None,
    ) -> UnifiedResult:
        """Get a prediction from one provider, or from both.

        Args:
            request: The request to send
            mode: A provider id, or "both" to query the primary and secondary
                providers concurrently (defaults to the primary provider)

        Returns:
            UnifiedResult; a comparison is included only when both providers
            succeeded

        Raises:
            ConfigurationError: If `mode` names an unknown provider
        """
        mode = self.check_mode(mode)

        if mode != BOTH:
            logger.info("Getting prediction for %s using %s", request.display_name, mode)
            return UnifiedResult(primary=await self._run_provider(mode, request))

        logger.info(
            "Getting prediction for %s using %s and %s",
            request.display_name,
            self.primary,
            self.secondary,
        )
        primary, secondary = await asyncio.gather(
            self._run_provider(self.primary, request),
            self._run_provider(self.secondary, request),
        )

        comparison = None
        if primary.prediction is not None and secondary.prediction is not None:
            comparison = compare_predictions(
                primary.prediction,
                secondary.prediction,
                self.outcome_tolerance,
            )
            if not comparison.agrees_within_tolerance:
                logger.info(
                    "Providers disagree on %s: %s",
                    request.display_name,
                    "; ".join(comparison.differences),
                )

        return UnifiedResult(primary=primary, secondary=secondary, comparison=comparison)

    async def _run_provider(
        self,
        provider: str,
        request: PredictionRequest,
    ) -> ModelPredictionResult:
        """Run one provider call and capture its outcome. Never raises."""
        adapter = self._adapter(provider)
        start = self._clock.now_ms()

        try:
            prediction = await self.serializer.run(
                provider, lambda: adapter.predict(request)
            )
        except Exception as e:
            response_time = self._clock.now_ms() - start
            error = classify_exception(e, provider)
            message = user_facing_message(
                error,
                adapter.name,
                wait_ms=self.limiter.status(provider).wait_time_ms,
            )
            logger.error(
                "%s failed after %.0fms: %s", adapter.name, response_time, error.message
            )
            return ModelPredictionResult(
                provider=provider,
                error=message,
                error_category=error.category.value,
                response_time_ms=response_time,
            )

        response_time = self._clock.now_ms() - start
        logger.info("%s completed in %.0fms", adapter.name, response_time)
        return ModelPredictionResult(
            provider=provider,
            prediction=prediction,
            response_time_ms=response_time,
        )

    @staticmethod
    def get_best_result(unified: UnifiedResult) -> Prediction | None:
        """Return the primary prediction, else the secondary, else None."""
        if unified.primary is not None and unified.primary.prediction is not None:
            return unified.primary.prediction
        if unified.secondary is not None and unified.secondary.prediction is not None:
            return unified.secondary.prediction
        return None

    async def predict(
        self,
        request: PredictionRequest,
        mode: str | None = None,
    ) -> Prediction:
        """Get the best available prediction.

        Raises:
            PredictionUnavailableError: If no provider produced a prediction
        """
        unified = await self.get_prediction(request, mode)
        prediction = self.get_best_result(unified)
        if prediction is None:
            errors = [r.error for r in unified.results() if r.error]
            detail = "; ".join(errors) or "no provider returned a prediction"
            raise PredictionUnavailableError(
                f"Failed to generate prediction for {request.display_name}: {detail}"
            )
        return prediction

    def available_providers(self) -> dict[str, bool]:
        """Which configured providers have credentials."""
        return {pid: adapter.is_available() for pid, adapter in self.adapters.items()}

    def status(self, provider: str) -> RateLimitStatus:
        return self.limiter.status(provider)

    def status_all(self) -> dict[str, RateLimitStatus]:
        return self.limiter.status_all()


def create_orchestrator(
    config: Config | None = None,
    clock: Clock | None = None,
) -> Orchestrator:
    """Build an orchestrator with adapters, limiter and serializer from config.

    Disabled providers get no adapter.
    """
    from fixturecast.config.settings import get_config
    from fixturecast.providers import create_adapter
    from fixturecast.providers import list_provider_ids

    config = config or get_config()
    clock = clock or SystemClock()

    adapters = {}
    for provider_id in list_provider_ids():
        if not config.is_provider_enabled(provider_id):
            continue
        provider_cfg = config.get_provider_config(provider_id)
        adapters[provider_id] = create_adapter(provider_id, model=provider_cfg.model)

    limiter = RateLimiter(config.rate_limits(), clock)
    serializer = CallSerializer(
        limiter,
        clock,
        max_attempts=config.serializer.max_attempts,
        max_wait_ms=config.serializer.max_wait_ms,
    )
    return Orchestrator(
        adapters,
        limiter,
        serializer,
        primary=config.orchestrator.primary,
        secondary=config.orchestrator.secondary,
        outcome_tolerance=config.orchestrator.outcome_tolerance,
        clock=clock,
    )
