"""Batch re-issue of predictions whose earlier result was incomplete."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Callable
from typing import Iterable

from fixturecast.config.settings import DEFAULT_RETRY_DELAY_MS
from fixturecast.core.clock import Clock
from fixturecast.core.clock import SystemClock
from fixturecast.core.orchestrator import Orchestrator
from fixturecast.models import PredictionRequest
from fixturecast.models import UnifiedResult

logger = logging.getLogger(__name__)


@dataclass
class RetryReport:
    """What a RetryDriver run did."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    results: dict[str, UnifiedResult] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0


class RetryDriver:
    """Re-runs predictions for incomplete items, one at a time.

    Items are processed sequentially with a fixed delay after every attempt
    so bulk recovery does not add rate-limit pressure. Each incomplete item
    gets exactly one attempt per run; running the driver again is the retry.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        delay_ms: float = DEFAULT_RETRY_DELAY_MS,
        clock: Clock | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.delay_ms = delay_ms
        self._clock = clock or SystemClock()

    async def run(
        self,
        requests: Iterable[PredictionRequest],
        is_complete: Callable[[PredictionRequest], bool],
        mode: str | None = None,
        on_result: Callable[[PredictionRequest, UnifiedResult], None] | None = None,
    ) -> RetryReport:
        """Retry every request that `is_complete` rejects.

        Args:
            requests: Requests to check, in processing order
            is_complete: Predicate telling whether a request already has a
                complete prediction
            mode: Orchestrator mode (provider id or "both")
            on_result: Called after each attempt, e.g. to persist successes

        Returns:
            RetryReport with per-run counts and results keyed by request key
        """
        report = RetryReport()

        for request in requests:
            if is_complete(request):
                logger.info("Prediction already complete for %s", request.display_name)
                report.skipped += 1
                continue

            logger.info("Retrying prediction for %s", request.display_name)
            report.attempted += 1
            try:
                result = await self.orchestrator.get_prediction(request, mode)
            except Exception:
                logger.exception("Failed to retry prediction for %s", request.display_name)
                report.failed += 1
            else:
                report.results[request.key] = result
                if self.orchestrator.get_best_result(result) is not None:
                    logger.info("Prediction retried for %s", request.display_name)
                    report.succeeded += 1
                else:
                    errors = "; ".join(r.error for r in result.results() if r.error)
                    logger.error(
                        "Failed to retry prediction for %s: %s",
                        request.display_name,
                        errors,
                    )
                    report.failed += 1
                if on_result is not None:
                    on_result(request, result)

            if self.delay_ms > 0:
                await self._clock.sleep_ms(self.delay_ms)

        logger.info(
            "Retry finished: %d attempted, %d succeeded, %d failed, %d skipped",
            report.attempted,
            report.succeeded,
            report.failed,
            report.skipped,
        )
        return report
