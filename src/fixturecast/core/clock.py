"""Time source used by the rate limiter, serializer and retry driver."""

from __future__ import annotations

import asyncio
import time
from datetime import date
from typing import Protocol


class Clock(Protocol):
    """Wall-clock time in epoch milliseconds, calendar date and sleeping."""

    def now_ms(self) -> float: ...

    def today(self) -> date: ...

    async def sleep_ms(self, ms: float) -> None: ...


class SystemClock:
    """Clock backed by the system time and asyncio.sleep."""

    def now_ms(self) -> float:
        return time.time() * 1000

    def today(self) -> date:
        return date.today()

    async def sleep_ms(self, ms: float) -> None:
        if ms > 0:
            await asyncio.sleep(ms / 1000)
