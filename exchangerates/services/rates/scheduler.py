from __future__ import annotations

"""Daily dataset refresh.

The ECB publishes new reference rates once per working day at around 16:00 CET.
We refresh once a day at a configured UTC time slot; a failed refresh is retried
a bounded number of times and the previous dataset stays in service meanwhile.
"""
import asyncio
import logging
from datetime import datetime, time, timedelta, timezone
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .cache_service import DatasetStore

logger = logging.getLogger("exchangerates.scheduler")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _slot_on(day: datetime, slot: time) -> datetime:
    return datetime.combine(day.date(), slot, tzinfo=timezone.utc)


def next_update_after(now: datetime, slot: time) -> datetime:
    """First update slot strictly after ``now``."""
    candidate = _slot_on(now, slot)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def previous_update_before(now: datetime, slot: time) -> datetime:
    """Most recent update slot at or before ``now``."""
    candidate = _slot_on(now, slot)
    if candidate > now:
        candidate -= timedelta(days=1)
    return candidate


class DatasetUpdater:
    def __init__(
        self,
        store: "DatasetStore",
        *,
        hour: int = 15,
        minute: int = 30,
        retry_seconds: float = 600.0,
        max_retries: int = 5,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._store = store
        self.slot = time(hour=hour, minute=minute)
        self._retry_seconds = retry_seconds
        self._max_retries = max_retries
        self._clock = clock
        self._sleep = sleep
        self.last_success: Optional[datetime] = None

    def seconds_until_next(self) -> float:
        now = self._clock()
        return (next_update_after(now, self.slot) - now).total_seconds()

    async def update_once(self) -> bool:
        for attempt in range(self._max_retries + 1):
            try:
                await self._store.refresh()
            except Exception:
                logger.exception(
                    "dataset refresh failed (attempt %d/%d)", attempt + 1, self._max_retries + 1
                )
                if attempt < self._max_retries:
                    await self._sleep(self._retry_seconds)
                continue
            self.last_success = self._clock()
            return True
        logger.error("giving up on dataset refresh until the next slot")
        return False

    async def run(self) -> None:
        logger.info("dataset updates scheduled daily at %s UTC", self.slot.strftime("%H:%M"))
        while True:
            delay = self.seconds_until_next()
            logger.debug("next dataset refresh in %.0f seconds", delay)
            await self._sleep(delay)
            await self.update_once()
