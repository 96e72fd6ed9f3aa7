"""Shared contention signal for ESI requests.

The limiter is a decaying counter: every non-success response from ESI bumps
it by one and a background task takes one unit off per tick. Fetchers poll the
value and hold off while it sits above a threshold. It never grants or denies
slots; it only tells callers how hot the API currently is.
"""

import asyncio
import logging
import threading
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_DECAY_INTERVAL = 1.0  # seconds per decay tick


class RateLimiter:
    """Decaying overload counter with a stoppable background decay task.

    Features:
    - Lock-guarded counter that never goes below zero
    - Background decay of one unit per interval
    - Scoped lifetime via start()/stop() or ``async with``
    """

    def __init__(self, decay_interval: float = DEFAULT_DECAY_INTERVAL):
        """Initialize the rate limiter.

        Args:
            decay_interval: Seconds between decay ticks.
        """
        self._decay_interval = decay_interval
        self._count = 0
        self._lock = threading.Lock()
        self._decay_task: Optional[asyncio.Task] = None

        # Lifetime totals, for the run summary
        self._total_increases = 0

    def increase(self) -> None:
        """Record one overload signal from the remote API."""
        with self._lock:
            self._count += 1
            self._total_increases += 1

    def decrease(self) -> None:
        """Remove one unit, stopping at zero."""
        with self._lock:
            if self._count > 0:
                self._count -= 1

    def value(self) -> int:
        """Get the current contention level."""
        with self._lock:
            return self._count

    def tick(self) -> None:
        """Run one decay step."""
        if self.value() > 0:
            self.decrease()

    @property
    def running(self) -> bool:
        """Whether the decay task is active."""
        return self._decay_task is not None and not self._decay_task.done()

    def start(self) -> None:
        """Start the background decay task on the running event loop."""
        if self.running:
            return
        self._decay_task = asyncio.get_running_loop().create_task(self._decay_loop())
        logger.debug(f"Rate limiter decay started (interval={self._decay_interval}s)")

    async def stop(self) -> None:
        """Stop the background decay task and wait for it to exit."""
        task = self._decay_task
        self._decay_task = None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Rate limiter decay stopped")

    async def _decay_loop(self) -> None:
        while True:
            await asyncio.sleep(self._decay_interval)
            self.tick()

    def get_status(self) -> dict[str, Any]:
        """Get current rate limiter status."""
        with self._lock:
            return {
                "value": self._count,
                "total_increases": self._total_increases,
                "decay_interval": self._decay_interval,
                "running": self.running,
            }

    async def __aenter__(self) -> "RateLimiter":
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()
