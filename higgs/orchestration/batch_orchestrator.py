"""Batch fan-out for per-identifier work.

Splits a list of identifiers into contiguous batches and runs one asyncio task
per batch. Items inside a batch are handled one after another; the call
returns once every batch task has finished.
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ItemOutcome(str, Enum):
    """What happened to a single work item."""

    STORED = "stored"
    DUPLICATE = "duplicate"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"
    STORE_FAILED = "store_failed"


class AbortBatch(Exception):
    """Raised by an item handler to stop the rest of its batch."""

    def __init__(self, outcome: ItemOutcome, message: str = ""):
        super().__init__(message or outcome.value)
        self.outcome = outcome


@dataclass
class BatchReport:
    """Aggregated result of one orchestrated run."""

    batches: int = 0
    items: int = 0
    outcomes: Counter = field(default_factory=Counter)
    aborted_batches: int = 0
    not_attempted: int = 0

    def record(self, outcome: ItemOutcome) -> None:
        self.outcomes[outcome] += 1

    def count(self, outcome: ItemOutcome) -> int:
        return self.outcomes.get(outcome, 0)

    @property
    def attempted(self) -> int:
        return sum(self.outcomes.values())


def partition_batches(items: Sequence[T], workers: int) -> list[list[T]]:
    """Split items into contiguous batches for ``workers`` workers.

    Batch size is ``len(items) // workers + 1``. Full batches are cut from the
    front while more than one batch worth of items remains; whatever is left
    (possibly nothing) becomes the last batch. The result therefore has at
    most ``workers + 1`` batches and always at least one.

    Args:
        items: Work items in order.
        workers: Worker count, at least 1.

    Returns:
        List of batches covering every item exactly once, in order.

    Example:
        25 items, 4 workers -> batch size 7 -> sizes [7, 7, 7, 4]
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    remaining = list(items)
    batch_size = len(remaining) // workers + 1

    batches: list[list[T]] = []
    while batch_size < len(remaining):
        batches.append(remaining[:batch_size])
        remaining = remaining[batch_size:]

    batches.append(remaining)
    return batches


class BatchOrchestrator:
    """Runs an async item handler over batches with one task per batch."""

    def __init__(self, workers: int):
        """Initialize the orchestrator.

        Args:
            workers: Base worker count (W).
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self._workers = workers

    @property
    def workers(self) -> int:
        return self._workers

    async def run(
        self,
        items: Sequence[T],
        handler: Callable[[T], Awaitable[ItemOutcome]],
        fan_out: int = 1,
        label: str = "items",
    ) -> BatchReport:
        """Process every item and wait for all batches to finish.

        Args:
            items: Work items.
            handler: Coroutine called once per item. Returns the item outcome
                or raises AbortBatch to stop the remaining items of its batch.
            fan_out: Multiplier applied to the worker count.
            label: Name used in log lines.

        Returns:
            BatchReport with per-outcome counts.

        Raises:
            Exception: The first unexpected error raised by a handler, after
                every batch has finished.
        """
        batches = partition_batches(items, self._workers * max(1, fan_out))
        report = BatchReport(batches=len(batches), items=len(items))

        logger.debug(
            f"Running {len(items)} {label} in {len(batches)} batches "
            f"(batch size {len(batches[0])})"
        )

        async def run_batch(index: int, batch: list[T]) -> None:
            for position, item in enumerate(batch):
                try:
                    outcome = await handler(item)
                except AbortBatch as e:
                    report.record(e.outcome)
                    report.aborted_batches += 1
                    skipped = len(batch) - position - 1
                    report.not_attempted += skipped
                    logger.warning(
                        f"Batch {index} of {label} aborted at item {item}: {e} "
                        f"({skipped} items not attempted)"
                    )
                    return
                report.record(outcome)

        completed = await asyncio.gather(
            *(run_batch(i, batch) for i, batch in enumerate(batches)),
            return_exceptions=True,
        )

        for item in completed:
            if isinstance(item, BaseException):
                logger.error(f"Batch worker for {label} failed: {item!r}")
                raise item

        return report
