"""Crawl pipeline for dependency-ordered snapshot runs.

Runs stages in topological order. Each stage resolves its identifier set,
fans the identifiers out over batches and, per identifier, fetches the ESI
record, decodes it and writes it to the store. A stage only starts once every
stage it depends on has finished writing.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from ..clients.esi_client import ESIClient
from ..core.errors import (
    FetchError,
    HiggsError,
    RecordDecodeError,
    StageFailedError,
    StoreError,
)
from ..stages import BaseStage, get_stage
from ..storage.base import STATIC_COLLECTIONS, InsertOutcome, Store
from ..types.summary import CrawlError, CrawlStatistics, StageStats
from .batch_orchestrator import AbortBatch, BatchOrchestrator, BatchReport, ItemOutcome
from .stage_planner import CrawlPlan, StagePlanner

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """How item fetch failures are handled."""

    SKIP = "skip"  # Skip the item, keep going
    LEGACY = "legacy"  # Root list stages abort the rest of the batch


@dataclass
class PipelineConfig:
    """Configuration for the crawl pipeline."""

    # Execution
    workers: int = 20
    max_concurrent_stages: int = 1  # >1 runs independent stages of a layer together
    startup_delay: float = 0.0  # Pause after clearing, before the first stage

    # Failure handling
    failure_policy: FailurePolicy = FailurePolicy.SKIP
    strict: bool = False  # Fail the run when a stage finishes with skipped items

    # Planning
    include_dependencies: bool = True
    clear_existing: bool = True

    # Progress
    progress_callback: Optional[Callable[[str, int, int, str], None]] = None


@dataclass
class StageResult:
    """Result of running a single stage."""

    stage_name: str
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    ids_total: int = 0
    report: BatchReport = field(default_factory=BatchReport)
    errors: list[CrawlError] = field(default_factory=list)
    failure: Optional[str] = None  # Set when the stage itself could not run

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def stored(self) -> int:
        return self.report.count(ItemOutcome.STORED)

    @property
    def duplicates(self) -> int:
        return self.report.count(ItemOutcome.DUPLICATE)

    @property
    def skipped(self) -> int:
        """Items that were attempted but not persisted."""
        return (
            self.report.count(ItemOutcome.FETCH_FAILED)
            + self.report.count(ItemOutcome.DECODE_FAILED)
            + self.report.count(ItemOutcome.STORE_FAILED)
        )

    @property
    def duration_seconds(self) -> float:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def add_error(
        self,
        error_type: str,
        message: str,
        entity_id: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Record an error for the stage."""
        self.errors.append(
            CrawlError(
                stage=self.stage_name,
                error_type=error_type,
                message=message,
                entity_id=entity_id,
                url=url,
                details=details,
            )
        )

    def to_stats(self) -> StageStats:
        if not self.success:
            status = "failed"
        elif self.report.aborted_batches:
            status = "aborted"
        else:
            status = "completed"

        return StageStats(
            name=self.stage_name,
            status=status,
            ids_total=self.ids_total,
            batches=self.report.batches,
            stored=self.stored,
            duplicates=self.duplicates,
            fetch_failed=self.report.count(ItemOutcome.FETCH_FAILED),
            decode_failed=self.report.count(ItemOutcome.DECODE_FAILED),
            store_failed=self.report.count(ItemOutcome.STORE_FAILED),
            aborted_batches=self.report.aborted_batches,
            not_attempted=self.report.not_attempted,
            duration_seconds=self.duration_seconds,
            errors=self.errors,
        )


@dataclass
class CrawlResult:
    """Result of a snapshot run."""

    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    stages_planned: list[str] = field(default_factory=list)
    results: dict[str, StageResult] = field(default_factory=dict)
    aborted_stage: Optional[str] = None
    rate_limit_signals: int = 0

    @property
    def success(self) -> bool:
        """Check if every planned stage ran to completion."""
        return self.aborted_stage is None and all(
            r.success for r in self.results.values()
        )

    @property
    def duration_seconds(self) -> float:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def get_statistics(self) -> CrawlStatistics:
        """Generate statistics from stage results."""
        stats = CrawlStatistics(
            stages_run=len(self.results),
            total_duration_seconds=self.duration_seconds,
            rate_limit_signals=self.rate_limit_signals,
            aborted_stage=self.aborted_stage,
        )

        for name, stage_result in self.results.items():
            if stage_result.success:
                stats.stages_succeeded += 1
            else:
                stats.stages_failed += 1

            stats.total_ids += stage_result.ids_total
            stats.total_stored += stage_result.stored
            stats.total_skipped += stage_result.skipped
            stats.by_stage[name] = stage_result.to_stats()

        return stats


async def clear_collections(store: Store, collections: list[str]) -> dict[str, int]:
    """Delete every document in the given collections.

    Returns:
        Dict mapping collection name to the number of documents removed.
    """
    removed = {}
    for collection in collections:
        removed[collection] = await store.delete_all(collection)
        logger.info(f"Cleared {collection} ({removed[collection]} documents)")
    return removed


class CrawlPipeline:
    """Runs crawl stages against ESI and a store.

    Features:
    - Dependency-ordered stage execution (via StagePlanner)
    - Batch fan-out per stage with a shared rate signal
    - Per-item failure collection without abort
    - Fatal stop when a stage cannot build its identifier set
    """

    def __init__(
        self,
        client: ESIClient,
        store: Store,
        config: Optional[PipelineConfig] = None,
    ):
        """Initialize the pipeline.

        Args:
            client: Started ESI client.
            store: Connected store.
            config: Pipeline configuration.
        """
        self._client = client
        self._store = store
        self._config = config or PipelineConfig()
        self._planner = StagePlanner(include_dependencies=self._config.include_dependencies)
        self._orchestrator = BatchOrchestrator(self._config.workers)

    def get_plan(self, stage_names: Optional[list[str]] = None) -> CrawlPlan:
        """Get the crawl plan for the given stages (all stages when None)."""
        return self._planner.plan(stage_names)

    async def run(self, stage_names: Optional[list[str]] = None) -> CrawlResult:
        """Run a snapshot.

        Args:
            stage_names: Stages to run. None runs every stage and clears every
                static collection first; a subset only clears its own
                collections.

        Returns:
            CrawlResult with per-stage results.

        Raises:
            StageFailedError: When a stage cannot resolve its identifiers, or
                finishes with failures in strict mode. The partial
                CrawlResult is attached as ``result``.
        """
        plan = self.get_plan(stage_names)
        result = CrawlResult(stages_planned=plan.stage_names)
        signals_before = self._client.rate_limiter.get_status()["total_increases"]

        logger.info(f"Crawl plan: {' -> '.join(plan.stage_names)}")

        try:
            if self._config.clear_existing:
                if stage_names is None:
                    collections = list(STATIC_COLLECTIONS)
                else:
                    collections = [get_stage(name).collection for name in plan.stage_names]
                await clear_collections(self._store, collections)

            if self._config.startup_delay > 0:
                logger.info(f"Waiting {self._config.startup_delay}s before crawling")
                await asyncio.sleep(self._config.startup_delay)

            if self._config.max_concurrent_stages > 1:
                await self._run_layers(plan, result)
            else:
                for stage_name in plan.stage_names:
                    await self.run_stage(stage_name, result)

        except StageFailedError as e:
            result.aborted_stage = e.stage
            e.result = result
            logger.error(str(e))
            raise

        finally:
            result.completed_at = datetime.now()
            result.rate_limit_signals = (
                self._client.rate_limiter.get_status()["total_increases"] - signals_before
            )

        logger.info(
            f"Crawl finished in {result.duration_seconds:.1f}s "
            f"({sum(r.stored for r in result.results.values())} records stored)"
        )
        return result

    async def _run_layers(self, plan: CrawlPlan, result: CrawlResult) -> None:
        """Run stages layer by layer, with independent stages in parallel."""
        layers = self._planner.get_dependency_layers(set(plan.stage_names))
        semaphore = asyncio.Semaphore(self._config.max_concurrent_stages)

        logger.info(f"Executing {len(layers)} dependency layers")

        async def run_single(stage_name: str) -> StageResult:
            async with semaphore:
                return await self.run_stage(stage_name, result)

        for layer_idx, layer in enumerate(layers):
            logger.debug(f"Layer {layer_idx}: {layer}")
            completed = await asyncio.gather(
                *(run_single(name) for name in layer), return_exceptions=True
            )
            for item in completed:
                if isinstance(item, BaseException):
                    raise item

    async def run_stage(
        self, stage_name: str, crawl_result: Optional[CrawlResult] = None
    ) -> StageResult:
        """Run one stage to completion.

        Args:
            stage_name: Registered stage name.
            crawl_result: Run result the stage result is recorded into.

        Returns:
            StageResult with outcome counts and item errors.

        Raises:
            StageFailedError: If the identifier set cannot be built, a batch
                worker fails, or in strict mode when items were skipped.
        """
        stage = get_stage(stage_name)()
        stage_result = StageResult(stage_name=stage_name)
        if crawl_result is not None:
            crawl_result.results[stage_name] = stage_result

        self._report_progress(stage_name, 0, 0, "Resolving")

        try:
            ids = await stage.resolve_ids(self._client, self._store)
        except (HiggsError, ValidationError) as e:
            stage_result.failure = str(e)
            stage_result.add_error(type(e).__name__, str(e), url=getattr(e, "url", None))
            stage_result.completed_at = datetime.now()
            self._report_progress(stage_name, 0, 0, "Error")
            raise StageFailedError(
                stage_name, f"could not build identifier set: {e}", cause=e
            ) from e

        stage_result.ids_total = len(ids)
        logger.info(f"Have to get {len(ids)} {stage_name}")

        handler = self._make_handler(stage, stage_result)
        try:
            stage_result.report = await self._orchestrator.run(
                ids, handler, fan_out=stage.fan_out, label=stage_name
            )
        except Exception as e:
            stage_result.failure = str(e)
            stage_result.add_error(type(e).__name__, str(e))
            stage_result.completed_at = datetime.now()
            self._report_progress(stage_name, 0, len(ids), "Error")
            raise StageFailedError(stage_name, f"batch worker failed: {e}", cause=e) from e
        stage_result.completed_at = datetime.now()

        logger.info(
            f"Finished {stage_name}: {stage_result.stored} stored, "
            f"{stage_result.duplicates} duplicates, {stage_result.skipped} skipped "
            f"in {stage_result.duration_seconds:.1f}s"
        )
        status = "Completed" if not stage_result.skipped else "Completed with errors"
        self._report_progress(stage_name, len(ids), len(ids), status)

        if self._config.strict and (stage_result.skipped or stage_result.report.not_attempted):
            raise StageFailedError(
                stage_name,
                f"{stage_result.skipped} items failed and "
                f"{stage_result.report.not_attempted} were not attempted",
            )

        return stage_result

    def _make_handler(self, stage: BaseStage, stage_result: StageResult):
        """Build the per-identifier fetch -> decode -> store closure."""
        abort_on_fetch_failure = (
            self._config.failure_policy == FailurePolicy.LEGACY
            and stage.abort_batch_on_fetch_failure
        )
        total = stage_result.ids_total
        done = 0

        async def handle(entity_id: int) -> ItemOutcome:
            nonlocal done
            done += 1
            self._report_progress(stage.name, done, total, "Fetching")

            url = stage.detail_url(self._client, entity_id)

            try:
                body = await self._client.get_esi(url)
            except FetchError as e:
                logger.warning(f"Failed to fetch {stage.name} {entity_id}: {e}")
                stage_result.add_error("FetchError", str(e), entity_id=entity_id, url=url)
                if abort_on_fetch_failure:
                    raise AbortBatch(ItemOutcome.FETCH_FAILED, str(e)) from e
                return ItemOutcome.FETCH_FAILED

            try:
                record = stage.decode(url, entity_id, body)
            except RecordDecodeError as e:
                logger.warning(str(e))
                stage_result.add_error(
                    "DecodeError",
                    str(e),
                    entity_id=entity_id,
                    url=url,
                    details={"body": body[:200].decode("utf-8", errors="replace")},
                )
                return ItemOutcome.DECODE_FAILED

            try:
                outcome = await self._store.insert(stage.collection, record.to_document())
            except StoreError as e:
                logger.warning(f"Failed to store {stage.name} {entity_id}: {e}")
                stage_result.add_error("StoreError", str(e), entity_id=entity_id, url=url)
                return ItemOutcome.STORE_FAILED

            if outcome == InsertOutcome.DUPLICATE:
                logger.info(f"dup {stage.name} {entity_id}")
                return ItemOutcome.DUPLICATE

            return ItemOutcome.STORED

        return handle

    def _report_progress(self, stage: str, current: int, total: int, status: str) -> None:
        """Report progress via callback."""
        if self._config.progress_callback:
            self._config.progress_callback(stage, current, total, status)
