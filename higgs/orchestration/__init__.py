"""Crawl orchestration: batching, stage ordering and the snapshot pipeline."""

from .batch_orchestrator import (
    AbortBatch,
    BatchOrchestrator,
    BatchReport,
    ItemOutcome,
    partition_batches,
)
from .crawl_pipeline import (
    CrawlPipeline,
    CrawlResult,
    FailurePolicy,
    PipelineConfig,
    StageResult,
    clear_collections,
)
from .stage_planner import CrawlPlan, CrawlStep, StagePlanner

__all__ = [
    "AbortBatch",
    "BatchOrchestrator",
    "BatchReport",
    "ItemOutcome",
    "partition_batches",
    "CrawlPipeline",
    "CrawlResult",
    "FailurePolicy",
    "PipelineConfig",
    "StageResult",
    "clear_collections",
    "CrawlPlan",
    "CrawlStep",
    "StagePlanner",
]
