"""Crawl run summary models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class CrawlError(BaseModel):
    """Error that occurred during a crawl stage."""

    stage: str = Field(description="Name of the stage the error belongs to")
    error_type: str = Field(description="Type of error (e.g., FetchError, DecodeError)")
    message: str = Field(description="Error message")
    entity_id: Optional[int] = Field(default=None, description="Identifier being processed")
    url: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=datetime.now)
    details: Optional[dict[str, Any]] = Field(default=None, description="Additional error context")


class StageStats(BaseModel):
    """Statistics for a single stage run."""

    name: str = Field(description="Stage name")
    status: str = Field(description="completed, failed, aborted")
    ids_total: int = Field(default=0, description="Identifiers scheduled after dedup")
    batches: int = Field(default=0)
    stored: int = Field(default=0)
    duplicates: int = Field(default=0)
    fetch_failed: int = Field(default=0)
    decode_failed: int = Field(default=0)
    store_failed: int = Field(default=0)
    aborted_batches: int = Field(default=0)
    not_attempted: int = Field(default=0)
    duration_seconds: float = Field(default=0.0)
    errors: list[CrawlError] = Field(default_factory=list)

    @property
    def skipped(self) -> int:
        """Items that were attempted but not persisted."""
        return self.fetch_failed + self.decode_failed + self.store_failed


class CrawlStatistics(BaseModel):
    """Statistics for a whole snapshot run."""

    stages_run: int = Field(default=0)
    stages_succeeded: int = Field(default=0)
    stages_failed: int = Field(default=0)
    total_ids: int = Field(default=0)
    total_stored: int = Field(default=0)
    total_skipped: int = Field(default=0)
    rate_limit_signals: int = Field(default=0, description="Non-success responses seen")
    total_duration_seconds: float = Field(default=0.0)
    aborted_stage: Optional[str] = Field(default=None, description="Stage that stopped the run")
    by_stage: dict[str, StageStats] = Field(default_factory=dict)


class CrawlSummary(BaseModel):
    """Summary document written after a snapshot run."""

    tool_version: str = Field(description="Loader version")
    started_at: datetime
    completed_at: Optional[datetime] = None
    datasource: str = Field(default="tranquility", description="ESI datasource crawled")
    stages_planned: list[str] = Field(default_factory=list)
    success: bool = Field(default=True)
    statistics: CrawlStatistics
    errors: list[CrawlError] = Field(default_factory=list)
