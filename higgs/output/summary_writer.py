"""Run summary writer.

Writes the statistics and collected item errors of a snapshot run as an
indented JSON document.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson

from .. import __version__
from ..orchestration import CrawlResult
from ..types.summary import CrawlSummary

logger = logging.getLogger(__name__)


def json_dumps(obj: Any) -> bytes:
    """Serialize object to JSON bytes using orjson."""
    return orjson.dumps(
        obj,
        option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
        default=_json_default,
    )


def _json_default(obj: Any) -> Any:
    """Default serializer for non-standard types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    raise TypeError(f"Cannot serialize {type(obj)}")


def build_summary(result: CrawlResult, datasource: str = "tranquility") -> CrawlSummary:
    """Build the summary document for a crawl result."""
    return CrawlSummary(
        tool_version=__version__,
        started_at=result.started_at,
        completed_at=result.completed_at,
        datasource=datasource,
        stages_planned=result.stages_planned,
        success=result.success,
        statistics=result.get_statistics(),
        errors=[
            error
            for stage_result in result.results.values()
            for error in stage_result.errors
        ],
    )


class SummaryWriter:
    """Writes crawl summaries to disk."""

    def __init__(self, path: Path, datasource: str = "tranquility"):
        """Initialize the summary writer.

        Args:
            path: Target file. Parent directories are created on write.
            datasource: ESI datasource recorded in the summary.
        """
        self._path = path
        self._datasource = datasource

    @property
    def path(self) -> Path:
        return self._path

    async def write(self, result: CrawlResult) -> Path:
        """Write the summary for a crawl result.

        Returns:
            Path of the written file.
        """
        summary = build_summary(result, self._datasource)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_json_sync, summary.model_dump())
        logger.info(f"Wrote crawl summary to {self._path}")
        return self._path

    def _write_json_sync(self, data: Any) -> None:
        """Synchronous JSON write."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "wb") as f:
            f.write(json_dumps(data))
