"""Output writers for crawl summaries."""

from .summary_writer import SummaryWriter, build_summary, json_dumps

__all__ = ["SummaryWriter", "build_summary", "json_dumps"]
