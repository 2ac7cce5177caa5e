# app/pipeline/runner.py
import logging
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from app.core.models import Category, IncidentReport, RunStats
from app.pipeline.aggregator import aggregate
from app.pipeline.merger import merge
from app.pipeline.orchestrator import FetchOrchestrator
from app.sources.base import IncidentSource

logger = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    report: IncidentReport
    stats: RunStats


def run_pipeline(
    source: IncidentSource,
    categories: Optional[Iterable[Category]] = None,
    max_workers: Optional[int] = None,
    preserve_collisions: bool = False,
) -> PipelineRun:
    """Fetch every category, merge, and aggregate into one report."""
    fetched = FetchOrchestrator(source, categories=categories, max_workers=max_workers).run()

    stats = RunStats(
        identity_source_ok=fetched.identity_source_ok,
        identities=len(fetched.directory),
        fetched={b.category.value: len(b.records) for b in fetched.batches},
        failed_categories={c.value: reason for c, reason in fetched.failed.items()},
    )

    started = time.perf_counter()
    merged = merge(fetched.batches, fetched.directory, stats=stats, preserve_collisions=preserve_collisions)
    report = aggregate(merged, stats=stats)
    logger.debug("merge and aggregate took %.2fs", time.perf_counter() - started)

    for category, kinds in stats.dropped.items():
        logger.warning("%s: dropped records %s", category, kinds)
    logger.info(
        "report ready: %d identities, %d records merged, %d dropped, %d overwritten, %d categories failed",
        stats.identities_reported, stats.merged, stats.total_dropped(), stats.overwritten, len(stats.failed_categories),
    )
    return PipelineRun(report=report, stats=stats)
