# app/pipeline/aggregator.py
import logging
from typing import Iterable, Optional

from app.core.errors import UnknownSeverity
from app.core.models import SEVERITY_ORDER, IncidentReport, NormalizedRecord, RunStats, empty_levels

logger = logging.getLogger(__name__)


def _check_severity(record: NormalizedRecord) -> None:
    if record.severity not in SEVERITY_ORDER:
        raise UnknownSeverity(f"unrecognized severity {record.severity!r}", record.category.value)


def aggregate(merged: Iterable[NormalizedRecord], stats: Optional[RunStats] = None) -> IncidentReport:
    """Group records by identity, then by severity bucket.

    Every identity that appears gets all four buckets, empty or not.
    Records with a severity outside the buckets are dropped and counted.
    """
    report: IncidentReport = {}
    for record in merged:
        try:
            _check_severity(record)
        except UnknownSeverity as exc:
            logger.warning("data quality: dropping record: %s", exc)
            if stats is not None:
                stats.record_drop(record.category.value, exc.kind)
            continue

        levels = report.get(str(record.resolved_identity))
        if levels is None:
            levels = report[str(record.resolved_identity)] = empty_levels()
        bucket = levels[record.severity]
        bucket.count += 1
        bucket.incidents.append(record.to_incident())

    if stats is not None:
        stats.identities_reported = len(report)
    return report
