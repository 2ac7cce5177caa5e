# app/pipeline/report_view.py
from typing import Any, Dict, List, Mapping

from app.core.models import SEVERITY_ORDER


def _count(bucket: Any) -> int:
    return bucket["count"] if isinstance(bucket, Mapping) else bucket.count


def summarize_report(report: Mapping[str, Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """One row per identity with per-severity counts, busiest identities first.

    Accepts either an IncidentReport or its JSON form.
    """
    rows = []
    for identity, levels in report.items():
        row: Dict[str, Any] = {"identity": identity}
        for level in SEVERITY_ORDER:
            row[level] = _count(levels[level])
        row["total"] = sum(row[level] for level in SEVERITY_ORDER)
        rows.append(row)
    rows.sort(key=lambda r: (-r["critical"], -r["high"], -r["total"], r["identity"]))
    return rows


def format_summary(rows: List[Dict[str, Any]]) -> str:
    header = ["identity", *SEVERITY_ORDER, "total"]
    widths = [max([len(h)] + [len(str(r[h])) for r in rows]) for h in header]
    lines = ["  ".join(h.ljust(w) for h, w in zip(header, widths))]
    for r in rows:
        lines.append("  ".join(str(r[h]).ljust(w) for h, w in zip(header, widths)))
    return "\n".join(lines)
