# app/core/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field

from app.core.errors import UnknownCategory

RawRecord = Dict[str, Any]


class Category(str, Enum):
    DENIAL = "denial"
    INTRUSION = "intrusion"
    EXECUTABLE = "executable"
    MISUSE = "misuse"
    UNAUTHORIZED = "unauthorized"
    PROBING = "probing"
    OTHER = "other"

    @classmethod
    def parse(cls, name: str) -> "Category":
        key = (name or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise UnknownCategory(name)


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_ORDER: Tuple[str, ...] = tuple(s.value for s in Severity)


@dataclass(frozen=True)
class RecordBatch:
    category: Category
    records: List[RawRecord]


@dataclass(frozen=True)
class NormalizedRecord:
    fields: RawRecord
    category: Category
    resolved_identity: int
    severity: str
    timestamp: float

    def to_incident(self) -> RawRecord:
        """Record as delivered in the report: source fields plus its `type` tag."""
        incident = dict(self.fields)
        incident["type"] = self.category.value
        return incident


class IncidentBucket(BaseModel):
    count: int = 0
    incidents: List[Dict[str, Any]] = Field(default_factory=list)


IncidentReport = Dict[str, Dict[str, IncidentBucket]]


def empty_levels() -> Dict[str, IncidentBucket]:
    return {level: IncidentBucket() for level in SEVERITY_ORDER}


def report_to_json(report: IncidentReport) -> Dict[str, Dict[str, Dict[str, Any]]]:
    return {
        identity: {level: bucket.model_dump() for level, bucket in levels.items()}
        for identity, levels in report.items()
    }


class RunStats(BaseModel):
    fetched: Dict[str, int] = Field(default_factory=dict)
    failed_categories: Dict[str, str] = Field(default_factory=dict)
    identity_source_ok: bool = True
    identities: int = 0
    dropped: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    merged: int = 0
    overwritten: int = 0
    identities_reported: int = 0

    def record_drop(self, category: str, kind: str) -> None:
        per_category = self.dropped.setdefault(category, {})
        per_category[kind] = per_category.get(kind, 0) + 1

    def total_dropped(self) -> int:
        return sum(sum(kinds.values()) for kinds in self.dropped.values())
