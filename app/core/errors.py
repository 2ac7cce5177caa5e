# app/core/errors.py
"""
Error taxonomy for the aggregation pipeline.

Per-record errors (RecordError subclasses) and FetchError are recoverable:
the record or the category is dropped and the run continues.
MalformedIdentityData is fatal to the run.
"""
from typing import Optional


class IncidentPipelineError(Exception):
    """Base class for everything the pipeline raises on purpose."""


class FetchError(IncidentPipelineError):
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"failed to fetch {source}: {reason}")


class MalformedIdentityData(IncidentPipelineError):
    pass


class UnknownCategory(IncidentPipelineError, ValueError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown incident category: {name!r}")


class RecordError(IncidentPipelineError):
    # short, stable label used as the drop-counter key
    kind = "record_error"

    def __init__(self, reason: str, category: Optional[str] = None):
        self.reason = reason
        self.category = category
        prefix = f"{category}: " if category else ""
        super().__init__(f"{prefix}{reason}")


class UnresolvableIdentity(RecordError):
    kind = "unresolvable_identity"


class UnknownSeverity(RecordError):
    kind = "unknown_severity"


class InvalidTimestamp(RecordError):
    kind = "invalid_timestamp"
