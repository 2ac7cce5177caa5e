# app/pipeline/normalizer.py
import math
from typing import Callable, Dict, Optional, Tuple

from app.core.errors import InvalidTimestamp, UnknownSeverity, UnresolvableIdentity
from app.core.models import SEVERITY_ORDER, Category, NormalizedRecord, RawRecord
from app.pipeline.identities import IdentityDirectory, is_identity_value

SEVERITY_FIELD = "priority"
TIMESTAMP_FIELD = "timestamp"


def _direct(category: Category, record: RawRecord, field: str, directory: IdentityDirectory) -> int:
    if field not in record:
        raise UnresolvableIdentity(f"missing field '{field}'", category.value)
    value = record[field]
    if not is_identity_value(value):
        raise UnresolvableIdentity(f"field '{field}' is not a non-negative integer: {value!r}", category.value)
    return value


def _lookup(category: Category, record: RawRecord, field: str, directory: IdentityDirectory) -> int:
    if field not in record:
        raise UnresolvableIdentity(f"missing field '{field}'", category.value)
    address = record[field]
    if not isinstance(address, str):
        raise UnresolvableIdentity(f"field '{field}' is not an address: {address!r}", category.value)
    identity = directory.resolve(address)
    if identity is None:
        raise UnresolvableIdentity(f"address {address} not in identity directory", category.value)
    return identity


def _lookup_or_direct(category: Category, record: RawRecord, field: str, directory: IdentityDirectory) -> int:
    if isinstance(record.get(field), str):
        return _lookup(category, record, field, directory)
    return _direct(category, record, field, directory)


Rule = Callable[[Category, RawRecord, str, IdentityDirectory], int]

# category -> (identity field, resolution rule)
IDENTITY_RULES: Dict[Category, Tuple[str, Rule]] = {
    Category.DENIAL: ("reported_by", _direct),
    Category.EXECUTABLE: ("machine_ip", _lookup),
    Category.INTRUSION: ("internal_ip", _lookup),
    Category.MISUSE: ("employee_id", _direct),
    Category.UNAUTHORIZED: ("employee_id", _direct),
    Category.PROBING: ("ip", _lookup),
    Category.OTHER: ("identifier", _lookup_or_direct),
}


def resolve_identity(category: Category, record: RawRecord, directory: IdentityDirectory) -> int:
    field, rule = IDENTITY_RULES[category]
    return rule(category, record, field, directory)


def record_severity(record: RawRecord, category: Optional[Category] = None) -> str:
    level = record.get(SEVERITY_FIELD)
    if level not in SEVERITY_ORDER:
        raise UnknownSeverity(f"unrecognized severity {level!r}", category.value if category else None)
    return level


def record_timestamp(record: RawRecord, category: Optional[Category] = None) -> float:
    label = category.value if category else None
    if TIMESTAMP_FIELD not in record:
        raise InvalidTimestamp("missing field 'timestamp'", label)
    value = record[TIMESTAMP_FIELD]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidTimestamp(f"timestamp is not numeric: {value!r}", label)
    try:
        ts = float(value)
    except OverflowError as e:
        raise InvalidTimestamp("timestamp out of float range", label) from e
    if not math.isfinite(ts):
        raise InvalidTimestamp(f"timestamp is not finite: {value!r}", label)
    return ts


def normalize_record(category: Category, record: RawRecord, directory: IdentityDirectory) -> NormalizedRecord:
    return NormalizedRecord(
        fields=record,
        category=category,
        resolved_identity=resolve_identity(category, record, directory),
        severity=record_severity(record, category),
        timestamp=record_timestamp(record, category),
    )
