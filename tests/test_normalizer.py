import pytest

from app.core.errors import InvalidTimestamp, UnknownCategory, UnknownSeverity, UnresolvableIdentity
from app.core.models import Category
from app.pipeline.identities import IdentityDirectory
from app.pipeline.normalizer import normalize_record, record_severity, record_timestamp, resolve_identity

DIRECTORY = IdentityDirectory.build({"10.0.0.5": 42, "10.0.0.6": 43})


class ExplodingDirectory:
    def resolve(self, address):
        raise AssertionError("directory must not be consulted")


def test_category_parse_is_case_insensitive():
    assert Category.parse("denial") is Category.DENIAL
    assert Category.parse("Intrusion") is Category.INTRUSION
    assert Category.parse(" PROBING ") is Category.PROBING
    with pytest.raises(UnknownCategory):
        Category.parse("something")


@pytest.mark.parametrize("category,field", [
    (Category.DENIAL, "reported_by"),
    (Category.MISUSE, "employee_id"),
    (Category.UNAUTHORIZED, "employee_id"),
])
def test_direct_categories_skip_directory(category, field):
    record = {field: 1234, "priority": "low", "timestamp": 1.0}
    assert resolve_identity(category, record, ExplodingDirectory()) == 1234


@pytest.mark.parametrize("category,field", [
    (Category.EXECUTABLE, "machine_ip"),
    (Category.INTRUSION, "internal_ip"),
    (Category.PROBING, "ip"),
])
def test_address_categories_use_directory(category, field):
    assert resolve_identity(category, {field: "10.0.0.6"}, DIRECTORY) == 43
    with pytest.raises(UnresolvableIdentity):
        resolve_identity(category, {field: "172.16.0.1"}, DIRECTORY)
    with pytest.raises(UnresolvableIdentity):
        resolve_identity(category, {}, DIRECTORY)


def test_other_identifier_string_or_number():
    assert resolve_identity(Category.OTHER, {"identifier": "10.0.0.5"}, DIRECTORY) == 42
    assert resolve_identity(Category.OTHER, {"identifier": 77}, DIRECTORY) == 77
    with pytest.raises(UnresolvableIdentity):
        resolve_identity(Category.OTHER, {"identifier": "8.8.8.8"}, DIRECTORY)
    with pytest.raises(UnresolvableIdentity):
        resolve_identity(Category.OTHER, {"identifier": None}, DIRECTORY)


@pytest.mark.parametrize("value", ["1234", -3, 1.5, False])
def test_direct_value_must_be_integer(value):
    with pytest.raises(UnresolvableIdentity) as exc:
        resolve_identity(Category.MISUSE, {"employee_id": value}, DIRECTORY)
    assert exc.value.category == "misuse"


def test_severity_and_timestamp():
    assert record_severity({"priority": "critical"}) == "critical"
    with pytest.raises(UnknownSeverity):
        record_severity({"priority": "urgent"})
    with pytest.raises(UnknownSeverity):
        record_severity({})
    assert record_timestamp({"timestamp": 1700000000}) == 1700000000.0
    assert record_timestamp({"timestamp": 12.25}) == 12.25
    for bad in ({"timestamp": "12"}, {"timestamp": True}, {"timestamp": float("nan")}, {"timestamp": 10**400}, {}):
        with pytest.raises(InvalidTimestamp):
            record_timestamp(bad)


def test_normalize_record_keeps_fields_and_tags_type():
    raw = {"ip": "10.0.0.5", "priority": "high", "timestamp": 100.0}
    rec = normalize_record(Category.PROBING, raw, DIRECTORY)
    assert rec.resolved_identity == 42
    assert rec.severity == "high"
    assert rec.timestamp == 100.0
    assert rec.to_incident() == {"ip": "10.0.0.5", "priority": "high", "timestamp": 100.0, "type": "probing"}
    assert "type" not in raw
