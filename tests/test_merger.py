# tests/test_merger.py
from app.core.models import Category, RecordBatch, RunStats
from app.pipeline.identities import IdentityDirectory
from app.pipeline.merger import merge

DIRECTORY = IdentityDirectory.build({"10.0.0.5": 42})


def test_merged_set_iterates_by_timestamp():
    batches = [
        (Category.DENIAL, [{"reported_by": 1, "priority": "low", "timestamp": 300.0}]),
        (Category.MISUSE, [
            {"employee_id": 2, "priority": "low", "timestamp": 100.5},
            {"employee_id": 3, "priority": "low", "timestamp": 200},
        ]),
    ]
    merged = merge(batches, DIRECTORY)
    assert [r.timestamp for r in merged] == [100.5, 200.0, 300.0]
    assert len(merged) == 3


def test_timestamp_collision_overwrites_earlier_record():
    stats = RunStats()
    batches = [
        RecordBatch(Category.DENIAL, [{"reported_by": 1, "priority": "low", "timestamp": 100.0}]),
        RecordBatch(Category.PROBING, [{"ip": "10.0.0.5", "priority": "high", "timestamp": 100.0}]),
    ]
    merged = list(merge(batches, DIRECTORY, stats=stats))
    assert len(merged) == 1
    assert merged[0].category is Category.PROBING
    assert stats.overwritten == 1
    assert stats.merged == 1


def test_preserve_collisions_keeps_both_in_insertion_order():
    batches = [
        RecordBatch(Category.DENIAL, [{"reported_by": 1, "priority": "low", "timestamp": 100.0}]),
        RecordBatch(Category.PROBING, [{"ip": "10.0.0.5", "priority": "high", "timestamp": 100.0}]),
    ]
    merged = merge(batches, DIRECTORY, preserve_collisions=True)
    assert [r.category for r in merged] == [Category.DENIAL, Category.PROBING]
    assert merged.overwritten == 0


def test_bad_records_are_dropped_and_counted():
    stats = RunStats()
    batches = [
        RecordBatch(Category.PROBING, [
            {"ip": "10.0.0.5", "priority": "high", "timestamp": 1.0},
            {"ip": "10.1.1.1", "priority": "high", "timestamp": 2.0},
            {"ip": "10.0.0.5", "priority": "urgent", "timestamp": 3.0},
            {"ip": "10.0.0.5", "priority": "low"},
        ]),
        RecordBatch(Category.DENIAL, [{"priority": "low", "timestamp": 4.0}]),
    ]
    merged = merge(batches, DIRECTORY, stats=stats)
    assert len(merged) == 1
    assert stats.dropped == {
        "probing": {"unresolvable_identity": 1, "unknown_severity": 1, "invalid_timestamp": 1},
        "denial": {"unresolvable_identity": 1},
    }
    assert stats.total_dropped() == 4


def test_out_of_range_timestamp_dropped_not_raised():
    stats = RunStats()
    batches = [(Category.DENIAL, [
        {"reported_by": 1, "priority": "low", "timestamp": 10**400},
        {"reported_by": 1, "priority": "low", "timestamp": 5.0},
    ])]
    merged = merge(batches, IdentityDirectory.empty(), stats=stats)
    assert [r.timestamp for r in merged] == [5.0]
    assert stats.dropped == {"denial": {"invalid_timestamp": 1}}
