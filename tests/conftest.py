# tests/conftest.py
import pytest

from app.core.errors import FetchError
from app.core.models import Category


class FakeSource:
    """In-memory IncidentSource; values may be exceptions to raise instead."""

    def __init__(self, identities=None, categories=None):
        self.identities = identities if identities is not None else {}
        self.categories = categories or {}
        self.calls = []

    def fetch_identities(self):
        self.calls.append("identities")
        if isinstance(self.identities, Exception):
            raise self.identities
        if isinstance(self.identities, dict):
            return list(self.identities.items())
        return self.identities

    def fetch_category(self, category):
        self.calls.append(category.value)
        value = self.categories.get(category, [])
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def sample_source():
    return FakeSource(
        identities={"10.0.0.5": 42, "10.0.0.6": 43},
        categories={
            Category.PROBING: [{"ip": "10.0.0.5", "priority": "high", "timestamp": 100.0}],
            Category.DENIAL: [{"reported_by": 7, "priority": "low", "timestamp": 101.5}],
            Category.INTRUSION: [{"internal_ip": "10.0.0.6", "priority": "critical", "timestamp": 99.0}],
            Category.MISUSE: FetchError("misuse", "503 Service Unavailable"),
        },
    )
