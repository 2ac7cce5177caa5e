# app/sources/base.py
import json
from typing import Any, Iterable, List, Protocol, Tuple

from app.core.errors import FetchError
from app.core.models import Category, RawRecord

IDENTITIES = "identities"


class IncidentSource(Protocol):
    def fetch_identities(self) -> Iterable[Tuple[str, Any]]: ...

    def fetch_category(self, category: Category) -> List[RawRecord]: ...


def parse_identities(body: str, source: str = IDENTITIES) -> List[Tuple[str, Any]]:
    """Parse the identity table body, keeping repeated keys visible as pairs."""
    try:
        data = json.loads(body, object_pairs_hook=lambda pairs: pairs)
    except (ValueError, RecursionError) as e:
        raise FetchError(source, f"invalid JSON: {e}") from e
    # objects decode to lists of (key, value) tuples, arrays to lists of lists
    if not isinstance(data, list) or not all(isinstance(p, tuple) and len(p) == 2 for p in data):
        raise FetchError(source, "identity table is not a JSON object")
    return data


def parse_results(body: str, source: str) -> List[RawRecord]:
    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise FetchError(source, f"invalid JSON: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise FetchError(source, "body has no 'results' array")
    results = data["results"]
    if not all(isinstance(r, dict) for r in results):
        raise FetchError(source, "'results' contains non-object entries")
    return results
