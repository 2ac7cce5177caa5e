# app/sources/file_source.py
import logging
import os
from typing import Any, List, Tuple

from app.core.errors import FetchError
from app.core.models import Category, RawRecord
from app.sources.base import IDENTITIES, parse_identities, parse_results

logger = logging.getLogger(__name__)


class FileIncidentSource:
    """Reads a snapshot laid out as data_dir/identities.json and data_dir/<category>.json."""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = data_dir

    def path_for(self, endpoint: str) -> str:
        return os.path.join(self.data_dir, f"{endpoint}.json")

    def _read(self, endpoint: str) -> str:
        path = self.path_for(endpoint)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(endpoint, f"cannot read {path}: {e}") from e

    def fetch_identities(self) -> List[Tuple[str, Any]]:
        pairs = parse_identities(self._read(IDENTITIES))
        logger.debug("loaded %d identities from %s", len(pairs), self.path_for(IDENTITIES))
        return pairs

    def fetch_category(self, category: Category) -> List[RawRecord]:
        results = parse_results(self._read(category.value), category.value)
        logger.debug("loaded %d %s from %s", len(results), category.value, self.path_for(category.value))
        return results
