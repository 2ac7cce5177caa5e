# app/sources/snapshot.py
"""Download every endpoint into data_dir so later runs can use FileIncidentSource."""
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List

from app.core.errors import FetchError
from app.core.models import Category
from app.sources.base import IDENTITIES
from app.sources.http_source import HttpIncidentSource

logger = logging.getLogger(__name__)

SNAPSHOT_ENDPOINTS = [IDENTITIES] + [c.value for c in Category]


@dataclass
class SnapshotResult:
    written: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)


def _save(source: HttpIncidentSource, endpoint: str, data_dir: str) -> str:
    body = source.fetch_raw(endpoint)
    path = os.path.join(data_dir, f"{endpoint}.json")
    with open(path, "w", encoding="utf-8") as f:
        f.write(body)
    logger.info("writing %d bytes to %s", len(body), path)
    return path


def download_snapshot(source: HttpIncidentSource, data_dir: str = "data", max_workers: int = 8) -> SnapshotResult:
    os.makedirs(data_dir, exist_ok=True)
    endpoints: List[str] = list(SNAPSHOT_ENDPOINTS)
    result = SnapshotResult()

    started = time.perf_counter()
    logger.info("started %d tasks. Waiting...", len(endpoints))
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {endpoint: pool.submit(_save, source, endpoint, data_dir) for endpoint in endpoints}
        for endpoint, future in futures.items():
            try:
                result.written[endpoint] = future.result()
            except (FetchError, OSError) as e:
                logger.error("error saving %s: %s", endpoint, e)
                result.failed[endpoint] = str(e)
    logger.info("finished processing all tasks. took %.2fs", time.perf_counter() - started)
    return result
