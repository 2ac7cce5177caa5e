# app/pipeline/orchestrator.py
"""
Fan-out/fan-in retrieval.

One task per category plus one that fetches the identity table and builds the
directory. All tasks are joined before anything is merged. A failed category is
left out of the result; a failed identity fetch degrades to an empty directory.
MalformedIdentityData is not caught here and ends the run.
"""
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from app.core.errors import FetchError, MalformedIdentityData
from app.core.models import Category, RecordBatch
from app.pipeline.identities import IdentityDirectory
from app.sources.base import IncidentSource

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    directory: IdentityDirectory
    batches: List[RecordBatch] = field(default_factory=list)
    failed: Dict[Category, str] = field(default_factory=dict)
    identity_source_ok: bool = True


class FetchOrchestrator:
    def __init__(
        self,
        source: IncidentSource,
        categories: Optional[Iterable[Category]] = None,
        max_workers: Optional[int] = None,
    ):
        self.source = source
        self.categories: List[Category] = list(categories) if categories is not None else list(Category)
        self.max_workers = max_workers or len(self.categories) + 1

    def _load_directory(self) -> IdentityDirectory:
        return IdentityDirectory.build(self.source.fetch_identities())

    def run(self) -> FetchResult:
        started = time.perf_counter()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            tasks: Dict[Category, Future] = {c: pool.submit(self.source.fetch_category, c) for c in self.categories}
            logger.debug("loading identities")
            identity_task = pool.submit(self._load_directory)
            logger.debug("started %d tasks. Waiting...", len(tasks) + 1)

            result = FetchResult(directory=self._collect_directory(identity_task))
            result.identity_source_ok = identity_task.exception() is None
            # declared order, not completion order, so merging is deterministic
            for category, task in tasks.items():
                try:
                    records = task.result()
                except FetchError as e:
                    logger.error("error retrieving %s: %s", category.value, e.reason)
                    result.failed[category] = e.reason
                    continue
                except Exception as e:
                    logger.warning("%s task failed unexpectedly", category.value, exc_info=True)
                    result.failed[category] = f"{type(e).__name__}: {e}"
                    continue
                result.batches.append(RecordBatch(category, records))
        logger.debug("finished processing all tasks. took %.2fs", time.perf_counter() - started)
        return result

    @staticmethod
    def _collect_directory(identity_task: Future) -> IdentityDirectory:
        try:
            directory = identity_task.result()
        except FetchError as e:
            logger.error("error retrieving identities: %s", e.reason)
            return IdentityDirectory.empty()
        except MalformedIdentityData:
            raise
        except Exception:
            logger.warning("identities task failed unexpectedly", exc_info=True)
            return IdentityDirectory.empty()
        logger.debug("loaded %d identities", len(directory))
        return directory
