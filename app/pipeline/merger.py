# app/pipeline/merger.py
"""
Fold per-category batches into one timestamp-ordered set.

By default the set is keyed by the record timestamp alone, so a later record
with the same timestamp replaces the earlier one. With preserve_collisions the
key becomes (timestamp, insertion sequence) and nothing is replaced.
"""
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from app.core.errors import RecordError
from app.core.models import Category, NormalizedRecord, RawRecord, RecordBatch, RunStats
from app.pipeline.identities import IdentityDirectory
from app.pipeline.normalizer import normalize_record

logger = logging.getLogger(__name__)

MergeKey = Union[float, Tuple[float, int]]
BatchInput = Union[RecordBatch, Tuple[Category, List[RawRecord]]]


class MergedSet:
    def __init__(self, preserve_collisions: bool = False):
        self.preserve_collisions = preserve_collisions
        self._records: Dict[MergeKey, NormalizedRecord] = {}
        self._seq = 0
        self.overwritten = 0

    def add(self, record: NormalizedRecord) -> None:
        if self.preserve_collisions:
            key: MergeKey = (record.timestamp, self._seq)
        else:
            key = record.timestamp
            previous = self._records.get(key)
            if previous is not None:
                self.overwritten += 1
                logger.warning(
                    "timestamp %r collision: %s record replaced by %s record",
                    key, previous.category.value, record.category.value,
                )
        self._seq += 1
        self._records[key] = record

    def __iter__(self) -> Iterator[NormalizedRecord]:
        for key in sorted(self._records):
            yield self._records[key]

    def __len__(self) -> int:
        return len(self._records)


def merge(
    batches: Iterable[BatchInput],
    directory: IdentityDirectory,
    stats: Optional[RunStats] = None,
    preserve_collisions: bool = False,
) -> MergedSet:
    merged = MergedSet(preserve_collisions=preserve_collisions)
    for batch in batches:
        category, records = (batch.category, batch.records) if isinstance(batch, RecordBatch) else batch
        dropped: Dict[str, int] = {}
        for raw in records:
            try:
                merged.add(normalize_record(category, raw, directory))
            except RecordError as exc:
                dropped[exc.kind] = dropped.get(exc.kind, 0) + 1
                if stats is not None:
                    stats.record_drop(category.value, exc.kind)
                logger.debug("dropping record: %s", exc)
        if dropped:
            logger.debug("%s: dropped %d of %d records %s", category.value, sum(dropped.values()), len(records), dropped)

    if stats is not None:
        stats.merged = len(merged)
        stats.overwritten = merged.overwritten
    logger.debug("populated %d results (%d overwritten)", len(merged), merged.overwritten)
    return merged
