# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Ordered, path-deduplicated record collection."""

import logging
from collections.abc import Iterable, Iterator

from vstscan.model import Record

logger = logging.getLogger(__name__)


def merge_records(existing: Iterable[Record], incoming: Iterable[Record]) -> list[Record]:
    """Append incoming records whose path is not yet known.

    Existing records keep their order and content; a rescanned path never
    replaces the stored record. Paths are compared as exact strings.

    Args:
        existing: Records already stored.
        incoming: Newly scanned records.

    Returns:
        Existing records followed by the new ones.
    """
    merged = list(existing)
    seen = {record.path for record in merged}
    for record in incoming:
        if record.path in seen:
            continue
        seen.add(record.path)
        merged.append(record)
    return merged


class RecordStore:
    """Hold the records of one scan run in insertion order."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        """Initialize the store.

        Args:
            records: Initial records, typically loaded from a document.
        """
        self._records: list[Record] = merge_records((), records)

    def merge(self, incoming: Iterable[Record]) -> int:
        """Merge newly scanned records into the store.

        Args:
            incoming: Newly scanned records.

        Returns:
            Number of records added.
        """
        before = len(self._records)
        self._records = merge_records(self._records, incoming)
        added = len(self._records) - before
        logger.debug(f"Merged records (existing={before} added={added})")
        return added

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    @property
    def valid_count(self) -> int:
        return sum(1 for record in self._records if record.is_valid)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._records))
