"""
collection.py — In-memory, insertion-ordered record collection.

One instance per record type. Ids are "<prefix>-<n>" from a per-collection
counter; caller-supplied ids are kept as-is. Writing an existing id replaces
the record in place (last write wins, original position kept).
"""
from __future__ import annotations

import itertools
import logging
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class RecordCollection(Generic[R]):
    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self._records: dict[str, R] = {}
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def _next_id(self) -> str:
        while True:
            candidate = f"{self.prefix}-{next(self._counter)}"
            if candidate not in self._records:
                return candidate

    def add(self, record: R) -> R:
        """Store record, assigning an id if it has none. Returns the stored record."""
        record_id = getattr(record, "id", None)
        if not record_id:
            record = record.model_copy(update={"id": self._next_id()})
            record_id = record.id  # type: ignore[attr-defined]
        replaced = record_id in self._records
        self._records[record_id] = record
        logger.debug("%s %s id=%s", "Replaced" if replaced else "Added", self.prefix, record_id)
        return record

    def get(self, record_id: str) -> Optional[R]:
        return self._records.get(record_id)

    def remove(self, record_id: str) -> bool:
        """Delete by id. Returns False when the id is unknown."""
        removed = self._records.pop(record_id, None) is not None
        if removed:
            logger.debug("Removed %s id=%s", self.prefix, record_id)
        return removed

    def list(self, newest_first: bool = False) -> list[R]:
        records = list(self._records.values())
        if newest_first:
            records.reverse()
        return records

    def clear(self) -> None:
        self._records.clear()
        self._counter = itertools.count(1)
