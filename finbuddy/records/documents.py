"""
documents.py — Simulated document processing.

upload() stores a DocumentRecord in `processing` and schedules its completion on
the clock. When the timer fires the record moves to a terminal state:
  - completed, with synthetic extracted fields chosen by filename keyword
  - error, when the upload exceeds the size limit
Extraction values come from an injected random.Random so tests can seed them.

No real parsing happens here: filenames drive everything.
"""
from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from finbuddy.clock import Clock, TimerHandle, default_clock
from finbuddy.config import settings
from finbuddy.records.collection import RecordCollection
from finbuddy.records.schemas import (
    BankStatementExtract,
    BillExtract,
    DocumentRecord,
    DocumentStatus,
    ExtractedData,
    MediaKind,
)

logger = logging.getLogger(__name__)

BANK_KEYWORDS = ("bank", "statement")
BILL_KEYWORDS = ("bill", "invoice")

STATEMENT_CATEGORIES = ["Salary", "Food", "Transport", "Bills", "Entertainment"]
BILL_CATEGORIES = ["Electricity", "Water", "Internet", "Phone"]
BILL_VENDOR = "Service Provider"

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def media_kind_for(content_type: Optional[str], filename: str = "") -> MediaKind:
    """PDF when the MIME type (or, lacking one, the extension) says so; image otherwise."""
    if content_type:
        return MediaKind.pdf if "pdf" in content_type.lower() else MediaKind.image
    return MediaKind.pdf if filename.lower().endswith(".pdf") else MediaKind.image


def format_file_size(size_bytes: int) -> str:
    """1024-based human-readable size, at most two decimals: 2048000 → '1.95 MB'."""
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def simulate_extraction(
    filename: str,
    rng: random.Random,
    today: date,
) -> Optional[ExtractedData]:
    """
    Synthetic fields by filename keyword (case-insensitive):
      bank / statement → transaction summary
      bill / invoice   → single amount, due date, category, vendor
      anything else    → None
    """
    name = filename.lower()
    if any(keyword in name for keyword in BANK_KEYWORDS):
        return BankStatementExtract(
            transactions=rng.randint(20, 69),
            total_income=rng.randint(40_000, 59_999),
            total_expenses=rng.randint(25_000, 39_999),
            categories=list(STATEMENT_CATEGORIES),
        )
    if any(keyword in name for keyword in BILL_KEYWORDS):
        return BillExtract(
            amount=rng.randint(1_000, 5_999),
            due_date=today + timedelta(days=rng.randint(0, 29)),
            category=rng.choice(BILL_CATEGORIES),
            vendor=BILL_VENDOR,
        )
    return None


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------

class DocumentProcessor:
    """Owns the documents collection and the pending completion timers."""

    def __init__(
        self,
        collection: RecordCollection[DocumentRecord],
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        delay_seconds: float = settings.document_processing_delay_seconds,
        max_size_bytes: int = settings.max_upload_size_bytes,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.collection = collection
        self.clock = default_clock(clock)
        self.rng = rng if rng is not None else random.Random(settings.random_seed)
        self.delay_seconds = delay_seconds
        self.max_size_bytes = max_size_bytes
        self._now = now
        self._timers: dict[str, TimerHandle] = {}

    @property
    def pending(self) -> int:
        return len(self._timers)

    def upload(
        self,
        name: str,
        size_bytes: int,
        content_type: Optional[str] = None,
    ) -> DocumentRecord:
        """Store a processing record and schedule its completion."""
        record = self.collection.add(
            DocumentRecord(
                name=name,
                media_kind=media_kind_for(content_type, name),
                size_bytes=size_bytes,
                uploaded_at=self._now(),
            )
        )
        doc_id = record.id
        self._timers[doc_id] = self.clock.call_later(
            self.delay_seconds, lambda: self._complete(doc_id)
        )
        logger.info(
            "Document queued id=%s media_kind=%s size=%d",
            doc_id, record.media_kind.value, size_bytes,
        )
        return record

    def delete(self, doc_id: str) -> bool:
        """Remove a document; a pending completion is cancelled."""
        timer = self._timers.pop(doc_id, None)
        if timer is not None:
            timer.cancel()
        return self.collection.remove(doc_id)

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def _complete(self, doc_id: str) -> None:
        self._timers.pop(doc_id, None)
        record = self.collection.get(doc_id)
        if record is None or record.status != DocumentStatus.processing:
            return

        if record.size_bytes > self.max_size_bytes:
            updated = record.model_copy(update={
                "status": DocumentStatus.error,
                "error_message": (
                    f"File is {format_file_size(record.size_bytes)}; "
                    f"the limit is {format_file_size(self.max_size_bytes)}."
                ),
            })
        else:
            updated = record.model_copy(update={
                "status": DocumentStatus.completed,
                "extracted_data": simulate_extraction(
                    record.name, self.rng, self._now().date()
                ),
            })

        self.collection.add(updated)
        logger.info("Document processed id=%s status=%s", doc_id, updated.status.value)
