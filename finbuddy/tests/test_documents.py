"""Simulated document processing tests on a VirtualClock."""
from __future__ import annotations

import random
from datetime import date, datetime, timezone

import pytest

from finbuddy.clock import VirtualClock
from finbuddy.records.collection import RecordCollection
from finbuddy.records.documents import (
    BILL_CATEGORIES,
    STATEMENT_CATEGORIES,
    DocumentProcessor,
    format_file_size,
    media_kind_for,
    simulate_extraction,
)
from finbuddy.records.schemas import (
    BankStatementExtract,
    BillExtract,
    DocumentRecord,
    DocumentStatus,
    MediaKind,
)

FIXED_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def processor(clock: VirtualClock, rng: random.Random) -> DocumentProcessor:
    collection: RecordCollection[DocumentRecord] = RecordCollection("doc")
    return DocumentProcessor(
        collection,
        clock=clock,
        rng=rng,
        delay_seconds=3.0,
        max_size_bytes=10 * 1024 * 1024,
        now=lambda: FIXED_NOW,
    )


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (2_048_000, "1.95 MB"),
        (1_024_000, "1000 KB"),
        (10 * 1024 * 1024, "10 MB"),
        (3 * 1024 ** 3, "3 GB"),
    ],
)
def test_format_file_size(size: int, expected: str) -> None:
    assert format_file_size(size) == expected


def test_media_kind_for() -> None:
    assert media_kind_for("application/pdf") == MediaKind.pdf
    assert media_kind_for("image/png") == MediaKind.image
    assert media_kind_for(None, "Statement.PDF") == MediaKind.pdf
    assert media_kind_for(None, "scan.jpg") == MediaKind.image


def test_extraction_by_keyword(rng: random.Random) -> None:
    today = date(2024, 3, 1)

    statement = simulate_extraction("HDFC_Bank_March.pdf", rng, today)
    assert isinstance(statement, BankStatementExtract)
    assert 20 <= statement.transactions <= 69
    assert 40_000 <= statement.total_income <= 59_999
    assert 25_000 <= statement.total_expenses <= 39_999
    assert statement.categories == STATEMENT_CATEGORIES

    bill = simulate_extraction("electricity-invoice.png", rng, today)
    assert isinstance(bill, BillExtract)
    assert 1_000 <= bill.amount <= 5_999
    assert 0 <= (bill.due_date - today).days <= 29
    assert bill.category in BILL_CATEGORIES
    assert bill.vendor == "Service Provider"

    assert simulate_extraction("holiday.jpg", rng, today) is None


def test_extraction_is_reproducible_with_seed() -> None:
    today = date(2024, 3, 1)
    first = simulate_extraction("bill.pdf", random.Random(99), today)
    second = simulate_extraction("bill.pdf", random.Random(99), today)
    assert first == second


def test_upload_completes_after_delay(processor: DocumentProcessor, clock: VirtualClock) -> None:
    record = processor.upload("bank_statement.pdf", 2_048_000, "application/pdf")
    assert record.id == "doc-1"
    assert record.status == DocumentStatus.processing
    assert record.uploaded_at == FIXED_NOW
    assert processor.pending == 1

    clock.advance(2)
    assert processor.collection.get(record.id).status == DocumentStatus.processing

    clock.advance(1)
    done = processor.collection.get(record.id)
    assert done.status == DocumentStatus.completed
    assert isinstance(done.extracted_data, BankStatementExtract)
    assert processor.pending == 0


def test_upload_without_keyword_has_no_extraction(processor: DocumentProcessor, clock: VirtualClock) -> None:
    record = processor.upload("photo.png", 1_000, "image/png")
    clock.advance(3)
    done = processor.collection.get(record.id)
    assert done.status == DocumentStatus.completed
    assert done.extracted_data is None


def test_oversized_upload_ends_in_error(processor: DocumentProcessor, clock: VirtualClock) -> None:
    record = processor.upload("bill.pdf", 11 * 1024 * 1024, "application/pdf")
    clock.advance(3)
    done = processor.collection.get(record.id)
    assert done.status == DocumentStatus.error
    assert done.extracted_data is None
    assert "11 MB" in done.error_message


def test_delete_cancels_pending_completion(processor: DocumentProcessor, clock: VirtualClock) -> None:
    record = processor.upload("bill.pdf", 100, "application/pdf")
    assert processor.delete(record.id)

    assert processor.pending == 0
    assert clock.advance(3) == 0
    assert processor.collection.get(record.id) is None


def test_delete_unknown_document(processor: DocumentProcessor) -> None:
    assert not processor.delete("doc-404")


def test_completion_keeps_list_position(processor: DocumentProcessor, clock: VirtualClock) -> None:
    first = processor.upload("a_bill.pdf", 100, "application/pdf")
    second = processor.upload("b_statement.pdf", 100, "application/pdf")
    clock.advance(3)
    assert [doc.id for doc in processor.collection.list()] == [first.id, second.id]
    assert all(doc.status == DocumentStatus.completed for doc in processor.collection.list())
