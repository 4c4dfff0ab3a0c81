"""Tests for the BatchProcessor state machine."""
import math
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from app.db.models.content_item import ContentItem
from app.models.job import JobBreakdown, JobStatus, ScanJob
from app.repositories.content_repository import ContentRepository
from app.services.batch_processor import BatchProcessor

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW_TS = int(NOW.timestamp())


def build_job(ids_by_category):
    pending = [record_id for ids in ids_by_category.values() for record_id in ids]
    return ScanJob(
        categories=list(ids_by_category),
        pending=pending,
        total_count=len(pending),
        breakdown=JobBreakdown(
            totals={category: len(ids) for category, ids in ids_by_category.items()},
            processed={category: 0 for category in ids_by_category},
        ),
        created_at=NOW - timedelta(minutes=1),
        updated_at=NOW - timedelta(minutes=1),
    )


def assert_invariants(job: ScanJob) -> None:
    assert job.remaining + job.processed_count + job.error_count == job.total_count
    assert job.processed_count + job.error_count <= job.total_count
    for category, processed in job.breakdown.processed.items():
        assert processed <= job.breakdown.totals[category]
    assert sum(job.breakdown.processed.values()) == job.processed_count


def test_batch_size_must_be_positive(records: ContentRepository):
    with pytest.raises(ValueError):
        BatchProcessor(records, batch_size=0)


def test_advance_processes_one_batch_fifo(db: Session, records: ContentRepository, make_items):
    """One call consumes exactly one batch from the front of the queue."""
    ids = make_items(120)
    job = build_job({"post": ids})

    job = BatchProcessor(records, batch_size=50).advance(job, now=NOW)

    assert job.processed_count == 50
    assert job.error_count == 0
    assert job.pending == ids[50:]
    assert job.status == JobStatus.RUNNING
    assert job.updated_at == NOW
    assert job.completed_at is None
    assert_invariants(job)

    scanned = db.query(ContentItem).filter(ContentItem.last_scanned_at == NOW_TS).all()
    assert sorted(item.id for item in scanned) == ids[:50]


def test_advance_does_not_mutate_input(records: ContentRepository, make_items):
    ids = make_items(3)
    job = build_job({"post": ids})

    BatchProcessor(records).advance(job, now=NOW)

    assert job.pending == ids
    assert job.processed_count == 0


def test_advance_completes_when_queue_drains(records: ContentRepository, make_items):
    """The batch that empties the queue also completes the job."""
    ids = make_items(3)
    job = build_job({"post": ids})

    job = BatchProcessor(records).advance(job, now=NOW)

    assert job.status == JobStatus.COMPLETED
    assert job.completed_at == NOW
    assert job.pending == []
    assert job.processed_count == 3
    assert_invariants(job)


@pytest.mark.parametrize("total", [1, 49, 50, 51, 137, 250])
def test_ceil_n_over_batch_size_calls_complete(records: ContentRepository, make_items, total):
    """ceil(N / 50) advances always reach completion."""
    job = build_job({"post": make_items(total)})
    processor = BatchProcessor(records, batch_size=50)

    for _ in range(math.ceil(total / 50)):
        assert job.status == JobStatus.RUNNING
        job = processor.advance(job, now=NOW)
        assert_invariants(job)

    assert job.status == JobStatus.COMPLETED
    assert job.processed_count == total


def test_empty_queue_completes_without_record_io(records: ContentRepository, monkeypatch):
    """An empty pending queue transitions straight to completed."""
    job = build_job({"post": []})

    def fail(*args, **kwargs):
        raise AssertionError("record store must not be touched")

    monkeypatch.setattr(records, "set_last_scanned", fail)

    job = BatchProcessor(records).advance(job, now=NOW)

    assert job.status == JobStatus.COMPLETED
    assert job.completed_at == NOW
    assert job.updated_at == NOW
    assert job.total_count == 0


def test_advance_on_terminal_job_is_noop(records: ContentRepository, make_items):
    """Completed jobs are returned unchanged, and completion is applied once."""
    job = build_job({"post": make_items(2)})
    processor = BatchProcessor(records)

    completed = processor.advance(job, now=NOW)
    later = processor.advance(completed, now=NOW + timedelta(hours=1))

    assert later == completed
    assert later.completed_at == NOW


def test_already_correct_value_counts_as_processed(records: ContentRepository, make_items):
    """A no-op write whose stored value already matches is a success."""
    ids = make_items(2, last_scanned_at=NOW_TS)
    job = build_job({"post": ids})

    job = BatchProcessor(records).advance(job, now=NOW)

    assert job.processed_count == 2
    assert job.error_count == 0
    assert job.breakdown.processed == {"post": 2}


def test_failed_write_counts_as_error(db: Session, records: ContentRepository, make_items):
    """A no-op write with a mismatching stored value is an error."""
    ids = make_items(3)
    job = build_job({"post": ids})

    # Item disappears between enumeration and processing
    db.query(ContentItem).filter(ContentItem.id == ids[1]).delete()
    db.commit()

    job = BatchProcessor(records).advance(job, now=NOW)

    assert job.processed_count == 2
    assert job.error_count == 1
    assert job.status == JobStatus.COMPLETED
    assert_invariants(job)


def test_write_failure_with_stale_value_counts_as_error(records: ContentRepository, make_items, monkeypatch):
    """The write primitive reporting no change is not trusted on its own."""
    ids = make_items(2, last_scanned_at=NOW_TS - 3600)
    job = build_job({"post": ids})
    monkeypatch.setattr(records, "set_last_scanned", lambda record_id, scanned_at: False)

    job = BatchProcessor(records).advance(job, now=NOW)

    assert job.processed_count == 0
    assert job.error_count == 2
    assert job.breakdown.processed == {"post": 0}


def test_breakdown_uses_current_category(db: Session, records: ContentRepository, make_items):
    """Processed counters follow the item's type at update time."""
    posts = make_items(2, content_type="post")
    pages = make_items(1, content_type="page")
    job = build_job({"post": posts, "page": pages})

    item = db.get(ContentItem, posts[0])
    item.content_type = "page"
    db.commit()

    job = BatchProcessor(records).advance(job, now=NOW)

    assert job.breakdown.processed == {"post": 1, "page": 2}
    assert job.processed_count == 3
    assert job.remaining + job.processed_count + job.error_count == job.total_count
    assert sum(job.breakdown.processed.values()) == job.processed_count
    # an item that moved between two selected types overshoots its new type's total
    assert job.breakdown.processed["page"] > job.breakdown.totals["page"]
