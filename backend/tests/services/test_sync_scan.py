"""Tests for the SynchronousScanner."""
from datetime import datetime, timezone

from app.db.models.content_item import ContentItem
from app.services.sync_scan import SynchronousScanner

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW_TS = int(NOW.timestamp())


def test_scans_everything_and_reports_breakdown(records, make_items, make_terms, db):
    make_items(4, content_type="post")
    make_items(2, content_type="page")
    make_items(3, content_type="post", status="private")
    make_terms(["News"])

    result = SynchronousScanner(records).run(["post", "page"], now=NOW)

    assert (result.processed, result.errors, result.total) == (6, 0, 6)
    assert result.breakdown.totals == {"post": 4, "page": 2}
    assert result.breakdown.processed == {"post": 4, "page": 2}
    assert result.breakdown.extras == {"categories": 1}

    db.expire_all()
    scanned = db.query(ContentItem).filter(ContentItem.last_scanned_at == NOW_TS).count()
    assert scanned == 6


def test_progress_callback_per_chunk(records, make_items):
    make_items(450)
    calls = []

    SynchronousScanner(records).run(
        ["post"], chunk_size=200, on_progress=lambda done, total: calls.append((done, total)), now=NOW
    )

    assert calls == [(200, 450), (400, 450), (450, 450)]


def test_commits_each_chunk(records, make_items, monkeypatch):
    make_items(5)
    commits = []
    original = records.commit
    monkeypatch.setattr(records, "commit", lambda: (commits.append(1), original()))

    SynchronousScanner(records).run(["post"], chunk_size=2, now=NOW)

    assert len(commits) == 3


def test_empty_selection(records, make_items):
    make_items(2, status="draft")
    calls = []

    result = SynchronousScanner(records).run(["post"], on_progress=lambda d, t: calls.append((d, t)), now=NOW)

    assert (result.processed, result.errors, result.total) == (0, 0, 0)
    assert result.breakdown.processed == {"post": 0}
    assert calls == []


def test_already_scanned_items_still_count(records, make_items):
    make_items(3, last_scanned_at=NOW_TS)

    result = SynchronousScanner(records).run(["post"], now=NOW)

    assert (result.processed, result.errors) == (3, 0)
