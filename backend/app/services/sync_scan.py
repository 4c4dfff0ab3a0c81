"""Direct, non-resumable scan of every eligible item in one call."""
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from app.models.job import JobBreakdown, utcnow
from app.models.progress import SyncScanResult
from app.repositories.content_repository import ContentRepository
from app.services.batch_processor import BatchProcessor
from app.services.record_enumerator import RecordEnumerator

logger = logging.getLogger(__name__)

AUX_TAXONOMY = "category"

ProgressCallback = Callable[[int, int], None]


class SynchronousScanner:
    """
    Drains the full eligible set without touching the job store.

    Meant for invocations outside a request/response cycle (the daily
    timer, the command-line tool) or for small selections.
    """

    def __init__(self, records: ContentRepository, processor: Optional[BatchProcessor] = None):
        self.records = records
        self.processor = processor or BatchProcessor(records)
        self.enumerator = RecordEnumerator(records)

    def run(
        self,
        categories: List[str],
        chunk_size: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        now: Optional[datetime] = None,
    ) -> SyncScanResult:
        """
        Scan all eligible items of the given categories.

        Items are committed chunk by chunk and ``on_progress(done, total)``
        is called after each chunk.

        Args:
            categories: Already-normalized content types
            chunk_size: Items per commit; the whole set when omitted
            on_progress: Optional progress callback
            now: Clock override

        Returns:
            Processed/error/total counts with the per-type breakdown
        """
        ids_by_category = self.enumerator.enumerate(categories)
        all_ids = _flatten(categories, ids_by_category)
        total = len(all_ids)

        processed_by_category: Dict[str, int] = {category: 0 for category in categories}
        processed = 0
        errors = 0
        scanned_at = int((now or utcnow()).timestamp())
        chunk = max(1, chunk_size or total or 1)

        logger.info(f"Synchronous scan of {total} items for {categories}")

        for offset in range(0, total, chunk):
            for record_id in all_ids[offset : offset + chunk]:
                if not self.processor.scan_record(record_id, scanned_at):
                    errors += 1
                    continue
                processed += 1
                category = self.records.get_category(record_id)
                if category in processed_by_category:
                    processed_by_category[category] += 1

            self.records.commit()
            if on_progress is not None:
                on_progress(min(offset + chunk, total), total)

        logger.info(f"Synchronous scan finished: {processed} processed, {errors} errors, {total} total")

        return SyncScanResult(
            processed=processed,
            errors=errors,
            total=total,
            categories=list(categories),
            breakdown=JobBreakdown(
                totals={category: len(ids_by_category[category]) for category in categories},
                processed=processed_by_category,
                extras={"categories": self.records.count_terms(AUX_TAXONOMY)},
            ),
        )


def _flatten(categories: Iterable[str], ids_by_category: Dict[str, List[int]]) -> List[int]:
    return [record_id for category in categories for record_id in ids_by_category[category]]
