"""
Posts Scan Script

Scans published content and stamps each item with the current scan
timestamp, the same way the admin scan does, but synchronously in one run.

What it does:
1. Validates the requested content types against the public ones
2. Lists every published item of those types
3. Writes the scan marker chunk by chunk
4. Prints a per-type summary

Usage:
    python scan_posts.py                      # All public content types
    python scan_posts.py --types post,page
    python scan_posts.py --types post,page,product --batch 100
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal
from app.repositories.content_repository import ContentRepository
from app.services.record_enumerator import filter_categories
from app.services.sync_scan import SynchronousScanner

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_TYPES = 1
EXIT_COMPLETED_WITH_ERRORS = 2


def plural_label(content_type: str) -> str:
    """Display label for a content type (post -> posts, news -> news)."""
    if content_type == "post":
        return "posts"
    if content_type == "page":
        return "pages"
    return content_type if content_type.endswith("s") else f"{content_type}s"


def resolve_types(types_arg: Optional[str], allowed: List[str]) -> List[str]:
    """
    Resolve the --types option.

    Args:
        types_arg: Comma-separated types, or None/empty for all public types
        allowed: Public content types

    Returns:
        Valid types; empty when every requested type is invalid
    """
    if not types_arg:
        return list(allowed)
    return filter_categories(types_arg.split(","), allowed)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scan published content and update the last-scan marker"
    )
    parser.add_argument(
        "--types",
        default=None,
        help="Comma-separated content types to scan (default: all public types)",
    )
    parser.add_argument(
        "--batch",
        type=int,
        default=settings.SCAN_CLI_CHUNK_SIZE,
        help=f"Items per chunk (default: {settings.SCAN_CLI_CHUNK_SIZE})",
    )
    return parser


def main(
    argv: Optional[List[str]] = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> int:
    """
    Main entry point for the script.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)
    batch = max(1, args.batch)

    post_types = resolve_types(args.types, settings.SCAN_PUBLIC_CONTENT_TYPES)
    if not post_types:
        logger.error(
            "No valid public content types to scan. Use --types=post,page or omit to scan all public types."
        )
        return EXIT_INVALID_TYPES

    def on_progress(done: int, total: int) -> None:
        logger.info(f"Scanning posts: {done}/{total}")

    session = session_factory()
    try:
        records = ContentRepository(session, eligible_status=settings.SCAN_ELIGIBLE_STATUS)
        result = SynchronousScanner(records).run(post_types, chunk_size=batch, on_progress=on_progress)
    finally:
        session.close()

    if result.total == 0:
        print("No published posts found for the selected types.")
        return EXIT_OK

    print("")
    print("Summary:")
    for content_type in post_types:
        print(
            f"  {plural_label(content_type)}: "
            f"{result.breakdown.processed.get(content_type, 0)} / {result.breakdown.totals.get(content_type, 0)}"
        )
    print(f"  categories: {result.breakdown.extras.get('categories', 0)}")
    print(f"Processed: {result.processed} | Errors: {result.errors} | Total: {result.total}")

    if result.errors > 0:
        logger.warning("Completed with errors.")
        return EXIT_COMPLETED_WITH_ERRORS

    logger.info("Scan completed successfully.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
