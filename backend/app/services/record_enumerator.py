"""
Record Enumerator

Turns a requested set of content types into the ordered set of item IDs a
scan has to visit, partitioned by type.

Usage:
    categories = normalize_categories(["post", "Page"], allowed, default)
    ids_by_type = RecordEnumerator(content_repository).enumerate(categories)
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from app.repositories.content_repository import ContentRepository

logger = logging.getLogger(__name__)

_KEY_INVALID_CHARS = re.compile(r"[^a-z0-9_\-]")


def sanitize_key(value: str) -> str:
    """Lowercase a label and drop everything outside ``[a-z0-9_-]``."""
    return _KEY_INVALID_CHARS.sub("", str(value).strip().lower())


def filter_categories(
    requested: Optional[Iterable[str]], allowed: Sequence[str]
) -> List[str]:
    """
    Sanitize, de-duplicate and validate requested categories.

    Args:
        requested: Raw labels from the caller (may be None)
        allowed: Known category labels

    Returns:
        Valid labels in request order; unknown labels are silently dropped
    """
    allowed_set = set(allowed)
    categories: List[str] = []
    for raw in requested or []:
        key = sanitize_key(raw)
        if key and key in allowed_set and key not in categories:
            categories.append(key)
    return categories


def normalize_categories(
    requested: Optional[Iterable[str]],
    allowed: Sequence[str],
    default: Sequence[str],
) -> List[str]:
    """
    Validate requested categories, falling back to the default pair.

    Args:
        requested: Raw labels from the caller (may be None or empty)
        allowed: Known category labels
        default: Substituted when nothing valid remains

    Returns:
        Non-empty list of category labels
    """
    requested = list(requested or [])
    categories = filter_categories(requested, allowed)
    if not categories:
        if requested:
            logger.info(f"No valid types in {requested}, using defaults {list(default)}")
        categories = list(default)
    return categories


class RecordEnumerator:
    """Read-only enumeration of eligible items per category."""

    def __init__(self, records: ContentRepository):
        self.records = records

    def enumerate(self, categories: Sequence[str]) -> Dict[str, List[int]]:
        """
        Fetch the complete eligible ID list for each category in one pass.

        Args:
            categories: Already-normalized category labels

        Returns:
            Ordered mapping category -> item IDs (ascending)
        """
        ids_by_category: Dict[str, List[int]] = {}
        for category in categories:
            ids_by_category[category] = self.records.list_eligible_ids(category)
            logger.debug(f"Enumerated {len(ids_by_category[category])} eligible '{category}' items")
        return ids_by_category
