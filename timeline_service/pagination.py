"""
Page arithmetic shared by in-memory and store-side pagination
"""
from typing import List, Optional, Sequence, Tuple, TypeVar

from .config import settings

T = TypeVar("T")


def coerce_int(value: Optional[str], default: int) -> int:
    """Read a query-string number leniently; fractions truncate, garbage gives `default`"""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def clamp_page(page: Optional[int]) -> int:
    """1-based page; anything below 1 (or missing) is page 1"""
    if page is None or page < 1:
        return 1
    return int(page)


def clamp_limit(limit: Optional[int], max_limit: int = settings.MAX_PAGE_SIZE) -> int:
    """Clamp a requested page size into [1, max_limit]"""
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    return min(max(1, int(limit)), max_limit)


def page_window(
    page: Optional[int],
    limit: Optional[int],
    max_limit: int = settings.MAX_PAGE_SIZE
) -> Tuple[int, int]:
    """Return (offset, limit) after clamping"""
    safe_page = clamp_page(page)
    safe_limit = clamp_limit(limit, max_limit)
    return (safe_page - 1) * safe_limit, safe_limit


def paginate(
    items: Sequence[T],
    page: Optional[int],
    limit: Optional[int],
    max_limit: int = settings.MAX_PAGE_SIZE
) -> Tuple[List[T], bool]:
    """Slice a fully ranked sequence; has_more is True when items remain past the slice"""
    offset, safe_limit = page_window(page, limit, max_limit)
    end = offset + safe_limit
    return list(items[offset:end]), end < len(items)


def split_probe(rows: Sequence[T], limit: int) -> Tuple[List[T], bool]:
    """
    Split a store page fetched with limit + 1 rows.

    The extra row only signals that another page exists and is dropped.
    """
    return list(rows[:limit]), len(rows) > limit
