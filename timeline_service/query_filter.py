"""
In-memory search filter over hydrated timeline entries
"""
from typing import List, Optional

from .query_parser import SearchQuery, normalize_search_text
from .schemas import TimelineEntry
from .timestamps import parse_db_timestamp


def fuzzy_includes(haystack: str, needle: str) -> bool:
    """Case-insensitive substring containment; an empty needle always matches"""
    needle = normalize_search_text(needle)
    if not needle:
        return True
    return needle in normalize_search_text(haystack)


def build_searchable_date_text(created_at_raw: str) -> str:
    """
    Render a stored timestamp as every date form a search term may target:
    the raw value, YYYY-MM-DD, YYYY/MM/DD, YYYY-MM and YYYY (UTC).
    """
    created = parse_db_timestamp(created_at_raw)
    if created is None:
        return normalize_search_text(str(created_at_raw or ""))

    yyyy_mm_dd = created.strftime("%Y-%m-%d")
    parts = [
        str(created_at_raw),
        yyyy_mm_dd,
        yyyy_mm_dd.replace("-", "/"),
        yyyy_mm_dd[:7],
        yyyy_mm_dd[:4],
    ]
    return normalize_search_text(" ".join(parts))


def build_searchable_text(entry: TimelineEntry) -> str:
    return normalize_search_text("\n".join([
        entry.author.name,
        entry.author.handle,
        entry.language,
        entry.code,
        " ".join(entry.tags),
    ]))


def matches_query(entry: TimelineEntry, query: SearchQuery) -> bool:
    """True when the entry satisfies every term of every category"""
    tag_values = [normalize_search_text(tag) for tag in entry.tags]
    if not all(any(fuzzy_includes(tag, term) for tag in tag_values) for term in query.tag_terms):
        return False

    language_value = normalize_search_text(entry.language)
    if not all(fuzzy_includes(language_value, term) for term in query.lang_terms):
        return False

    if query.date_terms:
        date_value = build_searchable_date_text(entry.created_at)
        if not all(fuzzy_includes(date_value, term) for term in query.date_terms):
            return False

    if query.text_terms:
        searchable_text = build_searchable_text(entry)
        if not all(fuzzy_includes(searchable_text, term) for term in query.text_terms):
            return False

    return True


def filter_entries(
    entries: List[TimelineEntry],
    query: Optional[SearchQuery]
) -> List[TimelineEntry]:
    """Keep the entries matching `query`, preserving order"""
    if query is None:
        return entries
    return [entry for entry in entries if matches_query(entry, query)]
