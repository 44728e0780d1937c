"""
Free-text timeline search parsing

Supported tokens:
- tag:<term>                 matches inside any tag name
- lang:<term>, language:<term>  matches inside the post language
- date:<term>                matches inside the post date (e.g. 2026-02)
- anything else              matches inside author, language, code and tags
"""
from dataclasses import dataclass, field
from typing import List, Optional

_PREFIXES = (
    ("tag:", "tag_terms"),
    ("lang:", "lang_terms"),
    ("language:", "lang_terms"),
    ("date:", "date_terms"),
)


def normalize_search_text(value: str) -> str:
    return value.strip().lower()


@dataclass
class SearchQuery:
    """Parsed search; categories are ANDed, terms within one are ANDed"""
    raw: str
    text_terms: List[str] = field(default_factory=list)
    tag_terms: List[str] = field(default_factory=list)
    lang_terms: List[str] = field(default_factory=list)
    date_terms: List[str] = field(default_factory=list)


def parse_search_query(query: Optional[str]) -> Optional[SearchQuery]:
    """Parse a raw search string, returning None when there is nothing to filter on"""
    raw = str(query if query is not None else "").strip()
    if not raw:
        return None

    parsed = SearchQuery(raw=raw)

    for token in raw.split():
        lower = token.lower()
        for prefix, bucket in _PREFIXES:
            if lower.startswith(prefix):
                term = normalize_search_text(token[len(prefix):])
                if term:
                    getattr(parsed, bucket).append(term)
                break
        else:
            parsed.text_terms.append(normalize_search_text(token))

    return parsed
