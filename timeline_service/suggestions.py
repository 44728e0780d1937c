"""
Composer autocomplete values: store usage merged with a built-in master list
"""
from typing import Iterable, List, Optional

COMPOSER_MASTER = {
    "languages": [
        "TypeScript", "JavaScript", "Python", "Rust", "Go", "Java", "Kotlin",
        "Swift", "C#", "PHP", "Ruby", "SQL", "Bash", "Shell", "Mermaid",
    ],
    "versions": ["latest", "v5", "v4", "v3", "3.12", "3.11", "1.81", "1.80", "17", "21"],
    "tags": [
        "react", "nextjs", "expo", "typescript", "javascript", "python", "rust",
        "go", "sql", "drizzle", "turso", "hono", "tailwind", "mermaid", "zod",
    ],
}


def merge_suggestions(
    values: Iterable[Optional[str]],
    fallback: Iterable[str],
    max_items: int = 80
) -> List[str]:
    """Trim, drop blanks, dedupe case-insensitively (first spelling wins), cap"""
    unique = {}
    for raw in [*values, *fallback]:
        if not raw:
            continue
        value = raw.strip()
        if not value:
            continue
        unique.setdefault(value.lower(), value)
    return list(unique.values())[:max_items]
