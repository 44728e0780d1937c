"""
Codec for the comma separated profile-languages field on users
"""
from typing import Iterable, List, Optional, Union

MAX_PROFILE_LANGUAGES = 8
MAX_PROFILE_LANGUAGE_LENGTH = 24


def decode_profile_languages(raw: Optional[str]) -> List[str]:
    """
    Split a stored profile-languages string into a clean list.

    Tokens are trimmed, empty or over-long tokens are dropped, duplicates are
    removed case-insensitively (first spelling wins) and the result is capped.
    """
    seen = set()
    result: List[str] = []

    for token in str(raw if raw is not None else "").split(","):
        normalized = token.strip()
        if not normalized:
            continue
        if len(normalized) > MAX_PROFILE_LANGUAGE_LENGTH:
            continue
        key = normalized.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(normalized)
        if len(result) >= MAX_PROFILE_LANGUAGES:
            break

    return result


def encode_profile_languages(values: Union[str, Iterable[str], None]) -> str:
    """Normalize and join profile languages for storage"""
    if values is None or isinstance(values, str):
        raw = values
    else:
        raw = ",".join(values)
    return ", ".join(decode_profile_languages(raw))
