"""
Parsing of stored timestamps into aware UTC datetimes
"""
import re
from datetime import datetime, timezone
from typing import Optional, Union

# CURRENT_TIMESTAMP rendering: "YYYY-MM-DD HH:MM:SS", always UTC
_STORE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")
_HAS_ZONE = re.compile(r"[zZ]|[+\-]\d{2}:\d{2}$")
_ISO_WITHOUT_ZONE = re.compile(r"^\d{4}-\d{2}-\d{2}T")
_FRACTION = re.compile(r"(:\d{2})\.(\d+)")


def _six_digit_fraction(match: "re.Match") -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def _from_iso(value: str) -> Optional[datetime]:
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    value = _FRACTION.sub(_six_digit_fraction, value, count=1)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_db_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Zone-less values are UTC, never local time. Returns None when the value
    cannot be parsed; callers treat that as maximally stale.
    """
    if isinstance(value, datetime):
        return as_utc(value)

    raw = str(value if value is not None else "").strip()
    if not raw:
        return None

    if _STORE_FORMAT.match(raw):
        return _from_iso(raw.replace(" ", "T") + "Z")

    if _HAS_ZONE.search(raw):
        return _from_iso(raw)

    if _ISO_WITHOUT_ZONE.match(raw):
        return _from_iso(raw + "Z")

    return _from_iso(raw)


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC already"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def age_in_hours(created: Optional[datetime], now: datetime, unknown: float) -> float:
    """Hours elapsed since `created`, clamped at zero; `unknown` when unparsed"""
    if created is None:
        return unknown
    return max(0.0, (as_utc(now) - created).total_seconds() / 3600.0)
