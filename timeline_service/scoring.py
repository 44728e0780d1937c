"""
Relevance scoring for the for-you timeline
"""
import asyncio
from collections import Counter
from datetime import datetime
from typing import List, Optional

from .config import Settings
from .models import ViewerSignals
from .repositories import ITimelineRepository
from .schemas import TimelineEntry
from .timestamps import age_in_hours, parse_db_timestamp


async def load_viewer_signals(
    repository: ITimelineRepository,
    viewer_id: int,
    settings: Settings
) -> ViewerSignals:
    """Fetch liked languages, liked tags and follows concurrently"""
    languages, tag_names, followed = await asyncio.gather(
        repository.fetch_viewer_liked_languages(viewer_id, settings.LIKED_LANGUAGES_LIMIT),
        repository.fetch_viewer_liked_tags(viewer_id, settings.LIKED_TAGS_LIMIT),
        repository.fetch_viewer_followed_author_ids(viewer_id),
    )
    return ViewerSignals(
        language_counts=dict(Counter(language.lower() for language in languages)),
        tag_counts=dict(Counter(name.lower() for name in tag_names)),
        followed_author_ids=set(followed),
    )


def recency(entry: TimelineEntry, now: datetime, settings: Settings) -> float:
    """1.0 for a brand new post, decaying linearly to 0 at the recency window"""
    window = settings.RECENCY_WINDOW_HOURS
    age = age_in_hours(parse_db_timestamp(entry.created_at), now, settings.UNKNOWN_AGE_HOURS)
    return max(0.0, window - age) / window


def personalized_score(
    entry: TimelineEntry,
    signals: ViewerSignals,
    now: datetime,
    settings: Settings
) -> float:
    engagement = entry.like_count * settings.LIKE_WEIGHT + entry.comment_count * settings.COMMENT_WEIGHT
    lang_pref = signals.language_preference(entry.language) * settings.LANGUAGE_PREF_WEIGHT
    tag_pref = min(
        settings.TAG_PREF_CAP,
        sum(signals.tag_preference(tag) for tag in entry.tags),
    )
    follow_bonus = settings.FOLLOW_BONUS if signals.follows(entry.author.id) else 0.0
    jitter = (entry.id % settings.JITTER_MODULUS) * settings.JITTER_STEP

    return (
        engagement
        + recency(entry, now, settings) * settings.RECENCY_WEIGHT
        + lang_pref
        + tag_pref
        + follow_bonus
        + jitter
    )


def guest_score(entry: TimelineEntry, now: datetime, settings: Settings) -> float:
    engagement = (
        entry.like_count * settings.GUEST_LIKE_WEIGHT
        + entry.comment_count * settings.GUEST_COMMENT_WEIGHT
    )
    jitter = (entry.id % settings.GUEST_JITTER_MODULUS) * settings.JITTER_STEP
    return engagement + recency(entry, now, settings) * settings.RECENCY_WEIGHT + jitter


def rank_entries(
    entries: List[TimelineEntry],
    signals: Optional[ViewerSignals],
    now: datetime,
    settings: Settings
) -> List[TimelineEntry]:
    """
    Order entries by descending score.

    Personalized when signals are given, guest scoring otherwise. The sort is
    stable, so equal scores keep the store's newest-first order.
    """
    if signals is None:
        scores = {entry.id: guest_score(entry, now, settings) for entry in entries}
    else:
        scores = {entry.id: personalized_score(entry, signals, now, settings) for entry in entries}
    return sorted(entries, key=lambda entry: scores[entry.id], reverse=True)
