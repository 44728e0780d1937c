"""
Turns candidate rows into viewer-relative timeline entries
"""
import asyncio
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import PostRow
from .profile_languages import decode_profile_languages
from .repositories import ITimelineRepository
from .schemas import AuthorSnapshot, TimelineEntry


def build_tag_map(rows: Iterable[Tuple[int, str]]) -> Dict[int, List[str]]:
    """Group (post_id, tag_name) rows by post"""
    tag_map: Dict[int, List[str]] = {}
    for post_id, name in rows:
        tag_map.setdefault(post_id, []).append(name)
    return tag_map


def build_entry(row: PostRow, tags: List[str], liked_by_me: bool) -> TimelineEntry:
    author = AuthorSnapshot(
        id=row.author_id,
        name=row.author_name,
        handle=row.author_handle,
        avatar_url=row.author_avatar_url,
        profile_languages=decode_profile_languages(row.author_profile_languages_raw),
    )
    return TimelineEntry(
        id=row.id,
        public_id=row.public_id,
        premise1=row.premise1,
        premise2=row.premise2,
        code=row.code,
        language=row.language,
        version=row.version,
        ai_summary=row.ai_summary,
        created_at=row.created_at,
        author=author,
        like_count=row.like_count,
        comment_count=row.comment_count,
        tags=tags,
        liked_by_me=liked_by_me,
    )


async def _no_likes() -> Set[int]:
    return set()


async def hydrate_timeline(
    repository: ITimelineRepository,
    rows: List[PostRow],
    viewer_id: Optional[int] = None
) -> List[TimelineEntry]:
    """
    Attach tags and the viewer's like flag to a batch of rows.

    Issues one tag query for the whole batch and, for a known viewer, one
    like query, concurrently. An empty batch issues nothing.
    """
    if not rows:
        return []

    post_ids = [row.id for row in rows]

    tag_rows, liked_ids = await asyncio.gather(
        repository.fetch_tags_for_posts(post_ids),
        repository.fetch_liked_post_ids(viewer_id, post_ids) if viewer_id else _no_likes(),
    )

    tag_map = build_tag_map(tag_rows)

    return [
        build_entry(row, tag_map.get(row.id, []), row.id in liked_ids)
        for row in rows
    ]
