"""
Repository interface and PostgreSQL implementation for timeline reads
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from .database import Database
from .models import PostRow


class ITimelineRepository(ABC):
    """Read-only store contract the timeline is built from"""

    @abstractmethod
    async def fetch_recent_posts(
        self,
        limit: int,
        offset: int = 0,
        follower_id: Optional[int] = None
    ) -> List[PostRow]:
        """
        Newest posts first, joined with author fields and like/comment counts.

        With follower_id, only posts by authors that user follows.
        """
        pass

    @abstractmethod
    async def fetch_tags_for_posts(self, post_ids: Sequence[int]) -> List[Tuple[int, str]]:
        """(post_id, tag_name) pairs for the given posts"""
        pass

    @abstractmethod
    async def fetch_liked_post_ids(self, viewer_id: int, post_ids: Sequence[int]) -> Set[int]:
        """Which of the given posts the viewer has liked"""
        pass

    @abstractmethod
    async def fetch_viewer_liked_languages(self, viewer_id: int, limit: int) -> List[str]:
        """Language of each post the viewer liked (one entry per like)"""
        pass

    @abstractmethod
    async def fetch_viewer_liked_tags(self, viewer_id: int, limit: int) -> List[str]:
        """Tag names of posts the viewer liked (one entry per like and tag)"""
        pass

    @abstractmethod
    async def fetch_viewer_followed_author_ids(self, viewer_id: int) -> Set[int]:
        """Ids of the users the viewer follows"""
        pass

    @abstractmethod
    async def fetch_popular_languages(self, limit: int) -> List[str]:
        """Post languages, most used first"""
        pass

    @abstractmethod
    async def fetch_popular_versions(self, limit: int) -> List[str]:
        """Non-empty post versions, most used first"""
        pass

    @abstractmethod
    async def fetch_tag_names(self, limit: int) -> List[str]:
        """Tag names in alphabetical order"""
        pass


_POST_COLUMNS = """
    p.id,
    p.public_id,
    p.premise_1 AS premise1,
    p.premise_2 AS premise2,
    p.code,
    p.language,
    p.version,
    p.ai_summary,
    to_char(p.created_at, 'YYYY-MM-DD HH24:MI:SS') AS created_at,
    u.id AS author_id,
    u.name AS author_name,
    u.handle AS author_handle,
    u.avatar_url AS author_avatar_url,
    u.profile_languages AS author_profile_languages_raw,
    COUNT(DISTINCT l.user_id)::int AS like_count,
    COUNT(DISTINCT c.id)::int AS comment_count
"""


class TimelineRepository(ITimelineRepository):
    """Timeline repository implementation using PostgreSQL"""

    def __init__(self, db: Database):
        self.db = db

    def _row_to_post(self, row: Dict[str, Any]) -> PostRow:
        """Convert database row to PostRow model"""
        return PostRow(**row)

    async def fetch_recent_posts(
        self,
        limit: int,
        offset: int = 0,
        follower_id: Optional[int] = None
    ) -> List[PostRow]:
        if follower_id is None:
            query = f"""
                SELECT {_POST_COLUMNS}
                FROM posts p
                INNER JOIN users u ON u.id = p.user_id
                LEFT JOIN likes l ON l.post_id = p.id
                LEFT JOIN comments c ON c.post_id = p.id
                GROUP BY p.id, u.id
                ORDER BY p.created_at DESC, p.id DESC
                LIMIT $1 OFFSET $2
            """
            rows = await self.db.fetch_all(query, limit, offset)
        else:
            query = f"""
                SELECT {_POST_COLUMNS}
                FROM posts p
                INNER JOIN users u ON u.id = p.user_id
                INNER JOIN follows f ON f.following_id = p.user_id AND f.follower_id = $3
                LEFT JOIN likes l ON l.post_id = p.id
                LEFT JOIN comments c ON c.post_id = p.id
                GROUP BY p.id, u.id
                ORDER BY p.created_at DESC, p.id DESC
                LIMIT $1 OFFSET $2
            """
            rows = await self.db.fetch_all(query, limit, offset, follower_id)
        return [self._row_to_post(row) for row in rows]

    async def fetch_tags_for_posts(self, post_ids: Sequence[int]) -> List[Tuple[int, str]]:
        query = """
            SELECT pt.post_id, t.name
            FROM post_tags pt
            INNER JOIN tags t ON t.id = pt.tag_id
            WHERE pt.post_id = ANY($1::int[])
        """
        rows = await self.db.fetch_all(query, list(post_ids))
        return [(row["post_id"], row["name"]) for row in rows]

    async def fetch_liked_post_ids(self, viewer_id: int, post_ids: Sequence[int]) -> Set[int]:
        query = """
            SELECT post_id
            FROM likes
            WHERE user_id = $1 AND post_id = ANY($2::int[])
        """
        rows = await self.db.fetch_all(query, viewer_id, list(post_ids))
        return {row["post_id"] for row in rows}

    async def fetch_viewer_liked_languages(self, viewer_id: int, limit: int) -> List[str]:
        query = """
            SELECT p.language
            FROM likes l
            INNER JOIN posts p ON p.id = l.post_id
            WHERE l.user_id = $1
            LIMIT $2
        """
        rows = await self.db.fetch_all(query, viewer_id, limit)
        return [row["language"] for row in rows]

    async def fetch_viewer_liked_tags(self, viewer_id: int, limit: int) -> List[str]:
        query = """
            SELECT t.name
            FROM likes l
            INNER JOIN post_tags pt ON pt.post_id = l.post_id
            INNER JOIN tags t ON t.id = pt.tag_id
            WHERE l.user_id = $1
            LIMIT $2
        """
        rows = await self.db.fetch_all(query, viewer_id, limit)
        return [row["name"] for row in rows]

    async def fetch_viewer_followed_author_ids(self, viewer_id: int) -> Set[int]:
        query = """
            SELECT following_id
            FROM follows
            WHERE follower_id = $1
        """
        rows = await self.db.fetch_all(query, viewer_id)
        return {row["following_id"] for row in rows}

    async def fetch_popular_languages(self, limit: int) -> List[str]:
        query = """
            SELECT language AS value
            FROM posts
            GROUP BY language
            ORDER BY COUNT(*) DESC
            LIMIT $1
        """
        rows = await self.db.fetch_all(query, limit)
        return [row["value"] for row in rows]

    async def fetch_popular_versions(self, limit: int) -> List[str]:
        query = """
            SELECT version AS value
            FROM posts
            WHERE version IS NOT NULL AND version <> ''
            GROUP BY version
            ORDER BY COUNT(*) DESC
            LIMIT $1
        """
        rows = await self.db.fetch_all(query, limit)
        return [row["value"] for row in rows]

    async def fetch_tag_names(self, limit: int) -> List[str]:
        query = """
            SELECT name
            FROM tags
            ORDER BY name
            LIMIT $1
        """
        rows = await self.db.fetch_all(query, limit)
        return [row["name"] for row in rows]
