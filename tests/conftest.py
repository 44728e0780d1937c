from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from timeline_service.config import Settings
from timeline_service.models import PostRow
from timeline_service.repositories import ITimelineRepository
from timeline_service.service import TimelineService

NOW = datetime(2026, 2, 14, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryTimelineRepository(ITimelineRepository):
    """Store double that keeps rows in dicts and counts every call"""

    def __init__(self):
        self.users: Dict[int, dict] = {}
        self.posts: Dict[int, dict] = {}
        self.post_tags: List[Tuple[int, str]] = []
        self.likes: Set[Tuple[int, int]] = set()  # (user_id, post_id)
        self.comments: List[Tuple[int, int]] = []  # (user_id, post_id)
        self.follows: Set[Tuple[int, int]] = set()  # (follower_id, following_id)
        self.calls: Counter = Counter()
        self.fail_with: Optional[Exception] = None

    # Fixture helpers
    def add_user(self, user_id: int, name: str = "", handle: str = "", profile_languages: str = ""):
        self.users[user_id] = {
            "name": name or f"User {user_id}",
            "handle": handle or f"user{user_id}",
            "avatar_url": None,
            "profile_languages": profile_languages,
        }

    def add_post(
        self,
        post_id: int,
        author_id: int,
        created_at: str,
        language: str = "Python",
        code: str = "print('hi')",
        tags: Sequence[str] = (),
        version: Optional[str] = "latest",
    ):
        if author_id not in self.users:
            self.add_user(author_id)
        self.posts[post_id] = {
            "id": post_id,
            "public_id": f"p{post_id:04d}",
            "author_id": author_id,
            "premise1": "premise one",
            "premise2": "premise two",
            "code": code,
            "language": language,
            "version": version,
            "ai_summary": "",
            "created_at": created_at,
        }
        for tag in tags:
            self.post_tags.append((post_id, tag))

    def like(self, user_id: int, post_id: int):
        self.likes.add((user_id, post_id))

    def comment(self, user_id: int, post_id: int):
        self.comments.append((user_id, post_id))

    def follow(self, follower_id: int, following_id: int):
        self.follows.add((follower_id, following_id))

    def _check(self, name: str):
        self.calls[name] += 1
        if self.fail_with is not None:
            raise self.fail_with

    def _row(self, post: dict) -> PostRow:
        author = self.users[post["author_id"]]
        return PostRow(
            id=post["id"],
            public_id=post["public_id"],
            premise1=post["premise1"],
            premise2=post["premise2"],
            code=post["code"],
            language=post["language"],
            version=post["version"],
            ai_summary=post["ai_summary"],
            created_at=post["created_at"],
            author_id=post["author_id"],
            author_name=author["name"],
            author_handle=author["handle"],
            author_avatar_url=author["avatar_url"],
            author_profile_languages_raw=author["profile_languages"],
            like_count=sum(1 for _, pid in self.likes if pid == post["id"]),
            comment_count=sum(1 for _, pid in self.comments if pid == post["id"]),
        )

    # ITimelineRepository
    async def fetch_recent_posts(self, limit, offset=0, follower_id=None):
        self._check("fetch_recent_posts")
        posts = list(self.posts.values())
        if follower_id is not None:
            followed = {following for follower, following in self.follows if follower == follower_id}
            posts = [post for post in posts if post["author_id"] in followed]
        posts.sort(key=lambda post: (post["created_at"], post["id"]), reverse=True)
        return [self._row(post) for post in posts[offset:offset + limit]]

    async def fetch_tags_for_posts(self, post_ids):
        self._check("fetch_tags_for_posts")
        wanted = set(post_ids)
        return [(pid, name) for pid, name in self.post_tags if pid in wanted]

    async def fetch_liked_post_ids(self, viewer_id, post_ids):
        self._check("fetch_liked_post_ids")
        wanted = set(post_ids)
        return {pid for uid, pid in self.likes if uid == viewer_id and pid in wanted}

    async def fetch_viewer_liked_languages(self, viewer_id, limit):
        self._check("fetch_viewer_liked_languages")
        return [self.posts[pid]["language"] for uid, pid in sorted(self.likes) if uid == viewer_id][:limit]

    async def fetch_viewer_liked_tags(self, viewer_id, limit):
        self._check("fetch_viewer_liked_tags")
        liked = {pid for uid, pid in self.likes if uid == viewer_id}
        return [name for pid, name in self.post_tags if pid in liked][:limit]

    async def fetch_viewer_followed_author_ids(self, viewer_id):
        self._check("fetch_viewer_followed_author_ids")
        return {following for follower, following in self.follows if follower == viewer_id}

    async def fetch_popular_languages(self, limit):
        self._check("fetch_popular_languages")
        counts = Counter(post["language"] for post in self.posts.values())
        return [language for language, _ in counts.most_common(limit)]

    async def fetch_popular_versions(self, limit):
        self._check("fetch_popular_versions")
        counts = Counter(post["version"] for post in self.posts.values() if post["version"])
        return [version for version, _ in counts.most_common(limit)]

    async def fetch_tag_names(self, limit):
        self._check("fetch_tag_names")
        return sorted({name for _, name in self.post_tags})[:limit]


@pytest.fixture
def repo() -> InMemoryTimelineRepository:
    return InMemoryTimelineRepository()


@pytest.fixture
def test_settings() -> Settings:
    return Settings()


@pytest.fixture
def service(repo, test_settings) -> TimelineService:
    return TimelineService(repo, test_settings)


def make_row(post_id: int, **overrides) -> PostRow:
    values = dict(
        id=post_id,
        public_id=f"p{post_id:04d}",
        premise1="premise one",
        premise2="premise two",
        code="print('hi')",
        language="Python",
        created_at="2026-02-14 10:00:00",
        author_id=1,
        author_name="Ada Lovelace",
        author_handle="ada",
    )
    values.update(overrides)
    return PostRow(**values)
