"""
Domain models - Core timeline entities
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Set


class TimelineTab(str, Enum):
    """Timeline views"""
    FOR_YOU = "for-you"
    LATEST = "latest"
    FOLLOWING = "following"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TimelineTab":
        """Resolve a raw tab parameter, falling back to for-you"""
        if isinstance(value, cls):
            return value
        for tab in cls:
            if tab.value == value:
                return tab
        return cls.FOR_YOU


@dataclass
class PostRow:
    """Candidate post joined with its author and engagement aggregates"""
    id: int
    public_id: str
    premise1: str
    premise2: str
    code: str
    language: str
    created_at: str
    author_id: int
    author_name: str
    author_handle: str
    version: Optional[str] = None
    ai_summary: Optional[str] = None
    author_avatar_url: Optional[str] = None
    author_profile_languages_raw: Optional[str] = None
    like_count: int = 0
    comment_count: int = 0


@dataclass
class ViewerSignals:
    """What a viewer's likes and follows say about their taste"""
    language_counts: Dict[str, int] = field(default_factory=dict)
    tag_counts: Dict[str, int] = field(default_factory=dict)
    followed_author_ids: Set[int] = field(default_factory=set)

    def language_preference(self, language: str) -> int:
        return self.language_counts.get(language.lower(), 0)

    def tag_preference(self, tag: str) -> int:
        return self.tag_counts.get(tag.lower(), 0)

    def follows(self, author_id: int) -> bool:
        return author_id in self.followed_author_ids
