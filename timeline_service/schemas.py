"""
Pydantic schemas for Timeline Service
"""
from pydantic import BaseModel, Field
from typing import Optional, List


# User schema (from auth token)
class User(BaseModel):
    """Authenticated viewer"""
    id: int
    username: Optional[str] = None


class AuthorSnapshot(BaseModel):
    """Author fields joined onto a timeline entry at read time"""
    id: int
    name: str
    handle: str
    avatar_url: Optional[str] = None
    profile_languages: List[str] = Field(default_factory=list)


class TimelineEntry(BaseModel):
    """A post as seen by the requesting viewer"""
    id: int
    public_id: str
    premise1: str
    premise2: str
    code: str
    language: str
    version: Optional[str] = None
    ai_summary: Optional[str] = None
    created_at: str
    author: AuthorSnapshot
    like_count: int = 0
    comment_count: int = 0
    tags: List[str] = Field(default_factory=list)
    liked_by_me: bool = False


class TimelinePage(BaseModel):
    """One page of a timeline"""
    items: List[TimelineEntry] = Field(default_factory=list)
    has_more: bool = False


class ComposerSuggestionsResponse(BaseModel):
    """Autocomplete values for the post composer"""
    languages: List[str]
    versions: List[str]
    tags: List[str]
