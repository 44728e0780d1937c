"""
Timeline Service - Core business logic
"""
import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Union
import logging

from .config import Settings, settings as default_settings
from .hydrator import hydrate_timeline
from .models import PostRow, TimelineTab
from .pagination import page_window, paginate, split_probe
from .query_filter import filter_entries
from .query_parser import SearchQuery, parse_search_query
from .repositories import ITimelineRepository
from .schemas import ComposerSuggestionsResponse, TimelineEntry, TimelinePage
from .scoring import load_viewer_signals, rank_entries
from .suggestions import COMPOSER_MASTER, merge_suggestions
from .timestamps import as_utc

logger = logging.getLogger(__name__)


class TimelineService:
    """Builds ranked, filtered and paginated timelines"""

    def __init__(
        self,
        repository: ITimelineRepository,
        settings: Optional[Settings] = None
    ):
        self.repository = repository
        self.settings = settings or default_settings

    async def get_timeline_page(
        self,
        tab: Union[TimelineTab, str, None],
        user_id: Optional[int],
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        query: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TimelinePage:
        """
        Get one page of a timeline

        Args:
            tab: for-you, latest or following (unknown values mean for-you)
            user_id: Viewer id, None for anonymous requests
            page: 1-based page number, clamped to >= 1
            limit: Page size, clamped to [1, MAX_PAGE_SIZE]
            query: Optional raw search string
            now: Reference time for recency scoring

        Returns:
            TimelinePage with items and has_more
        """
        tab = TimelineTab.parse(tab)
        search = parse_search_query(query)

        if tab is TimelineTab.FOLLOWING:
            if not user_id:
                logger.debug("Following timeline requested without a viewer")
                return TimelinePage(items=[], has_more=False)
            return await self._get_following_page(user_id, page, limit, search)

        if tab is TimelineTab.LATEST:
            return await self._get_latest_page(user_id, page, limit, search)

        return await self._get_recommended_page(user_id, page, limit, search, now)

    async def _get_recommended_page(
        self,
        user_id: Optional[int],
        page: Optional[int],
        limit: Optional[int],
        search: Optional[SearchQuery],
        now: Optional[datetime]
    ) -> TimelinePage:
        """Wide fetch, hydrate, rank, filter, then paginate in memory"""
        now = as_utc(now) if now else datetime.now(timezone.utc)
        rows = await self.repository.fetch_recent_posts(self.settings.FOR_YOU_WINDOW)

        if user_id:
            entries, signals = await asyncio.gather(
                hydrate_timeline(self.repository, rows, user_id),
                load_viewer_signals(self.repository, user_id, self.settings),
            )
        else:
            entries = await hydrate_timeline(self.repository, rows, None)
            signals = None

        ranked = rank_entries(entries, signals, now, self.settings)
        filtered = filter_entries(ranked, search)

        logger.debug(
            f"Ranked {len(ranked)} candidates for "
            f"{'user ' + str(user_id) if user_id else 'guest'}, {len(filtered)} after filtering"
        )
        return self._page_in_memory(filtered, page, limit)

    async def _get_latest_page(
        self,
        user_id: Optional[int],
        page: Optional[int],
        limit: Optional[int],
        search: Optional[SearchQuery]
    ) -> TimelinePage:
        if search:
            rows = await self.repository.fetch_recent_posts(self.settings.SEARCH_WINDOW)
            return await self._search_page(rows, user_id, page, limit, search)
        return await self._get_store_page(user_id, page, limit, follower_id=None)

    async def _get_following_page(
        self,
        user_id: int,
        page: Optional[int],
        limit: Optional[int],
        search: Optional[SearchQuery]
    ) -> TimelinePage:
        if search:
            rows = await self.repository.fetch_recent_posts(
                self.settings.SEARCH_WINDOW,
                follower_id=user_id
            )
            return await self._search_page(rows, user_id, page, limit, search)
        return await self._get_store_page(user_id, page, limit, follower_id=user_id)

    async def _search_page(
        self,
        rows: List[PostRow],
        user_id: Optional[int],
        page: Optional[int],
        limit: Optional[int],
        search: SearchQuery
    ) -> TimelinePage:
        """Hydrate a wide window, filter it, then paginate in memory"""
        entries = await hydrate_timeline(self.repository, rows, user_id)
        filtered = filter_entries(entries, search)
        logger.debug(f"Search '{search.raw}' kept {len(filtered)} of {len(entries)} posts")
        return self._page_in_memory(filtered, page, limit)

    async def _get_store_page(
        self,
        user_id: Optional[int],
        page: Optional[int],
        limit: Optional[int],
        follower_id: Optional[int]
    ) -> TimelinePage:
        """Let the store paginate, probing one extra row for has_more"""
        offset, safe_limit = page_window(page, limit, self.settings.MAX_PAGE_SIZE)
        rows = await self.repository.fetch_recent_posts(
            safe_limit + 1,
            offset=offset,
            follower_id=follower_id
        )
        rows, has_more = split_probe(rows, safe_limit)
        items = await hydrate_timeline(self.repository, rows, user_id)
        return TimelinePage(items=items, has_more=has_more)

    def _page_in_memory(
        self,
        entries: List[TimelineEntry],
        page: Optional[int],
        limit: Optional[int]
    ) -> TimelinePage:
        items, has_more = paginate(entries, page, limit, self.settings.MAX_PAGE_SIZE)
        return TimelinePage(items=items, has_more=has_more)

    async def get_timeline(self, user_id: Optional[int] = None) -> List[TimelineEntry]:
        """First page of the for-you timeline"""
        result = await self.get_timeline_page(
            TimelineTab.FOR_YOU, user_id, 1, self.settings.FIRST_PAGE_SIZE
        )
        return result.items

    async def get_following_timeline(self, user_id: Optional[int]) -> List[TimelineEntry]:
        """First page of the following timeline"""
        result = await self.get_timeline_page(
            TimelineTab.FOLLOWING, user_id, 1, self.settings.FIRST_PAGE_SIZE
        )
        return result.items

    async def get_composer_suggestions(self) -> ComposerSuggestionsResponse:
        """Languages, versions and tags to offer in the post composer"""
        languages, versions, tag_names = await asyncio.gather(
            self.repository.fetch_popular_languages(self.settings.SUGGESTION_QUERY_LIMIT),
            self.repository.fetch_popular_versions(self.settings.SUGGESTION_QUERY_LIMIT),
            self.repository.fetch_tag_names(self.settings.SUGGESTION_TAG_LIMIT),
        )
        max_items = self.settings.SUGGESTION_MAX_ITEMS
        return ComposerSuggestionsResponse(
            languages=merge_suggestions(languages, COMPOSER_MASTER["languages"], max_items),
            versions=merge_suggestions(versions, COMPOSER_MASTER["versions"], max_items),
            tags=merge_suggestions(tag_names, COMPOSER_MASTER["tags"], max_items),
        )
