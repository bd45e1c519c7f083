"""Feed state and the controller that owns it.

``FeedController`` is the single owner of the feed's mutable state. Every
setter returns a new immutable ``FeedState``; selector changes do not fetch
by themselves, callers follow them with :meth:`FeedController.refresh`.
"""

import logging
from dataclasses import dataclass, field, replace

from kalki_news.data import FetchErrorKind, Language, NewsGenre, NewsItem, Region
from kalki_news.errors import QuotaExhaustedError
from kalki_news.fetch import DEFAULT_CITY, NewsSource
from kalki_news.filtering import FilterState
from kalki_news.store import LibraryStore

logger = logging.getLogger(__name__)

LIBRARY_REGIONS = (Region.SAVED, Region.READ_LATER)


@dataclass(frozen=True)
class FeedState:
    """Snapshot of everything the presentation layer renders."""

    filters: FilterState = field(default_factory=FilterState)
    city: str = DEFAULT_CITY
    news: tuple[NewsItem, ...] = ()
    is_loading: bool = False
    is_detecting: bool = False
    error_kind: FetchErrorKind = FetchErrorKind.NONE


class FeedController:
    """Coordinates fetching, filtering and the user's library.

    Fetches are tagged with an increasing sequence number; a fetch that
    resolves after a newer one was started is discarded, so a slow response
    never overwrites the feed for newer selectors.

    Args:
        source: Where stories come from.
        library: The user's bookmarks and reactions.
        initial: Starting state.
    """

    def __init__(
        self,
        source: NewsSource,
        library: LibraryStore,
        initial: FeedState | None = None,
    ) -> None:
        self._source = source
        self._library = library
        self._state = initial or FeedState()
        self._seq = 0

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def library(self) -> LibraryStore:
        return self._library

    @property
    def cloud_connected(self) -> bool:
        return self._library.state.cloud_connected

    async def aclose(self) -> None:
        await self._library.aclose()

    async def __aenter__(self) -> "FeedController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def set_language(self, language: Language) -> FeedState:
        return self._set_filters(language=language)

    def set_region(self, region: Region) -> FeedState:
        return self._set_filters(region=region)

    def set_genre(self, genre: NewsGenre) -> FeedState:
        return self._set_filters(genre=genre)

    def set_query(self, query: str) -> FeedState:
        return self._set_filters(query=query)

    def set_verified_only(self, verified_only: bool) -> FeedState:
        return self._set_filters(verified_only=verified_only)

    def set_city(self, city: str) -> FeedState:
        self._state = replace(self._state, city=city)
        return self._state

    async def refresh(self) -> FeedState:
        """Load the feed for the current selectors.

        Library regions (saved / read later) are rendered from the local
        library and skip the fetch. A quota failure keeps the previous
        stories and sets ``error_kind`` to QUOTA.
        """
        filters = self._state.filters
        self._seq += 1
        seq = self._seq
        if filters.region in LIBRARY_REGIONS:
            self._state = replace(self._state, is_loading=False, error_kind=FetchErrorKind.NONE)
            return self._state

        self._state = replace(self._state, is_loading=True, error_kind=FetchErrorKind.NONE)

        news: list[NewsItem] | None = None
        error_kind = FetchErrorKind.NONE
        try:
            news = await self._source.fetch_news(
                filters.language,
                filters.region,
                city_name=self._state.city,
                genre=filters.genre,
            )
        except QuotaExhaustedError:
            error_kind = FetchErrorKind.QUOTA
        except Exception:
            logger.exception("Feed refresh failed")
            error_kind = FetchErrorKind.GENERAL

        if seq != self._seq:
            logger.debug("Discarding stale feed result %d (latest is %d)", seq, self._seq)
            return self._state

        self._state = replace(
            self._state,
            news=tuple(news) if news is not None else self._state.news,
            is_loading=False,
            error_kind=error_kind,
        )
        return self._state

    async def detect_location(self, lat: float, lng: float) -> FeedState:
        """Resolve the city for a coordinate pair and switch to the local feed."""
        self._state = replace(self._state, is_detecting=True)
        try:
            city = await self._source.get_city_from_coords(lat, lng)
        finally:
            self._state = replace(self._state, is_detecting=False)

        if city:
            self._state = replace(
                self._state,
                city=city,
                filters=replace(self._state.filters, region=Region.CITY),
            )
        return self._state

    def visible_items(self) -> list[NewsItem]:
        """Stories to render: the feed or a library list, with filters applied."""
        filters = self._state.filters
        library = self._library.state
        if filters.region == Region.SAVED:
            items: tuple[NewsItem, ...] = library.saved
        elif filters.region == Region.READ_LATER:
            items = library.read_later
        else:
            items = self._state.news
        return filters.apply(items)

    def _set_filters(self, **changes: object) -> FeedState:
        self._state = replace(self._state, filters=replace(self._state.filters, **changes))
        return self._state
