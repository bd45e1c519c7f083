from typing import Protocol

from kalki_news.data import Language, NewsGenre, NewsItem, Region


class NewsSource(Protocol):
    """Interface for producing a feed of news stories."""

    async def fetch_news(
        self,
        language: Language,
        region: Region,
        *,
        city_name: str | None = None,
        genre: NewsGenre = NewsGenre.ALL,
    ) -> list[NewsItem]:
        """Fetch the latest stories for the given selectors.

        Args:
            language: Output language.
            region: Geographic scope. ``Region.CITY`` uses ``city_name``.
            city_name: City to cover when ``region`` is ``Region.CITY``.
            genre: Topic focus.

        Returns:
            Stories in display order. Empty on any failure except quota.

        Raises:
            QuotaExhaustedError: The service stayed rate-limited after retries.
        """
        ...

    async def get_city_from_coords(self, lat: float, lng: float) -> str:
        """Resolve a "City, State" label for a coordinate pair. Never raises."""
        ...
