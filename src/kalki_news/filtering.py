"""Client-side projection of a story list by genre, verification and search text."""

from collections.abc import Iterable
from dataclasses import dataclass

from kalki_news.data import Language, NewsGenre, NewsItem, Region


def matches_genre(item: NewsItem, genre: NewsGenre) -> bool:
    """Return True if ``item`` belongs in the ``genre`` view.

    ``TRENDING`` selects urgent stories whatever their category.
    """
    if genre == NewsGenre.ALL:
        return True
    if genre == NewsGenre.TRENDING:
        return item.is_urgent
    return item.category == genre


def matches_query(item: NewsItem, query: str) -> bool:
    """Case-insensitive substring match against title or summary."""
    if query == "":
        return True
    needle = query.lower()
    return needle in item.title.lower() or needle in item.summary.lower()


def filter_news(
    items: Iterable[NewsItem],
    genre: NewsGenre = NewsGenre.ALL,
    verified_only: bool = False,
    query: str = "",
) -> list[NewsItem]:
    """Reduce ``items`` to those visible under the given filters.

    Genre is checked first, then the verified flag, then the search query.
    Source order is preserved.
    """
    return [
        item
        for item in items
        if matches_genre(item, genre)
        and (not verified_only or item.is_verified)
        and matches_query(item, query)
    ]


@dataclass(frozen=True)
class FilterState:
    """Transient feed selectors. Never persisted."""

    language: Language = Language.ENGLISH
    region: Region = Region.GLOBAL
    genre: NewsGenre = NewsGenre.ALL
    query: str = ""
    verified_only: bool = False

    def apply(self, items: Iterable[NewsItem]) -> list[NewsItem]:
        return filter_news(
            items, genre=self.genre, verified_only=self.verified_only, query=self.query
        )
