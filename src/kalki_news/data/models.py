"""Core data models for Voice of Kalki."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class Language(StrEnum):
    """Feed language."""

    ENGLISH = "en"
    KANNADA = "kn"


class Region(StrEnum):
    """Feed scope.

    ``SAVED`` and ``READ_LATER`` are local views over the user's library and
    never trigger a fetch.
    """

    GLOBAL = "Global"
    COUNTRY = "India"
    STATE = "Karnataka"
    CITY = "Local"
    SAVED = "Saved"
    READ_LATER = "Read Later"


class NewsGenre(StrEnum):
    """Fixed set of article categories.

    ``ALL`` and ``TRENDING`` are filter values as well: ``TRENDING`` selects
    urgent stories rather than matching the category field.
    """

    ALL = "All"
    TRENDING = "Trending"
    POLITICS = "Politics"
    CURRENT_AFFAIRS = "Current Affairs"
    SPORTS = "Sports"
    ENTERTAINMENT = "Entertainment"
    BUSINESS = "Business"
    TECH = "Technology"
    HEALTH = "Health"
    CRIME = "Crime"
    EDUCATION = "Education"


class BookmarkKind(StrEnum):
    """Bookmark list an article belongs to."""

    SAVED = "saved"
    READ_LATER = "read_later"


class Reaction(StrEnum):
    """Per-article sentiment. Absence is modelled as ``None``."""

    UP = "up"
    DOWN = "down"


class SyncStatus(StrEnum):
    """Remote write state of a single library record."""

    SYNCED = "synced"
    PENDING = "pending"
    FAILED = "failed"


class FetchErrorKind(StrEnum):
    """User-facing classification of a feed load failure."""

    NONE = "none"
    QUOTA = "quota"
    GENERAL = "general"


class NewsItem(BaseModel):
    """One aggregated news story.

    Serialized with camelCase aliases (``sourceUrl``, ``isUrgent`` ...), which
    is both the shape requested from the generative service and the shape of
    the snapshots kept in the local cache and the ``bookmarks`` table.
    """

    id: str = ""
    title: str
    summary: str
    full_description: str | None = Field(
        default=None, description="Detailed 3-4 paragraph background of the story."
    )
    source: str = Field(
        description="Platform name (e.g., X, Reddit, The Hindu, Deccan Herald)."
    )
    source_url: str = ""
    timestamp: str = Field(
        default="", description="Relative time like '2 hours ago' or 'Just now'."
    )
    category: NewsGenre = Field(
        description=(
            "Must be: Trending, Politics, Current Affairs, Sports, Entertainment, "
            "Business, Technology, Health, Crime, or Education"
        )
    )
    region: str = ""
    image_url: str | None = None
    is_urgent: bool = False
    is_verified: bool = Field(
        default=False,
        description="True if from a verified official source or major news media outlet.",
    )

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @field_validator("category", mode="before")
    @classmethod
    def _match_category(cls, v: Any) -> Any:
        # Generated text is not always cased like the enum values
        if isinstance(v, str):
            for genre in NewsGenre:
                if genre.value.lower() == v.strip().lower():
                    return genre
        return v

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase JSON-compatible dict used for storage."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class UserIdentity:
    """The identity library records are keyed by.

    Anonymous identities are generated locally; authenticated ones come from
    the hosted auth service. The two are never merged.
    """

    user_id: str
    anonymous: bool = True
    email: str | None = None
