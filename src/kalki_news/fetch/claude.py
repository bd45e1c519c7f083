"""News feed generation using Claude with web search."""

import json
import logging
import os
import time
from datetime import UTC, datetime
from typing import Any

import anthropic
from anthropic.types import Message
from pydantic import ValidationError

from kalki_news.data import FetchErrorKind, Language, NewsGenre, NewsItem, Region
from kalki_news.errors import QuotaExhaustedError
from kalki_news.images import has_usable_image, placeholder_image_url
from kalki_news.retry import call_with_retry, is_quota_error
from kalki_news.run_logger import RunLogger

logger = logging.getLogger(__name__)

DEFAULT_CITY = "Bengaluru"
DEFAULT_CITY_LABEL = "Bengaluru, Karnataka"

TRENDING_CONSTRAINT = (
    "high-engagement viral topics, internet trends, and breaking social media alerts"
)

_CATEGORIES = [g.value for g in NewsGenre if g is not NewsGenre.ALL]

NEWS_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "title": {"type": "string"},
            "summary": {"type": "string"},
            "fullDescription": {
                "type": "string",
                "description": "Detailed 3-4 paragraph background of the story.",
            },
            "source": {
                "type": "string",
                "description": "Platform name (e.g., X, Reddit, The Hindu, Deccan Herald).",
            },
            "sourceUrl": {"type": "string"},
            "timestamp": {
                "type": "string",
                "description": "Relative time like '2 hours ago' or 'Just now'.",
            },
            "category": {"type": "string", "enum": _CATEGORIES},
            "region": {"type": "string"},
            "isUrgent": {"type": "boolean"},
            "isVerified": {
                "type": "boolean",
                "description": (
                    "True if from a verified official source or major news media outlet."
                ),
            },
        },
        "required": [
            "id",
            "title",
            "summary",
            "fullDescription",
            "source",
            "sourceUrl",
            "timestamp",
            "category",
            "region",
            "isUrgent",
            "isVerified",
        ],
    },
}

SYSTEM_PROMPT = """\
You are the "Voice Of Kalki" real-time information engine.
Use web search to find real, current stories. Respond with a JSON array that \
follows this JSON schema strictly:

{schema}

Every story must have a unique "id". Return ONLY the JSON array, no other text.\
"""


def build_news_prompt(
    language: Language,
    region: Region,
    *,
    city_name: str | None = None,
    genre: NewsGenre = NewsGenre.ALL,
) -> str:
    """Build the natural-language aggregation request for a feed."""
    region_query = (city_name or DEFAULT_CITY) if region == Region.CITY else region.value
    lang_text = "Kannada" if language == Language.KANNADA else "English"

    if genre == NewsGenre.ALL:
        genre_constraint = "a broad mix of topics"
    elif genre == NewsGenre.TRENDING:
        genre_constraint = TRENDING_CONSTRAINT
    else:
        genre_constraint = f"specifically {genre.value}"

    return (
        f"Aggregate the most recent (within 24 hours) data for {region_query} "
        f"in {lang_text}.\n\n"
        "HYPER-IMPORTANT: Blend traditional news media reports with current social "
        "media pulse (trending posts on X/Twitter, Reddit discussions, and local "
        "community social signals).\n"
        f"Focus: {genre_constraint}.\n\n"
        "For Kannada content: Use standard, easy-to-read journalism style.\n"
        "For English content: Use punchy, catchy digital media headlines.\n\n"
        "Return a JSON array of stories following the schema strictly. Ensure unique IDs."
    )


def _response_text(response: Message) -> str:
    text = ""
    for block in response.content:
        if block.type == "text":
            text += block.text
    return text


def _extract_json_array(text: str) -> Any:
    """Parse a JSON payload out of model text.

    Strips markdown fences; if the remainder is not valid JSON, falls back to
    the outermost ``[...]`` span, since search-grounded answers sometimes wrap
    the array in prose.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("["), cleaned.rfind("]")
        if start == -1 or end <= start:
            raise
        return json.loads(cleaned[start : end + 1])


def parse_news_items(text: str, *, now_ms: int | None = None) -> tuple[list[NewsItem], int]:
    """Validate generated text into stories.

    Invalid records and repeated ids are dropped. Stories without a usable
    image get a placeholder seeded by their id.

    Args:
        text: Raw model output.
        now_ms: Override for the placeholder fallback seed.

    Returns:
        Tuple of (stories, number of dropped records).
    """
    try:
        parsed = _extract_json_array(text)
    except json.JSONDecodeError:
        logger.warning("Failed to parse news JSON, returning empty feed")
        return ([], 0)

    if not isinstance(parsed, list):
        logger.warning("News response is not a list, returning empty feed")
        return ([], 0)

    items: list[NewsItem] = []
    seen_ids: set[str] = set()
    dropped = 0
    for index, raw in enumerate(parsed):
        try:
            item = NewsItem.model_validate(raw)
        except ValidationError as e:
            logger.warning("Dropping malformed story at index %d: %s", index, e.error_count())
            dropped += 1
            continue

        if item.id:
            if item.id in seen_ids:
                logger.warning("Dropping duplicate story id %r", item.id)
                dropped += 1
                continue
            seen_ids.add(item.id)

        if not has_usable_image(item.image_url):
            item = item.model_copy(
                update={"image_url": placeholder_image_url(item.id, index, now_ms=now_ms)}
            )
        items.append(item)

    return (items, dropped)


class ClaudeNewsFetcher:
    """Generate a news feed using Claude's built-in web search tool.

    Rate-limit errors are retried with exponential backoff; if the service
    is still rate-limited afterwards, ``QuotaExhaustedError`` is raised. Any
    other failure (network, parse, validation) returns an empty feed so the
    caller can keep rendering.

    Args:
        api_key: Anthropic API key (defaults to CLAUDE_API_KEY env var).
        model: Model to use (default: claude-haiku-4-5-20251001).
        max_tokens: Completion budget for a feed request.
        max_searches: Max web searches per feed request.
        retries: Retry budget for rate-limited calls.
        initial_delay: Seconds before the first retry.
        fallback_city: City used for ``Region.CITY`` when none is given.
        fallback_city_label: Result of a failed coordinate lookup.
        run_logger: Optional RunLogger for recording fetches.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        max_tokens: int = 8192,
        max_searches: int = 5,
        retries: int = 3,
        initial_delay: float = 2.0,
        fallback_city: str = DEFAULT_CITY,
        fallback_city_label: str = DEFAULT_CITY_LABEL,
        run_logger: RunLogger | None = None,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._model = model
        self._max_tokens = max_tokens
        self._max_searches = max_searches
        self._retries = retries
        self._initial_delay = initial_delay
        self._fallback_city = fallback_city
        self._fallback_city_label = fallback_city_label
        self._run_logger = run_logger

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
            city_name: City to cover (defaults to the fallback city).
            genre: Topic focus.

        Returns:
            Validated stories, each with an image URL.

        Raises:
            QuotaExhaustedError: The service stayed rate-limited after retries.
        """
        user_prompt = build_news_prompt(
            language, region, city_name=city_name or self._fallback_city, genre=genre
        )
        request = {
            "language": language.value,
            "region": region.value,
            "city_name": city_name,
            "genre": genre.value,
        }
        system = SYSTEM_PROMPT.format(schema=json.dumps(NEWS_SCHEMA, indent=2))

        started = datetime.now(tz=UTC)
        t0 = time.monotonic()
        try:
            response = await call_with_retry(
                lambda: self._client.messages.create(
                    model=self._model,
                    max_tokens=self._max_tokens,
                    system=system,
                    tools=[
                        {
                            "type": "web_search_20250305",
                            "name": "web_search",
                            "max_uses": self._max_searches,
                        }
                    ],
                    messages=[{"role": "user", "content": user_prompt}],
                ),
                retries=self._retries,
                delay=self._initial_delay,
            )
        except Exception as e:
            duration = time.monotonic() - t0
            if is_quota_error(e):
                logger.error("News quota exhausted after %d retries: %s", self._retries, e)
                self._record(
                    request, started, duration, error_kind=FetchErrorKind.QUOTA, error=str(e)
                )
                raise QuotaExhaustedError() from e
            # Non-quota failures are hidden from the feed, but not from the log
            logger.error("News flow interrupted, returning empty feed: %s", e, exc_info=True)
            self._record(
                request, started, duration, error_kind=FetchErrorKind.GENERAL, error=str(e)
            )
            return []

        items, dropped = parse_news_items(_response_text(response))
        self._record(
            request,
            started,
            time.monotonic() - t0,
            item_count=len(items),
            dropped_count=dropped,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        logger.info("Fetched %d stories (%d dropped)", len(items), dropped)
        return items

    async def get_city_from_coords(self, lat: float, lng: float) -> str:
        """Resolve a "City, State" label for a coordinate pair.

        Returns the fallback label on any failure; never raises.
        """
        prompt = (
            f"Identify the specific city and state for coordinates Lat: {lat}, "
            f'Lng: {lng}. Return only "City, State".'
        )
        try:
            response = await call_with_retry(
                lambda: self._client.messages.create(
                    model=self._model,
                    max_tokens=64,
                    messages=[{"role": "user", "content": prompt}],
                ),
                retries=self._retries,
                delay=self._initial_delay,
            )
        except Exception as e:
            logger.warning("City lookup failed for (%s, %s): %s", lat, lng, e)
            return self._fallback_city_label

        city = _response_text(response).strip()
        return city or self._fallback_city_label

    def _record(
        self,
        request: dict[str, Any],
        started: datetime,
        duration: float,
        **kwargs: Any,
    ) -> None:
        if self._run_logger:
            self._run_logger.record(
                "fetch_news",
                request,
                duration_seconds=duration,
                started_at=started,
                **kwargs,
            )
