"""Tests for data models."""

import pytest
from pydantic import ValidationError

from kalki_news.data import NewsGenre, NewsItem, PostStatus, SocialMediaPost


def test_news_item_parses_camel_case() -> None:
    item = NewsItem.model_validate(
        {
            "id": "n1",
            "title": "Title",
            "summary": "Summary",
            "fullDescription": "Long text",
            "source": "The Hindu",
            "sourceUrl": "https://example.com/n1",
            "timestamp": "2 hours ago",
            "category": "Sports",
            "region": "Karnataka",
            "isUrgent": True,
            "isVerified": False,
        }
    )
    assert item.full_description == "Long text"
    assert item.source_url == "https://example.com/n1"
    assert item.category == NewsGenre.SPORTS
    assert item.is_urgent is True
    assert item.image_url is None


def test_news_item_accepts_field_names() -> None:
    item = NewsItem(
        id="n1", title="T", summary="S", source="X", category=NewsGenre.TECH, is_verified=True
    )
    assert item.is_verified is True


def test_to_wire_uses_aliases() -> None:
    item = NewsItem(id="n1", title="T", summary="S", source="X", category=NewsGenre.HEALTH)
    wire = item.to_wire()
    assert wire["category"] == "Health"
    assert "sourceUrl" in wire
    assert "isUrgent" in wire
    assert "source_url" not in wire
    assert NewsItem.model_validate(wire) == item


def test_category_match_is_case_insensitive() -> None:
    item = NewsItem(id="n1", title="T", summary="S", source="X", category="current affairs")
    assert item.category == NewsGenre.CURRENT_AFFAIRS


def test_unknown_category_rejected() -> None:
    with pytest.raises(ValidationError):
        NewsItem(id="n1", title="T", summary="S", source="X", category="Weather")


def test_news_item_is_frozen() -> None:
    item = NewsItem(id="n1", title="T", summary="S", source="X", category=NewsGenre.CRIME)
    with pytest.raises(ValidationError):
        item.title = "changed"  # type: ignore[misc]


def test_social_post_defaults() -> None:
    post = SocialMediaPost(
        id="p1",
        user_id="u1",
        article_id="a1",
        social_account_id="s1",
        platform="twitter",
        post_content="hello",
    )
    assert post.status == PostStatus.DRAFT
    assert post.published_at is None
