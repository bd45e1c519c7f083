"""Tests for placeholder images."""

from kalki_news.images import has_usable_image, placeholder_image_url


def test_placeholder_is_deterministic_per_id() -> None:
    assert placeholder_image_url("abc", 0) == placeholder_image_url("abc", 7)
    assert placeholder_image_url("abc", 0) == "https://picsum.photos/seed/abc/1000/600"


def test_placeholder_seed_is_url_quoted() -> None:
    url = placeholder_image_url("news/42 x", 0)
    assert url == "https://picsum.photos/seed/news%2F42%20x/1000/600"


def test_placeholder_without_id_uses_index_and_time() -> None:
    assert placeholder_image_url("", 3, now_ms=99) == "https://picsum.photos/seed/3-99/1000/600"
    assert placeholder_image_url("  ", 1, now_ms=5).endswith("/seed/1-5/1000/600")


def test_has_usable_image() -> None:
    assert has_usable_image("https://cdn.example.com/a.jpg")
    assert has_usable_image("HTTP://example.com/a.png")
    assert not has_usable_image(None)
    assert not has_usable_image("")
    assert not has_usable_image("/relative/path.jpg")
    assert not has_usable_image("data:image/png;base64,AAAA")
