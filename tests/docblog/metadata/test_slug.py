import pytest

from docblog.metadata.slug import DEFAULT_SLUG, MAX_SLUG_LENGTH, generate_slug, is_valid_slug


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Web Development Guide", "web-development-guide"),
        ("Hello, World!", "hello-world"),
        ("  --Trim me--  ", "trim-me"),
        ("Café Résumé", "cafe-resume"),
        ("プログラミング入門", "programming-introduction"),
        ("Notta の使い方ガイド", "notta-usage-guide"),
        ("日本語のみ", DEFAULT_SLUG),
        ("", DEFAULT_SLUG),
    ],
)
def test_generate_slug(title, expected):
    assert generate_slug(title) == expected


def test_long_titles_are_capped_without_trailing_hyphen():
    slug = generate_slug("word " * 30)
    assert len(slug) <= MAX_SLUG_LENGTH
    assert not slug.endswith("-")
    assert is_valid_slug(slug)


@pytest.mark.parametrize(
    "slug, valid",
    [
        ("meeting-notes", True),
        ("abc123", True),
        ("Meeting-Notes", False),
        ("meeting_notes", False),
        ("meeting notes", False),
        ("", False),
        (None, False),
        (42, False),
        ("meeting-notes\n", False),
        (" meeting-notes\n ", False),
    ],
)
def test_is_valid_slug(slug, valid):
    assert is_valid_slug(slug) is valid
