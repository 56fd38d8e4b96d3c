import pytest

from markdown_alternate.urls import absolutize, clean_image_url, is_absolute, join_site_path, resolve_link

BASE_URL = "https://example.org"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://x.com", True),
        ("http://x.com", True),
        ("//cdn.x.com/a.png", True),
        ("data:image/png;base64,AAAA", True),
        ("/images/a.png", False),
        ("images/a:b.png", False),
        ("", False),
    ],
)
def test_is_absolute(url, expected):
    assert is_absolute(url) is expected


def test_absolutize():
    assert absolutize("/a/b", BASE_URL) == "https://example.org/a/b"
    assert absolutize("a/b", "https://example.org/root/") == "https://example.org/root/a/b"
    assert absolutize("https://x.com/y", BASE_URL) == "https://x.com/y"
    assert absolutize("", BASE_URL) == ""


def test_clean_image_url_strips_picker_suffix():
    path = "images/cat.jpg#joomlaImage://local-images/cat.jpg?width=800&height=600"

    assert clean_image_url(path, BASE_URL) == "https://example.org/images/cat.jpg"
    assert clean_image_url("#joomlaImage://only", BASE_URL) == ""
    assert clean_image_url(None, BASE_URL) == ""


def test_resolve_link_leaves_anchors_and_mailto():
    assert resolve_link("#top", BASE_URL) == "#top"
    assert resolve_link("mailto:a@b.com", BASE_URL) == "mailto:a@b.com"
    assert resolve_link("/contact", BASE_URL) == "https://example.org/contact"


def test_join_site_path_skips_empty_segments():
    assert join_site_path("https://ex.org/", "tags", "news.md") == "https://ex.org/tags/news.md"
    assert join_site_path("https://ex.org", "", "a.md") == "https://ex.org/a.md"
