import json

import pytest

from markdown_alternate.loader import (
    StaticFieldLookup,
    build_content_item,
    create_session,
    load_content_item,
    load_json,
)
from markdown_alternate.models import Article, Category, ChildFieldMeta

ARTICLE_ROW = {
    "id": 12,
    "title": "Pizza",
    "alias": "pizza",
    "introtext": "<p>Intro</p>",
    "fulltext": "<p>Full</p>",
    "created": "2024-05-01 08:00:00",
    "images": '{"image_intro": "images/i.jpg", "image_fulltext": ""}',
    "metadesc": "Tasty",
    "author": "Chef",
    "category_title": "Recipes",
    "category_alias": "recipes",
    "tags": [{"title": "Food", "alias": "food"}],
    "custom_fields": [
        {"id": 3, "name": "time", "label": "Time", "type": "text", "rawvalue": "20 min", "params": "{}"},
    ],
}


class _FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class _FakeSession:
    def __init__(self, payload):
        self.payload = payload
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append((url, timeout))
        return _FakeResponse(self.payload)


def test_article_from_row():
    article = build_content_item(ARTICLE_ROW)

    assert isinstance(article, Article)
    assert article.text == "<p>Intro</p>\n\n<p>Full</p>"
    assert article.images.intro == "images/i.jpg"
    assert article.images.lead == "images/i.jpg"
    assert article.tags[0].alias == "food"
    assert article.custom_fields[0].raw_value == "20 min"
    assert article.custom_fields[0].id == 3


def test_category_detected_from_articles_or_type():
    category = build_content_item({
        "id": 4,
        "title": "Recipes",
        "alias": "recipes",
        "params": '{"image": "images/c.jpg"}',
        "articles": [{"title": "Pizza", "alias": "pizza", "introtext": "<p>x</p>"}],
    })

    assert isinstance(category, Category)
    assert category.image == "images/c.jpg"
    assert category.articles[0].alias == "pizza"
    assert isinstance(build_content_item({"type": "category", "id": 1, "title": "C"}), Category)


def test_web_service_payload_is_unwrapped():
    payload = {"data": {"type": "articles", "id": "12", "attributes": {"title": "Pizza", "introtext": "x"}}}

    article = build_content_item(payload)

    assert article.id == 12
    assert article.title == "Pizza"


def test_non_object_payload_is_rejected():
    with pytest.raises(ValueError):
        build_content_item(["not", "an", "object"])


def test_load_from_file(tmp_path):
    path = tmp_path / "article.json"
    path.write_text(json.dumps(ARTICLE_ROW), encoding="utf-8")

    assert load_content_item(str(path)).title == "Pizza"


def test_load_from_url_uses_session():
    session = _FakeSession(ARTICLE_ROW)

    assert load_json("https://ex.org/export/12.json", session=session, timeout=5) == ARTICLE_ROW
    assert session.requested == [("https://ex.org/export/12.json", 5)]


def test_session_headers():
    session = create_session(token="secret")

    assert session.headers["Authorization"] == "Bearer secret"
    assert session.headers["User-Agent"] == "MarkdownAlternate/1.0"


def test_static_field_lookup(tmp_path):
    path = tmp_path / "fields.json"
    path.write_text(json.dumps([
        {"name": "field3", "label": "Ingredient", "type": "text"},
        {"name": "photo", "label": "Photo", "type": "media"},
    ]), encoding="utf-8")

    lookup = StaticFieldLookup.from_source(str(path))

    assert lookup({"field3", "missing"}) == {
        "field3": ChildFieldMeta(name="field3", label="Ingredient", type="text"),
    }
