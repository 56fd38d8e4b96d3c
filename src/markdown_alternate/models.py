#!/usr/bin/env python3
"""
Content Models Module

Immutable records for the content handed to the document assembler. The
``from_dict`` constructors accept the row shapes produced by CMS exports and
web service payloads (``introtext``, ``fulltext``, ``images`` as a JSON string,
``custom_fields`` rows with ``rawvalue`` and ``params``, ...).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


def _text(value):
    return '' if value is None else str(value)


def _json_object(value):
    """Decode a JSON object stored as a string; dicts pass through."""
    if isinstance(value, dict):
        return value
    if not value:
        return {}
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring undecodable JSON object: {value!r}")
        return {}
    return decoded if isinstance(decoded, dict) else {}


@dataclass(frozen=True)
class Tag:
    title: str
    alias: str

    @classmethod
    def from_dict(cls, data):
        return cls(title=_text(data.get('title')), alias=_text(data.get('alias')))


@dataclass(frozen=True)
class ArticleImages:
    intro: str = ''
    fulltext: str = ''

    @classmethod
    def from_value(cls, value):
        """
        Build images from the stored ``images`` column.

        Args:
            value: JSON string or dict with ``image_intro``/``image_fulltext``
                   (``intro``/``fulltext`` are accepted too)

        Returns:
            ArticleImages: The parsed images
        """
        if isinstance(value, cls):
            return value
        data = _json_object(value)
        return cls(
            intro=_text(data.get('image_intro', data.get('intro'))),
            fulltext=_text(data.get('image_fulltext', data.get('fulltext'))),
        )

    @property
    def lead(self):
        """The image shown above the article body."""
        return self.fulltext or self.intro


@dataclass(frozen=True)
class CustomField:
    name: str
    label: str
    type: str
    raw_value: Any
    type_params: Any = '{}'
    id: int = 0

    @classmethod
    def from_dict(cls, data):
        raw_value = data.get('rawvalue', data.get('raw_value', data.get('value')))
        return cls(
            name=_text(data.get('name')),
            label=_text(data.get('label')),
            type=_text(data.get('type') or 'text').lower(),
            raw_value=raw_value,
            type_params=data.get('params', data.get('fieldparams', '{}')) or '{}',
            id=int(data.get('id') or 0),
        )


@dataclass(frozen=True)
class ChildFieldMeta:
    name: str
    label: str = ''
    type: str = 'text'

    @classmethod
    def coerce(cls, name, entry):
        """Accept a ChildFieldMeta, a mapping or an object with label/type."""
        if isinstance(entry, cls):
            return entry
        if isinstance(entry, dict):
            label, field_type = entry.get('label'), entry.get('type')
        else:
            label, field_type = getattr(entry, 'label', None), getattr(entry, 'type', None)
        return cls(name=name, label=_text(label), type=_text(field_type or 'text'))


@dataclass(frozen=True)
class RenderedField:
    name: str
    label: str
    type: str
    raw_value: Any
    value: str
    markdown: str


@dataclass(frozen=True)
class Article:
    id: int
    title: str
    intro_text: str = ''
    full_text: str = ''
    created: Any = None
    meta_description: str = ''
    author_name: str = ''
    category_title: str = ''
    category_alias: str = ''
    alias: str = ''
    images: ArticleImages = ArticleImages()
    tags: Tuple[Tag, ...] = ()
    custom_fields: Tuple[CustomField, ...] = ()

    @property
    def text(self):
        """Intro and full text, separated by a blank line when both exist."""
        if self.intro_text and self.full_text:
            return f"{self.intro_text}\n\n{self.full_text}"
        return self.intro_text or self.full_text

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=int(data.get('id') or 0),
            title=_text(data.get('title')),
            intro_text=_text(data.get('introtext', data.get('intro_text'))),
            full_text=_text(data.get('fulltext', data.get('full_text'))),
            created=data.get('created'),
            meta_description=_text(data.get('metadesc', data.get('meta_description'))),
            author_name=_text(data.get('author', data.get('author_name'))),
            category_title=_text(data.get('category_title')),
            category_alias=_text(data.get('category_alias')),
            alias=_text(data.get('alias')),
            images=ArticleImages.from_value(data.get('images')),
            tags=tuple(Tag.from_dict(tag) for tag in data.get('tags') or []),
            custom_fields=tuple(
                CustomField.from_dict(field) for field in data.get('custom_fields') or []
            ),
        )


@dataclass(frozen=True)
class ArticleSummary:
    title: str
    alias: str = ''
    intro_text: str = ''
    images: ArticleImages = ArticleImages()

    @classmethod
    def from_dict(cls, data):
        return cls(
            title=_text(data.get('title')),
            alias=_text(data.get('alias')),
            intro_text=_text(data.get('introtext', data.get('intro_text'))),
            images=ArticleImages.from_value(data.get('images')),
        )


@dataclass(frozen=True)
class Category:
    id: int
    title: str
    alias: str = ''
    description: str = ''
    meta_description: str = ''
    image: str = ''
    articles: Tuple[ArticleSummary, ...] = ()

    @classmethod
    def from_dict(cls, data):
        image: Optional[str] = data.get('image')
        if image is None:
            image = _json_object(data.get('params')).get('image')

        return cls(
            id=int(data.get('id') or 0),
            title=_text(data.get('title')),
            alias=_text(data.get('alias')),
            description=_text(data.get('description')),
            meta_description=_text(data.get('metadesc', data.get('meta_description'))),
            image=_text(image),
            articles=tuple(
                ArticleSummary.from_dict(article) for article in data.get('articles') or []
            ),
        )
