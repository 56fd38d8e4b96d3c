#!/usr/bin/env python3
"""
Content Loader Module

This module reads content items and child field definitions from JSON
documents, either local files or URLs of a web service that exports them.
"""

import json
import logging

import requests

from .models import Article, Category, ChildFieldMeta

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "MarkdownAlternate/1.0"


def create_session(user_agent=DEFAULT_USER_AGENT, token=None):
    """
    Create a requests session for fetching JSON exports.

    Args:
        user_agent (str): User agent string to use
        token (str, optional): Bearer token for the web service

    Returns:
        requests.Session: Configured session
    """
    session = requests.Session()
    session.headers.update({
        "User-Agent": user_agent,
        "Accept": "application/json",
    })
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session


def load_json(source, session=None, timeout=30):
    """
    Load a JSON document from a file path or an http(s) URL.

    Args:
        source (str): Path or URL
        session (requests.Session, optional): Session used for URLs
        timeout (float): Request timeout in seconds

    Returns:
        The decoded JSON document

    Raises:
        ValueError: If the document is not valid JSON
        requests.RequestException: If fetching a URL fails
        OSError: If reading a file fails
    """
    if source.startswith(('http://', 'https://')):
        session = session or create_session()
        logger.debug(f"Requesting: {source}")
        response = session.get(source, timeout=timeout)
        response.raise_for_status()
        return response.json()

    with open(source, 'r', encoding='utf-8') as f:
        return json.load(f)


def _unwrap(data):
    # Web service payloads wrap the record as {"data": {"attributes": {...}}}
    if isinstance(data, dict) and isinstance(data.get('data'), dict):
        record = data['data']
        if isinstance(record.get('attributes'), dict):
            merged = dict(record['attributes'])
            merged.setdefault('id', record.get('id'))
            merged.setdefault('type', record.get('type'))
            return merged
        return record
    return data


def build_content_item(data):
    """
    Build an Article or a Category from a decoded JSON payload.

    A payload is a category when its ``type`` says so or when it carries an
    ``articles`` list.

    Args:
        data (dict): Decoded payload

    Returns:
        Article or Category: The content item

    Raises:
        ValueError: If the payload is not a JSON object
    """
    data = _unwrap(data)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object for a content item, got {type(data).__name__}")

    item_type = str(data.get('type') or '').lower()
    if item_type in ('category', 'categories') or 'articles' in data:
        return Category.from_dict(data)
    return Article.from_dict(data)


def load_content_item(source, session=None):
    """Load and build the content item stored at a path or URL."""
    item = build_content_item(load_json(source, session=session))
    logger.info(f"Loaded {type(item).__name__.lower()} {item.id} from {source}")
    return item


class StaticFieldLookup:
    """
    A child field lookup backed by a mapping.

    The mapping is ``name -> {"label": ..., "type": ...}``, for example loaded
    from a JSON export of field definitions. Instances are callable the way
    the field renderer expects.
    """

    def __init__(self, definitions=None):
        self.definitions = {
            name: ChildFieldMeta.coerce(name, entry)
            for name, entry in (definitions or {}).items()
        }

    @classmethod
    def from_source(cls, source, session=None):
        data = load_json(source, session=session)
        # A list of field rows is accepted as well as a mapping
        if isinstance(data, list):
            data = {row.get('name'): row for row in data if isinstance(row, dict) and row.get('name')}
        if not isinstance(data, dict):
            raise ValueError(f"Expected field definitions as an object or a list in {source}")
        return cls(data)

    def __call__(self, names):
        return {name: self.definitions[name] for name in names if name in self.definitions}
