#!/usr/bin/env python3
"""
Content Negotiation Module

Helpers for the web layer that serves Markdown alternates: deciding whether
a request asks for Markdown, building the response headers and the
``<link rel="alternate">`` hint for HTML pages.
"""

import html
from urllib.parse import parse_qs, urlsplit, urlunsplit

MARKDOWN_SUFFIX = '.md'
MARKDOWN_CONTENT_TYPE = 'text/markdown'


def wants_markdown(path, query='', accept=''):
    """
    Check whether a request asks for the Markdown representation.

    Args:
        path (str): Request path
        query (str or dict): Query string or parsed query parameters
        accept (str): Value of the Accept header

    Returns:
        bool: True for a ``.md`` path, ``output=markdown`` or a
              ``text/markdown`` Accept header
    """
    if path.endswith(MARKDOWN_SUFFIX):
        return True

    params = parse_qs(query) if isinstance(query, str) else (query or {})
    output = params.get('output')
    if isinstance(output, list):
        output = output[0] if output else None
    if output == 'markdown':
        return True

    return MARKDOWN_CONTENT_TYPE in (accept or '')


def strip_markdown_suffix(path):
    """Return the HTML path for a ``.md`` path."""
    if path.endswith(MARKDOWN_SUFFIX):
        return path[:-len(MARKDOWN_SUFFIX)]
    return path


def markdown_url(url):
    """
    Build the Markdown alternate URL of a page.

    Query and fragment are dropped, a trailing slash is removed and ``.md``
    is appended.
    """
    parts = urlsplit(url)
    path = parts.path.rstrip('/') + MARKDOWN_SUFFIX
    return urlunsplit((parts.scheme, parts.netloc, path, '', ''))


def estimate_tokens(markdown):
    """Rough token count: one token per four bytes of UTF-8."""
    return len(markdown.encode('utf-8')) // 4


def markdown_response_headers(markdown, canonical_url):
    """
    Headers for a Markdown response.

    Args:
        markdown (str): The response body
        canonical_url (str): URL of the HTML equivalent

    Returns:
        dict: Header name to value
    """
    return {
        'Content-Type': f"{MARKDOWN_CONTENT_TYPE}; charset=utf-8",
        'X-Markdown-Tokens': str(estimate_tokens(markdown)),
        'Link': f'<{canonical_url}>; rel="canonical"',
    }


def alternate_link_tag(page_url):
    """The ``<link>`` element advertising the Markdown alternate of a page."""
    href = html.escape(markdown_url(page_url), quote=True)
    return f'<link href="{href}" rel="alternate" type="{MARKDOWN_CONTENT_TYPE}">'
