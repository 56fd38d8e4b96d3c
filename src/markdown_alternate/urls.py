#!/usr/bin/env python3
"""
URL Resolver Module

This module turns the relative paths stored by the CMS into absolute URLs
against an explicitly supplied base URL.
"""

import re

SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]*:')


def is_absolute(url):
    """
    Check whether a URL already carries a scheme or is protocol-relative.

    Args:
        url (str): URL or path

    Returns:
        bool: True if the URL needs no base
    """
    return url.startswith('//') or bool(SCHEME_RE.match(url))


def absolutize(path, base_url):
    """
    Make a path absolute against the base URL.

    The base URL already contains the site root path, so the path is simply
    appended to it rather than resolved with ``urljoin``.

    Args:
        path (str): Relative or absolute path
        base_url (str): Scheme, host, optional port and site root

    Returns:
        str: Absolute URL, or an empty string for an empty path
    """
    path = (path or '').strip()
    if not path or is_absolute(path):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def clean_image_url(path, base_url):
    """
    Clean an image path coming from the media manager.

    Everything from the first ``#`` onward is dropped (the media picker
    appends markers such as ``#joomlaImage://local-images/...``), then the
    path is made absolute.

    Args:
        path (str): Stored image path
        base_url (str): Base URL of the site

    Returns:
        str: Absolute image URL or an empty string
    """
    path = path or ''
    if '#' in path:
        path = path[:path.index('#')]
    return absolutize(path, base_url)


def resolve_link(href, base_url):
    """Absolutize a link target, leaving anchors and mailto links alone."""
    href = (href or '').strip()
    if href.startswith('#') or href.lower().startswith('mailto:'):
        return href
    return absolutize(href, base_url)


def join_site_path(base_url, *segments):
    """
    Build a URL below the site root from path segments.

    Args:
        base_url (str): Base URL of the site
        *segments (str): Path segments, e.g. ``'tags', 'news.md'``

    Returns:
        str: The joined URL
    """
    path = '/'.join(segment.strip('/') for segment in segments if segment.strip('/'))
    return f"{base_url.rstrip('/')}/{path}"
