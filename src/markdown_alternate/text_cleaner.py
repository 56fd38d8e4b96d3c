#!/usr/bin/env python3
"""
Text Cleaner Module

This module provides small, stateless helpers to normalize raw strings
before they end up in a Markdown document or its YAML frontmatter.
"""

import html
import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# ASCII whitespace only, so that non-breaking spaces survive collapsing
WHITESPACE_RE = re.compile(r'[ \t\n\r\f\v]+')
TAG_RE = re.compile(r'<[^>]*>')
TRIM_CHARS = ' \t\n\r\x0b\x00'


def trim(text):
    """Trim ASCII whitespace from both ends, keeping non-breaking spaces."""
    return text.strip(TRIM_CHARS)


def collapse_whitespace(text):
    """
    Collapse every run of whitespace (newlines included) into one space.

    Args:
        text (str): Text to normalize

    Returns:
        str: Text with single spaces between words
    """
    if not text:
        return ''
    return WHITESPACE_RE.sub(' ', text)


def strip_tags(value):
    """
    Remove markup tags from a string, keeping the text between them.

    Args:
        value (str): String that may contain HTML

    Returns:
        str: The string without tags (entities are left untouched)
    """
    if not value:
        return ''
    return TAG_RE.sub('', str(value))


def decode_entities(value):
    """Decode named and numeric HTML entities."""
    if not value:
        return ''
    return html.unescape(str(value))


def clean_text(value):
    """
    Strip tags, decode entities and trim a raw value.

    BeautifulSoup does the tag stripping so that unbalanced markup and
    comments are handled the same way the rest of the converter sees them.

    Args:
        value: Raw value (usually a string; numbers are stringified)

    Returns:
        str: Plain text
    """
    if value is None:
        return ''
    value = str(value)
    if '<' not in value and '&' not in value:
        return value.strip()

    try:
        text = BeautifulSoup(value, 'html.parser').get_text()
    except Exception as e:
        logger.debug(f"Falling back to regex tag stripping: {str(e)}")
        text = decode_entities(strip_tags(value))

    return text.strip()


def yaml_quote(value):
    """
    Render a string as a double-quoted YAML scalar.

    Args:
        value (str): Value to quote

    Returns:
        str: Quoted scalar, e.g. ``"Say \\"hi\\""``
    """
    value = '' if value is None else str(value)
    value = value.replace('\\', '\\\\').replace('"', '\\"')
    value = value.replace('\r', '\\r').replace('\n', '\\n').replace('\t', '\\t')
    return f'"{value}"'


def escape_table_cell(value):
    """Make converted cell content safe to place inside a pipe-table row."""
    value = re.sub(r'[ \t]*\n\s*', ' ', value.strip())
    return value.replace('|', '\\|')


def escape_link_text(value):
    """Escape square brackets so text can sit inside ``[...]``."""
    return value.replace('[', '\\[').replace(']', '\\]')
