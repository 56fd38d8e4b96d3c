#!/usr/bin/env python3
"""
HTML to Markdown Converter Module

This module walks a parsed HTML fragment and emits Markdown. Every tag name
maps to one rule function in ``TAG_RULES``; tags without a rule are
transparent and only contribute their children.

Rules receive the element, the base URL used to absolutize links and images,
and the current nesting depth. They return a Markdown string and never keep
state between calls.
"""

import logging
import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from .text_cleaner import collapse_whitespace, escape_table_cell, strip_tags, trim
from .urls import clean_image_url, resolve_link

logger = logging.getLogger(__name__)

# Deeper subtrees are flattened to their text instead of being walked
MAX_DEPTH = 100

DOCUMENT_HEAD = '<!DOCTYPE html><html><head><meta charset="UTF-8"></head><body>'
DOCUMENT_TAIL = '</body></html>'

LANGUAGE_RE = re.compile(r'(?:language-|lang-)(\w+)')
BLANK_LINE_RE = re.compile(r'^[ \t]+$')
FENCE_RE = re.compile(r'^[ \t]*```')
EXCESS_NEWLINES_RE = re.compile(r'\n{3,}')

BLOCK_TAGS = frozenset([
    'div', 'section', 'article', 'main', 'header', 'footer',
    'aside', 'nav', 'figure', 'figcaption',
])
INLINE_TAGS = frozenset([
    'span', 'abbr', 'cite', 'mark', 'small', 'sub', 'sup', 'time', 'label',
])
SUPPRESSED_TAGS = frozenset([
    'script', 'style', 'noscript', 'iframe', 'button', 'input',
    'select', 'textarea', 'form', 'svg',
])


def _convert_node(node, base_url, depth):
    if isinstance(node, NavigableString):
        # Comments, doctypes, CDATA and processing instructions
        if isinstance(node, PreformattedString):
            return ''
        return collapse_whitespace(str(node))

    if not isinstance(node, Tag):
        return ''

    rule = TAG_RULES.get(node.name, _passthrough)

    if depth > MAX_DEPTH and rule is not _suppress:
        logger.debug(f"Nesting deeper than {MAX_DEPTH} at <{node.name}>, flattening to text")
        return collapse_whitespace(node.get_text())

    return rule(node, base_url, depth)


def _convert_children(node, base_url, depth):
    parts = []

    for child in node.children:
        converted = _convert_node(child, base_url, depth + 1)
        # Text following a block starts a fresh line
        if parts and parts[-1].endswith('\n') and isinstance(child, NavigableString):
            converted = converted.lstrip(' ')
        if converted:
            parts.append(converted)

    return ''.join(parts)


def _element_children(node, *names):
    return [child for child in node.children if isinstance(child, Tag) and child.name in names]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _heading(level):
    marker = '#' * level

    def rule(node, base_url, depth):
        return f"\n{marker} {trim(_convert_children(node, base_url, depth))}\n\n"

    return rule


def _paragraph(node, base_url, depth):
    inner = trim(_convert_children(node, base_url, depth))
    return f"{inner}\n\n" if inner else ''


def _line_break(node, base_url, depth):
    return '  \n'


def _horizontal_rule(node, base_url, depth):
    return '\n---\n\n'


def _blockquote(node, base_url, depth):
    inner = trim(_convert_children(node, base_url, depth))
    quoted = '\n'.join(f"> {line}" for line in inner.split('\n'))
    return f"\n{quoted}\n\n"


def _preformatted(node, base_url, depth):
    """
    Render a ``pre`` element as a fenced code block.

    The text content is kept verbatim. A language is taken from a
    ``language-*`` or ``lang-*`` class on a directly nested ``code`` element.
    """
    language = ''
    code_nodes = _element_children(node, 'code')

    if code_nodes:
        code_node = code_nodes[0]
        classes = code_node.get('class') or []
        if isinstance(classes, str):
            classes = classes.split()
        match = LANGUAGE_RE.search(' '.join(classes))
        if match:
            language = match.group(1)
        code = code_node.get_text()
    else:
        code = node.get_text()

    if not code.endswith('\n'):
        code += '\n'

    return f"\n```{language}\n{code}```\n\n"


def _wrap(marker):
    def rule(node, base_url, depth):
        inner = trim(_convert_children(node, base_url, depth))
        return f"{marker}{inner}{marker}" if inner else ''

    return rule


def _inline_code(node, base_url, depth):
    text = node.get_text()

    if node.parent is not None and node.parent.name == 'pre':
        return text

    fence = '`'
    while fence in text:
        fence += '`'
    if text.startswith('`') or text.endswith('`'):
        text = f" {text} "

    return f"{fence}{text}{fence}"


def _link(node, base_url, depth):
    href = trim(node.get('href') or '')
    text = trim(_convert_children(node, base_url, depth))

    if not href:
        return text
    if not text:
        text = href

    return f"[{text}]({resolve_link(href, base_url)})"


def _image(node, base_url, depth):
    src = clean_image_url(node.get('src') or '', base_url)
    if not src:
        return ''

    alt = node.get('alt') or ''
    title = node.get('title') or ''

    markdown = f"![{alt}]({src}"
    if title:
        escaped = title.replace('"', '\\"')
        markdown += f' "{escaped}"'
    return markdown + ')'


def _indent_continuation(text, width):
    lines = text.split('\n')
    padding = ' ' * width
    return '\n'.join([lines[0]] + [padding + line if line else line for line in lines[1:]])


def _list(ordered):
    def rule(node, base_url, depth):
        output = ''
        counter = 1

        for item in _element_children(node, 'li'):
            text = trim(_convert_children(item, base_url, depth + 1))
            marker = f"{counter}. " if ordered else '- '
            output += marker + _indent_continuation(text, len(marker)) + '\n'
            counter += 1

        return f"\n{output}\n"

    return rule


def _list_item(node, base_url, depth):
    return trim(_convert_children(node, base_url, depth)) + '\n'


def _table_cells(row, base_url, depth):
    return [
        escape_table_cell(_convert_children(cell, base_url, depth + 1))
        for cell in _element_children(row, 'td', 'th')
    ]


def _table(node, base_url, depth):
    """
    Render a table as a pipe table.

    The first row is the header when it sits in ``thead`` or holds a ``th``
    cell; otherwise a blank header as wide as the widest row is used. Rows
    are padded or truncated to the header width.
    """
    rows = [row for row in node.find_all('tr') if row.find_parent('table') is node]
    if not rows:
        return ''

    first = rows[0]
    has_header = (
        (first.parent is not None and first.parent.name == 'thead')
        or bool(_element_children(first, 'th'))
    )

    if has_header:
        header = _table_cells(first, base_url, depth + 1)
        body = [_table_cells(row, base_url, depth + 1) for row in rows[1:]]
    else:
        body = [_table_cells(row, base_url, depth + 1) for row in rows]
        header = [''] * max(len(cells) for cells in body)

    width = len(header)
    if width == 0:
        return ''

    lines = [
        '| ' + ' | '.join(header) + ' |',
        '| ' + ' | '.join(['---'] * width) + ' |',
    ]
    for cells in body:
        cells = (cells + [''] * width)[:width]
        lines.append('| ' + ' | '.join(cells) + ' |')

    return '\n' + '\n'.join(lines) + '\n\n'


def _block(node, base_url, depth):
    inner = trim(_convert_children(node, base_url, depth))
    return f"{inner}\n\n" if inner else ''


def _passthrough(node, base_url, depth):
    return _convert_children(node, base_url, depth)


def _suppress(node, base_url, depth):
    return ''


TAG_RULES = {
    'h1': _heading(1),
    'h2': _heading(2),
    'h3': _heading(3),
    'h4': _heading(4),
    'h5': _heading(5),
    'h6': _heading(6),
    'p': _paragraph,
    'br': _line_break,
    'hr': _horizontal_rule,
    'blockquote': _blockquote,
    'pre': _preformatted,
    'strong': _wrap('**'),
    'b': _wrap('**'),
    'em': _wrap('*'),
    'i': _wrap('*'),
    'del': _wrap('~~'),
    's': _wrap('~~'),
    'code': _inline_code,
    'a': _link,
    'img': _image,
    'ul': _list(ordered=False),
    'ol': _list(ordered=True),
    'li': _list_item,
    'table': _table,
}
TAG_RULES.update(dict.fromkeys(BLOCK_TAGS, _block))
TAG_RULES.update(dict.fromkeys(INLINE_TAGS, _passthrough))
TAG_RULES.update(dict.fromkeys(SUPPRESSED_TAGS, _suppress))


def _clear_blank_lines(markdown):
    """Empty whitespace-only lines outside fenced code blocks."""
    lines = markdown.split('\n')
    in_fence = False

    for index, line in enumerate(lines):
        if FENCE_RE.match(line):
            in_fence = not in_fence
        elif not in_fence and BLANK_LINE_RE.match(line):
            lines[index] = ''

    return '\n'.join(lines)


def _fallback_text(html_fragment):
    text = trim(strip_tags(html_fragment))
    return f"{text}\n" if text else ''


def convert(html_fragment, base_url):
    """
    Convert an HTML fragment to Markdown.

    Args:
        html_fragment (str): HTML body fragment (may be malformed)
        base_url (str): Base URL used to absolutize links and images

    Returns:
        str: Markdown ending in a single newline, or an empty string for
             empty input
    """
    if not html_fragment or not html_fragment.strip():
        return ''

    try:
        soup = BeautifulSoup(DOCUMENT_HEAD + html_fragment + DOCUMENT_TAIL, 'lxml')
        body = soup.body
    except Exception as e:
        logger.warning(f"Could not parse HTML fragment, falling back to plain text: {str(e)}")
        return _fallback_text(html_fragment)

    if body is None:
        logger.debug("Parsed document has no body, falling back to plain text")
        return _fallback_text(html_fragment)

    markdown = _convert_children(body, base_url, 0)
    markdown = _clear_blank_lines(markdown)
    markdown = trim(EXCESS_NEWLINES_RE.sub('\n\n', markdown))

    return f"{markdown}\n" if markdown else ''
