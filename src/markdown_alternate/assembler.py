#!/usr/bin/env python3
"""
Document Assembler Module

This module composes the final Markdown document for an article or a
category: a YAML frontmatter block followed by the Markdown body.

Frontmatter is written line by line rather than through a YAML serializer so
that the key order and quoting stay fixed for every document.
"""

import logging
import re
from datetime import date, datetime

from .fields import render_custom_fields
from .html_converter import convert
from .options import RenderOptions
from .text_cleaner import decode_entities, escape_link_text, trim, yaml_quote
from .urls import clean_image_url, join_site_path

logger = logging.getLogger(__name__)

DATE_PREFIX_RE = re.compile(r'^(\d{4}-\d{2}-\d{2})')


def format_date(created):
    """
    Format a creation timestamp as ``YYYY-MM-DD``.

    Args:
        created: datetime, date or a timestamp string such as
                 ``2024-03-01 10:15:00``

    Returns:
        str: The date, or an empty string when it cannot be read
    """
    if isinstance(created, (datetime, date)):
        return created.strftime('%Y-%m-%d')
    if not created:
        return ''

    text = str(created).strip()
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).strftime('%Y-%m-%d')
    except ValueError:
        match = DATE_PREFIX_RE.match(text)
        if match:
            try:
                return datetime.strptime(match.group(1), '%Y-%m-%d').strftime('%Y-%m-%d')
            except ValueError:
                pass
        logger.debug(f"Unreadable creation date {text!r}, leaving it out")
        return ''


def build_frontmatter(lines):
    """Wrap YAML lines in ``---`` delimiters."""
    return '---\n' + ''.join(f"{line}\n" for line in lines) + '---\n'


def _link_list(key, entries):
    lines = [f"{key}:"]
    for name, url in entries:
        lines.append(f"  - name: {yaml_quote(name)}")
        lines.append(f"    url: {yaml_quote(url)}")
    return lines


def _document(frontmatter_lines, sections):
    body = '\n\n'.join(section for section in sections if section)
    return f"{build_frontmatter(frontmatter_lines)}\n{body}\n"


def _converted(html_fragment, base_url):
    return trim(convert(html_fragment, base_url))


def _article_frontmatter(article, title, base_url, options):
    lines = [f"title: {yaml_quote(title)}"]

    if options.show_date:
        created = format_date(article.created)
        if created:
            lines.append(f"date: {created}")

    if options.show_description and article.meta_description:
        lines.append(f"description: {yaml_quote(article.meta_description)}")

    author = decode_entities(article.author_name)
    if options.show_author and author:
        lines.append(f"author: {yaml_quote(author)}")

    if options.show_images:
        intro_image = clean_image_url(article.images.intro, base_url)
        if intro_image:
            lines.append(f"intro_image: {yaml_quote(intro_image)}")
        fulltext_image = clean_image_url(article.images.fulltext, base_url)
        if fulltext_image:
            lines.append(f"fulltext_image: {yaml_quote(fulltext_image)}")

    category_title = decode_entities(article.category_title)
    if options.show_category and category_title:
        category_url = join_site_path(base_url, f"{article.category_alias}.md")
        lines.extend(_link_list('categories', [(category_title, category_url)]))

    if options.show_tags and article.tags:
        tags = [
            (decode_entities(tag.title), join_site_path(base_url, 'tags', f"{tag.alias}.md"))
            for tag in article.tags
        ]
        lines.extend(_link_list('tags', tags))

    return lines


def assemble_article(article, base_url, options=None, child_lookup=None):
    """
    Build the Markdown document for an article.

    Args:
        article (Article): Fully loaded article
        base_url (str): Base URL of the site, used for every link and image
        options (RenderOptions, optional): Section toggles; all on by default
        child_lookup (callable, optional): Resolves subform child field names
                                           to labels and types

    Returns:
        str: Frontmatter and body, ending in a single newline
    """
    options = options or RenderOptions()
    title = decode_entities(article.title)

    sections = [f"# {title}"]

    if options.show_images:
        lead_image = clean_image_url(article.images.lead, base_url)
        if lead_image:
            sections.append(f"![{escape_link_text(title)}]({lead_image})")

    sections.append(_converted(article.text, base_url))

    if options.show_fields and article.custom_fields:
        rendered = render_custom_fields(article.custom_fields, base_url, child_lookup)
        if rendered:
            blocks = '\n\n'.join(field.markdown.strip('\n') for field in rendered)
            sections.append(f"## Custom Fields\n\n{blocks}")

    logger.debug(f"Assembled article {article.id} ({len(sections)} body section(s))")
    return _document(_article_frontmatter(article, title, base_url, options), sections)


def _article_teaser(summary, category, base_url, options):
    title = decode_entities(summary.title)
    parts = [f"## {title}"]

    if options.show_images:
        intro_image = clean_image_url(summary.images.intro, base_url)
        if intro_image:
            parts.append(f"![{escape_link_text(title)}]({intro_image})")

    parts.append(_converted(summary.intro_text, base_url))

    article_url = join_site_path(base_url, category.alias, f"{summary.alias}.md")
    parts.append(f"[{options.read_more_label}]({article_url})")

    return '\n\n'.join(part for part in parts if part)


def assemble_category(category, base_url, options=None):
    """
    Build the Markdown document for a category and its article teasers.

    Args:
        category (Category): Category with its published articles
        base_url (str): Base URL of the site
        options (RenderOptions, optional): Section toggles; all on by default

    Returns:
        str: Frontmatter and body, ending in a single newline
    """
    options = options or RenderOptions()
    title = decode_entities(category.title)

    lines = [f"title: {yaml_quote(title)}"]
    if options.show_description and category.meta_description:
        lines.append(f"description: {yaml_quote(category.meta_description)}")
    if options.show_images:
        image = clean_image_url(category.image, base_url)
        if image:
            lines.append(f"image: {yaml_quote(image)}")

    sections = [f"# {title}"]
    if options.show_description:
        sections.append(_converted(category.description, base_url))

    for summary in category.articles:
        sections.append(_article_teaser(summary, category, base_url, options))

    logger.debug(f"Assembled category {category.id} with {len(category.articles)} article(s)")
    return _document(lines, sections)
