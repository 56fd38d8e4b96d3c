"""
Markdown Alternate

Render articles and categories as Markdown documents with YAML frontmatter,
for agents that read the ``.md`` alternates of web pages.
"""

from .assembler import assemble_article, assemble_category
from .fields import render_custom_field, render_field_value
from .html_converter import convert
from .models import (
    Article,
    ArticleImages,
    ArticleSummary,
    Category,
    ChildFieldMeta,
    CustomField,
    RenderedField,
    Tag,
)
from .negotiation import (
    alternate_link_tag,
    estimate_tokens,
    markdown_response_headers,
    markdown_url,
    strip_markdown_suffix,
    wants_markdown,
)
from .options import RenderOptions

__version__ = "1.0.0"

__all__ = [
    "Article",
    "ArticleImages",
    "ArticleSummary",
    "Category",
    "ChildFieldMeta",
    "CustomField",
    "RenderOptions",
    "RenderedField",
    "Tag",
    "alternate_link_tag",
    "assemble_article",
    "assemble_category",
    "convert",
    "estimate_tokens",
    "markdown_response_headers",
    "markdown_url",
    "render_custom_field",
    "render_field_value",
    "strip_markdown_suffix",
    "wants_markdown",
]
