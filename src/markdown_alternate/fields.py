#!/usr/bin/env python3
"""
Field Value Renderer Module

This module turns the stored value of a custom field into text an agent can
read. Each field yields two forms:

- a flat value, one line of plain text (option labels joined with commas,
  subform rows joined with semicolons, ...)
- a Markdown block used in the "Custom Fields" section of a document

Stored values are loosely typed JSON blobs. ``normalize_value`` reduces them
once to a ``ScalarValue``, a ``ListValue`` or a ``RowsValue`` and the
renderers only ever look at those.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Tuple

from .models import ChildFieldMeta, RenderedField
from .text_cleaner import clean_text, decode_entities, strip_tags
from .urls import clean_image_url

logger = logging.getLogger(__name__)

OPTION_TYPES = frozenset(['list', 'radio', 'checkboxes'])
MEDIA_TYPES = frozenset(['media', 'image'])
SUBFORM_TYPE = 'subform'

# Auto-generated child field names carry no meaning for a reader
GENERIC_LABEL_RE = re.compile(r'^field\d+$')

# What an empty media selection turns into when serialized upstream
ARRAY_ARTIFACT = 'Array'


@dataclass(frozen=True)
class ScalarValue:
    text: str


@dataclass(frozen=True)
class ListValue:
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class RowsValue:
    rows: Tuple[Tuple[Tuple[str, Any], ...], ...]

    def child_names(self):
        names = []
        for row in self.rows:
            for name, _ in row:
                if name not in names:
                    names.append(name)
        return names


@dataclass(frozen=True)
class _Column:
    label: str
    value: str
    generic: bool


def decode_json(value):
    """
    Decode a JSON string, returning None when it is not valid JSON.

    Values that are already decoded (dicts, lists, numbers) pass through.
    """
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return None


def _scalar_text(value):
    if value is None or isinstance(value, (dict, list)):
        return ''
    if isinstance(value, bool):
        return '1' if value else ''
    return str(value)


def normalize_value(raw_value):
    """
    Reduce a stored field value to one of the parsed variants.

    Rows may be stored as ``{"row0": {...}, "row1": {...}}`` or ``[[...]]``.
    When the first row is a mapping or a list the value is a set of rows
    (list rows are keyed by position), otherwise it is a flat list.

    Args:
        raw_value: Stored value, usually a JSON string

    Returns:
        ScalarValue | ListValue | RowsValue: The parsed value
    """
    data = decode_json(raw_value)

    if not isinstance(data, (dict, list)) or not data:
        if isinstance(raw_value, (dict, list)):
            return ScalarValue('')
        return ScalarValue(_scalar_text(raw_value))

    values = list(data.values()) if isinstance(data, dict) else list(data)

    if not isinstance(values[0], (dict, list)):
        return ListValue(tuple(values))

    rows = []
    for row in values:
        if isinstance(row, dict):
            rows.append(tuple((str(name), value) for name, value in row.items()))
        elif isinstance(row, list):
            rows.append(tuple((str(index), value) for index, value in enumerate(row)))
        else:
            logger.debug(f"Skipping non-row entry in subform value: {row!r}")

    return RowsValue(tuple(rows))


def lookup_child_fields(names, child_lookup):
    """
    Resolve labels and types of subform child fields in one call.

    Args:
        names (list): Child field names
        child_lookup (callable): ``names -> {name: meta}``, may be None

    Returns:
        dict: Field name to ChildFieldMeta; empty when the lookup fails
    """
    if not names or child_lookup is None:
        return {}

    try:
        found = child_lookup(set(names)) or {}
        return {
            name: ChildFieldMeta.coerce(name, entry)
            for name, entry in dict(found).items()
            if entry is not None
        }
    except Exception as e:
        logger.warning(f"Child field lookup failed, using field names as labels: {str(e)}")
        return {}


def _labelled(label, value):
    return f"**{label}:** {value}\n" if label else f"{value}\n"


# ---------------------------------------------------------------------------
# Option, media and plain values
# ---------------------------------------------------------------------------

def _option_labels(type_params):
    params = decode_json(type_params)
    options = params.get('options') if isinstance(params, dict) else None

    # Options are stored as {"options0": {...}, "options1": {...}} or a list
    if isinstance(options, dict):
        options = list(options.values())

    labels = {}
    for option in options or []:
        if isinstance(option, dict) and 'value' in option and 'name' in option:
            labels[_scalar_text(option['value'])] = decode_entities(_scalar_text(option['name']))
    return labels


def resolve_options(raw_value, type_params):
    """
    Map the selected option keys of a list, radio or checkboxes field to labels.

    Args:
        raw_value: Selected key, or a JSON array of keys
        type_params: Field parameters holding the ``options`` definitions

    Returns:
        str: Labels joined with ", "; unknown keys are kept as they are
    """
    labels = _option_labels(type_params)

    keys = decode_json(raw_value)
    if isinstance(keys, dict):
        keys = list(keys.values())
    elif not isinstance(keys, list):
        keys = [raw_value]

    resolved = []
    for key in keys:
        key = _scalar_text(key)
        label = labels.get(key, key)
        if label:
            resolved.append(label)

    return ', '.join(resolved)


def resolve_media(raw_value, base_url):
    """Return the absolute URL of a media/image field, or an empty string."""
    data = decode_json(raw_value)

    if isinstance(data, dict):
        path = _scalar_text(data.get('url')) or _scalar_text(data.get('imagefile'))
    elif isinstance(data, list):
        path = ''
    else:
        path = strip_tags(_scalar_text(raw_value))

    return clean_image_url(path, base_url)


# ---------------------------------------------------------------------------
# Subforms
# ---------------------------------------------------------------------------

def clean_child_value(value, base_url):
    """
    Turn one subform cell into display text.

    Image selections (mappings with an ``imagefile`` key) become an inline
    image; empty selections, other nested structures and the "Array"
    artifact become an empty string.
    """
    if isinstance(value, dict) and 'imagefile' in value:
        src = clean_image_url(_scalar_text(value.get('imagefile')), base_url)
        if not src:
            return ''
        alt = clean_text(_scalar_text(value.get('alt_text')))
        return f"![{alt}]({src})"

    if isinstance(value, (dict, list)):
        return ''

    text = _scalar_text(value)
    if text.strip() == ARRAY_ARTIFACT:
        return ''

    return clean_text(text)


def _row_columns(row, child_meta, base_url):
    columns = []

    for name, value in row:
        clean = clean_child_value(value, base_url)
        if not clean:
            continue

        meta = child_meta.get(name)
        label = decode_entities(meta.label) if meta is not None and meta.label else name
        columns.append(_Column(label=label, value=clean, generic=bool(GENERIC_LABEL_RE.match(label))))

    return columns


def _flat_row(columns):
    if len(columns) == 1:
        return columns[0].value
    return ', '.join(
        column.value if column.generic else f"{column.label}: {column.value}"
        for column in columns
    )


def _markdown_row(columns):
    """
    Format one row according to how many columns carry a value.

    Returns:
        tuple: (is_bullet, text)
    """
    if len(columns) == 1:
        return True, f"- {columns[0].value}"

    if len(columns) == 2:
        return False, f"**{columns[0].value}**\n{columns[1].value}"

    lines = [
        column.value if column.generic else f"**{column.label}:** {column.value}"
        for column in columns
    ]
    return False, '\n'.join(lines)


def _join_rows(chunks):
    output = ''
    previous_bullet = False

    for is_bullet, text in chunks:
        if output:
            output += '\n' if (is_bullet and previous_bullet) else '\n\n'
        output += text
        previous_bullet = is_bullet

    return output


def render_subform(raw_value, field_id, child_lookup, base_url, label=''):
    """
    Render a subform field.

    Each row is formatted on its own, driven by its count of meaningful
    columns: none is skipped, one becomes a bullet, two become a bold line
    followed by a plain line, three or more become one ``**Label:** value``
    line each. Generic ``field<digits>`` labels are left out.

    Args:
        raw_value: Stored JSON rows
        field_id (int): ID of the subform field, for diagnostics
        child_lookup (callable): Resolves child field names to labels/types
        base_url (str): Base URL for image cells
        label (str): Label of the subform field

    Returns:
        tuple: (flat_value, markdown_block)
    """
    parsed = normalize_value(raw_value)

    if isinstance(parsed, ScalarValue):
        flat = clean_text(parsed.text)
        return flat, _labelled(label, flat) if flat else ''

    if isinstance(parsed, ListValue):
        items = [clean_text(_scalar_text(item)) for item in parsed.items]
        items = [item for item in items if item]
        if not items:
            return '', ''
        bullets = '\n'.join(f"- {item}" for item in items)
        heading = f"**{label}:**\n\n" if label else ''
        return ', '.join(items), f"{heading}{bullets}\n"

    child_meta = lookup_child_fields(parsed.child_names(), child_lookup)
    logger.debug(f"Subform field {field_id}: {len(parsed.rows)} row(s), "
                 f"{len(child_meta)} child field(s) resolved")

    flat_rows = []
    chunks = []
    for row in parsed.rows:
        columns = _row_columns(row, child_meta, base_url)
        if not columns:
            continue
        flat_rows.append(_flat_row(columns))
        chunks.append(_markdown_row(columns))

    if not chunks:
        return '', ''

    heading = f"**{label}:**\n\n" if label else ''
    return '; '.join(flat_rows), f"{heading}{_join_rows(chunks)}\n"


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def render_field_value(raw_value, field_type, type_params, field_id, child_lookup, base_url, label=''):
    """
    Render a stored field value by its declared type.

    Malformed JSON in the value or the parameters never raises; the value is
    treated as plain text instead.

    Args:
        raw_value: Stored value
        field_type (str): Declared field type; unknown types are plain text
        type_params: JSON parameters of the field
        field_id (int): Field ID
        child_lookup (callable): Child field lookup for subforms
        base_url (str): Base URL for media values
        label (str): Field label used in the Markdown block

    Returns:
        tuple: (flat_value, markdown_block); both empty when nothing remains
    """
    field_type = (field_type or '').lower()

    if field_type in OPTION_TYPES:
        flat = resolve_options(raw_value, type_params)
        return flat, _labelled(label, flat) if flat else ''

    if field_type in MEDIA_TYPES:
        url = resolve_media(raw_value, base_url)
        return url, _labelled(label, f"![]({url})") if url else ''

    if field_type == SUBFORM_TYPE:
        return render_subform(raw_value, field_id, child_lookup, base_url, label)

    flat = clean_text(_scalar_text(raw_value))
    return flat, _labelled(label, flat) if flat else ''


def render_custom_field(field, base_url, child_lookup=None):
    """
    Render one custom field.

    Args:
        field (CustomField): The field with its stored value
        base_url (str): Base URL for media values
        child_lookup (callable, optional): Child field lookup for subforms

    Returns:
        RenderedField or None: None when the field has nothing to show
    """
    if field.raw_value is None or field.raw_value == '':
        return None

    label = decode_entities(field.label or field.name)
    value, markdown = render_field_value(
        field.raw_value, field.type, field.type_params, field.id, child_lookup, base_url, label
    )

    if not value:
        logger.debug(f"Field {field.name!r} rendered empty, leaving it out")
        return None

    return RenderedField(
        name=field.name,
        label=label,
        type=field.type,
        raw_value=field.raw_value,
        value=value,
        markdown=markdown,
    )


def render_custom_fields(fields, base_url, child_lookup=None):
    """Render fields in order, dropping those without a value."""
    rendered = []
    for field in fields:
        result = render_custom_field(field, base_url, child_lookup)
        if result is not None:
            rendered.append(result)
    return rendered
