#!/usr/bin/env python3
"""
Render Options Module

Toggles that switch individual frontmatter and body sections on or off.
Every section is shown unless an option says otherwise.
"""

import logging
from dataclasses import dataclass, fields, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOptions:
    show_date: bool = True
    show_description: bool = True
    show_author: bool = True
    show_images: bool = True
    show_category: bool = True
    show_tags: bool = True
    show_fields: bool = True
    read_more_label: str = 'Read more...'

    @classmethod
    def from_mapping(cls, mapping):
        """
        Build options from a plain mapping such as stored plugin parameters.

        Args:
            mapping (dict): Option name to value; ``"0"``/``0``/``False`` switch
                            a section off

        Returns:
            RenderOptions: The options, defaults for keys not given
        """
        known = {f.name for f in fields(cls)}
        values = {}

        for key, value in (mapping or {}).items():
            if key not in known:
                logger.warning(f"Ignoring unknown render option: {key}")
                continue
            if key == 'read_more_label':
                values[key] = str(value)
            else:
                values[key] = _as_bool(value)

        return replace(cls(), **values)


def _as_bool(value):
    if isinstance(value, str):
        return value.strip().lower() not in ('', '0', 'false', 'no', 'off')
    return bool(value)
