#!/usr/bin/env python3
"""
File Manager Module

This module provides functionality to save rendered Markdown documents and
read their frontmatter back.
"""

import logging
import os
import re

import yaml

logger = logging.getLogger(__name__)


def extract_frontmatter(content):
    """
    Extract frontmatter from markdown content.

    Args:
        content (str): Markdown content with potential frontmatter

    Returns:
        tuple: (frontmatter_dict, content_without_frontmatter) or (None, content) if no frontmatter
    """
    if content.startswith('---\n'):
        end_pos = content.find('\n---\n', 3)
        if end_pos != -1:
            frontmatter_str = content[4:end_pos + 1]
            try:
                frontmatter = yaml.safe_load(frontmatter_str)
                if isinstance(frontmatter, dict):
                    return frontmatter, content[end_pos + 5:]
            except (yaml.YAMLError, ValueError) as e:
                logger.debug(f"Invalid YAML frontmatter: {str(e)}")

    return None, content


class FileManager:
    """
    A class that writes Markdown documents below an output directory.

    Documents are named after the item's alias. When a file with the same
    name already holds a different document (its frontmatter title differs),
    a numbered variant is used instead of overwriting it.
    """

    def __init__(self, output_dir="output"):
        """
        Initialize the file manager.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = output_dir
        self._create_directory(output_dir)

    def _create_directory(self, directory):
        """
        Create a directory if it doesn't exist.

        Args:
            directory (str): Directory path

        Returns:
            bool: True if directory exists or was created, False otherwise
        """
        try:
            if not os.path.exists(directory):
                os.makedirs(directory)
                logger.info(f"Created directory: {directory}")
            return True
        except OSError as e:
            logger.error(f"Error creating directory {directory}: {str(e)}")
            return False

    def _sanitize_filename(self, filename):
        """
        Sanitize a filename to make it filesystem-safe.

        Args:
            filename (str): Filename to sanitize

        Returns:
            str: Sanitized filename
        """
        sanitized = re.sub(r'[\\/*?:"<>|]', '_', filename)
        sanitized = sanitized.replace(' ', '_')

        if not sanitized or sanitized in ('.', '..'):
            sanitized = 'index'

        if len(sanitized) > 200:
            sanitized = sanitized[:200]

        return sanitized

    def filepath_for(self, name, subdirectory=''):
        """
        Build the path a document will be written to.

        Args:
            name (str): Base name, usually the item's alias
            subdirectory (str): Optional directory below the output directory

        Returns:
            str: Path ending in ``.md``
        """
        filename = self._sanitize_filename(name)
        if not filename.endswith('.md'):
            filename = f"{filename}.md"

        directory = self.output_dir
        if subdirectory:
            directory = os.path.join(directory, self._sanitize_filename(subdirectory))
        return os.path.join(directory, filename)

    def save_markdown(self, markdown_content, name, subdirectory=''):
        """
        Save a Markdown document.

        Args:
            markdown_content (str): Document with frontmatter
            name (str): Base name of the file
            subdirectory (str): Optional directory below the output directory

        Returns:
            str: Path to the saved file, or None if failed
        """
        filepath = self.filepath_for(name, subdirectory)

        if not self._create_directory(os.path.dirname(filepath)):
            return None

        filepath = self._handle_naming_conflict(filepath, markdown_content)

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(markdown_content)
        except OSError as e:
            logger.error(f"Error saving Markdown to {filepath}: {str(e)}")
            return None

        logger.info(f"Saved Markdown file: {filepath}")
        return filepath

    def _same_document(self, filepath, title):
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                existing, _ = extract_frontmatter(f.read())
        except OSError as e:
            logger.warning(f"Error reading existing file {filepath}: {str(e)}")
            return False

        return bool(existing) and existing.get('title') == title

    def _handle_naming_conflict(self, filepath, markdown_content):
        """
        Pick a free path unless the existing file holds the same document.

        Args:
            filepath (str): Original filepath
            markdown_content (str): New document

        Returns:
            str: Modified filepath if needed, or original filepath
        """
        if not os.path.exists(filepath):
            return filepath

        frontmatter, _ = extract_frontmatter(markdown_content)
        title = frontmatter.get('title') if frontmatter else None

        if title is not None and self._same_document(filepath, title):
            logger.debug(f"Updating existing file {filepath}")
            return filepath

        base, ext = os.path.splitext(filepath)
        counter = 1

        while True:
            new_filepath = f"{base}_{counter}{ext}"
            if not os.path.exists(new_filepath):
                logger.debug(f"Renamed {filepath} to {new_filepath} to avoid conflict with different content")
                return new_filepath
            if title is not None and self._same_document(new_filepath, title):
                logger.debug(f"Updating existing numbered file {new_filepath}")
                return new_filepath
            counter += 1
