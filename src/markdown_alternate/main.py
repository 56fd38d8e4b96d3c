#!/usr/bin/env python3
"""
Markdown Alternate: Main Controller

This module serves as the entry point of the command line tool. It reads
exported articles and categories (JSON files or URLs), renders their
Markdown alternates and prints them or writes them to an output directory
laid out like the site's ``.md`` URLs.
"""

import argparse
import logging
import sys

from tqdm import tqdm

from .assembler import assemble_article, assemble_category
from .file_manager import FileManager
from .loader import StaticFieldLookup, create_session, load_content_item
from .models import Category
from .options import RenderOptions

TOGGLES = ('date', 'description', 'author', 'images', 'category', 'tags', 'fields')


def setup_logging(log_level=logging.INFO):
    """
    Configure logging to the console (stderr, so stdout stays clean Markdown).

    Args:
        log_level (int): Logging level

    Returns:
        logger: Configured logger object
    """
    logger = logging.getLogger()
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    return logger


def parse_arguments(argv=None):
    """
    Parse command line arguments.

    Args:
        argv (list, optional): Arguments to parse instead of sys.argv

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Render articles and categories as Markdown documents with YAML frontmatter",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "inputs",
        nargs="+",
        help="JSON exports of articles or categories (file paths or URLs)"
    )

    parser.add_argument(
        "--base-url",
        required=True,
        help="Site base URL (scheme, host, optional port and root path)"
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save documents to (prints to stdout when omitted)"
    )

    parser.add_argument(
        "--fields",
        default=None,
        help="JSON file or URL with field definitions used to label subform columns"
    )

    parser.add_argument(
        "--token",
        default=None,
        help="Bearer token for fetching inputs from a web service"
    )

    parser.add_argument(
        "--read-more-label",
        default=RenderOptions.read_more_label,
        help="Link text under each article teaser of a category"
    )

    for toggle in TOGGLES:
        parser.add_argument(
            f"--hide-{toggle}",
            action="store_false",
            dest=f"show_{toggle}",
            help=f"Leave the {toggle} section out"
        )

    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase verbosity (no flag: errors only, -v: info, -vv: debug)"
    )

    return parser.parse_args(argv)


def configure_log_level(verbosity):
    """
    Set log level based on verbosity.

    Args:
        verbosity (int): Verbosity level from command line

    Returns:
        int: Corresponding logging level
    """
    if verbosity == 0:
        return logging.ERROR
    elif verbosity == 1:
        return logging.INFO
    else:
        return logging.DEBUG


def build_options(args):
    """Map parsed arguments to render options."""
    values = {f"show_{toggle}": getattr(args, f"show_{toggle}") for toggle in TOGGLES}
    values['read_more_label'] = args.read_more_label
    return RenderOptions.from_mapping(values)


def render_item(item, base_url, options, child_lookup=None):
    """
    Render a loaded content item.

    Returns:
        str: The Markdown document
    """
    if isinstance(item, Category):
        return assemble_category(item, base_url, options)
    return assemble_article(item, base_url, options, child_lookup)


def process_input(source, args, options, session, child_lookup, file_manager):
    """
    Process a single input: load it, render it and print or save the result.

    Args:
        source (str): File path or URL
        args (argparse.Namespace): Parsed arguments
        options (RenderOptions): Render options
        session (requests.Session): Session for URL inputs
        child_lookup (callable): Subform child field lookup
        file_manager (FileManager): Manager for saving files, or None for stdout

    Returns:
        bool: True if successful, False otherwise
    """
    logger = logging.getLogger(__name__)

    try:
        item = load_content_item(source, session=session)
        markdown = render_item(item, args.base_url, options, child_lookup)

        if file_manager is None:
            sys.stdout.write(markdown)
            return True

        if isinstance(item, Category):
            filepath = file_manager.save_markdown(markdown, item.alias or str(item.id))
        else:
            filepath = file_manager.save_markdown(
                markdown, item.alias or str(item.id), subdirectory=item.category_alias
            )

        if not filepath:
            logger.info(f"Failed to save Markdown for {source}")
            return False

        logger.info(f"Successfully processed {source} -> {filepath}")
        return True

    except Exception as e:
        logger.error(f"Error processing {source}: {str(e)}")
        logger.debug("Traceback:", exc_info=True)
        return False


def main(argv=None):
    """Main entry point of the application."""
    args = parse_arguments(argv)

    log_level = configure_log_level(args.verbose)
    logger = setup_logging(log_level=log_level)

    options = build_options(args)
    session = create_session(token=args.token)

    child_lookup = None
    if args.fields:
        try:
            child_lookup = StaticFieldLookup.from_source(args.fields, session=session)
        except Exception as e:
            logger.error(f"Could not load field definitions from {args.fields}: {str(e)}")
            return 1

    file_manager = FileManager(output_dir=args.output_dir) if args.output_dir else None

    successful = 0
    failed = 0

    # The progress bar would interleave with documents printed to stdout
    show_progress = file_manager is not None and len(args.inputs) > 1

    try:
        with tqdm(total=len(args.inputs), desc="Rendering", unit="item",
                  disable=not show_progress) as progress_bar:
            for source in args.inputs:
                if process_input(source, args, options, session, child_lookup, file_manager):
                    successful += 1
                else:
                    failed += 1
                progress_bar.update(1)
    except KeyboardInterrupt:
        logger.warning("Process interrupted by user")

    logger.info(f"Rendering complete. Successfully processed {successful} item(s).")
    if failed > 0:
        logger.warning(f"Failed to process {failed} item(s).")

    return 0 if successful else 1


if __name__ == "__main__":
    sys.exit(main())
