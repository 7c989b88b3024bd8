#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line entry point.

Renders tutorials to images, writes the static site configuration and
scaffolds new documents.
"""
import argparse
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from visage import __version__
from visage.core.config import DATA_DIR, DOCS_DIR, load_config
from visage.core.logging_config import get_module_logger, setup_logging

# Initialize logger
logger = get_module_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_floats(text: str, count: int) -> List[float]:
    values = [float(v) for v in text.split(",")]
    if len(values) != count:
        raise argparse.ArgumentTypeError(f"Expected {count} comma-separated numbers, got '{text}'")
    return values


def _bbox(text: str) -> List[float]:
    return _parse_floats(text, 4)


def _lonlat(text: str) -> List[float]:
    return _parse_floats(text, 2)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser with the ``list``, ``render``, ``render-all``, ``site`` and
        ``new`` subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="visage",
        description="Render map-making tutorials and build the documentation site."
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        help="Logging level (default: the logging block of the configuration, INFO)"
    )
    parser.add_argument(
        "--config", "-c",
        help="YAML file overriding configuration blocks"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"visage v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    subparsers.required = True

    subparsers.add_parser("list", help="List available tutorials")

    render_options = argparse.ArgumentParser(add_help=False)
    render_options.add_argument(
        "--data-dir", "-d",
        default=str(DATA_DIR),
        help=f"Directory holding tutorial inputs (default: {DATA_DIR})"
    )
    render_options.add_argument(
        "--no-basemap",
        action="store_true",
        help="Skip fetching basemap tiles"
    )
    render_options.add_argument(
        "--bbox",
        type=_bbox,
        help="Bounding box west,south,east,north (routing tutorial)"
    )
    render_options.add_argument(
        "--origin",
        type=_lonlat,
        help="Route origin lon,lat"
    )
    render_options.add_argument(
        "--destination",
        type=_lonlat,
        help="Route destination lon,lat"
    )

    render_parser = subparsers.add_parser("render", parents=[render_options],
                                          help="Render one or more tutorials")
    render_parser.add_argument("names", nargs="+", help="Tutorial names")
    render_parser.add_argument(
        "--topic", "-t",
        help="Image sub-directory (default: the tutorial name)"
    )

    subparsers.add_parser("render-all", parents=[render_options], help="Render every tutorial")

    site_parser = subparsers.add_parser("site", help="Write the site configuration and listing")
    site_parser.add_argument(
        "--root", "-r",
        default=str(DOCS_DIR.parent),
        help="Site root holding the documents"
    )
    site_parser.add_argument(
        "--title",
        help="Site title (default: from configuration)"
    )

    new_parser = subparsers.add_parser("new", help="Create a document with front matter")
    new_parser.add_argument("path", help="Path of the new document (.qmd)")
    new_parser.add_argument("--title", help="Document title (default: the tutorial title)")
    new_parser.add_argument(
        "--categories",
        default="",
        help="Comma-separated categories"
    )
    new_parser.add_argument("--description", help="Short description used for social cards")
    new_parser.add_argument("--image", help="Preview image")
    new_parser.add_argument("--author", help="Author")
    new_parser.add_argument(
        "--tutorial",
        help="Take title, categories and description from a tutorial"
    )
    new_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing document"
    )

    return parser


def _render_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {"data_dir": args.data_dir}
    if args.no_basemap:
        options["basemap"] = False
    for key in ("bbox", "origin", "destination"):
        value = getattr(args, key, None)
        if value is not None:
            options[key] = value
    return options


def render_tutorial(name: str, topic: Optional[str] = None, **options: Any) -> List[Path]:
    """
    Run one tutorial and return the images it saved.
    """
    from visage.tutorials import get_tutorial

    tutorial = get_tutorial(name)
    start_time = time.time()
    logger.info(f"Rendering tutorial '{name}'")
    outputs = tutorial.run(topic=topic, **options)
    elapsed_time = time.time() - start_time
    logger.info(f"Rendered '{name}' in {elapsed_time:.2f} seconds: {[str(p) for p in outputs]}")
    return outputs


def list_command(args: argparse.Namespace) -> int:
    from visage.tutorials import get_tutorial, list_tutorials

    for name in list_tutorials():
        print(f"{name:24s} {get_tutorial(name).METADATA['title']}")
    return 0


def render_command(args: argparse.Namespace) -> int:
    """
    Render the named tutorials, stopping at the first failure.

    Returns
    -------
    int
        Exit code.
    """
    options = _render_options(args)
    try:
        for name in args.names:
            for path in render_tutorial(name, topic=args.topic, **options):
                print(path)
    except Exception as e:
        logger.exception(f"Error while rendering: {e}")
        return 1
    return 0


def render_all_command(args: argparse.Namespace) -> int:
    """
    Render every tutorial; failures are logged and counted, not fatal.

    Returns
    -------
    int
        Exit code: 1 when any tutorial failed.
    """
    from visage.tutorials import list_tutorials

    options = _render_options(args)
    failed = []
    for name in tqdm(list_tutorials(), desc="Rendering tutorials"):
        try:
            render_tutorial(name, **options)
        except Exception as e:
            logger.exception(f"Tutorial '{name}' failed: {e}")
            failed.append(name)

    if failed:
        logger.error(f"{len(failed)} tutorial(s) failed: {', '.join(failed)}")
        return 1
    logger.info("All tutorials rendered")
    return 0


def site_command(args: argparse.Namespace) -> int:
    """
    Write ``_quarto.yml`` and ``listing.json`` for the site root.
    """
    from visage.site.config import (
        build_listing, build_site_config, collect_documents,
        sections_from_documents, write_listing, write_site_config
    )

    try:
        documents = collect_documents(args.root)
        overrides = {"title": args.title} if args.title else None
        site_config = build_site_config(sections_from_documents(documents), overrides)
        write_site_config(args.root, site_config)
        write_listing(args.root, build_listing(documents))
    except Exception as e:
        logger.exception(f"Error while building the site configuration: {e}")
        return 1
    return 0


def new_command(args: argparse.Namespace) -> int:
    """
    Scaffold a document, optionally from a tutorial's metadata.
    """
    from visage.site.frontmatter import new_document

    title = args.title
    categories = [c for c in args.categories.split(",") if c.strip()]
    description = args.description
    try:
        if args.tutorial:
            from visage.tutorials import get_tutorial

            metadata = get_tutorial(args.tutorial).METADATA
            title = title or metadata["title"]
            categories = categories or list(metadata.get("categories", []))
            description = description or metadata.get("description")

        if not title:
            raise ValueError("A title is required (--title or --tutorial)")

        path = new_document(args.path, title=title, categories=categories,
                            description=description, image=args.image,
                            author=args.author, overwrite=args.force)
    except Exception as e:
        logger.exception(f"Error while creating the document: {e}")
        return 1
    print(path)
    return 0


COMMANDS = {
    "list": list_command,
    "render": render_command,
    "render-all": render_all_command,
    "site": site_command,
    "new": new_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function of the command line interface.
    """
    args = build_parser().parse_args(argv)

    # the logging block may come from the configuration file
    config_error = None
    if args.config:
        try:
            load_config(args.config)
        except (FileNotFoundError, ValueError) as e:
            config_error = e

    setup_logging(log_level=args.log_level)
    if config_error is not None:
        logger.error(f"Invalid configuration: {config_error}")
        return 1

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
