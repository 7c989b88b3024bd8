#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document front matter.

Every document of the site starts with a YAML block delimited by ``---``
lines holding its title, date, author, categories and the social sharing
metadata the site generator consumes.
"""
import datetime
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml

from visage.core.config import SITE_CONFIG
from visage.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

# keys written first, in this order
KEY_ORDER = ["title", "subtitle", "date", "author", "categories", "description", "image"]


def parse_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a document into its front matter and body.

    Parameters
    ----------
    text : str
        Full document text.

    Returns
    -------
    tuple
        Metadata dictionary (empty when the document has no front matter)
        and the remaining body.
    """
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text

    meta = yaml.safe_load(match.group(1)) or {}
    if not isinstance(meta, dict):
        raise ValueError("Front matter must be a YAML mapping")
    return meta, text[match.end():]


def _normalize_date(value: Any) -> str:
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    text = str(value).strip()
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d-%m-%Y", "%B %d, %Y", "%b %d, %Y"):
        try:
            return datetime.datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date: {value!r}")


def _normalize_categories(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    categories = []
    for item in value:
        item = str(item).strip()
        if item and item not in categories:
            categories.append(item)
    return categories


def validate_front_matter(meta: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check and normalise document metadata.

    - ``title`` is required;
    - ``date`` becomes an ISO ``YYYY-MM-DD`` string;
    - ``categories`` becomes a de-duplicated list;
    - ``author``, ``image`` and ``description`` default from ``SITE_CONFIG``;
    - ``twitter-card`` and ``open-graph`` are filled from title, description
      and image when social sharing is enabled for the document.
    """
    meta = dict(meta)
    title = meta.get("title")
    if not title or not str(title).strip():
        raise ValueError("Front matter requires a title")
    meta["title"] = str(title).strip()

    if meta.get("date") is not None:
        meta["date"] = _normalize_date(meta["date"])
    meta["categories"] = _normalize_categories(meta.get("categories"))

    if not meta.get("author") and SITE_CONFIG.get("default_author"):
        meta["author"] = SITE_CONFIG["default_author"]
    if not meta.get("image") and SITE_CONFIG.get("default_image"):
        meta["image"] = SITE_CONFIG["default_image"]

    social = {"title": meta["title"]}
    if meta.get("description"):
        social["description"] = meta["description"]
    if meta.get("image"):
        social["image"] = meta["image"]
    for key in ("twitter-card", "open-graph"):
        if meta.get(key) is True:
            meta[key] = dict(social)
        elif isinstance(meta.get(key), dict):
            merged = dict(social)
            merged.update(meta[key])
            meta[key] = merged

    return meta


def render_front_matter(meta: Dict[str, Any], body: str = "") -> str:
    """
    Serialise metadata (and an optional body) back into document text.
    """
    ordered = {k: meta[k] for k in KEY_ORDER if k in meta and meta[k] not in (None, [], "")}
    ordered.update({k: v for k, v in meta.items() if k not in ordered and k not in KEY_ORDER})
    header = yaml.safe_dump(ordered, sort_keys=False, allow_unicode=True, default_flow_style=False)
    text = f"---\n{header}---\n"
    if body:
        text += body if body.startswith("\n") else "\n" + body
    return text


def read_document(path: Union[str, Path]) -> Tuple[Dict[str, Any], str]:
    """Read and validate a document's front matter; returns ``(meta, body)``."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    meta, body = parse_front_matter(text)
    if not meta:
        raise ValueError(f"Document has no front matter: {path}")
    return validate_front_matter(meta), body


def new_document(
    path: Union[str, Path],
    title: str,
    categories: Optional[Sequence[str]] = None,
    description: Optional[str] = None,
    date: Optional[Union[str, datetime.date]] = None,
    author: Optional[str] = None,
    image: Optional[str] = None,
    body: str = "",
    overwrite: bool = False
) -> Path:
    """
    Create a new document with validated front matter.

    Existing files are left untouched unless ``overwrite`` is set.
    """
    path = Path(path)
    if path.exists() and not overwrite:
        raise FileExistsError(f"Document already exists: {path}")

    meta = {
        "title": title,
        "date": date or datetime.date.today(),
        "author": author,
        "categories": list(categories or []),
        "description": description,
        "image": image,
    }
    if image:
        meta["twitter-card"] = True
        meta["open-graph"] = True
    meta = validate_front_matter({k: v for k, v in meta.items() if v is not None})

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_front_matter(meta, body), encoding="utf-8")
    logger.info(f"Created document {path}")
    return path
