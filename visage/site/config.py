#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Static site configuration.

Builds the site generator's project file (``_quarto.yml``: navigation,
theme, output directory) and the per-section listings of documents found
under the site root.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from visage.core.config import SITE_CONFIG
from visage.core.logging_config import get_module_logger
from visage.site.frontmatter import parse_front_matter, validate_front_matter

# Initialize logger
logger = get_module_logger(__name__)

SITE_CONFIG_FILE = "_quarto.yml"
# directories never scanned for documents
IGNORED_DIRS = {"_site", "_freeze", ".quarto", ".git", "docs", "images", "data", ".cache"}


def _section_title(name: str) -> str:
    return name.replace("_", " ").replace("-", " ").strip().title()


def build_site_config(
    sections: Optional[Sequence[Dict[str, str]]] = None,
    config: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build the site project configuration.

    Parameters
    ----------
    sections : list of dict, optional
        Navbar entries ``{"text": ..., "file": ...}``, by default
        ``SITE_CONFIG["sections"]``.
    config : dict, optional
        Settings overriding ``SITE_CONFIG``.

    Returns
    -------
    dict
        Mapping ready to be dumped as ``_quarto.yml``.
    """
    settings = dict(SITE_CONFIG)
    if config:
        settings.update(config)
    sections = list(sections if sections is not None else settings.get("sections", []))
    for entry in sections:
        if "text" not in entry or ("file" not in entry and "href" not in entry):
            raise ValueError(f"Navbar entries need 'text' and 'file' or 'href': {entry}")

    website: Dict[str, Any] = {
        "title": settings["title"],
        "description": settings.get("description"),
        "search": bool(settings.get("search", True)),
        "reader-mode": bool(settings.get("reader_mode", True)),
        "site-url": settings.get("site_url"),
        "repo-url": settings.get("repo_url"),
        "favicon": settings.get("favicon"),
        "twitter-card": True,
        "open-graph": True,
    }
    if settings.get("repo_url"):
        website["repo-actions"] = ["edit", "issue"]

    navbar: Dict[str, Any] = {"left": [dict(entry) for entry in sections]}
    if settings.get("logo"):
        navbar["logo"] = settings["logo"]
        navbar["logo-alt"] = settings["title"]
    tools = [{"icon": "rss", "href": "index.xml"}]
    if settings.get("repo_url"):
        repo = settings["repo_url"].rstrip("/")
        tools.append({
            "icon": "github",
            "menu": [
                {"text": "Source Code", "url": repo},
                {"text": "Suggestions / Feedback", "url": f"{repo}/issues"},
            ],
        })
    navbar["tools"] = tools
    website["navbar"] = navbar

    html: Dict[str, Any] = {"theme": settings.get("theme", "flatly"), "toc": bool(settings.get("toc", True))}
    if settings.get("css"):
        html["css"] = settings["css"]

    site: Dict[str, Any] = {
        "project": {"type": "website", "output-dir": settings.get("output_dir", "docs")},
        "website": {k: v for k, v in website.items() if v is not None},
        "format": {"html": html},
    }
    if settings.get("editor"):
        site["editor"] = settings["editor"]
    if settings.get("giscus_repo"):
        site["comments"] = {"giscus": {"repo": settings["giscus_repo"]}}
    if settings.get("lightbox"):
        site["lightbox"] = dict(settings["lightbox"])
    return site


def write_site_config(root: Union[str, Path], site_config: Dict[str, Any]) -> Path:
    """Write ``_quarto.yml`` into the site root."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    path = root / SITE_CONFIG_FILE
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(site_config, f, sort_keys=False, allow_unicode=True, default_flow_style=False)
    logger.info(f"Wrote site configuration to {path}")
    return path


def load_site_config(root: Union[str, Path]) -> Dict[str, Any]:
    """Read ``_quarto.yml`` from a site root (or a direct file path)."""
    path = Path(root)
    if path.is_dir():
        path = path / SITE_CONFIG_FILE
    if not path.exists():
        raise FileNotFoundError(f"Site configuration not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _notebook_front_matter(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        notebook = json.load(f)
    cells = notebook.get("cells", [])
    if not cells or cells[0].get("cell_type") not in ("raw", "markdown"):
        return {}
    source = cells[0].get("source", "")
    text = "".join(source) if isinstance(source, list) else source
    meta, _ = parse_front_matter(text)
    return meta


def collect_documents(root: Union[str, Path], suffixes: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    """
    Find every document with front matter below ``root``.

    Parameters
    ----------
    root : str or Path
        Site root.
    suffixes : list of str, optional
        Document file suffixes, by default ``SITE_CONFIG["document_suffixes"]``.

    Returns
    -------
    list of dict
        ``{"path", "section", "meta"}`` entries, newest first; undated
        documents come last, sorted by title.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Site root not found: {root}")
    suffixes = set(suffixes or SITE_CONFIG.get("document_suffixes", [".qmd", ".md", ".ipynb"]))

    documents = []
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root)
        if not path.is_file() or path.suffix not in suffixes:
            continue
        if any(part in IGNORED_DIRS or part.startswith(".") for part in rel.parts[:-1]):
            continue

        try:
            if path.suffix == ".ipynb":
                meta = _notebook_front_matter(path)
            else:
                meta, _ = parse_front_matter(path.read_text(encoding="utf-8"))
            if not meta:
                logger.debug(f"Skipping {rel}: no front matter")
                continue
            meta = validate_front_matter(meta)
        except (ValueError, yaml.YAMLError) as e:
            logger.warning(f"Skipping {rel}: {e}")
            continue

        documents.append({
            "path": rel.as_posix(),
            "section": rel.parts[0] if len(rel.parts) > 1 else "",
            "meta": meta,
        })

    dated = sorted((d for d in documents if d["meta"].get("date")),
                   key=lambda d: (d["meta"]["date"], d["meta"]["title"]), reverse=True)
    undated = sorted((d for d in documents if not d["meta"].get("date")),
                     key=lambda d: d["meta"]["title"])
    logger.info(f"Collected {len(documents)} documents under {root}")
    return dated + undated


def build_listing(documents: Sequence[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Group documents by section into listing entries (title, date, path,
    categories, description, image).
    """
    listing: Dict[str, List[Dict[str, Any]]] = {}
    for doc in documents:
        meta = doc["meta"]
        entry = {
            "title": meta["title"],
            "path": doc["path"],
            "date": meta.get("date"),
            "categories": meta.get("categories", []),
            "description": meta.get("description"),
            "image": meta.get("image"),
        }
        listing.setdefault(doc["section"], []).append(entry)
    return listing


def sections_from_documents(documents: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Navbar entries: ``Home`` then one listing page per section directory.
    """
    sections = [{"text": "Home", "file": "index.qmd"}]
    for name in sorted({d["section"] for d in documents if d["section"]}):
        sections.append({"text": _section_title(name), "file": f"{name}.qmd"})
    return sections


def write_listing(root: Union[str, Path], listing: Dict[str, List[Dict[str, Any]]],
                  filename: str = "listing.json") -> Path:
    """Write the section listing as JSON next to the site configuration."""
    path = Path(root) / filename
    with open(path, "w", encoding="utf-8") as f:
        json.dump(listing, f, indent=2, ensure_ascii=False)
    logger.info(f"Wrote listing of {sum(len(v) for v in listing.values())} documents to {path}")
    return path
