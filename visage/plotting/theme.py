#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fonts, theme and captions.

Every tutorial registers its fonts, applies the shared theme and writes a
caption crediting the data source and the author. This module holds that
boilerplate.
"""
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import urlparse

import matplotlib as mpl
from matplotlib import font_manager

from visage.core.config import CAPTION_CONFIG, FIGURE_CONFIG, FONT_CONFIG
from visage.core.io import download_dataset
from visage.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def register_font(family: str, source: Optional[Union[str, Path]] = None) -> str:
    """
    Make a font file available to matplotlib.

    Parameters
    ----------
    family : str
        Font family name, used to look up ``FONT_CONFIG["sources"]`` when
        ``source`` is not given.
    source : str or Path, optional
        Local path or URL of a ``.ttf``/``.otf`` file.

    Returns
    -------
    str
        The family name matplotlib registered for the file.
    """
    source = source or FONT_CONFIG.get("sources", {}).get(family)
    if source is None:
        raise ValueError(f"No font file configured for family '{family}'")

    source = str(source)
    if urlparse(source).scheme in ("http", "https"):
        path = download_dataset(source)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Font file not found: {path}")

    font_manager.fontManager.addfont(str(path))
    registered = font_manager.FontProperties(fname=str(path)).get_name()
    if registered != family:
        logger.info(f"Font file {path.name} registered as '{registered}' (requested '{family}')")
    else:
        logger.info(f"Registered font '{family}' from {path}")
    return registered


def apply_theme(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Apply the shared matplotlib theme.

    Parameters
    ----------
    overrides : mapping, optional
        Extra rcParams applied last.

    Returns
    -------
    dict
        The rcParams that were set.
    """
    families: List[str] = [FONT_CONFIG.get("family", "sans-serif")]
    families += [f for f in FONT_CONFIG.get("fallbacks", []) if f not in families]

    params = {
        "font.family": families,
        "figure.facecolor": FIGURE_CONFIG.get("facecolor", "white"),
        "axes.facecolor": FIGURE_CONFIG.get("facecolor", "white"),
        "text.color": FIGURE_CONFIG.get("text_color", "#333333"),
        "axes.titlesize": FIGURE_CONFIG.get("title_size", 16),
        "image.cmap": FIGURE_CONFIG.get("cmap", "viridis"),
        "savefig.dpi": FIGURE_CONFIG.get("dpi", 300),
    }
    if overrides:
        params.update(overrides)
    mpl.rcParams.update(params)
    return params


def build_caption(
    data_source: Optional[str] = None,
    author: Optional[str] = None,
    handles: Optional[Mapping[str, str]] = None,
    tools: Optional[Sequence[str]] = None,
    separator: Optional[str] = None
) -> str:
    """
    Assemble the caption crediting data, author and tools.

    >>> build_caption("Natural Earth", author="A. Mapper", tools=["geopandas"], separator=" | ")
    'Data: Natural Earth | Graphics: A. Mapper | Made with geopandas'
    """
    author = author if author is not None else CAPTION_CONFIG.get("author")
    handles = handles if handles is not None else CAPTION_CONFIG.get("handles", {})
    separator = separator if separator is not None else CAPTION_CONFIG.get("separator", "  |  ")

    parts = []
    if data_source:
        parts.append(f"{CAPTION_CONFIG.get('data_prefix', 'Data')}: {data_source}")
    if author:
        parts.append(f"{CAPTION_CONFIG.get('author_prefix', 'Graphics')}: {author}")
    for platform, handle in (handles or {}).items():
        if handle:
            parts.append(f"{platform}: {handle}")
    if tools:
        parts.append(f"{CAPTION_CONFIG.get('tools_prefix', 'Made with')} {', '.join(tools)}")
    return separator.join(parts)


def style_map_axes(
    ax: Any,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    caption: Optional[str] = None
) -> Any:
    """Title, subtitle and caption on a map axes; hides axis decorations."""
    if FIGURE_CONFIG.get("hide_axes", True):
        ax.set_axis_off()
    if title:
        ax.set_title(title, fontsize=FIGURE_CONFIG.get("title_size", 16),
                     loc="left", fontweight="bold", pad=18 if subtitle else 6)
    if subtitle:
        ax.text(0.0, 1.01, subtitle, transform=ax.transAxes, ha="left", va="bottom",
                fontsize=FIGURE_CONFIG.get("subtitle_size", 11))
    if caption:
        ax.text(1.0, -0.02, caption, transform=ax.transAxes, ha="right", va="top",
                fontsize=FIGURE_CONFIG.get("caption_size", 8), alpha=0.8)
    return ax
