#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the visage tutorials.

This module centralizes all configuration parameters used across the
tutorials, the plotting helpers and the site builder, making it easier to
modify settings in one place. Blocks can be overridden from a YAML file with
``load_config``.
"""
from typing import Dict, Union, Any
import os
from pathlib import Path

import yaml

# General configuration
DEFAULT_CRS: str = "EPSG:4326"
WEB_MERCATOR_CRS: str = "EPSG:3857"
DEFAULT_NODATA_VALUE: float = -9999.0

# Path configuration
PROJECT_ROOT: Path = Path(__file__).parent.parent.parent.absolute()
DATA_DIR: Path = Path(os.environ.get("VISAGE_DATA_DIR", PROJECT_ROOT / "data"))
IMAGE_DIR: Path = Path(os.environ.get("VISAGE_IMAGE_DIR", PROJECT_ROOT / "images"))
CACHE_DIR: Path = Path(os.environ.get("VISAGE_CACHE_DIR", PROJECT_ROOT / ".cache"))
DOCS_DIR: Path = PROJECT_ROOT / "docs"

# Figure configuration
FIGURE_CONFIG: Dict[str, Any] = {
    "figsize": (10, 8),
    "dpi": 300,
    "facecolor": "white",
    "title_size": 16,
    "subtitle_size": 11,
    "caption_size": 8,
    "text_color": "#333333",
    "cmap": "viridis",
    "relief_cmap": "terrain",
    "hide_axes": True,
}

# Font configuration (families are tried in order)
FONT_CONFIG: Dict[str, Any] = {
    "family": "sans-serif",
    "fallbacks": ["DejaVu Sans", "Arial", "Helvetica"],
    # family name -> local path or URL of a .ttf/.otf file
    "sources": {},
}

# Caption configuration
CAPTION_CONFIG: Dict[str, Any] = {
    "author": None,
    "handles": {},  # platform -> handle, e.g. {"github": "user"}
    "separator": "  |  ",
    "data_prefix": "Data",
    "author_prefix": "Graphics",
    "tools_prefix": "Made with",
}

# Basemap tile configuration
TILE_CONFIG: Dict[str, Any] = {
    "provider": "CartoDB.Positron",
    "zoom": "auto",
    "fail_silently": True,
    "alpha": 1.0,
}

# Terrain shading configuration
HILLSHADE_CONFIG: Dict[str, Any] = {
    "azimuth": 315.0,
    "altitude": 45.0,
    "z_factor": 1.0,
    "alpha": 0.5,
}

# Raster transformation configuration
RASTER_CONFIG: Dict[str, Any] = {
    "resolution": None,  # None keeps the source resolution
    "resampling": "bilinear",
    "interpolation_method": "linear",
    "grid_size": 200,    # cells along the longest side for interpolation
    "all_touched": False,
}

# Street network configuration
ROUTING_CONFIG: Dict[str, Any] = {
    "network_type": "drive",
    "weight": "length",
    "simplify": True,
}

# Cartogram configuration
CARTOGRAM_CONFIG: Dict[str, Any] = {
    "k": 1.0,
    "dorling_k": 5.0,
    "dorling_iterations": 100,
}

# Download configuration
DOWNLOAD_CONFIG: Dict[str, Any] = {
    "timeout": 60,
    "chunk_size": 1 << 16,
    "user_agent": "visage-tutorials/0.1",
}

# Static site configuration
SITE_CONFIG: Dict[str, Any] = {
    "title": "visage",
    "description": "Visualizing Information and Spatial Analysis",
    "site_url": None,
    "repo_url": None,
    "output_dir": "docs",
    "theme": "flatly",
    "css": "styles.css",
    "favicon": None,
    "logo": None,
    "search": True,
    "reader_mode": True,
    "toc": True,
    "editor": "visual",
    "giscus_repo": None,  # "owner/repo" enables giscus comments
    "lightbox": {"match": "auto", "effect": "zoom"},
    "default_author": None,
    "default_image": None,
    "document_suffixes": [".qmd", ".md", ".ipynb"],
    "sections": [
        {"text": "Home", "file": "index.qmd"},
    ],
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": CACHE_DIR / "visage.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# YAML block name -> configuration dictionary
CONFIG_BLOCKS: Dict[str, Dict[str, Any]] = {
    "figure": FIGURE_CONFIG,
    "fonts": FONT_CONFIG,
    "caption": CAPTION_CONFIG,
    "tiles": TILE_CONFIG,
    "hillshade": HILLSHADE_CONFIG,
    "raster": RASTER_CONFIG,
    "routing": ROUTING_CONFIG,
    "cartogram": CARTOGRAM_CONFIG,
    "download": DOWNLOAD_CONFIG,
    "site": SITE_CONFIG,
    "logging": LOGGING_CONFIG,
}


def load_config(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """
    Merge configuration overrides from a YAML file.

    Parameters
    ----------
    path : str or Path
        YAML file whose top-level keys are block names (``figure``,
        ``tiles``, ``site``...) mapping to partial settings.

    Returns
    -------
    dict
        The merged configuration blocks, keyed by block name.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")

    unknown = sorted(set(overrides) - set(CONFIG_BLOCKS))
    if unknown:
        raise ValueError(f"Unknown configuration blocks: {unknown}")

    for block_name, values in overrides.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Configuration block '{block_name}' must be a mapping")
        CONFIG_BLOCKS[block_name].update(values)

    return CONFIG_BLOCKS

