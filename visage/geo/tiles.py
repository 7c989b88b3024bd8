#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Basemap tiles and bounding boxes.

Bounding boxes show up in several spellings across libraries
(``xmin/ymin/xmax/ymax``, ``left/bottom/right/top``, ``west/south/east/north``);
the helpers here normalise, rename and reproject them. Basemap tiles are
fetched through contextily from public tile providers.
"""
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import contextily as ctx
import numpy as np
from pyproj import Transformer

from visage.core.config import DEFAULT_CRS, TILE_CONFIG, WEB_MERCATOR_CRS
from visage.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

BBox = Tuple[float, float, float, float]
BBoxLike = Union[Sequence[float], Mapping[str, float]]

BBOX_STYLES: Dict[str, Tuple[str, str, str, str]] = {
    "xy": ("xmin", "ymin", "xmax", "ymax"),
    "ltrb": ("left", "bottom", "right", "top"),
    "compass": ("west", "south", "east", "north"),
}


def normalize_bbox(bbox: BBoxLike) -> BBox:
    """
    Convert any supported bounding-box spelling to ``(xmin, ymin, xmax, ymax)``.

    Parameters
    ----------
    bbox : sequence or mapping
        Four numbers in ``xmin, ymin, xmax, ymax`` order, or a mapping keyed
        by one of the styles in ``BBOX_STYLES``.

    Returns
    -------
    tuple
        ``(xmin, ymin, xmax, ymax)`` as floats.
    """
    if isinstance(bbox, Mapping):
        for keys in BBOX_STYLES.values():
            if all(k in bbox for k in keys):
                values = tuple(float(bbox[k]) for k in keys)
                break
        else:
            raise ValueError(f"Unrecognised bounding box keys: {sorted(bbox)}")
    else:
        values = tuple(float(v) for v in bbox)
        if len(values) != 4:
            raise ValueError(f"Bounding box needs 4 values, got {len(values)}")

    xmin, ymin, xmax, ymax = values
    if xmin >= xmax or ymin >= ymax:
        raise ValueError(f"Invalid bounding box ordering: {values}")
    return values


def rename_bbox(bbox: BBoxLike, style: str = "xy") -> Dict[str, float]:
    """Return the bounding box as a mapping keyed in the given ``style``."""
    if style not in BBOX_STYLES:
        raise ValueError(f"Unknown bounding box style '{style}', expected one of {sorted(BBOX_STYLES)}")
    return dict(zip(BBOX_STYLES[style], normalize_bbox(bbox)))


def reproject_bbox(
    bbox: BBoxLike,
    src_crs: str = DEFAULT_CRS,
    dst_crs: str = WEB_MERCATOR_CRS,
    densify_pts: int = 21
) -> BBox:
    """
    Reproject a bounding box, densifying its edges so curved borders are covered.
    """
    xmin, ymin, xmax, ymax = normalize_bbox(bbox)
    transformer = Transformer.from_crs(src_crs, dst_crs, always_xy=True)
    out = transformer.transform_bounds(xmin, ymin, xmax, ymax, densify_pts=densify_pts)
    if not np.all(np.isfinite(out)):
        raise ValueError(f"Bounding box {bbox} cannot be projected to {dst_crs}")
    return tuple(float(v) for v in out)


def pad_bbox(bbox: BBoxLike, fraction: float = 0.05) -> BBox:
    """Grow a bounding box by ``fraction`` of its width/height on every side."""
    if fraction < 0:
        raise ValueError("Padding fraction must be non-negative")
    xmin, ymin, xmax, ymax = normalize_bbox(bbox)
    dx = (xmax - xmin) * fraction
    dy = (ymax - ymin) * fraction
    return xmin - dx, ymin - dy, xmax + dx, ymax + dy


def get_provider(name: Optional[str] = None) -> Any:
    """
    Look up a tile provider by dotted name, e.g. ``"CartoDB.Positron"``.
    """
    name = name or TILE_CONFIG.get("provider", "CartoDB.Positron")
    provider = ctx.providers
    for part in name.split("."):
        try:
            provider = provider[part]
        except (KeyError, TypeError):
            raise ValueError(f"Unknown tile provider: {name}")
    if "url" not in provider:
        raise ValueError(f"'{name}' is a provider group, not a tile provider")
    return provider


def fetch_basemap(
    bbox: BBoxLike,
    crs: str = DEFAULT_CRS,
    zoom: Union[int, str, None] = None,
    provider: Optional[str] = None
) -> Tuple[np.ndarray, BBox]:
    """
    Download the basemap image covering a bounding box.

    Parameters
    ----------
    bbox : sequence or mapping
        Area to cover, in ``crs``.
    crs : str, optional
        CRS of ``bbox``, by default EPSG:4326.
    zoom : int or "auto", optional
        Tile zoom level.
    provider : str, optional
        Dotted provider name.

    Returns
    -------
    tuple
        RGB(A) image array and its ``(left, right, bottom, top)`` extent in
        web mercator.
    """
    west, south, east, north = reproject_bbox(bbox, crs, WEB_MERCATOR_CRS)
    zoom = zoom if zoom is not None else TILE_CONFIG.get("zoom", "auto")
    source = get_provider(provider)

    logger.info(f"Fetching basemap tiles ({provider or TILE_CONFIG.get('provider')}, zoom={zoom})")
    image, extent = ctx.bounds2img(west, south, east, north, zoom=zoom, source=source, ll=False)
    return image, tuple(extent)


def add_basemap(
    ax: Any,
    crs: str,
    provider: Optional[str] = None,
    zoom: Union[int, str, None] = None,
    alpha: Optional[float] = None,
    attribution: Optional[str] = None,
    fail_silently: Optional[bool] = None
) -> bool:
    """
    Draw basemap tiles behind the data already plotted on ``ax``.

    Returns True when tiles were added. Tile failures propagate unless
    ``fail_silently`` (default ``TILE_CONFIG["fail_silently"]``) is set, in
    which case they are logged and False is returned.
    """
    fail_silently = TILE_CONFIG.get("fail_silently", True) if fail_silently is None else fail_silently
    zoom = zoom if zoom is not None else TILE_CONFIG.get("zoom", "auto")
    alpha = TILE_CONFIG.get("alpha", 1.0) if alpha is None else alpha
    source = get_provider(provider)

    kwargs = {}
    if attribution is not None:
        kwargs["attribution"] = attribution

    try:
        ctx.add_basemap(ax, crs=crs, source=source, zoom=zoom, alpha=alpha, **kwargs)
    except Exception as e:
        if not fail_silently:
            raise
        logger.warning(f"Could not add basemap: {e}")
        return False
    return True
