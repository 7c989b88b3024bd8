#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Feature collection helpers.

Thin wrappers around geopandas/shapely used by the tutorials: reprojection,
cropping to a bounding box, simplification, metric buffering and the small
amount of data cleaning (missing values, empty geometries) done before
geometric operations.
"""
from typing import Iterable, List, Optional, Sequence, Union

import geopandas as gpd
from shapely.geometry import box

from visage.core.config import DEFAULT_CRS
from visage.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def ensure_crs(
    gdf: gpd.GeoDataFrame,
    crs: str = DEFAULT_CRS,
    assume: bool = False
) -> gpd.GeoDataFrame:
    """
    Make sure a feature collection carries a CRS.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Input features.
    crs : str, optional
        CRS to assign to CRS-less data, by default EPSG:4326.
    assume : bool, optional
        Only when True is a missing CRS assigned; otherwise it is an error.

    Returns
    -------
    gpd.GeoDataFrame
        Features with a CRS.
    """
    if gdf.crs is not None:
        return gdf
    if not assume:
        raise ValueError("Feature collection has no CRS; pass assume=True to set one")
    logger.warning(f"No CRS found, assuming {crs}")
    return gdf.set_crs(crs)


def reproject(gdf: gpd.GeoDataFrame, crs: str) -> gpd.GeoDataFrame:
    """Reproject features to ``crs``."""
    gdf = ensure_crs(gdf)
    if gdf.crs == crs:
        return gdf
    logger.debug(f"Reprojecting {len(gdf)} features from {gdf.crs} to {crs}")
    return gdf.to_crs(crs)


def drop_empty(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Drop rows whose geometry is missing or empty.
    """
    keep = gdf.geometry.notna() & ~gdf.geometry.is_empty
    dropped = int((~keep).sum())
    if dropped:
        logger.info(f"Dropped {dropped} empty geometries")
    return gdf.loc[keep].copy()


def drop_missing(
    gdf: gpd.GeoDataFrame,
    columns: Optional[Union[str, Sequence[str]]] = None
) -> gpd.GeoDataFrame:
    """
    Drop rows with missing values in the given columns.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Input features.
    columns : str or list, optional
        Columns to check; all non-geometry columns when None.

    Returns
    -------
    gpd.GeoDataFrame
        Rows with complete values in ``columns``.
    """
    if columns is None:
        columns = [c for c in gdf.columns if c != gdf.geometry.name]
    elif isinstance(columns, str):
        columns = [columns]

    missing = [c for c in columns if c not in gdf.columns]
    if missing:
        raise ValueError(f"Columns not found: {missing}")

    cleaned = gdf.dropna(subset=list(columns))
    dropped = len(gdf) - len(cleaned)
    if dropped:
        logger.info(f"Dropped {dropped} rows with missing values in {list(columns)}")
    return cleaned.copy()


def bbox_to_gdf(bbox: Sequence[float], crs: str = DEFAULT_CRS) -> gpd.GeoDataFrame:
    """Polygon feature for a ``(xmin, ymin, xmax, ymax)`` bounding box."""
    xmin, ymin, xmax, ymax = bbox
    if xmin >= xmax or ymin >= ymax:
        raise ValueError(f"Invalid bounding box: {bbox}")
    return gpd.GeoDataFrame({"name": ["bbox"]}, geometry=[box(xmin, ymin, xmax, ymax)], crs=crs)


def clip_to_bbox(
    gdf: gpd.GeoDataFrame,
    bbox: Sequence[float],
    bbox_crs: str = DEFAULT_CRS
) -> gpd.GeoDataFrame:
    """
    Crop features to a bounding box.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Input features.
    bbox : sequence of float
        ``(xmin, ymin, xmax, ymax)`` in ``bbox_crs``.
    bbox_crs : str, optional
        CRS of the bounding box, by default EPSG:4326.

    Returns
    -------
    gpd.GeoDataFrame
        Clipped features in the input CRS.
    """
    gdf = ensure_crs(gdf)
    mask = bbox_to_gdf(bbox, crs=bbox_crs).to_crs(gdf.crs)
    clipped = gpd.clip(drop_empty(gdf), mask)
    logger.info(f"Clipped {len(gdf)} features to {len(clipped)} inside {tuple(bbox)}")
    return drop_empty(clipped)


def simplify(
    gdf: gpd.GeoDataFrame,
    tolerance: float,
    preserve_topology: bool = True
) -> gpd.GeoDataFrame:
    """Simplify geometries; ``tolerance`` is in CRS units."""
    if tolerance < 0:
        raise ValueError("Simplification tolerance must be non-negative")
    out = gdf.copy()
    out[gdf.geometry.name] = gdf.geometry.simplify(tolerance, preserve_topology=preserve_topology)
    return drop_empty(out)


def buffer(
    gdf: gpd.GeoDataFrame,
    distance_m: float,
    resolution: int = 16
) -> gpd.GeoDataFrame:
    """
    Buffer features by a distance in metres.

    Geographic data is buffered in its estimated UTM zone and returned in the
    input CRS.
    """
    gdf = drop_empty(ensure_crs(gdf))
    if gdf.empty:
        return gdf

    if gdf.crs.is_geographic:
        metric_crs = gdf.estimate_utm_crs()
        work = gdf.to_crs(metric_crs)
    else:
        work = gdf

    work = work.copy()
    work[work.geometry.name] = work.geometry.buffer(distance_m, resolution=resolution)
    logger.debug(f"Buffered {len(work)} features by {distance_m} m")
    return work.to_crs(gdf.crs) if work.crs != gdf.crs else work


def to_points(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Representative point of each feature, e.g. for label placement."""
    gdf = drop_empty(gdf)
    out = gdf.copy()
    out[gdf.geometry.name] = gdf.geometry.representative_point()
    return out


def total_bounds(frames: Iterable[gpd.GeoDataFrame], crs: str) -> List[float]:
    """Combined ``[xmin, ymin, xmax, ymax]`` of several feature collections in ``crs``."""
    bounds = [reproject(f, crs).total_bounds for f in frames if not f.empty]
    if not bounds:
        raise ValueError("No features to compute bounds from")
    return [
        min(b[0] for b in bounds),
        min(b[1] for b in bounds),
        max(b[2] for b in bounds),
        max(b[3] for b in bounds),
    ]
