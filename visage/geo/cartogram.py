#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cartogram distortion.

Two cartogram types used in the tutorials:

- non-contiguous (Olson): every polygon is shrunk about its centroid so that
  its area becomes proportional to its weight;
- Dorling: every region becomes a circle whose area is proportional to its
  weight, nudged apart so circles overlap less.
"""
from typing import Optional

import numpy as np
import geopandas as gpd
from shapely import affinity
from shapely.geometry import Point

from visage.core.config import CARTOGRAM_CONFIG
from visage.core.logging_config import get_module_logger
from visage.geo.vector import drop_empty, drop_missing, ensure_crs

# Initialize logger
logger = get_module_logger(__name__)


def _prepare(gdf: gpd.GeoDataFrame, column: str) -> gpd.GeoDataFrame:
    if column not in gdf.columns:
        raise ValueError(f"Column not found: {column}")
    gdf = drop_missing(drop_empty(ensure_crs(gdf)), column)
    negative = gdf[column] < 0
    if negative.any():
        logger.warning(f"Dropping {int(negative.sum())} rows with negative '{column}'")
        gdf = gdf.loc[~negative]
    if gdf.empty:
        raise ValueError("No features with usable weights")
    if gdf.crs.is_geographic:
        raise ValueError("Cartograms need a projected CRS; reproject the features first")
    return gdf.copy()


def cartogram_ncont(
    gdf: gpd.GeoDataFrame,
    column: str,
    k: Optional[float] = None
) -> gpd.GeoDataFrame:
    """
    Non-contiguous area cartogram.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Polygons in a projected CRS.
    column : str
        Weight attribute.
    k : float, optional
        Inflation factor of the reference density; values > 1 let the densest
        regions grow beyond their original size.

    Returns
    -------
    gpd.GeoDataFrame
        Copy of the input with scaled geometries and a ``scale`` column.
    """
    k = CARTOGRAM_CONFIG.get("k", 1.0) if k is None else k
    if k <= 0:
        raise ValueError("k must be positive")
    gdf = _prepare(gdf, column)

    area = gdf.geometry.area
    density = gdf[column].astype(float) / area
    # the densest region keeps its size (times k), every other shrinks
    reference = density.max()
    if reference == 0:
        raise ValueError(f"All weights in '{column}' are zero")

    scale = np.sqrt(density / reference) * np.sqrt(k)
    geometries = [
        affinity.scale(geom, xfact=s, yfact=s, origin=geom.centroid)
        for geom, s in zip(gdf.geometry, scale)
    ]
    out = gdf.copy()
    out[gdf.geometry.name] = geometries
    out["scale"] = scale.to_numpy()
    logger.info(f"Built non-contiguous cartogram of {len(out)} regions on '{column}'")
    return out


def cartogram_dorling(
    gdf: gpd.GeoDataFrame,
    column: str,
    k: Optional[float] = None,
    iterations: Optional[int] = None
) -> gpd.GeoDataFrame:
    """
    Dorling cartogram: one circle per region.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Regions in a projected CRS.
    column : str
        Weight attribute.
    k : float, optional
        Share of the total map area covered by circles, in percent of the
        features' bounding box area.
    iterations : int, optional
        Rounds of pairwise repulsion.

    Returns
    -------
    gpd.GeoDataFrame
        Copy of the input with circle geometries and a ``radius`` column.
    """
    k = CARTOGRAM_CONFIG.get("dorling_k", 5.0) if k is None else k
    iterations = CARTOGRAM_CONFIG.get("dorling_iterations", 100) if iterations is None else iterations
    if k <= 0:
        raise ValueError("k must be positive")
    gdf = _prepare(gdf, column)

    centroids = gdf.geometry.centroid
    xy = np.column_stack([centroids.x, centroids.y])
    weights = gdf[column].astype(float).to_numpy()
    if weights.sum() == 0:
        raise ValueError(f"All weights in '{column}' are zero")

    xmin, ymin, xmax, ymax = gdf.total_bounds
    target_area = (xmax - xmin) * (ymax - ymin) * k / 100.0
    radius = np.sqrt(weights / weights.sum() * target_area / np.pi)

    for _ in range(max(int(iterations), 0)):
        delta = xy[:, None, :] - xy[None, :, :]
        dist = np.hypot(delta[..., 0], delta[..., 1])
        np.fill_diagonal(dist, np.inf)
        overlap = radius[:, None] + radius[None, :] - dist
        overlap[overlap < 0] = 0.0
        if not overlap.any():
            break
        # push each pair apart by half the overlap, along the line joining them
        safe = np.where(np.isfinite(dist) & (dist > 0), dist, 1.0)
        push = (overlap / (2 * safe))[..., None] * delta
        xy = xy + push.sum(axis=1)

    out = gdf.copy()
    out[gdf.geometry.name] = [Point(x, y).buffer(r) for (x, y), r in zip(xy, radius)]
    out["radius"] = radius
    logger.info(f"Built Dorling cartogram of {len(out)} regions on '{column}'")
    return out
