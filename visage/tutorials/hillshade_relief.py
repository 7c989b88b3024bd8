#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shaded relief map.

Elevation raster -> optional mask to a boundary -> hillshade -> relief map
(elevation tint with a translucent hillshade) plus the bare hillshade.
"""
from pathlib import Path
from typing import Any, List, Optional, Union

import numpy as np

from visage.core.io import load_raster, load_vector, resolve_dataset, save_figure
from visage.core.logging_config import get_module_logger
from visage.geo.raster import calculate_hillshade, cell_size, mask_raster, raster_extent
from visage.plotting.maps import plot_raster, plot_relief
from visage.plotting.theme import apply_theme, build_caption

logger = get_module_logger(__name__)

METADATA = {
    "title": "Shaded relief maps from elevation rasters",
    "categories": ["raster", "hillshade", "terrain"],
    "description": "Mask an elevation model to a boundary and overlay its hillshade.",
    "data_source": "Digital elevation model",
}

# metres per degree of latitude
METRES_PER_DEGREE = 111_320.0


def _cell_size_metres(transform: Any, meta: dict) -> tuple:
    size_x, size_y = cell_size(transform)
    crs = meta.get("crs")
    if crs is None or not getattr(crs, "is_geographic", False):
        return size_x, size_y
    bounds = meta["bounds"]
    mid_lat = np.deg2rad((bounds["top"] + bounds["bottom"]) / 2.0)
    return size_x * METRES_PER_DEGREE * np.cos(mid_lat), size_y * METRES_PER_DEGREE


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    elevation: str = "elevation.tif",
    boundary: Optional[str] = "boundary.geojson",
    elevation_url: Optional[str] = None,
    azimuth: Optional[float] = None,
    altitude: Optional[float] = None,
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render the relief map and the hillshade.

    Parameters
    ----------
    data_dir : str or Path, optional
        Directory holding the inputs.
    topic : str, optional
        Image sub-directory, by default ``hillshade_relief``.
    elevation : str, optional
        Elevation raster file name.
    boundary : str, optional
        Boundary polygons used as a mask; skipped when the file is absent.
    elevation_url : str, optional
        Download location of the elevation raster.
    azimuth, altitude : float, optional
        Light source position.
    title : str, optional
        Map title, by default the tutorial title.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "hillshade_relief"
    apply_theme()

    raster_path = resolve_dataset(elevation, data_dir, url=elevation_url)

    boundary_gdf = None
    if boundary:
        try:
            boundary_gdf = load_vector(resolve_dataset(boundary, data_dir))
        except FileNotFoundError:
            logger.info("No boundary found, using the full raster extent")

    if boundary_gdf is not None:
        raster_data = mask_raster(raster_path, boundary_gdf)
    else:
        raster_data = load_raster(raster_path)

    arr, mask, transform, meta = raster_data
    if not mask.any():
        raise ValueError(f"No valid elevation cells in {raster_path}")

    hillshade = calculate_hillshade(arr, mask, azimuth=azimuth, altitude=altitude,
                                    cell_size=_cell_size_metres(transform, meta))
    extent = raster_extent(raster_data)
    if boundary_gdf is not None and meta.get("crs") is not None:
        boundary_gdf = boundary_gdf.to_crs(meta["crs"])

    caption = build_caption(METADATA["data_source"], tools=["rasterio", "matplotlib"])
    elevation_values = np.where(mask, arr.astype(float), np.nan)

    relief = plot_relief(elevation_values, hillshade, mask=mask, extent=extent,
                         title=title or METADATA["title"], caption=caption,
                         boundary=boundary_gdf)
    shade = plot_raster(hillshade, mask=mask, extent=extent, cmap="gray",
                        title="Hillshade", caption=caption)

    return [
        save_figure(relief, topic, "relief"),
        save_figure(shade, topic, "hillshade"),
    ]
