#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Interpolated climate surface.

Weather-station measurements -> drop missing readings -> grid interpolation
-> mask to the boundary -> filled contour map with the stations on top.
"""
from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd
import geopandas as gpd

from visage.core.config import DEFAULT_CRS
from visage.core.io import load_vector, resolve_dataset, save_figure
from visage.core.logging_config import get_module_logger
from visage.geo.raster import interpolate_points, raster_extent, rasterize_features
from visage.geo.vector import drop_empty, drop_missing, reproject
from visage.plotting.maps import plot_contours
from visage.plotting.theme import apply_theme, build_caption

logger = get_module_logger(__name__)

METADATA = {
    "title": "Interpolating station measurements into a surface",
    "categories": ["raster", "interpolation", "climate"],
    "description": "Interpolate point measurements onto a grid clipped to a boundary.",
    "data_source": "Weather station records",
}


def load_stations(path: Path, x: str = "lon", y: str = "lat", crs: str = DEFAULT_CRS) -> gpd.GeoDataFrame:
    """Stations from a vector file, or from a CSV with coordinate columns."""
    if path.suffix.lower() != ".csv":
        return load_vector(path)
    table = pd.read_csv(path)
    missing = [c for c in (x, y) if c not in table.columns]
    if missing:
        raise ValueError(f"Coordinate columns not found in {path.name}: {missing}")
    table = table.dropna(subset=[x, y])
    return gpd.GeoDataFrame(table, geometry=gpd.points_from_xy(table[x], table[y]), crs=crs)


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    stations: str = "stations.csv",
    stations_url: Optional[str] = None,
    boundary: Optional[str] = "boundary.geojson",
    column: str = "value",
    method: Optional[str] = None,
    resolution_m: Optional[float] = None,
    levels: int = 12,
    label: str = "Measured value",
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render the interpolated surface.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "interpolated_surface"
    apply_theme()

    points = load_stations(resolve_dataset(stations, data_dir, url=stations_url))
    points = drop_missing(drop_empty(points), column)
    if points.empty:
        raise ValueError(f"No stations with a '{column}' reading")

    boundary_gdf = None
    if boundary:
        try:
            boundary_gdf = load_vector(resolve_dataset(boundary, data_dir))
        except FileNotFoundError:
            logger.info("No boundary found, interpolating over the station extent")

    work_crs = points.estimate_utm_crs() if points.crs.is_geographic else points.crs
    points = reproject(points, work_crs)
    bounds = None
    if boundary_gdf is not None:
        boundary_gdf = reproject(drop_empty(boundary_gdf), work_crs)
        bounds = boundary_gdf.total_bounds

    raster_data = interpolate_points(points, column, resolution=resolution_m, method=method, bounds=bounds)
    arr, mask, transform, meta = raster_data

    if boundary_gdf is not None:
        inside, _, _, _ = rasterize_features(boundary_gdf, resolution=meta["res"][0],
                                             bounds=bounds, fill=0.0)
        mask = mask & (inside[:arr.shape[0], :arr.shape[1]] > 0)
    logger.info(f"{int(mask.sum())} interpolated cells kept")

    caption = build_caption(METADATA["data_source"], tools=["scipy", "geopandas"])
    fig = plot_contours(arr, mask=mask, extent=raster_extent(raster_data), levels=levels,
                        title=title or METADATA["title"], colorbar_label=label,
                        subtitle=f"{len(points)} stations", caption=caption, cmap="RdYlBu_r")
    ax = fig.axes[0]
    points.plot(ax=ax, color="black", markersize=6, zorder=3)
    if boundary_gdf is not None:
        boundary_gdf.boundary.plot(ax=ax, color="#333333", linewidth=0.6)
    return [save_figure(fig, topic, "surface")]
