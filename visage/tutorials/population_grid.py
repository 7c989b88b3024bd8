#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Population density grid.

Polygons with a count attribute -> equal-area density -> rasterized grid ->
density map.
"""
from pathlib import Path
from typing import Any, List, Optional, Union

import numpy as np

from visage.core.io import load_vector, resolve_dataset, save_figure
from visage.core.logging_config import get_module_logger
from visage.geo.raster import rasterize_features, raster_extent
from visage.geo.vector import drop_empty, drop_missing, reproject, simplify
from visage.plotting.maps import plot_raster
from visage.plotting.theme import apply_theme, build_caption

logger = get_module_logger(__name__)

METADATA = {
    "title": "Rasterizing population counts into a density grid",
    "categories": ["vector", "raster", "rasterize"],
    "description": "Turn administrative polygons with population counts into a regular density grid.",
    "data_source": "Census population counts",
}


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    regions: str = "regions.geojson",
    regions_url: Optional[str] = None,
    column: str = "population",
    resolution_m: float = 1000.0,
    simplify_m: float = 0.0,
    log_scale: bool = True,
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render the density grid.

    Parameters
    ----------
    column : str, optional
        Population count attribute.
    resolution_m : float, optional
        Grid cell size in metres.
    simplify_m : float, optional
        Simplification tolerance in metres applied before rasterizing.
    log_scale : bool, optional
        Plot ``log10(1 + density)``.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "population_grid"
    apply_theme()

    gdf = load_vector(resolve_dataset(regions, data_dir, url=regions_url))
    gdf = drop_missing(drop_empty(gdf), column)
    if gdf.empty:
        raise ValueError(f"No regions with a '{column}' value")

    # equal-area work in metres
    projected = reproject(gdf, gdf.estimate_utm_crs()) if gdf.crs.is_geographic else gdf
    if simplify_m > 0:
        projected = simplify(projected, simplify_m)

    projected = projected.copy()
    projected["density"] = projected[column].astype(float) / (projected.geometry.area / 1e6)
    logger.info(f"Density ranges from {projected['density'].min():.2f} "
                f"to {projected['density'].max():.2f} per km2")

    raster_data = rasterize_features(projected, resolution=resolution_m, column="density")
    arr, mask, transform, meta = raster_data
    values = np.log10(1 + arr) if log_scale else arr

    caption = build_caption(METADATA["data_source"], tools=["geopandas", "rasterio"])
    fig = plot_raster(values, mask=mask, extent=raster_extent(raster_data),
                      title=title or METADATA["title"],
                      subtitle=f"{resolution_m:g} m cells",
                      colorbar_label="log10(1 + people per km2)" if log_scale else "people per km2",
                      caption=caption, cmap="magma")
    return [save_figure(fig, topic, "density_grid")]
