#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Points over basemap tiles.

Point features -> web mercator -> metric buffers -> map over a tile basemap.
"""
from pathlib import Path
from typing import Any, List, Optional, Union

from visage.core.config import WEB_MERCATOR_CRS
from visage.core.io import load_vector, resolve_dataset, save_figure
from visage.core.logging_config import get_module_logger
from visage.geo.tiles import add_basemap, pad_bbox
from visage.geo.vector import buffer, drop_empty, reproject
from visage.plotting.maps import plot_features
from visage.plotting.theme import apply_theme, build_caption, style_map_axes

logger = get_module_logger(__name__)

METADATA = {
    "title": "Points and buffers over map tiles",
    "categories": ["vector", "basemap", "buffer"],
    "description": "Buffer point locations and draw them over a public tile basemap.",
    "data_source": "OpenStreetMap contributors",
}


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    points: str = "points.geojson",
    points_url: Optional[str] = None,
    buffer_m: float = 500.0,
    column: Optional[str] = None,
    basemap: bool = True,
    provider: Optional[str] = None,
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render buffered points over a basemap.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "basemap_points"
    apply_theme()

    gdf = drop_empty(load_vector(resolve_dataset(points, data_dir, url=points_url)))
    if gdf.empty:
        raise ValueError("No point features to plot")

    rings = reproject(buffer(gdf, buffer_m), WEB_MERCATOR_CRS)
    gdf = reproject(gdf, WEB_MERCATOR_CRS)
    logger.info(f"Plotting {len(gdf)} points with {buffer_m} m buffers")

    caption = build_caption(METADATA["data_source"], tools=["geopandas", "contextily"])
    style = {"alpha": 0.35, "edgecolor": "#08519c"}
    if column is None:
        style["facecolor"] = "#6baed6"
    fig = plot_features(rings, column=column, basemap=False, **style)
    ax = fig.axes[0]
    gdf.plot(ax=ax, color="#08306b", markersize=12, zorder=3)

    xmin, ymin, xmax, ymax = pad_bbox(rings.total_bounds, 0.1)
    ax.set_xlim(xmin, xmax)
    ax.set_ylim(ymin, ymax)

    if basemap:
        add_basemap(ax, crs=WEB_MERCATOR_CRS, provider=provider)

    style_map_axes(ax, title=title or METADATA["title"],
                   subtitle=f"{len(gdf)} locations, {buffer_m:g} m buffers", caption=caption)
    return [save_figure(fig, topic, "points")]
