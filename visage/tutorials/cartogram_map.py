#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cartograms.

Country polygons with a population estimate -> equal-area projection ->
non-contiguous and Dorling cartograms -> side-by-side comparison.
"""
from pathlib import Path
from typing import Any, List, Optional, Union

from visage.core.io import load_vector, resolve_dataset, save_figure
from visage.core.logging_config import get_module_logger
from visage.geo.cartogram import cartogram_dorling, cartogram_ncont
from visage.geo.vector import drop_empty, drop_missing, reproject
from visage.plotting.maps import plot_cartogram
from visage.plotting.theme import apply_theme, build_caption

logger = get_module_logger(__name__)

METADATA = {
    "title": "Distorting maps by population: cartograms",
    "categories": ["vector", "cartogram"],
    "description": "Compare a choropleth with non-contiguous and Dorling cartograms.",
    "data_source": "Natural Earth",
}

NATURAL_EARTH_COUNTRIES = "https://naciscdn.org/naturalearth/110m/cultural/ne_110m_admin_0_countries.zip"
# Mollweide
EQUAL_AREA_CRS = "ESRI:54009"


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    regions: str = "ne_110m_admin_0_countries.zip",
    regions_url: Optional[str] = NATURAL_EARTH_COUNTRIES,
    column: str = "POP_EST",
    crs: str = EQUAL_AREA_CRS,
    k: Optional[float] = None,
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render the cartogram comparison.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "cartogram_map"
    apply_theme()

    gdf = load_vector(resolve_dataset(regions, data_dir, url=regions_url))
    gdf = drop_missing(drop_empty(gdf), column)
    gdf = gdf.loc[gdf[column] > 0]
    gdf = reproject(gdf, crs)
    logger.info(f"Building cartograms for {len(gdf)} regions on '{column}'")

    ncont = cartogram_ncont(gdf, column, k=k)
    dorling = cartogram_dorling(gdf, column)

    caption = build_caption(METADATA["data_source"], tools=["geopandas", "shapely"])
    fig = plot_cartogram(gdf, [ncont, dorling], column,
                         titles=[title or "Original", "Non-contiguous", "Dorling"],
                         caption=caption, cmap="YlGnBu")
    return [save_figure(fig, topic, "cartograms")]
