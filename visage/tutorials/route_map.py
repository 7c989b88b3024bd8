#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shortest route on a street network.

OpenStreetMap street graph for a bounding box -> nearest nodes to two
locations -> shortest route -> route drawn over the streets.
"""
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import geopandas as gpd

from visage.core.config import DEFAULT_CRS
from visage.core.io import save_figure
from visage.core.logging_config import get_module_logger
from visage.geo.routing import (
    fetch_street_graph, nearest_node, route_to_gdf, shortest_route, streets_to_gdf
)
from visage.geo.tiles import normalize_bbox
from visage.plotting.maps import plot_route
from visage.plotting.theme import apply_theme, build_caption

logger = get_module_logger(__name__)

METADATA = {
    "title": "Routing on OpenStreetMap street networks",
    "categories": ["vector", "routing", "osm"],
    "description": "Download a street graph, find the shortest route between two places and map it.",
    "data_source": "OpenStreetMap contributors",
}


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    bbox: Optional[Sequence[float]] = None,
    origin: Optional[Sequence[float]] = None,
    destination: Optional[Sequence[float]] = None,
    network_type: Optional[str] = None,
    basemap: bool = True,
    provider: Optional[str] = None,
    graph: Any = None,
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render the route map.

    Parameters
    ----------
    bbox : sequence of float
        ``(west, south, east, north)`` in EPSG:4326.
    origin, destination : sequence of float
        ``(lon, lat)`` of the route ends; default to opposite corners of
        the middle half of ``bbox``.
    graph : networkx.MultiDiGraph, optional
        Pre-built street graph; skips the download.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "route_map"
    apply_theme()

    if graph is None:
        if bbox is None:
            raise ValueError("A bounding box is required to download the street network")
        graph = fetch_street_graph(bbox=bbox, network_type=network_type)

    if origin is None or destination is None:
        if bbox is None:
            raise ValueError("origin and destination are required when no bbox is given")
        west, south, east, north = normalize_bbox(bbox)
        dx, dy = (east - west) / 4.0, (north - south) / 4.0
        origin = origin or (west + dx, south + dy)
        destination = destination or (east - dx, north - dy)

    # graph coordinates are lon/lat unless the graph was projected
    graph_crs = graph.graph.get("crs", DEFAULT_CRS)
    ends = gpd.GeoDataFrame(
        {"role": ["origin", "destination"]},
        geometry=gpd.points_from_xy([origin[0], destination[0]], [origin[1], destination[1]]),
        crs=DEFAULT_CRS,
    ).to_crs(graph_crs)

    start = nearest_node(graph, ends.geometry.iloc[0].x, ends.geometry.iloc[0].y)
    end = nearest_node(graph, ends.geometry.iloc[1].x, ends.geometry.iloc[1].y)
    if start == end:
        raise ValueError(
            f"Origin and destination snap to the same street node {start}; "
            "choose points further apart"
        )
    route = route_to_gdf(graph, shortest_route(graph, start, end))
    streets = streets_to_gdf(graph)

    length_km = float(route["length"].iloc[0]) / 1000.0
    logger.info(f"Route length: {length_km:.2f} km")

    caption = build_caption(METADATA["data_source"], tools=["osmnx", "networkx"])
    fig = plot_route(streets, route, endpoints=ends, basemap=basemap, provider=provider,
                     title=title or METADATA["title"], subtitle=f"{length_km:.2f} km",
                     caption=caption)
    return [save_figure(fig, topic, "route")]
