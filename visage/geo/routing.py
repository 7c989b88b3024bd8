#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Street network routing.

Street graphs come from OpenStreetMap through osmnx; shortest paths are
computed with networkx and turned back into line features for plotting.
"""
from typing import Any, List, Optional, Sequence

import geopandas as gpd
import networkx as nx
import osmnx as ox
from shapely.geometry import LineString, Point

from visage.core.config import ROUTING_CONFIG
from visage.core.logging_config import get_module_logger
from visage.geo.tiles import normalize_bbox

# Initialize logger
logger = get_module_logger(__name__)


def fetch_street_graph(
    bbox: Optional[Sequence[float]] = None,
    place: Optional[str] = None,
    network_type: Optional[str] = None,
    simplify: Optional[bool] = None
) -> nx.MultiDiGraph:
    """
    Download the street network for a bounding box or a named place.

    Parameters
    ----------
    bbox : sequence of float, optional
        ``(west, south, east, north)`` in EPSG:4326.
    place : str, optional
        Place name to geocode, used when ``bbox`` is not given.
    network_type : str, optional
        osmnx network type (``drive``, ``walk``, ``bike``...).
    simplify : bool, optional
        Simplify the graph topology.

    Returns
    -------
    networkx.MultiDiGraph
        Street graph with ``x``/``y`` node attributes and edge ``length``.
    """
    network_type = network_type or ROUTING_CONFIG.get("network_type", "drive")
    simplify = ROUTING_CONFIG.get("simplify", True) if simplify is None else simplify

    if bbox is not None:
        west, south, east, north = normalize_bbox(bbox)
        logger.info(f"Fetching {network_type} network for bbox {(west, south, east, north)}")
        graph = ox.graph_from_bbox((west, south, east, north),
                                   network_type=network_type, simplify=simplify)
    elif place:
        logger.info(f"Fetching {network_type} network for '{place}'")
        graph = ox.graph_from_place(place, network_type=network_type, simplify=simplify)
    else:
        raise ValueError("Either bbox or place is required")

    logger.info(f"Street graph has {graph.number_of_nodes()} nodes and {graph.number_of_edges()} edges")
    return graph


def nearest_node(graph: nx.MultiDiGraph, x: float, y: float) -> Any:
    """
    Node closest to ``(x, y)`` (graph CRS), via the nodes' spatial index.
    """
    nodes = ox.graph_to_gdfs(graph, nodes=True, edges=False)
    if nodes.empty:
        raise ValueError("Graph has no nodes")
    _, tree_idx = nodes.sindex.nearest(Point(x, y), return_all=False)
    return nodes.index[int(tree_idx[0])]


def shortest_route(
    graph: nx.MultiDiGraph,
    origin: Any,
    destination: Any,
    weight: Optional[str] = None
) -> List[Any]:
    """
    Shortest path between two nodes.

    Raises
    ------
    ValueError
        When either node is missing or no path exists.
    """
    weight = weight or ROUTING_CONFIG.get("weight", "length")
    for node in (origin, destination):
        if node not in graph:
            raise ValueError(f"Node {node} is not in the graph")
    try:
        route = nx.shortest_path(graph, origin, destination, weight=weight)
    except nx.NetworkXNoPath:
        raise ValueError(f"No route between {origin} and {destination}")
    logger.info(f"Route from {origin} to {destination} visits {len(route)} nodes")
    return route


def route_to_gdf(graph: nx.MultiDiGraph, route: Sequence[Any], weight: str = "length") -> gpd.GeoDataFrame:
    """
    Single LineString feature following a route, with its total ``weight``.
    """
    if len(route) < 2:
        raise ValueError("A route needs at least two nodes")

    coords = []
    total = 0.0
    for u, v in zip(route[:-1], route[1:]):
        # cheapest parallel edge between u and v
        data = min(graph.get_edge_data(u, v).values(), key=lambda d: d.get(weight, 0.0))
        total += float(data.get(weight, 0.0))
        if "geometry" in data:
            segment = list(data["geometry"].coords)
        else:
            segment = [(graph.nodes[u]["x"], graph.nodes[u]["y"]),
                       (graph.nodes[v]["x"], graph.nodes[v]["y"])]
        if coords and coords[-1] == segment[0]:
            segment = segment[1:]
        coords.extend(segment)

    return gpd.GeoDataFrame(
        {"origin": [route[0]], "destination": [route[-1]], weight: [total], "nodes": [len(route)]},
        geometry=[LineString(coords)],
        crs=graph.graph.get("crs"),
    )


def streets_to_gdf(graph: nx.MultiDiGraph) -> gpd.GeoDataFrame:
    """Edges of a street graph as line features."""
    return ox.graph_to_gdfs(graph, nodes=False, edges=True)
