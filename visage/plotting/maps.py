#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Map figures for the tutorials.

Each function builds and returns a matplotlib figure; saving is left to
``core.io.save_figure`` so every tutorial writes its images the same way.
"""
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import geopandas as gpd
import matplotlib.pyplot as plt

from visage.core.config import FIGURE_CONFIG, HILLSHADE_CONFIG, WEB_MERCATOR_CRS
from visage.core.logging_config import get_module_logger
from visage.geo.tiles import add_basemap
from visage.geo.vector import drop_empty, reproject
from visage.plotting.theme import style_map_axes

# Initialize logger
logger = get_module_logger(__name__)


def plot_raster(
    raster: np.ndarray,
    mask: Optional[np.ndarray] = None,
    extent: Optional[Tuple[float, float, float, float]] = None,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    caption: Optional[str] = None,
    cmap: Optional[str] = None,
    colorbar_label: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Plot a raster array.

    Parameters
    ----------
    raster : np.ndarray
        2D array to plot.
    mask : np.ndarray, optional
        Boolean mask of valid data, by default all finite cells.
    extent : tuple, optional
        ``(left, right, bottom, top)`` in map units.
    title, subtitle, caption : str, optional
        Texts drawn around the map.
    cmap : str, optional
        Colormap name, by default ``FIGURE_CONFIG["cmap"]``.
    colorbar_label : str, optional
        Label of the colour bar.
    figsize : tuple, optional
        Figure size, by default ``FIGURE_CONFIG["figsize"]``.

    Returns
    -------
    plt.Figure
        Matplotlib figure.
    """
    if mask is None:
        mask = np.isfinite(raster)
    masked_raster = np.ma.array(raster, mask=~mask)

    fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    im = ax.imshow(masked_raster, cmap=cmap or FIGURE_CONFIG.get("cmap", "viridis"),
                   extent=extent, interpolation="nearest")
    cbar = fig.colorbar(im, ax=ax, shrink=0.7)
    if colorbar_label:
        cbar.set_label(colorbar_label)

    style_map_axes(ax, title=title, subtitle=subtitle, caption=caption)
    fig.tight_layout()
    return fig


def plot_relief(
    elevation: np.ndarray,
    hillshade: np.ndarray,
    mask: Optional[np.ndarray] = None,
    extent: Optional[Tuple[float, float, float, float]] = None,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    caption: Optional[str] = None,
    cmap: Optional[str] = None,
    alpha: Optional[float] = None,
    boundary: Optional[gpd.GeoDataFrame] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Elevation tinted by a colormap with a translucent hillshade on top.
    """
    if mask is None:
        mask = np.isfinite(elevation)
    alpha = HILLSHADE_CONFIG.get("alpha", 0.5) if alpha is None else alpha

    fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    im = ax.imshow(np.ma.array(elevation, mask=~mask),
                   cmap=cmap or FIGURE_CONFIG.get("relief_cmap", "terrain"),
                   extent=extent, interpolation="bilinear")
    ax.imshow(np.ma.array(hillshade, mask=~(mask & np.isfinite(hillshade))),
              cmap="gray", alpha=alpha, extent=extent, interpolation="bilinear")
    if boundary is not None and not boundary.empty:
        boundary.boundary.plot(ax=ax, color="#222222", linewidth=0.6)
    cbar = fig.colorbar(im, ax=ax, shrink=0.7)
    cbar.set_label("Elevation")

    style_map_axes(ax, title=title, subtitle=subtitle, caption=caption)
    fig.tight_layout()
    return fig


def plot_features(
    gdf: gpd.GeoDataFrame,
    column: Optional[str] = None,
    basemap: bool = False,
    provider: Optional[str] = None,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    caption: Optional[str] = None,
    cmap: Optional[str] = None,
    legend: bool = True,
    ax: Optional[Any] = None,
    figsize: Optional[Tuple[float, float]] = None,
    **plot_kwargs: Any
) -> plt.Figure:
    """
    Plot a feature collection, optionally coloured by ``column`` and drawn
    over basemap tiles (features are then shown in web mercator).
    """
    gdf = drop_empty(gdf)
    if basemap:
        gdf = reproject(gdf, WEB_MERCATOR_CRS)

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    else:
        fig = ax.figure

    if column is not None:
        gdf.plot(ax=ax, column=column, cmap=cmap or FIGURE_CONFIG.get("cmap", "viridis"),
                 legend=legend, **plot_kwargs)
    else:
        gdf.plot(ax=ax, **plot_kwargs)

    if basemap:
        add_basemap(ax, crs=gdf.crs.to_string(), provider=provider)

    style_map_axes(ax, title=title, subtitle=subtitle, caption=caption)
    return fig


def plot_cartogram(
    original: gpd.GeoDataFrame,
    distorted: Sequence[gpd.GeoDataFrame],
    column: str,
    titles: Optional[Sequence[str]] = None,
    caption: Optional[str] = None,
    cmap: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Original regions next to one or more distorted versions, coloured by ``column``.
    """
    panels = [original] + list(distorted)
    titles = list(titles) if titles else ["Original"] + [f"Cartogram {i + 1}" for i in range(len(distorted))]
    if len(titles) != len(panels):
        raise ValueError("One title per panel is required")

    cmap = cmap or FIGURE_CONFIG.get("cmap", "viridis")
    vmin = min(float(p[column].min()) for p in panels)
    vmax = max(float(p[column].max()) for p in panels)

    fig, axes = plt.subplots(1, len(panels), figsize=figsize or (6 * len(panels), 6), squeeze=False)
    for ax, panel, panel_title in zip(axes[0], panels, titles):
        original.boundary.plot(ax=ax, color="#bbbbbb", linewidth=0.4)
        panel.plot(ax=ax, column=column, cmap=cmap, vmin=vmin, vmax=vmax,
                   edgecolor="white", linewidth=0.3)
        style_map_axes(ax, title=panel_title)

    if caption:
        fig.text(0.99, 0.01, caption, ha="right", va="bottom",
                 fontsize=FIGURE_CONFIG.get("caption_size", 8), alpha=0.8)
    fig.tight_layout()
    return fig


def plot_route(
    streets: gpd.GeoDataFrame,
    route: gpd.GeoDataFrame,
    endpoints: Optional[gpd.GeoDataFrame] = None,
    basemap: bool = False,
    provider: Optional[str] = None,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    caption: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Street network in grey with the route highlighted.
    """
    crs = WEB_MERCATOR_CRS if basemap else streets.crs
    streets = reproject(streets, crs)
    route = reproject(route, crs)

    fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    streets.plot(ax=ax, color="#9a9a9a", linewidth=0.5)
    route.plot(ax=ax, color="#d7301f", linewidth=2.5)
    if endpoints is not None and not endpoints.empty:
        reproject(endpoints, crs).plot(ax=ax, color="#222222", markersize=30, zorder=5)

    if basemap:
        add_basemap(ax, crs=streets.crs.to_string(), provider=provider)

    style_map_axes(ax, title=title, subtitle=subtitle, caption=caption)
    fig.tight_layout()
    return fig


def plot_contours(
    grid: np.ndarray,
    mask: Optional[np.ndarray] = None,
    extent: Optional[Tuple[float, float, float, float]] = None,
    levels: int = 10,
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    caption: Optional[str] = None,
    cmap: Optional[str] = None,
    colorbar_label: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Filled contour map of a grid, e.g. an interpolated surface.

    Parameters
    ----------
    grid : np.ndarray
        2D array, first row at the top.
    mask : np.ndarray, optional
        Boolean mask of valid data, by default all finite cells.
    extent : tuple, optional
        ``(left, right, bottom, top)`` in map units, by default cell indices.
    levels : int, optional
        Number of contour levels.

    Returns
    -------
    plt.Figure
        Matplotlib figure.
    """
    if mask is None:
        mask = np.isfinite(grid)
    if not mask.any():
        raise ValueError("No valid cells to contour")

    height, width = grid.shape
    left, right, bottom, top = extent if extent is not None else (0, width, height, 0)
    # cell centres
    xs = left + (np.arange(width) + 0.5) * (right - left) / width
    ys = top - (np.arange(height) + 0.5) * (top - bottom) / height

    fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    filled = ax.contourf(xs, ys, np.ma.array(grid, mask=~mask), levels=levels,
                         cmap=cmap or FIGURE_CONFIG.get("cmap", "viridis"))
    ax.set_aspect("equal")
    cbar = fig.colorbar(filled, ax=ax, shrink=0.7)
    if colorbar_label:
        cbar.set_label(colorbar_label)

    style_map_axes(ax, title=title, subtitle=subtitle, caption=caption)
    fig.tight_layout()
    return fig
