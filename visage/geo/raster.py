#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Grid raster helpers.

This module wraps the rasterio and scipy calls the tutorials use to crop,
mask, rasterize, reproject and interpolate grids, and computes the hillshade
used for relief maps. Rasters are passed around as the
``(array, mask, transform, meta)`` tuple returned by ``core.io.load_raster``.
"""
from typing import Any, Dict, Optional, Sequence, Tuple, Union
from pathlib import Path

import numpy as np
import pandas as pd
import geopandas as gpd
import rasterio
from rasterio import features as rio_features
from rasterio.mask import mask as rio_mask
from rasterio.transform import Affine, from_origin, rowcol, xy
from rasterio.warp import Resampling, calculate_default_transform, reproject
from scipy.interpolate import griddata

from visage.core.config import DEFAULT_NODATA_VALUE, HILLSHADE_CONFIG, RASTER_CONFIG
from visage.core.io import RasterData
from visage.core.logging_config import get_module_logger
from visage.geo.vector import drop_empty, drop_missing, ensure_crs

# Initialize logger
logger = get_module_logger(__name__)


def cell_size(transform: Any) -> Tuple[float, float]:
    """Absolute ``(x, y)`` cell size of an affine transform."""
    return abs(transform.a), abs(transform.e)


def _masked_float(arr: np.ndarray, mask: np.ndarray) -> np.ndarray:
    return np.where(mask, arr.astype(np.float64), np.nan)


def crop_raster(raster_data: RasterData, bbox: Sequence[float]) -> RasterData:
    """
    Crop a raster to a bounding box given in the raster CRS.

    Parameters
    ----------
    raster_data : tuple
        ``(array, mask, transform, meta)``.
    bbox : sequence of float
        ``(xmin, ymin, xmax, ymax)``.

    Returns
    -------
    tuple
        Cropped ``(array, mask, transform, meta)``.
    """
    arr, mask, transform, meta = raster_data
    xmin, ymin, xmax, ymax = bbox
    if xmin >= xmax or ymin >= ymax:
        raise ValueError(f"Invalid bounding box: {bbox}")

    height, width = arr.shape
    row_top, col_left = rowcol(transform, xmin, ymax)
    row_bottom, col_right = rowcol(transform, xmax, ymin, op=np.ceil)
    row_top, row_bottom = sorted((int(row_top), int(row_bottom)))
    col_left, col_right = sorted((int(col_left), int(col_right)))
    row_top, col_left = max(row_top, 0), max(col_left, 0)
    row_bottom, col_right = min(row_bottom, height), min(col_right, width)

    if row_top >= row_bottom or col_left >= col_right:
        raise ValueError(f"Bounding box {tuple(bbox)} does not overlap the raster")

    new_transform = transform * Affine.translation(col_left, row_top)
    cropped = arr[row_top:row_bottom, col_left:col_right]
    cropped_mask = mask[row_top:row_bottom, col_left:col_right]

    new_meta = dict(meta)
    new_meta.update({
        'width': cropped.shape[1],
        'height': cropped.shape[0],
        'bounds': _bounds(new_transform, cropped.shape),
    })
    logger.info(f"Cropped raster from {arr.shape} to {cropped.shape}")
    return cropped, cropped_mask, new_transform, new_meta


def _bounds(transform: Any, shape: Tuple[int, int]) -> Dict[str, float]:
    west, south, east, north = rasterio.transform.array_bounds(shape[0], shape[1], transform)
    return {'left': west, 'bottom': south, 'right': east, 'top': north}


def mask_raster(
    path: Union[str, Path],
    shapes: gpd.GeoDataFrame,
    crop: bool = True,
    band: int = 1
) -> RasterData:
    """
    Mask a raster file with polygons; cells outside become invalid.

    Parameters
    ----------
    path : str or Path
        Raster file.
    shapes : gpd.GeoDataFrame
        Mask polygons, reprojected to the raster CRS when needed.
    crop : bool, optional
        Crop to the extent of the shapes, by default True.
    band : int, optional
        Band to read, by default 1.

    Returns
    -------
    tuple
        Masked ``(array, mask, transform, meta)``.
    """
    shapes = drop_empty(ensure_crs(shapes))
    if shapes.empty:
        raise ValueError("No mask geometries provided")

    with rasterio.open(path) as src:
        if src.crs is not None and shapes.crs != src.crs:
            shapes = shapes.to_crs(src.crs)
        nodata = src.nodata if src.nodata is not None else DEFAULT_NODATA_VALUE
        out, out_transform = rio_mask(src, list(shapes.geometry), crop=crop,
                                      nodata=nodata, indexes=band, filled=True)
        crs = src.crs
        res = src.res
        driver = src.driver

    arr = out
    valid = arr != nodata
    if np.issubdtype(arr.dtype, np.floating):
        valid &= ~np.isnan(arr)

    meta = {
        'width': arr.shape[1],
        'height': arr.shape[0],
        'crs': crs,
        'bounds': _bounds(out_transform, arr.shape),
        'nodata': nodata,
        'dtype': str(arr.dtype),
        'count': 1,
        'driver': driver,
        'res': res,
    }
    logger.info(f"Masked raster to shape {arr.shape}, {int(valid.sum())} valid cells")
    return arr, valid, out_transform, meta


def rasterize_features(
    gdf: gpd.GeoDataFrame,
    resolution: float,
    column: Optional[str] = None,
    fill: float = np.nan,
    all_touched: Optional[bool] = None,
    bounds: Optional[Sequence[float]] = None
) -> RasterData:
    """
    Burn feature values into a regular grid.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Features to rasterize.
    resolution : float
        Cell size in CRS units.
    column : str, optional
        Attribute to burn; 1 for every feature when None.
    fill : float, optional
        Value for cells not covered by any feature, by default NaN.
    all_touched : bool, optional
        Burn every touched cell instead of cell centres.
    bounds : sequence of float, optional
        Output extent, by default the feature bounds.

    Returns
    -------
    tuple
        ``(array, mask, transform, meta)``.
    """
    if resolution <= 0:
        raise ValueError("Resolution must be positive")
    gdf = drop_empty(ensure_crs(gdf))
    if column is not None:
        gdf = drop_missing(gdf, column)
    if gdf.empty:
        raise ValueError("No features to rasterize")

    all_touched = RASTER_CONFIG.get("all_touched", False) if all_touched is None else all_touched
    xmin, ymin, xmax, ymax = bounds if bounds is not None else gdf.total_bounds
    width = max(int(np.ceil((xmax - xmin) / resolution)), 1)
    height = max(int(np.ceil((ymax - ymin) / resolution)), 1)
    transform = from_origin(xmin, ymax, resolution, resolution)

    if column is None:
        shapes = ((geom, 1.0) for geom in gdf.geometry)
    else:
        shapes = zip(gdf.geometry, gdf[column].astype(float))

    arr = rio_features.rasterize(
        shapes,
        out_shape=(height, width),
        transform=transform,
        fill=fill,
        all_touched=all_touched,
        dtype='float64'
    )
    valid = ~np.isnan(arr) if np.isnan(fill) else arr != fill

    meta = {
        'width': width,
        'height': height,
        'crs': gdf.crs,
        'bounds': _bounds(transform, arr.shape),
        'nodata': fill,
        'dtype': str(arr.dtype),
        'count': 1,
        'driver': None,
        'res': (resolution, resolution),
    }
    logger.info(f"Rasterized {len(gdf)} features to a {height}x{width} grid")
    return arr, valid, transform, meta


def reproject_raster(
    raster_data: RasterData,
    dst_crs: str,
    resolution: Optional[float] = None,
    resampling: Optional[str] = None
) -> RasterData:
    """
    Warp a raster into another CRS.

    Parameters
    ----------
    raster_data : tuple
        ``(array, mask, transform, meta)``; ``meta['crs']`` is required.
    dst_crs : str
        Target CRS.
    resolution : float, optional
        Target cell size, by default chosen by rasterio.
    resampling : str, optional
        Resampling method name (``nearest``, ``bilinear``, ``cubic``...).

    Returns
    -------
    tuple
        Reprojected ``(array, mask, transform, meta)``.
    """
    arr, mask, transform, meta = raster_data
    src_crs = meta.get('crs')
    if src_crs is None:
        raise ValueError("Raster has no CRS to reproject from")

    resampling = resampling or RASTER_CONFIG.get("resampling", "bilinear")
    try:
        method = Resampling[resampling]
    except KeyError:
        raise ValueError(f"Unknown resampling method: {resampling}")

    resolution = resolution or RASTER_CONFIG.get("resolution")
    height, width = arr.shape
    west, south, east, north = rasterio.transform.array_bounds(height, width, transform)
    kwargs = {"resolution": resolution} if resolution else {}
    dst_transform, dst_width, dst_height = calculate_default_transform(
        src_crs, dst_crs, width, height, west, south, east, north, **kwargs
    )

    source = _masked_float(arr, mask)
    destination = np.full((dst_height, dst_width), np.nan)
    reproject(
        source=source,
        destination=destination,
        src_transform=transform,
        src_crs=src_crs,
        src_nodata=np.nan,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=np.nan,
        resampling=method,
    )
    valid = ~np.isnan(destination)

    new_meta = dict(meta)
    new_meta.update({
        'width': dst_width,
        'height': dst_height,
        'crs': dst_crs,
        'bounds': _bounds(dst_transform, destination.shape),
        'nodata': np.nan,
        'dtype': str(destination.dtype),
        'res': cell_size(dst_transform),
    })
    logger.info(f"Reprojected raster from {src_crs} to {dst_crs}: {arr.shape} -> {destination.shape}")
    return destination, valid, dst_transform, new_meta


def interpolate_points(
    gdf: gpd.GeoDataFrame,
    column: str,
    resolution: Optional[float] = None,
    method: Optional[str] = None,
    bounds: Optional[Sequence[float]] = None
) -> RasterData:
    """
    Interpolate point measurements onto a regular grid.

    Parameters
    ----------
    gdf : gpd.GeoDataFrame
        Point features carrying the measured value.
    column : str
        Attribute to interpolate.
    resolution : float, optional
        Cell size in CRS units; by default the longest side is split into
        ``RASTER_CONFIG["grid_size"]`` cells.
    method : str, optional
        ``nearest``, ``linear`` or ``cubic``.
    bounds : sequence of float, optional
        Grid extent, by default the point bounds.

    Returns
    -------
    tuple
        ``(array, mask, transform, meta)``; cells outside the convex hull of
        the points are invalid for ``linear`` and ``cubic``.
    """
    method = method or RASTER_CONFIG.get("interpolation_method", "linear")
    if method not in ("nearest", "linear", "cubic"):
        raise ValueError(f"Unknown interpolation method: {method}")

    points = drop_missing(drop_empty(ensure_crs(gdf)), column)
    if not points.geometry.geom_type.eq("Point").all():
        points = points.copy()
        points[points.geometry.name] = points.geometry.centroid
    if len(points) < 3 and method != "nearest":
        raise ValueError(f"At least 3 points are needed for {method} interpolation")
    if points.empty:
        raise ValueError("No points to interpolate")

    xmin, ymin, xmax, ymax = bounds if bounds is not None else points.total_bounds
    if resolution is None:
        resolution = max(xmax - xmin, ymax - ymin) / RASTER_CONFIG.get("grid_size", 200)
    if resolution <= 0:
        raise ValueError("Resolution must be positive")

    width = max(int(np.ceil((xmax - xmin) / resolution)), 1)
    height = max(int(np.ceil((ymax - ymin) / resolution)), 1)
    transform = from_origin(xmin, ymax, resolution, resolution)

    cols, rows = np.meshgrid(np.arange(width), np.arange(height))
    grid_x, grid_y = xy(transform, rows, cols)
    grid_x = np.asarray(grid_x).reshape(height, width)
    grid_y = np.asarray(grid_y).reshape(height, width)

    coords = np.column_stack([points.geometry.x, points.geometry.y])
    values = points[column].astype(float).to_numpy()
    arr = griddata(coords, values, (grid_x, grid_y), method=method)
    valid = ~np.isnan(arr)

    meta = {
        'width': width,
        'height': height,
        'crs': points.crs,
        'bounds': _bounds(transform, arr.shape),
        'nodata': np.nan,
        'dtype': str(arr.dtype),
        'count': 1,
        'driver': None,
        'res': (resolution, resolution),
    }
    logger.info(f"Interpolated {len(points)} points ({method}) onto a {height}x{width} grid")
    return arr, valid, transform, meta


def calculate_hillshade(
    elevation: np.ndarray,
    mask: Optional[np.ndarray] = None,
    azimuth: Optional[float] = None,
    altitude: Optional[float] = None,
    cell_size: Union[float, Tuple[float, float]] = 1.0,
    z_factor: Optional[float] = None
) -> np.ndarray:
    """
    Calculate hillshade from elevation raster.

    Parameters
    ----------
    elevation : np.ndarray
        2D array of elevation values.
    mask : np.ndarray, optional
        Boolean mask of valid data, by default None.
    azimuth : float, optional
        Azimuth of the light source in degrees (0-360, clockwise from north).
    altitude : float, optional
        Altitude of the light source in degrees above the horizon (0-90).
    cell_size : float or tuple, optional
        Cell size in map units, or ``(x, y)`` sizes, by default 1.0.
    z_factor : float, optional
        Vertical exaggeration, by default ``HILLSHADE_CONFIG["z_factor"]``.

    Returns
    -------
    np.ndarray
        2D array of hillshade values (0-255), NaN where data is invalid.
    """
    if mask is None:
        mask = np.ones_like(elevation, dtype=bool)
    azimuth = HILLSHADE_CONFIG["azimuth"] if azimuth is None else azimuth
    altitude = HILLSHADE_CONFIG["altitude"] if altitude is None else altitude
    z_factor = HILLSHADE_CONFIG["z_factor"] if z_factor is None else z_factor
    if not 0 <= altitude <= 90:
        raise ValueError(f"Altitude must be within 0-90 degrees, got {altitude}")

    if isinstance(cell_size, (tuple, list)):
        size_x, size_y = cell_size
    else:
        size_x = size_y = cell_size

    # Make a copy with NaN for invalid cells
    elev_nan = _masked_float(elevation, mask) * z_factor

    # Convert to math notation (counterclockwise from east)
    azimuth_rad = np.deg2rad(360.0 - azimuth + 90.0)
    altitude_rad = np.deg2rad(altitude)

    # Edge-replicate so border cells keep a full 3x3 neighbourhood
    padded = np.pad(elev_nan, 1, mode='edge')

    def neighbour(rows, cols):
        # invalid neighbours take the centre value so the mask does not spread
        values = padded[rows, cols]
        return np.where(np.isnan(values), elev_nan, values)

    z1 = neighbour(slice(0, -2), slice(0, -2))        # top left
    z2 = neighbour(slice(0, -2), slice(1, -1))        # top center
    z3 = neighbour(slice(0, -2), slice(2, None))      # top right
    z4 = neighbour(slice(1, -1), slice(0, -2))        # middle left
    z6 = neighbour(slice(1, -1), slice(2, None))      # middle right
    z7 = neighbour(slice(2, None), slice(0, -2))      # bottom left
    z8 = neighbour(slice(2, None), slice(1, -1))      # bottom center
    z9 = neighbour(slice(2, None), slice(2, None))    # bottom right

    # Horn's method
    dz_dx = ((z3 + 2*z6 + z9) - (z1 + 2*z4 + z7)) / (8 * size_x)
    dz_dy = ((z7 + 2*z8 + z9) - (z1 + 2*z2 + z3)) / (8 * size_y)

    slope_rad = np.arctan(np.sqrt(dz_dx**2 + dz_dy**2))
    aspect_rad = np.arctan2(dz_dy, -dz_dx)

    hillshade = 255.0 * ((np.cos(altitude_rad) * np.sin(slope_rad) * np.cos(aspect_rad - azimuth_rad)) +
                         (np.sin(altitude_rad) * np.cos(slope_rad)))
    hillshade = np.clip(hillshade, 0, 255)
    hillshade = np.where(mask, hillshade, np.nan)

    logger.debug(f"Hillshade calculation complete - shape: {hillshade.shape}, "
                 f"NaN count: {np.sum(np.isnan(hillshade))}")
    return hillshade


def raster_to_frame(raster_data: RasterData, value_name: str = "value") -> pd.DataFrame:
    """
    Long ``x, y, value`` table of the valid cells (cell centres).
    """
    arr, mask, transform, meta = raster_data
    rows, cols = np.nonzero(mask)
    xs, ys = xy(transform, rows, cols)
    return pd.DataFrame({
        'x': np.asarray(xs, dtype=float),
        'y': np.asarray(ys, dtype=float),
        value_name: arr[rows, cols],
    })


def raster_extent(raster_data: RasterData) -> Tuple[float, float, float, float]:
    """``(left, right, bottom, top)`` extent for ``imshow``."""
    arr, _, transform, _ = raster_data
    west, south, east, north = rasterio.transform.array_bounds(arr.shape[0], arr.shape[1], transform)
    return west, east, south, north
