#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input/output handling for the visage tutorials.

This module handles downloading public datasets, loading vector and raster
data from disk, writing rasters and saving rendered figures under the
per-topic image directories.
"""
import os
from pathlib import Path
from typing import Dict, Optional, Tuple, Union, Any
from urllib.parse import urlparse

import numpy as np
import geopandas as gpd
import rasterio
from rasterio.errors import RasterioIOError
import requests

from visage.core import config
from visage.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)

RasterData = Tuple[np.ndarray, np.ndarray, Any, Dict[str, Any]]


def download_dataset(
    url: str,
    filename: Optional[str] = None,
    cache_dir: Optional[Union[str, Path]] = None,
    overwrite: bool = False,
    timeout: Optional[float] = None
) -> Path:
    """
    Download a public dataset into the local cache.

    Parameters
    ----------
    url : str
        Address of the dataset.
    filename : str, optional
        Name of the cached file, by default the last path component of the URL.
    cache_dir : str or Path, optional
        Directory holding downloads, by default ``config.CACHE_DIR``.
    overwrite : bool, optional
        Download again even when a cached copy exists, by default False.
    timeout : float, optional
        Request timeout in seconds, by default ``DOWNLOAD_CONFIG["timeout"]``.

    Returns
    -------
    Path
        Path of the downloaded (or cached) file.
    """
    cache_dir = Path(cache_dir) if cache_dir is not None else Path(config.CACHE_DIR)
    if filename is None:
        filename = os.path.basename(urlparse(url).path)
    if not filename:
        raise ValueError(f"Cannot derive a file name from URL: {url}")

    target = cache_dir / filename
    if target.exists() and not overwrite:
        logger.info(f"Using cached dataset {target}")
        return target

    cache_dir.mkdir(parents=True, exist_ok=True)
    timeout = timeout or config.DOWNLOAD_CONFIG.get("timeout", 60)
    chunk_size = config.DOWNLOAD_CONFIG.get("chunk_size", 1 << 16)
    headers = {"User-Agent": config.DOWNLOAD_CONFIG.get("user_agent", "visage")}

    logger.info(f"Downloading {url} to {target}")
    partial = target.with_name(target.name + ".part")
    try:
        with requests.get(url, stream=True, timeout=timeout, headers=headers) as resp:
            resp.raise_for_status()
            with open(partial, "wb") as f:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
        partial.replace(target)
    except requests.RequestException as e:
        logger.error(f"Download failed for {url}: {e}")
        raise RuntimeError(f"Failed to download dataset: {url}") from e
    finally:
        # only a completed download leaves the cache
        if partial.exists():
            partial.unlink()

    logger.info(f"Saved {target.stat().st_size} bytes to {target}")
    return target


def load_vector(
    path: Union[str, Path],
    layer: Optional[str] = None,
    crs: Optional[str] = None
) -> gpd.GeoDataFrame:
    """
    Load a feature collection (shapefile, GeoJSON, GeoPackage).

    Parameters
    ----------
    path : str or Path
        Path to the vector file.
    layer : str, optional
        Layer name for multi-layer sources.
    crs : str, optional
        Reproject to this CRS after loading.

    Returns
    -------
    gpd.GeoDataFrame
        Loaded features.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vector file not found: {path}")

    logger.info(f"Loading features from {path}")
    kwargs = {"layer": layer} if layer is not None else {}
    gdf = gpd.read_file(path, **kwargs)

    if crs is not None and gdf.crs is not None:
        gdf = gdf.to_crs(crs)

    logger.info(f"Loaded {len(gdf)} features, CRS: {gdf.crs}")
    return gdf


def load_raster(path: Union[str, Path], band: int = 1) -> RasterData:
    """
    Load raster data from file.

    Parameters
    ----------
    path : str or Path
        Path to the raster file (GeoTIFF, ASCII grid, ...).
    band : int, optional
        Band to read, by default 1.

    Returns
    -------
    tuple
        - 2D array of raster values
        - 2D boolean mask of valid data
        - Affine transform
        - Additional metadata dictionary
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    logger.info(f"Loading raster from {path}")
    try:
        with rasterio.open(path) as src:
            arr = src.read(band)

            nodata = src.nodata
            if nodata is None:
                nodata = config.DEFAULT_NODATA_VALUE
                logger.warning(f"No nodata value found, using default: {nodata}")

            mask = arr != nodata
            if np.issubdtype(arr.dtype, np.floating):
                mask &= ~np.isnan(arr)

            transform = src.transform
            meta = {
                'width': src.width,
                'height': src.height,
                'crs': src.crs,
                'bounds': src.bounds._asdict(),
                'nodata': nodata,
                'dtype': str(arr.dtype),
                'count': src.count,
                'driver': src.driver,
                'res': src.res,
            }
    except RasterioIOError as e:
        logger.error(f"Rasterio loading failed: {e}")
        raise RuntimeError(f"Failed to load raster: {path}") from e

    logger.info(f"Loaded raster with shape {arr.shape}, {np.sum(mask)} valid cells")
    return arr, mask, transform, meta


def write_raster(
    path: Union[str, Path],
    array: np.ndarray,
    transform: Any,
    crs: Any,
    nodata: Optional[float] = None
) -> Path:
    """
    Write a single-band GeoTIFF.

    Parameters
    ----------
    path : str or Path
        Output path.
    array : np.ndarray
        2D array to write. NaN cells are written as ``nodata``.
    transform : affine.Affine
        Affine transform of the grid.
    crs : str or CRS
        Coordinate reference system.
    nodata : float, optional
        Nodata value, by default ``DEFAULT_NODATA_VALUE``.

    Returns
    -------
    Path
        The written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    nodata = config.DEFAULT_NODATA_VALUE if nodata is None else nodata

    data = np.asarray(array)
    if np.issubdtype(data.dtype, np.floating):
        data = np.where(np.isnan(data), nodata, data)

    with rasterio.open(
        path,
        'w',
        driver='GTiff',
        height=data.shape[0],
        width=data.shape[1],
        count=1,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata
    ) as dst:
        dst.write(data, 1)

    logger.info(f"Saved raster to {path}")
    return path


def image_path(topic: str, name: str) -> Path:
    """
    Build the output path of a rendered image: ``IMAGE_DIR/<topic>/<name>.png``.
    """
    if not topic or not name:
        raise ValueError("Both topic and name are required for an image path")
    filename = name if Path(name).suffix else f"{name}.png"
    return Path(config.IMAGE_DIR) / topic / filename


def save_figure(
    fig: Any,
    topic: str,
    name: str,
    dpi: Optional[int] = None,
    close: bool = True
) -> Path:
    """
    Save a matplotlib figure under the topic's image directory.

    Parameters
    ----------
    fig : matplotlib.figure.Figure
        Figure to save.
    topic : str
        Topic (image sub-directory).
    name : str
        File name, ``.png`` is appended when no suffix is given.
    dpi : int, optional
        Resolution, by default ``FIGURE_CONFIG["dpi"]``.
    close : bool, optional
        Close the figure after saving, by default True.

    Returns
    -------
    Path
        Path of the saved image.
    """
    import matplotlib.pyplot as plt

    output_path = image_path(topic, name)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    dpi = dpi or config.FIGURE_CONFIG.get("dpi", 300)

    fig.savefig(output_path, dpi=dpi, bbox_inches='tight',
                facecolor=config.FIGURE_CONFIG.get("facecolor", "white"))
    logger.info(f"Saved figure to {output_path}")

    if close:
        plt.close(fig)
    return output_path


def resolve_dataset(
    name: Union[str, Path],
    data_dir: Optional[Union[str, Path]] = None,
    url: Optional[str] = None
) -> Path:
    """
    Locate a tutorial input: an existing path, a file under the data
    directory, or a download from ``url`` into the cache.

    Parameters
    ----------
    name : str or Path
        Absolute path or file name relative to ``data_dir``.
    data_dir : str or Path, optional
        Data directory, by default ``config.DATA_DIR``.
    url : str, optional
        Where to fetch the dataset when no local copy exists.

    Returns
    -------
    Path
        Path of the local file.
    """
    candidate = Path(name)
    if not candidate.is_absolute():
        candidate = Path(data_dir if data_dir is not None else config.DATA_DIR) / candidate
    if candidate.exists():
        return candidate
    if url:
        return download_dataset(url)
    raise FileNotFoundError(f"Dataset not found: {candidate}")
