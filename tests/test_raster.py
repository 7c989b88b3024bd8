#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for grid raster helpers.
"""
import tempfile
import unittest
from pathlib import Path

import numpy as np
import geopandas as gpd
from rasterio.transform import from_origin
from shapely.geometry import Point, box

from visage.core.io import write_raster
from visage.geo.raster import (
    calculate_hillshade, cell_size, crop_raster, interpolate_points, mask_raster,
    raster_extent, raster_to_frame, rasterize_features, reproject_raster
)


class TestHillshade(unittest.TestCase):
    """Test hillshade calculation."""

    def test_flat_surface(self):
        elevation = np.full((5, 5), 100.0)
        hillshade = calculate_hillshade(elevation, azimuth=315, altitude=45)
        expected = 255.0 * np.sin(np.deg2rad(45))
        self.assertTrue(np.allclose(hillshade, expected))

    def test_light_direction(self):
        cols = np.tile(np.arange(10, dtype=float), (10, 1))
        flat = calculate_hillshade(np.zeros((10, 10)))
        # rising to the east: slope faces west, towards a north-west light
        west_facing = calculate_hillshade(cols)
        east_facing = calculate_hillshade(-cols)
        self.assertTrue(np.all(west_facing > flat))
        self.assertTrue(np.all(east_facing < flat))

    def test_mask_and_range(self):
        rng = np.random.default_rng(0)
        elevation = rng.random((8, 8)) * 50
        mask = np.ones((8, 8), dtype=bool)
        mask[3, 4] = False
        hillshade = calculate_hillshade(elevation, mask=mask, cell_size=(2.0, 2.0))
        self.assertTrue(np.isnan(hillshade[3, 4]))
        finite = hillshade[np.isfinite(hillshade)]
        self.assertTrue(np.all((finite >= 0) & (finite <= 255)))

    def test_mask_does_not_spread(self):
        elevation = np.full((7, 7), 50.0)
        mask = np.ones((7, 7), dtype=bool)
        mask[3, 3] = False
        hillshade = calculate_hillshade(elevation, mask=mask)
        self.assertFalse(np.isnan(hillshade[mask]).any())
        self.assertTrue(np.allclose(hillshade[mask], 255.0 * np.sin(np.deg2rad(45))))
        self.assertTrue(np.isnan(hillshade[3, 3]))

    def test_invalid_altitude(self):
        with self.assertRaises(ValueError):
            calculate_hillshade(np.zeros((3, 3)), altitude=120)


class TestCropAndMask(unittest.TestCase):
    """Test cropping and masking."""

    def setUp(self):
        self.arr = np.arange(100, dtype=float).reshape(10, 10)
        self.mask = np.ones((10, 10), dtype=bool)
        self.transform = from_origin(0, 10, 1, 1)
        self.meta = {'crs': "EPSG:32633", 'res': (1.0, 1.0)}

    def test_crop(self):
        arr, mask, transform, meta = crop_raster(
            (self.arr, self.mask, self.transform, self.meta), (2, 3, 5, 8)
        )
        self.assertEqual(arr.shape, (5, 3))
        self.assertEqual(arr[0, 0], self.arr[2, 2])
        self.assertAlmostEqual(transform.c, 2.0)
        self.assertAlmostEqual(transform.f, 8.0)
        self.assertEqual(meta['width'], 3)
        self.assertAlmostEqual(meta['bounds']['bottom'], 3.0)

    def test_crop_outside(self):
        with self.assertRaises(ValueError):
            crop_raster((self.arr, self.mask, self.transform, self.meta), (20, 20, 30, 30))

    def test_mask_raster(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "grid.tif"
            write_raster(path, self.arr.astype(np.float32), self.transform, "EPSG:32633")
            shapes = gpd.GeoDataFrame(geometry=[box(2, 2, 6, 6)], crs="EPSG:32633")

            arr, valid, transform, meta = mask_raster(path, shapes, crop=True)
            self.assertEqual(arr.shape, (4, 4))
            self.assertTrue(valid.all())

            arr, valid, transform, meta = mask_raster(path, shapes, crop=False)
            self.assertEqual(arr.shape, (10, 10))
            self.assertEqual(int(valid.sum()), 16)


class TestRasterize(unittest.TestCase):
    """Test burning polygons into a grid."""

    def test_column_values(self):
        gdf = gpd.GeoDataFrame(
            {"value": [5.0, 7.0, None]},
            geometry=[box(0, 0, 10, 10), box(10, 0, 20, 10), box(0, 10, 5, 15)],
            crs="EPSG:32633",
        )
        arr, valid, transform, meta = rasterize_features(gdf, resolution=1.0, column="value")
        # the feature without a value is dropped before sizing the grid
        self.assertEqual(arr.shape, (10, 20))
        self.assertTrue(valid.all())
        self.assertTrue(np.all(arr[:, :10] == 5.0))
        self.assertTrue(np.all(arr[:, 10:] == 7.0))
        self.assertEqual(meta['res'], (1.0, 1.0))

    def test_presence_grid_with_bounds(self):
        gdf = gpd.GeoDataFrame(geometry=[box(0, 0, 4, 4)], crs="EPSG:32633")
        arr, valid, _, _ = rasterize_features(gdf, resolution=1.0, fill=0.0, bounds=(0, 0, 8, 8))
        self.assertEqual(arr.shape, (8, 8))
        self.assertEqual(int(valid.sum()), 16)
        self.assertEqual(arr.max(), 1.0)

    def test_invalid_resolution(self):
        gdf = gpd.GeoDataFrame(geometry=[box(0, 0, 4, 4)], crs="EPSG:32633")
        with self.assertRaises(ValueError):
            rasterize_features(gdf, resolution=0)


class TestInterpolate(unittest.TestCase):
    """Test point interpolation."""

    def setUp(self):
        xs = [0, 1000, 0, 1000, 500]
        ys = [0, 0, 1000, 1000, 500]
        self.points = gpd.GeoDataFrame(
            {"value": [2 * x + 3 * y for x, y in zip(xs, ys)]},
            geometry=[Point(x, y) for x, y in zip(xs, ys)],
            crs="EPSG:32633",
        )

    def test_linear_reproduces_plane(self):
        raster_data = interpolate_points(self.points, "value", resolution=100, method="linear")
        arr, valid, transform, meta = raster_data
        self.assertEqual(arr.shape, (10, 10))
        self.assertTrue(valid.all())
        frame = raster_to_frame(raster_data)
        self.assertEqual(len(frame), 100)
        self.assertTrue(np.allclose(frame["value"], 2 * frame["x"] + 3 * frame["y"]))
        self.assertEqual(raster_extent(raster_data), (0.0, 1000.0, 0.0, 1000.0))

    def test_outside_hull_is_invalid(self):
        _, valid, _, _ = interpolate_points(self.points, "value", resolution=100,
                                            bounds=(0, 0, 2000, 1000))
        self.assertTrue(valid[:, :10].all())
        self.assertFalse(valid[:, 10:].any())

    def test_too_few_points(self):
        with self.assertRaises(ValueError):
            interpolate_points(self.points.iloc[:2], "value")

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            interpolate_points(self.points, "value", method="kriging")


class TestReproject(unittest.TestCase):
    """Test raster reprojection."""

    def setUp(self):
        self.arr = np.ones((20, 20))
        self.mask = np.ones((20, 20), dtype=bool)
        self.transform = from_origin(1113195, 6446276, 500, 500)

    def test_to_geographic(self):
        raster_data = (self.arr, self.mask, self.transform, {'crs': "EPSG:3857"})
        arr, valid, transform, meta = reproject_raster(raster_data, "EPSG:4326", resampling="nearest")
        self.assertEqual(meta['crs'], "EPSG:4326")
        self.assertTrue(valid.any())
        self.assertTrue(np.allclose(arr[valid], 1.0))
        self.assertEqual(meta['res'], cell_size(transform))
        self.assertLess(meta['bounds']['right'], 180)

    def test_requires_crs(self):
        with self.assertRaises(ValueError):
            reproject_raster((self.arr, self.mask, self.transform, {}), "EPSG:4326")

    def test_unknown_resampling(self):
        raster_data = (self.arr, self.mask, self.transform, {'crs': "EPSG:3857"})
        with self.assertRaises(ValueError):
            reproject_raster(raster_data, "EPSG:4326", resampling="magic")


if __name__ == '__main__':
    unittest.main()
