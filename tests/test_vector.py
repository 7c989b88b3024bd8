#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for vector helpers.
"""
import unittest

import geopandas as gpd
from shapely.geometry import Point, Polygon, box

from visage.geo.vector import (
    bbox_to_gdf, buffer, clip_to_bbox, drop_empty, drop_missing, ensure_crs,
    reproject, simplify, to_points, total_bounds
)


class TestVectorHelpers(unittest.TestCase):
    """Test CRS handling and cleaning."""

    def setUp(self):
        self.points = gpd.GeoDataFrame(
            {"name": ["a", "b", "c"], "value": [1.0, None, 3.0]},
            geometry=[Point(10, 50), Point(10.5, 50.5), Point(11, 51)],
            crs="EPSG:4326",
        )

    def test_ensure_crs(self):
        bare = gpd.GeoDataFrame(geometry=[Point(0, 0)])
        with self.assertRaises(ValueError):
            ensure_crs(bare)
        self.assertEqual(ensure_crs(bare, assume=True).crs.to_epsg(), 4326)
        self.assertIs(ensure_crs(self.points), self.points)

    def test_reproject(self):
        projected = reproject(self.points, "EPSG:3857")
        self.assertEqual(projected.crs.to_epsg(), 3857)
        self.assertGreater(projected.geometry.x.iloc[0], 1e6)

    def test_drop_empty_and_missing(self):
        with_empty = gpd.GeoDataFrame(geometry=[Point(0, 0), Polygon(), None], crs="EPSG:4326")
        self.assertEqual(len(drop_empty(with_empty)), 1)
        self.assertEqual(list(drop_missing(self.points, "value")["name"]), ["a", "c"])
        with self.assertRaises(ValueError):
            drop_missing(self.points, "absent")

    def test_bbox_and_clip(self):
        frame = bbox_to_gdf((10, 50, 10.6, 50.6))
        self.assertEqual(len(frame), 1)
        clipped = clip_to_bbox(self.points, (9.9, 49.9, 10.6, 50.6))
        self.assertEqual(sorted(clipped["name"]), ["a", "b"])
        with self.assertRaises(ValueError):
            bbox_to_gdf((1, 1, 0, 0))

    def test_clip_reprojects_bbox(self):
        projected = reproject(self.points, "EPSG:3857")
        clipped = clip_to_bbox(projected, (10.9, 50.9, 11.1, 51.1), bbox_crs="EPSG:4326")
        self.assertEqual(list(clipped["name"]), ["c"])
        self.assertEqual(clipped.crs.to_epsg(), 3857)

    def test_buffer_in_metres(self):
        buffered = buffer(self.points.iloc[:1], 1000)
        self.assertEqual(buffered.crs.to_epsg(), 4326)
        area = reproject(buffered, buffered.estimate_utm_crs()).geometry.area.iloc[0]
        self.assertAlmostEqual(area / (3.14159 * 1000 ** 2), 1.0, places=1)

    def test_simplify(self):
        wiggly = gpd.GeoDataFrame(
            geometry=[Polygon([(0, 0), (5, 0.01), (10, 0), (10, 10), (0, 10)])], crs="EPSG:32633"
        )
        simplified = simplify(wiggly, 1.0)
        self.assertLess(len(simplified.geometry.iloc[0].exterior.coords),
                        len(wiggly.geometry.iloc[0].exterior.coords))
        with self.assertRaises(ValueError):
            simplify(wiggly, -1)

    def test_points_and_bounds(self):
        polygons = gpd.GeoDataFrame(geometry=[box(0, 0, 2, 2)], crs="EPSG:32633")
        points = to_points(polygons)
        self.assertEqual(points.geometry.iloc[0].geom_type, "Point")
        self.assertTrue(polygons.geometry.iloc[0].contains(points.geometry.iloc[0]))

        bounds = total_bounds([self.points, reproject(self.points, "EPSG:3857")], "EPSG:4326")
        self.assertAlmostEqual(bounds[0], 10.0, places=6)
        self.assertAlmostEqual(bounds[3], 51.0, places=6)


if __name__ == '__main__':
    unittest.main()
