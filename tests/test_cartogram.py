#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for cartogram distortion.
"""
import unittest

import numpy as np
import geopandas as gpd
from shapely.geometry import box


class TestCartograms(unittest.TestCase):
    """Test non-contiguous and Dorling cartograms."""

    def setUp(self):
        self.regions = gpd.GeoDataFrame(
            {"name": ["dense", "sparse", "unknown"], "pop": [100.0, 25.0, None]},
            geometry=[box(0, 0, 10, 10), box(20, 0, 30, 10), box(40, 0, 50, 10)],
            crs="EPSG:3857",
        )

    def test_ncont_areas_follow_density(self):
        from visage.geo.cartogram import cartogram_ncont

        out = cartogram_ncont(self.regions, "pop")
        self.assertEqual(list(out["name"]), ["dense", "sparse"])
        areas = out.geometry.area.to_numpy()
        # densest region keeps its size; the other shrinks to density ratio
        self.assertAlmostEqual(areas[0], 100.0)
        self.assertAlmostEqual(areas[1], 25.0)
        self.assertTrue(np.allclose(out["scale"], [1.0, 0.5]))
        # shrinking happens in place
        self.assertTrue(out.geometry.iloc[1].centroid.equals_exact(
            self.regions.geometry.iloc[1].centroid, 1e-9))

    def test_ncont_inflation(self):
        from visage.geo.cartogram import cartogram_ncont

        out = cartogram_ncont(self.regions, "pop", k=4.0)
        self.assertAlmostEqual(out.geometry.area.iloc[0], 400.0)

    def test_dorling_radii(self):
        from visage.geo.cartogram import cartogram_dorling

        out = cartogram_dorling(self.regions, "pop", k=10.0, iterations=50)
        radii = out["radius"].to_numpy()
        self.assertAlmostEqual(radii[0] / radii[1], 2.0)
        self.assertTrue(np.allclose(out.geometry.area, np.pi * radii ** 2, rtol=0.01))
        self.assertTrue((out.geometry.geom_type == "Polygon").all())

    def test_dorling_separates_overlaps(self):
        from visage.geo.cartogram import cartogram_dorling

        crowded = gpd.GeoDataFrame(
            {"pop": [1.0, 1.0]}, geometry=[box(0, 0, 1, 1), box(0.5, 0, 1.5, 1)], crs="EPSG:3857"
        )
        out = cartogram_dorling(crowded, "pop", k=50.0, iterations=200)
        a, b = out.geometry
        self.assertLess(a.intersection(b).area, 0.01 * a.area)

    def test_invalid_input(self):
        from visage.geo.cartogram import cartogram_ncont

        with self.assertRaises(ValueError):
            cartogram_ncont(self.regions.to_crs("EPSG:4326"), "pop")
        with self.assertRaises(ValueError):
            cartogram_ncont(self.regions, "absent")
        zeros = self.regions.assign(pop=[0.0, 0.0, 0.0])
        with self.assertRaises(ValueError):
            cartogram_ncont(zeros, "pop")


if __name__ == '__main__':
    unittest.main()
