#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
End-to-end runs of the tutorials on small synthetic datasets.
"""
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import Point, box

from visage.core import config
from visage.tutorials import TUTORIALS, get_tutorial, list_tutorials
from synthetic import create_synthetic_raster, make_street_graph, save_synthetic_raster


class TutorialTestCase(unittest.TestCase):
    """Temporary data and image directories for tutorial runs."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self.tmp.name) / "data"
        self.data_dir.mkdir()
        self.image_dir = Path(self.tmp.name) / "images"
        patcher = patch.object(config, "IMAGE_DIR", self.image_dir)
        patcher.start()
        self.addCleanup(patcher.stop)
        dpi = patch.dict(config.FIGURE_CONFIG, {"dpi": 40})
        dpi.start()
        self.addCleanup(dpi.stop)

    def tearDown(self):
        plt.close("all")
        matplotlib.rcdefaults()
        self.tmp.cleanup()

    def assertImages(self, outputs, topic, names):
        self.assertEqual(outputs, [self.image_dir / topic / f"{name}.png" for name in names])
        for path in outputs:
            self.assertTrue(path.exists(), f"{path} was not written")


class TestRegistry(unittest.TestCase):
    """Test the tutorial registry."""

    def test_every_tutorial_is_importable(self):
        self.assertEqual(list_tutorials(), sorted(TUTORIALS))
        for name in list_tutorials():
            tutorial = get_tutorial(name)
            self.assertTrue(tutorial.METADATA["title"])
            self.assertTrue(tutorial.METADATA["categories"])
            self.assertTrue(callable(tutorial.run))

    def test_unknown_tutorial(self):
        with self.assertRaises(ValueError):
            get_tutorial("watercolour")


class TestHillshadeRelief(TutorialTestCase):
    """Test the shaded relief tutorial."""

    def setUp(self):
        super().setUp()
        save_synthetic_raster(self.data_dir / "elevation.tif", create_synthetic_raster())

    def test_full_extent(self):
        from visage.tutorials import hillshade_relief

        outputs = hillshade_relief.run(data_dir=self.data_dir)
        self.assertImages(outputs, "hillshade_relief", ["relief", "hillshade"])

    def test_with_boundary(self):
        from visage.tutorials import hillshade_relief

        boundary = gpd.GeoDataFrame(geometry=[box(500300, 3999100, 501200, 3999700)], crs="EPSG:32633")
        boundary.to_crs("EPSG:4326").to_file(self.data_dir / "boundary.gpkg", driver="GPKG")
        outputs = hillshade_relief.run(data_dir=self.data_dir, boundary="boundary.gpkg",
                                       topic="relief_masked")
        self.assertImages(outputs, "relief_masked", ["relief", "hillshade"])

    def test_missing_elevation(self):
        from visage.tutorials import hillshade_relief

        with self.assertRaises(FileNotFoundError):
            hillshade_relief.run(data_dir=self.data_dir, elevation="absent.tif")


class TestVectorTutorials(TutorialTestCase):
    """Test the tutorials built on feature collections."""

    def test_basemap_points(self):
        from visage.tutorials import basemap_points

        points = gpd.GeoDataFrame(
            {"kind": ["a", "b", "c"]},
            geometry=[Point(13.40, 52.52), Point(13.41, 52.51), Point(13.38, 52.50)],
            crs="EPSG:4326",
        )
        points.to_file(self.data_dir / "points.gpkg", driver="GPKG")
        with patch("visage.tutorials.basemap_points.add_basemap") as mock_basemap:
            outputs = basemap_points.run(data_dir=self.data_dir, points="points.gpkg", basemap=False)
            mock_basemap.assert_not_called()
        self.assertImages(outputs, "basemap_points", ["points"])

    def test_basemap_points_with_tiles(self):
        from visage.tutorials import basemap_points

        points = gpd.GeoDataFrame(geometry=[Point(13.40, 52.52), Point(13.41, 52.51)], crs="EPSG:4326")
        points.to_file(self.data_dir / "points.gpkg", driver="GPKG")
        with patch("visage.tutorials.basemap_points.add_basemap", return_value=False) as mock_basemap:
            basemap_points.run(data_dir=self.data_dir, points="points.gpkg")
            mock_basemap.assert_called_once()

    def test_population_grid(self):
        from visage.tutorials import population_grid

        regions = gpd.GeoDataFrame(
            {"population": [50000, 2000, None]},
            geometry=[box(500000, 4000000, 510000, 4010000), box(510000, 4000000, 520000, 4010000),
                      box(520000, 4000000, 530000, 4010000)],
            crs="EPSG:32633",
        )
        regions.to_file(self.data_dir / "regions.gpkg", driver="GPKG")
        outputs = population_grid.run(data_dir=self.data_dir, regions="regions.gpkg",
                                      resolution_m=1000, simplify_m=10)
        self.assertImages(outputs, "population_grid", ["density_grid"])

    def test_cartogram_map(self):
        from visage.tutorials import cartogram_map

        countries = gpd.GeoDataFrame(
            {"NAME": ["A", "B", "C", "D"], "POP_EST": [1e6, 5e6, 2e7, 0]},
            geometry=[box(0, 0, 10, 10), box(10, 0, 20, 10), box(0, 10, 10, 20), box(10, 10, 20, 20)],
            crs="EPSG:4326",
        )
        countries.to_file(self.data_dir / "countries.gpkg", driver="GPKG")
        outputs = cartogram_map.run(data_dir=self.data_dir, regions="countries.gpkg", regions_url=None)
        self.assertImages(outputs, "cartogram_map", ["cartograms"])

    def test_interpolated_surface(self):
        from visage.tutorials import interpolated_surface

        rng = np.random.default_rng(42)
        stations = pd.DataFrame({
            "lon": rng.uniform(10.0, 10.5, 25),
            "lat": rng.uniform(50.0, 50.5, 25),
        })
        stations["value"] = 10 + stations["lat"] - stations["lon"]
        stations.loc[3, "value"] = np.nan
        stations.to_csv(self.data_dir / "stations.csv", index=False)
        boundary = gpd.GeoDataFrame(geometry=[box(10.1, 50.1, 10.4, 50.4)], crs="EPSG:4326")
        boundary.to_file(self.data_dir / "boundary.gpkg", driver="GPKG")

        outputs = interpolated_surface.run(data_dir=self.data_dir, boundary="boundary.gpkg",
                                           resolution_m=500)
        self.assertImages(outputs, "interpolated_surface", ["surface"])

    def test_load_stations_requires_coordinates(self):
        from visage.tutorials.interpolated_surface import load_stations

        path = self.data_dir / "bad.csv"
        pd.DataFrame({"x": [1], "value": [2]}).to_csv(path, index=False)
        with self.assertRaises(ValueError):
            load_stations(path)


class TestEdaSummary(TutorialTestCase):
    """Test the exploratory analysis tutorial on a small table."""

    def setUp(self):
        super().setUp()
        rng = np.random.default_rng(1)
        table = pd.DataFrame({
            "area": rng.uniform(10, 100, size=30),
            "population": rng.integers(100, 1000, size=30),
            "density": rng.normal(50, 5, size=30),
            "region": ["north", "south", "east"] * 10,
        })
        table.loc[:4, "density"] = np.nan
        table.to_csv(self.data_dir / "table.csv", index=False)

    def test_run(self):
        from visage.tutorials import eda_summary

        outputs = eda_summary.run(data_dir=self.data_dir)
        self.assertImages(outputs, "eda_summary", ["missing_values", "correlation", "pairs"])
        summary = pd.read_csv(self.image_dir / "eda_summary" / "summary.csv", index_col="column")
        self.assertEqual(summary.loc["density", "missing"], 5)
        self.assertEqual(summary.loc["region", "unique"], 3)
        self.assertTrue(np.isnan(summary.loc["region", "mean"]))

    def test_single_numeric_column(self):
        from visage.tutorials import eda_summary

        outputs = eda_summary.run(data_dir=self.data_dir, columns=["area", "region"])
        self.assertImages(outputs, "eda_summary", ["missing_values"])

    def test_unknown_column(self):
        from visage.tutorials import eda_summary

        with self.assertRaisesRegex(ValueError, "Columns not found"):
            eda_summary.run(data_dir=self.data_dir, columns=["elevation"])

    def test_summarize_table(self):
        from visage.tutorials.eda_summary import summarize_table

        summary = summarize_table(pd.DataFrame({"a": [1.0, 2.0, None], "b": ["x", "x", "y"]}))
        self.assertEqual(list(summary.index), ["a", "b"])
        self.assertEqual(summary.loc["a", "missing"], 1)
        self.assertAlmostEqual(summary.loc["a", "median"], 1.5)
        self.assertEqual(summary.loc["b", "unique"], 2)


class TestRouteMap(TutorialTestCase):
    """Test the routing tutorial with a local street graph."""

    def test_with_graph(self):
        from visage.tutorials import route_map

        outputs = route_map.run(graph=make_street_graph(), origin=(0.0, 0.0),
                                destination=(0.002, 0.0), basemap=False)
        self.assertImages(outputs, "route_map", ["route"])

    def test_downloads_graph_for_bbox(self):
        from visage.tutorials import route_map

        bbox = (-0.0004, -0.0004, 0.0024, 0.0004)
        with patch("visage.tutorials.route_map.fetch_street_graph",
                   return_value=make_street_graph()) as mock_fetch:
            outputs = route_map.run(bbox=bbox, basemap=False)
        mock_fetch.assert_called_once_with(bbox=bbox, network_type=None)
        self.assertImages(outputs, "route_map", ["route"])

    def test_same_node_ends(self):
        from visage.tutorials import route_map

        with self.assertRaisesRegex(ValueError, "same street node"):
            route_map.run(graph=make_street_graph(), origin=(0.0, 0.0),
                          destination=(0.0001, 0.0), basemap=False)

    def test_requires_area(self):
        from visage.tutorials import route_map

        with self.assertRaises(ValueError):
            route_map.run(basemap=False)


if __name__ == '__main__':
    unittest.main()
