#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for street network routing.
"""
import unittest
from unittest.mock import patch

from visage.geo.routing import (
    fetch_street_graph, nearest_node, route_to_gdf, shortest_route, streets_to_gdf
)
from synthetic import make_street_graph


class TestRouting(unittest.TestCase):
    """Test nearest nodes, shortest paths and route features."""

    def setUp(self):
        self.graph = make_street_graph(isolated=True)
        # slower parallel edge, never the cheapest
        self.graph.add_edge(1, 2, length=500.0)

    def test_nearest_node(self):
        self.assertEqual(nearest_node(self.graph, 0.0019, 0.0001), 3)
        self.assertEqual(nearest_node(self.graph, 0.0011, 0.0008), 4)

    def test_shortest_route(self):
        self.assertEqual(shortest_route(self.graph, 1, 3), [1, 2, 3])

    def test_no_route(self):
        with self.assertRaises(ValueError):
            shortest_route(self.graph, 1, 5)
        with self.assertRaises(ValueError):
            shortest_route(self.graph, 1, 99)

    def test_route_to_gdf(self):
        route = route_to_gdf(self.graph, [1, 2, 3])
        self.assertEqual(len(route), 1)
        self.assertAlmostEqual(route["length"].iloc[0], 220.0)
        self.assertEqual(route["nodes"].iloc[0], 3)
        self.assertEqual(len(route.geometry.iloc[0].coords), 3)
        self.assertEqual(route.crs.to_epsg(), 4326)
        with self.assertRaises(ValueError):
            route_to_gdf(self.graph, [1])

    def test_streets_to_gdf(self):
        streets = streets_to_gdf(self.graph)
        self.assertEqual(len(streets), self.graph.number_of_edges())
        self.assertTrue((streets.geometry.geom_type == "LineString").all())

    @patch("visage.geo.routing.ox.graph_from_bbox")
    def test_fetch_street_graph(self, mock_from_bbox):
        mock_from_bbox.return_value = self.graph
        graph = fetch_street_graph(bbox={"west": 0, "south": 0, "east": 1, "north": 1},
                                   network_type="walk")
        self.assertIs(graph, self.graph)
        args, kwargs = mock_from_bbox.call_args
        self.assertEqual(args[0], (0.0, 0.0, 1.0, 1.0))
        self.assertEqual(kwargs["network_type"], "walk")

    def test_fetch_street_graph_needs_area(self):
        with self.assertRaises(ValueError):
            fetch_street_graph()


if __name__ == '__main__':
    unittest.main()
