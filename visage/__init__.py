#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Visualizing Information and Spatial Analysis.

A collection of independent map-making tutorials together with the small
amount of glue they share: dataset acquisition, vector and raster helpers,
basemap tiles, plotting theme and the static documentation site.
"""

__version__ = "0.1.0"
__author__ = "visage contributors"
