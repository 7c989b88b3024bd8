#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Geospatial helpers shared by the tutorials.

This package wraps the vector, raster, basemap tile, street routing and
cartogram calls the tutorials make into short, logged functions.
"""
