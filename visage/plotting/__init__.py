#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Plotting helpers: fonts, theme, captions and the map figures.
"""
