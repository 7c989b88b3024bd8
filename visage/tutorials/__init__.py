#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Independent map-making tutorials.

Each tutorial module is a linear script wrapped in a ``run`` function:
load libraries, acquire a dataset, transform it with library calls, plot it
and save the image(s). Modules expose ``METADATA`` (the document front
matter) and ``run(data_dir=None, topic=None, **options) -> List[Path]``.
"""
import importlib
from types import ModuleType
from typing import Dict, List

TUTORIALS: Dict[str, str] = {
    "hillshade_relief": "visage.tutorials.hillshade_relief",
    "basemap_points": "visage.tutorials.basemap_points",
    "population_grid": "visage.tutorials.population_grid",
    "cartogram_map": "visage.tutorials.cartogram_map",
    "interpolated_surface": "visage.tutorials.interpolated_surface",
    "route_map": "visage.tutorials.route_map",
    "eda_summary": "visage.tutorials.eda_summary",
}


def list_tutorials() -> List[str]:
    """Names of the available tutorials."""
    return sorted(TUTORIALS)


def get_tutorial(name: str) -> ModuleType:
    """Import a tutorial module by name."""
    if name not in TUTORIALS:
        raise ValueError(f"Unknown tutorial '{name}'. Available: {', '.join(list_tutorials())}")
    return importlib.import_module(TUTORIALS[name])
