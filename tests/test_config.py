#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for configuration overrides and logging setup.
"""
import logging
import os
import tempfile
import unittest

from visage.core import config
from visage.core.logging_config import get_module_logger, setup_logging


class TestLoadConfig(unittest.TestCase):
    """Test YAML configuration overrides."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.saved_tiles = dict(config.TILE_CONFIG)
        self.saved_figure = dict(config.FIGURE_CONFIG)

    def tearDown(self):
        config.TILE_CONFIG.clear()
        config.TILE_CONFIG.update(self.saved_tiles)
        config.FIGURE_CONFIG.clear()
        config.FIGURE_CONFIG.update(self.saved_figure)
        self.tmp.cleanup()

    def _write(self, text):
        path = os.path.join(self.tmp.name, "visage.yml")
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_merges_blocks_in_place(self):
        path = self._write("tiles:\n  provider: OpenStreetMap.Mapnik\nfigure:\n  dpi: 96\n")
        merged = config.load_config(path)
        self.assertEqual(config.TILE_CONFIG["provider"], "OpenStreetMap.Mapnik")
        self.assertEqual(config.FIGURE_CONFIG["dpi"], 96)
        # untouched keys survive
        self.assertIn("zoom", config.TILE_CONFIG)
        self.assertIs(merged["tiles"], config.TILE_CONFIG)

    def test_empty_file(self):
        path = self._write("")
        config.load_config(path)
        self.assertEqual(config.TILE_CONFIG, self.saved_tiles)

    def test_unknown_block(self):
        path = self._write("colours:\n  accent: red\n")
        with self.assertRaises(ValueError):
            config.load_config(path)

    def test_block_must_be_mapping(self):
        path = self._write("tiles: [1, 2]\n")
        with self.assertRaises(ValueError):
            config.load_config(path)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            config.load_config(os.path.join(self.tmp.name, "absent.yml"))


class TestLogging(unittest.TestCase):
    """Test logger setup."""

    def test_invalid_level(self):
        with self.assertRaises(ValueError):
            setup_logging(log_level="LOUD", module_name="visage.test_invalid")

    def test_reconfigure_replaces_handlers(self):
        logger = setup_logging(log_level="WARNING", module_name="visage.test_idem")
        n_handlers = len(logger.handlers)
        again = setup_logging(log_level="DEBUG", module_name="visage.test_idem")
        self.assertIs(logger, again)
        self.assertEqual(len(again.handlers), n_handlers)
        self.assertEqual(again.level, logging.DEBUG)

    def test_file_handler(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "visage.log")
            logger = setup_logging(log_level="INFO", log_file=log_file, module_name="visage.test_file")
            logger.info("written to file")
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            with open(log_file) as f:
                self.assertIn("written to file", f.read())

    def test_module_logger_is_nested(self):
        self.assertEqual(get_module_logger("tiles").name, "visage.tiles")
        self.assertEqual(get_module_logger("visage.geo.raster").name, "visage.geo.raster")


if __name__ == '__main__':
    unittest.main()
