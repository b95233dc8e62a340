#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for exceptions, configuration, logging and utilities.
"""

import logging
import os
import tempfile
import unittest
import numpy as np

from raster_filters.core import config
from raster_filters.core.exceptions import (
    ConfigError, ExpiredViewError, RasterFiltersError, ShapeMismatchError, SingularMatrixError
)
from raster_filters.core.logging_config import (
    ROOT_LOGGER_NAME, get_module_logger, parse_level, reconfigure_logging, setup_logging
)
from raster_filters.utils.utils import parallel_apply, split_batches, timer


class TestExceptions(unittest.TestCase):
    """Test the package errors."""

    def test_prefix(self):
        error = RasterFiltersError("something failed")
        self.assertEqual(str(error), "raster_filters: something failed")
        self.assertEqual(error.message, "something failed")

    def test_builtin_bases(self):
        self.assertTrue(issubclass(ShapeMismatchError, ValueError))
        self.assertTrue(issubclass(SingularMatrixError, ValueError))
        self.assertTrue(issubclass(ExpiredViewError, RuntimeError))
        self.assertTrue(issubclass(ConfigError, KeyError))

    def test_shape_mismatch_message(self):
        error = ShapeMismatchError((2, 3), (3, 2))
        self.assertEqual(str(error), "raster_filters: shape mismatch: expected (2, 3), got (3, 2)")

    def test_config_error_is_not_quoted(self):
        self.assertEqual(str(ConfigError("bad")), "raster_filters: bad")


class TestConfig(unittest.TestCase):
    """Test configuration overrides."""

    def setUp(self):
        self.saved = {name: dict(section) for name, section in config.CONFIG_SECTIONS.items()}

    def tearDown(self):
        for name, section in config.CONFIG_SECTIONS.items():
            section.clear()
            section.update(self.saved[name])
        reconfigure_logging()

    def test_load_yaml(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "config.yaml")
            with open(path, "w") as f:
                f.write("filter:\n  chunk_size: 128\nresampling:\n  default_interpolation: cubic\n")
            config.load_config(path)
        self.assertEqual(config.FILTER_CONFIG["chunk_size"], 128)
        self.assertEqual(config.FILTER_CONFIG["n_jobs"], self.saved["filter"]["n_jobs"])
        self.assertEqual(config.RESAMPLING_CONFIG["default_interpolation"], "cubic")

    def test_empty_yaml(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "empty.yaml")
            open(path, "w").close()
            sections = config.load_config(path)
        self.assertEqual(sections["filter"], self.saved["filter"])

    def test_unknown_section(self):
        with self.assertRaises(ConfigError):
            config.update_config({"rendering": {"dpi": 300}})

    def test_section_must_be_mapping(self):
        with self.assertRaises(ConfigError):
            config.update_config({"filter": 3})

    def test_invalid_overrides_update_nothing(self):
        with self.assertRaises(ConfigError):
            config.update_config({"filter": {"chunk_size": 5}, "rendering": {}})
        self.assertEqual(config.FILTER_CONFIG["chunk_size"], self.saved["filter"]["chunk_size"])

    def test_logging_section_reconfigures_package_logger(self):
        config.update_config({"logging": {"level": "DEBUG"}})
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        self.assertEqual(package_logger.level, logging.DEBUG)
        self.assertEqual(len(package_logger.handlers), 1)


class TestLogging(unittest.TestCase):
    """Test logger configuration."""

    def test_module_logger_is_child_of_package_logger(self):
        self.assertEqual(get_module_logger("raster_filters.data.box").name, "raster_filters.data.box")
        self.assertEqual(get_module_logger("scripts").name, "raster_filters.scripts")

    def test_setup_is_idempotent(self):
        logger = setup_logging(module_name="raster_filters.tests.idempotent")
        self.assertEqual(len(logger.handlers), 1)
        self.assertIs(setup_logging(module_name="raster_filters.tests.idempotent"), logger)
        self.assertEqual(len(logger.handlers), 1)

    def test_invalid_level(self):
        with self.assertRaises(ValueError):
            setup_logging(log_level="LOUD", module_name="raster_filters.tests.invalid")

    def test_parse_level(self):
        self.assertEqual(parse_level("debug"), logging.DEBUG)
        self.assertEqual(parse_level(logging.ERROR), logging.ERROR)

    def test_forced_setup_writes_log_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "logs", "filters.log")
            logger = setup_logging("INFO", path, "raster_filters.tests.file", force=True)
            logger.info("written")
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            with open(path) as f:
                self.assertIn("written", f.read())


class TestUtils(unittest.TestCase):
    """Test batching and parallel evaluation."""

    def test_split_batches(self):
        positions = np.arange(20).reshape(10, 2)
        batches = split_batches(positions, 4)
        self.assertEqual([len(b) for b in batches], [4, 4, 2])
        np.testing.assert_array_equal(np.concatenate(batches), positions)
        self.assertEqual(split_batches(positions[:0], 4), [])

    def test_parallel_apply_keeps_order(self):
        items = list(range(10))
        sequential = parallel_apply(lambda x, offset: x + offset, items, n_jobs=1, offset=3)
        threaded = parallel_apply(lambda x, offset: x + offset, items, n_jobs=2, prefer="threads", offset=3)
        self.assertEqual(sequential, [x + 3 for x in items])
        self.assertEqual(threaded, sequential)

    def test_timer_preserves_function(self):
        @timer
        def double(x):
            return 2 * x
        self.assertEqual(double.__name__, "double")
        self.assertEqual(double(4), 8)


if __name__ == '__main__':
    unittest.main()
