#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for boundary extrapolation and interpolation.
"""

import unittest
import numpy as np

from raster_filters.core.config import RESAMPLING_CONFIG
from raster_filters.core.exceptions import ConfigError
from raster_filters.data.raster import Raster
from raster_filters.transforms.extrapolation import (
    Constant, Cubic, Linear, Nearest, Periodic, extrapolation, interpolation, make_policy
)


class TestExtrapolation(unittest.TestCase):
    """Test the integer boundary policies."""

    def setUp(self):
        self.raster = Raster.from_array([[1, 2, 3], [4, 5, 6]])

    def test_inside_is_unchanged(self):
        for policy in (Constant(-1), Nearest(), Periodic()):
            extrapolator = extrapolation(self.raster, policy)
            for position in self.raster.domain():
                self.assertEqual(extrapolator[position], self.raster[position])

    def test_constant(self):
        extrapolator = extrapolation(self.raster, -1)
        self.assertIsInstance(extrapolator.policy, Constant)
        self.assertEqual(extrapolator[(-1, 0)], -1)
        self.assertEqual(extrapolator[(0, 3)], -1)
        np.testing.assert_array_equal(extrapolator.at_many([[-1, 0], [1, 1], [2, 2]]), [-1, 5, -1])

    def test_nearest(self):
        extrapolator = extrapolation(self.raster, Nearest())
        self.assertEqual(extrapolator[(-5, 10)], 3)
        self.assertEqual(extrapolator[(7, -2)], 4)
        np.testing.assert_array_equal(extrapolator.at_many([[-5, 10], [7, -2]]), [3, 4])

    def test_periodic(self):
        extrapolator = extrapolation(self.raster, "periodic")
        self.assertEqual(extrapolator[(-1, -1)], 6)
        self.assertEqual(extrapolator[(2, 3)], 1)
        self.assertEqual(extrapolator[(-3, 4)], 5)
        np.testing.assert_array_equal(extrapolator.at_many([[-1, -1], [2, 3], [-3, 4]]), [6, 1, 5])

    def test_constant_from_config(self):
        previous = RESAMPLING_CONFIG["constant_value"]
        RESAMPLING_CONFIG["constant_value"] = 9
        try:
            extrapolator = extrapolation(self.raster, "constant")
        finally:
            RESAMPLING_CONFIG["constant_value"] = previous
        self.assertEqual(extrapolator[(5, 5)], 9)

    def test_make_policy(self):
        self.assertIsInstance(make_policy("Periodic"), Periodic)
        self.assertEqual(make_policy("constant", value=3).value, 3)
        with self.assertRaises(ConfigError):
            make_policy("mirror")


class TestInterpolation(unittest.TestCase):
    """Test the real-valued sampling policies."""

    def setUp(self):
        i, j = np.indices((6, 6))
        self.raster = Raster.from_array(2. * i + 3. * j)

    def test_nearest(self):
        interpolator = interpolation(self.raster, Nearest())
        self.assertEqual(interpolator((0.5, 1.4)), self.raster[(1, 1)])
        self.assertEqual(interpolator((2.49, 3.5)), self.raster[(2, 4)])

    def test_linear_is_exact_on_linear_data(self):
        interpolator = interpolation(extrapolation(self.raster, "nearest"), Linear())
        self.assertAlmostEqual(interpolator((0.5, 1.25)), 4.75)
        self.assertAlmostEqual(interpolator((3, 4)), 18.)
        values = interpolator.sample(np.array([[1.5, 2.5], [4.1, 0.2]]))
        np.testing.assert_allclose(values, [10.5, 8.8])

    def test_cubic_is_exact_on_linear_data(self):
        interpolator = interpolation(self.raster, Cubic())
        self.assertAlmostEqual(interpolator((2.3, 2.6)), 12.4)
        self.assertAlmostEqual(interpolator((2, 3)), 13.)

    def test_cubic_catmull_rom_coefficients(self):
        cubes = Raster.from_array([0., 1., 8., 27.])
        interpolator = interpolation(cubes, Cubic())
        self.assertAlmostEqual(interpolator((1.5,)), 3.375)
        # Differs from both x ** 3 = 1.953125 and linear 2.75
        self.assertAlmostEqual(interpolator((1.25,)), 2.046875)

    def test_cubic_is_separable(self):
        cubes = np.array([0., 1., 8., 27.])
        squares = np.array([0., 1., 4., 9.])
        raster = Raster.from_array(np.outer(cubes, squares))
        interpolator = interpolation(raster, Cubic())
        # Catmull-Rom reproduces quadratics along the last axis
        self.assertAlmostEqual(interpolator((1.25, 1.5)), 2.046875 * 2.25)
        self.assertAlmostEqual(interpolator((1.5, 1.25)), 3.375 * 1.5625)

    def test_linear_mixes_neighbors(self):
        raster = Raster.from_array([[0., 1.], [2., 3.]])
        interpolator = interpolation(raster, "linear")
        self.assertAlmostEqual(interpolator((0.5, 0.5)), 1.5)
        self.assertAlmostEqual(interpolator((0.25, 0.)), 0.5)


if __name__ == '__main__':
    unittest.main()
