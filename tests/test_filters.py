#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for kernels, filters and filter builders.

Results are compared with scipy.ndimage where it implements the same operator.
"""

import operator
import unittest
import numpy as np
from scipy import ndimage

from raster_filters.core.config import FILTER_CONFIG
from raster_filters.core.exceptions import ShapeMismatchError
from raster_filters.data.box import Box
from raster_filters.data.grid import Grid
from raster_filters.data.mask import Mask
from raster_filters.data.raster import Raster
from raster_filters.transforms.builders import (
    convolution, convolution_along, correlation, correlation_along, dilation,
    erosion, generic_filter, laplace_operator, maximum_filter, mean_filter,
    median_filter, minimum_filter, prewitt_gradient, scharr_gradient,
    sobel_gradient, sparse_convolution, sparse_correlation
)
from raster_filters.transforms.extrapolation import extrapolation
from raster_filters.transforms.filters import FilterAgg, FilterSeq
from raster_filters.transforms.kernels import Correlation, MedianFilter


class TestKernels(unittest.TestCase):
    """Test kernels on single neighborhoods."""

    def test_median_odd(self):
        kernel = MedianFilter(Box((0, 0), (0, 4)))
        self.assertEqual(kernel([5, 1, 4, 2, 3]), 3)

    def test_median_even(self):
        kernel = MedianFilter(Box((0, 0), (0, 3)))
        self.assertEqual(kernel([4., 1., 3., 2.]), 2.5)

    def test_value_count_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            Correlation(Box((0, 0), (1, 1)), [1, 2, 3])

    def test_complex_correlation_is_conjugated(self):
        raster = Raster.from_array([[1 + 0j]])
        self.assertEqual((correlation(np.array([[2j]])) * raster)[(0, 0)], -2j)
        self.assertEqual((convolution(np.array([[2j]])) * raster)[(0, 0)], 2j)


class TestSimpleFilter(unittest.TestCase):
    """Test single-kernel filters."""

    def setUp(self):
        rng = np.random.default_rng(42)
        self.data = rng.normal(size=(7, 9))
        self.raster = Raster.from_array(self.data)
        self.window = Box.from_center(1, (0, 0))

    def test_mean_of_ones(self):
        ones = extrapolation(Raster((3, 3), fill=1.), 0)
        smooth = mean_filter(self.window)
        self.assertAlmostEqual(smooth.transform(ones, Box((1, 1), (1, 1)))[(0, 0)], 1.)
        self.assertAlmostEqual(smooth.transform(ones, Box((0, 0), (0, 0)))[(0, 0)], 4. / 9.)

    def test_default_domain(self):
        out = mean_filter(self.window) * extrapolation(self.raster, "nearest")
        self.assertEqual(out.shape(), self.raster.shape())
        np.testing.assert_allclose(out.array, ndimage.uniform_filter(self.data, 3, mode="nearest"))

    def test_correlation_matches_scipy(self):
        weights = np.arange(15.).reshape(3, 5) - 7
        out = correlation(weights) * extrapolation(self.raster, 0)
        expected = ndimage.correlate(self.data, weights, mode="constant", cval=0.)
        np.testing.assert_allclose(out.array, expected)

    def test_convolution_matches_scipy(self):
        weights = np.arange(15.).reshape(3, 5) - 7
        out = convolution(weights) * extrapolation(self.raster, "periodic")
        expected = ndimage.convolve(self.data, weights, mode="wrap")
        np.testing.assert_allclose(out.array, expected)

    def test_convolution_is_reversed_correlation(self):
        weights = np.arange(9.).reshape(3, 3) ** 2
        source = extrapolation(self.raster, "nearest")
        out = convolution(weights) * source
        expected = correlation(weights[::-1, ::-1]) * source
        np.testing.assert_allclose(out.array, expected.array)

    def test_explicit_window_and_origin(self):
        weights = [1., 2., 3.]
        source = extrapolation(self.raster, 0)
        by_window = correlation(weights, Box((0, 0), (0, 2))) * source
        by_origin = correlation(np.array([weights]), origin=(0, 0)) * source
        np.testing.assert_allclose(by_window.array, by_origin.array)
        expected = self.data.copy()
        expected[:, :-1] += 2 * self.data[:, 1:]
        expected[:, :-2] += 3 * self.data[:, 2:]
        np.testing.assert_allclose(by_window.array, expected)

    def test_sparse_matches_dense(self):
        weights = np.array([[0., 1., 0.], [2., 0., -3.], [0., 0., 4.]])
        source = extrapolation(self.raster, "nearest")
        np.testing.assert_allclose(
            (sparse_correlation(weights) * source).array, (correlation(weights) * source).array
        )
        np.testing.assert_allclose(
            (sparse_convolution(weights) * source).array, (convolution(weights) * source).array
        )
        self.assertEqual(sparse_convolution(weights).window().size(), 4)

    def test_median_matches_scipy(self):
        out = median_filter(self.window) * extrapolation(self.raster, "nearest")
        np.testing.assert_allclose(out.array, ndimage.median_filter(self.data, size=3, mode="nearest"))

    def test_minimum_maximum_match_scipy(self):
        source = extrapolation(self.raster, "nearest")
        np.testing.assert_allclose(
            (minimum_filter(self.window) * source).array,
            ndimage.minimum_filter(self.data, size=3, mode="nearest")
        )
        np.testing.assert_allclose(
            (maximum_filter(self.window) * source).array,
            ndimage.maximum_filter(self.data, size=3, mode="nearest")
        )

    def test_generic_filter(self):
        source = extrapolation(self.raster, "nearest")
        out = generic_filter(self.window, np.ptp) * source
        expected = (maximum_filter(self.window) * source).array - (minimum_filter(self.window) * source).array
        np.testing.assert_allclose(out.array, expected)

    def test_grid_domain(self):
        source = extrapolation(self.raster, 0)
        smooth = mean_filter(self.window)
        full = smooth * source
        strided = smooth.transform(source, Grid(self.raster.domain(), 2))
        self.assertEqual(strided.shape(), (4, 5))
        np.testing.assert_allclose(strided.array, full.array[::2, ::2])

    def test_mask_domain(self):
        source = extrapolation(self.raster, 0)
        smooth = mean_filter(self.window)
        full = smooth * source
        domain = Mask.ball(1, (3, 3))
        out = smooth.transform(source, domain)
        self.assertEqual(out.shape(), (3, 3))
        for position in domain.box():
            expected = full[position] if domain.contains(position) else 0.
            self.assertAlmostEqual(out[position - domain.front()], expected)

    def test_empty_domain(self):
        out = mean_filter(self.window).transform(extrapolation(self.raster, 0), Box((0, 0), (-1, 4)))
        self.assertEqual(out.size(), 0)

    def test_dimension_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            mean_filter(self.window) * extrapolation(Raster((2, 2, 2)), 0)

    def test_extend_applies_slice_wise(self):
        rng = np.random.default_rng(7)
        cube = rng.normal(size=(4, 5, 3))
        smooth = mean_filter(self.window)
        out = smooth.extend(3) * extrapolation(Raster.from_array(cube), 0)
        for k in range(cube.shape[2]):
            plane = smooth * extrapolation(Raster.from_array(cube[..., k]), 0)
            np.testing.assert_allclose(out.array[..., k], plane.array)

    def test_parallel_batches(self):
        previous = dict(FILTER_CONFIG)
        source = extrapolation(self.raster, "nearest")
        smooth = median_filter(Mask.ball(1, (0, 0)))
        expected = smooth * source
        FILTER_CONFIG.update({"n_jobs": 2, "chunk_size": 50})
        try:
            out = smooth * source
        finally:
            FILTER_CONFIG.clear()
            FILTER_CONFIG.update(previous)
        np.testing.assert_array_equal(out.array, expected.array)


class TestBinaryMorphology(unittest.TestCase):
    """Test erosion and dilation against minimum and maximum filters."""

    def setUp(self):
        rng = np.random.default_rng(0)
        self.raster = Raster.from_array(rng.random((8, 8)) > 0.3)
        self.windows = [Box.from_center(1, (0, 0)), Mask.ball(1, (0, 0), 1)]

    def test_erosion_is_minimum(self):
        source = extrapolation(self.raster, False)
        for window in self.windows:
            out = erosion(window) * source
            self.assertEqual(out.dtype, np.bool_)
            np.testing.assert_array_equal(out.array, (minimum_filter(window) * source).array)

    def test_dilation_is_maximum(self):
        source = extrapolation(self.raster, False)
        for window in self.windows:
            out = dilation(window) * source
            np.testing.assert_array_equal(out.array, (maximum_filter(window) * source).array)

    def test_erosion_matches_scipy(self):
        window = Mask.ball(1, (0, 0), 1)
        out = erosion(window) * extrapolation(self.raster, False)
        expected = ndimage.binary_erosion(self.raster.array, window.flags(), border_value=0)
        np.testing.assert_array_equal(out.array, expected)


class TestComposedFilters(unittest.TestCase):
    """Test filter sequences and aggregates."""

    def setUp(self):
        rng = np.random.default_rng(3)
        self.data = rng.normal(size=(6, 7))
        self.raster = Raster.from_array(self.data)

    def test_separable_equals_full(self):
        values = np.array([1., 2., 3.])
        source = extrapolation(self.raster, "nearest")
        separable = correlation_along(values, [0, 1])
        self.assertIsInstance(separable, FilterSeq)
        self.assertEqual(separable.window(), Box((-1, -1), (1, 1)))
        full = correlation(np.outer(values, values))
        np.testing.assert_allclose((separable * source).array, (full * source).array)

    def test_separable_convolution_on_subdomain(self):
        values = np.array([1., -2., 4., 0., 1.])
        source = extrapolation(self.raster, "periodic")
        domain = Box((1, 2), (4, 5))
        separable = convolution_along(values, [1, 0])
        full = convolution(np.outer(values, values))
        np.testing.assert_allclose(separable.transform(source, domain).array, full.transform(source, domain).array)

    def test_composition_operator(self):
        along_0 = correlation_along([1., 1., 1.], [0])
        along_1 = correlation_along([1., 1., 1.], [1])
        composed = along_0 * along_1
        self.assertIsInstance(composed, FilterSeq)
        source = extrapolation(self.raster, 0)
        np.testing.assert_allclose(
            (composed * source).array, (correlation(np.ones((3, 3))) * source).array
        )

    def test_invalid_sequences(self):
        with self.assertRaises(ValueError):
            FilterSeq()
        with self.assertRaises(ShapeMismatchError):
            FilterSeq(mean_filter(Box((0, 0), (0, 0))), mean_filter(Box((0, 0, 0), (0, 0, 0))))

    def test_aggregate(self):
        smooth = mean_filter(Box.from_center(1, (0, 0)))
        doubled = FilterAgg(operator.add, smooth, smooth)
        source = extrapolation(self.raster, "nearest")
        np.testing.assert_allclose((doubled * source).array, 2 * (smooth * source).array)

    def test_gradients_on_ramp(self):
        i, j = np.indices((6, 7))
        ramp = Raster.from_array(j.astype(float))
        for make, expected in ((prewitt_gradient, 6.), (sobel_gradient, 8.), (scharr_gradient, 32.)):
            gradient = make(1, (0,))
            inner = ramp.domain().erode(gradient.window())
            out = gradient.transform(ramp, inner)
            self.assertEqual(out.shape(), (4, 5))
            np.testing.assert_allclose(out.array, expected)
        backward = prewitt_gradient(1, sign=-1)
        out = backward.transform(ramp, ramp.domain().erode(backward.window()))
        np.testing.assert_allclose(out.array, -2.)

    def test_laplace_on_paraboloid(self):
        i, j = np.indices((6, 7))
        paraboloid = Raster.from_array((i ** 2 + j ** 2).astype(float))
        laplacian = laplace_operator([0, 1])
        self.assertIsInstance(laplacian, FilterAgg)
        inner = paraboloid.domain().erode(laplacian.window())
        np.testing.assert_allclose(laplacian.transform(paraboloid, inner).array, 4.)
        expected = ndimage.laplace(paraboloid.array, mode="nearest")
        out = laplacian * extrapolation(paraboloid, "nearest")
        np.testing.assert_allclose(out.array, expected)


if __name__ == '__main__':
    unittest.main()
