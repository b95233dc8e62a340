#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Factories of classical filters.

Weighted kernels can be made from a flat sequence of values and a window, from
a raster of values and the position of its origin, or from a raster of values
centered automatically (even lengths are rounded down). 1D kernels can be
replicated along several axes to build separable operators such as the
Prewitt, Sobel and Scharr gradients, or aggregated to build the Laplace
operator.
"""
import operator
from typing import Any, Callable, Optional, Sequence, Union

import numpy as np

from raster_filters.core.logging_config import get_module_logger
from raster_filters.data.box import Box
from raster_filters.data.mask import Mask
from raster_filters.data.position import Position
from raster_filters.data.raster import Raster
from raster_filters.transforms.filters import FilterAgg, FilterSeq, SimpleFilter
from raster_filters.transforms.kernels import (
    BinaryDilation, BinaryErosion, Convolution, Correlation, GenericFilter,
    MaximumFilter, MeanFilter, MedianFilter, MinimumFilter
)

# Initialize logger
logger = get_module_logger(__name__)

ArrayLike = Union[Raster, np.ndarray, Sequence]


def _kernel_window(values: ArrayLike, window: Optional[Box], origin: Optional[Sequence[int]]):
    """Resolve the flat values and window of a weighted kernel."""
    if window is not None:
        flat = values.array if isinstance(values, Raster) else np.asarray(values)
        return flat.ravel(), window
    array = values.array if isinstance(values, Raster) else np.asarray(values)
    domain = Box.from_shape(array.shape)
    if origin is None:
        origin = (domain.shape() - 1) // 2
    return array.ravel(), domain - Position(origin)


def correlation(
    values: ArrayLike,
    window: Optional[Box] = None,
    origin: Optional[Sequence[int]] = None,
    dtype: Any = None
) -> SimpleFilter:
    """
    Make a correlation filter.
    
    Parameters
    ----------
    values : Raster, array-like
        The weights. If `window` is given, they are read in row-major
        ordering; otherwise their shape defines the window.
    window : Box, optional
        The window, i.e. the box of offsets.
    origin : sequence of int, optional
        The position, in the weights array, of the zero offset. By default
        the center, rounded down for even lengths.
    dtype : numpy dtype, optional
        The output type.
        
    Returns
    -------
    SimpleFilter
        The correlation filter.
    """
    flat, window = _kernel_window(values, window, origin)
    return SimpleFilter(Correlation(window, flat, dtype))


def convolution(
    values: ArrayLike,
    window: Optional[Box] = None,
    origin: Optional[Sequence[int]] = None,
    dtype: Any = None
) -> SimpleFilter:
    """
    Make a convolution filter.
    
    Parameters are those of `correlation`.
    """
    flat, window = _kernel_window(values, window, origin)
    return SimpleFilter(Convolution(window, flat, dtype))


def sparse_correlation(values: ArrayLike, dtype: Any = None) -> SimpleFilter:
    """
    Make a centered correlation filter which skips zero weights.
    
    The window is a mask flagged where the weights are nonzero.
    """
    array = values.array if isinstance(values, Raster) else np.asarray(values)
    box = Box.from_shape(array.shape) - (Position(array.shape) - 1) // 2
    mask = Mask(box, array != 0)
    return SimpleFilter(Correlation(mask, array[array != 0], dtype))


def sparse_convolution(values: ArrayLike, dtype: Any = None) -> SimpleFilter:
    """
    Make a centered convolution filter which skips zero weights.
    
    The result equals that of `convolution(values)`.
    """
    array = values.array if isinstance(values, Raster) else np.asarray(values)
    box = Box.from_shape(array.shape) - (Position(array.shape) - 1) // 2
    reversed_values = array.ravel()[::-1]
    flags = reversed_values != 0
    mask = Mask(box, flags)
    # Convolution reverses its values again, pairing each flagged offset with its weight
    return SimpleFilter(Convolution(mask, reversed_values[flags][::-1], dtype))


def _line_window(length: int, axis: int, dimension: int) -> Box:
    radius = length // 2
    front = [0] * dimension
    back = [0] * dimension
    front[axis] = -radius
    back[axis] = length - radius - 1
    return Box(front, back)


def _along(
    make: Callable,
    values: Sequence,
    axes: Sequence[int],
    dimension: Optional[int],
    dtype: Any
):
    axes = list(axes)
    if not axes:
        raise ValueError("At least one axis is required")
    if dimension is None:
        dimension = max(axes) + 1
    filters = [make(values, _line_window(len(values), axis, dimension), dtype=dtype) for axis in axes]
    return filters[0] if len(filters) == 1 else FilterSeq(*filters)


def correlation_along(
    values: Sequence,
    axes: Sequence[int],
    dimension: Optional[int] = None,
    dtype: Any = None
) -> Union[SimpleFilter, FilterSeq]:
    """
    Create a filter made of identical 1D correlation kernels along given axes.
    
    Axes need not be different, e.g. to define some iterative kernel.
    
    Parameters
    ----------
    values : sequence
        The 1D weights, centered (rounded down for even lengths).
    axes : sequence of int
        The axes, in order of application.
    dimension : int, optional
        The window dimension, by default `max(axes) + 1`.
    dtype : numpy dtype, optional
        The output type.
    """
    return _along(correlation, values, axes, dimension, dtype)


def convolution_along(
    values: Sequence,
    axes: Sequence[int],
    dimension: Optional[int] = None,
    dtype: Any = None
) -> Union[SimpleFilter, FilterSeq]:
    """
    Create a filter made of identical 1D convolution kernels along given axes.
    
    Parameters are those of `correlation_along`.
    """
    return _along(convolution, values, axes, dimension, dtype)


def _gradient(averaging_values, derivation_axis, averaging_axes, sign, dimension, dtype):
    axes = [derivation_axis, *averaging_axes]
    if dimension is None:
        dimension = max(axes) + 1
    derivation = convolution_along([sign, 0, -sign], [derivation_axis], dimension, dtype)
    if not averaging_axes:
        return derivation
    averaging = convolution_along(averaging_values, averaging_axes, dimension, dtype)
    return derivation * averaging


def prewitt_gradient(
    derivation_axis: int,
    averaging_axes: Sequence[int] = (),
    sign: float = 1,
    dimension: Optional[int] = None,
    dtype: Any = None
) -> Union[SimpleFilter, FilterSeq]:
    """
    Make a Prewitt gradient filter along given axes.
    
    The convolution kernel along the averaging axes is `{1, 1, 1}` and that
    along the derivation axis is `{sign, 0, -sign}`. For differentiation in the
    increasing-index direction, keep `sign = 1`; for the opposite direction,
    set `sign = -1`.
    
    Parameters
    ----------
    derivation_axis : int
        The derivation axis.
    averaging_axes : sequence of int, optional
        The averaging axes.
    sign : float, optional
        The differentiation sign, by default 1.
    dimension : int, optional
        The window dimension, by default one more than the largest axis.
    dtype : numpy dtype, optional
        The output type.
        
    Examples
    --------
    Derivative along axis 1 backward, averaged along axes 0 and 2:
    
    >>> kernel = prewitt_gradient(1, (0, 2), sign=-1)
    >>> dy = kernel * extrapolation(raster, 'nearest')
    """
    return _gradient([1, 1, 1], derivation_axis, averaging_axes, sign, dimension, dtype)


def sobel_gradient(
    derivation_axis: int,
    averaging_axes: Sequence[int] = (),
    sign: float = 1,
    dimension: Optional[int] = None,
    dtype: Any = None
) -> Union[SimpleFilter, FilterSeq]:
    """
    Make a Sobel gradient filter along given axes.
    
    The averaging kernel is `{1, 2, 1}`; see `prewitt_gradient`.
    """
    return _gradient([1, 2, 1], derivation_axis, averaging_axes, sign, dimension, dtype)


def scharr_gradient(
    derivation_axis: int,
    averaging_axes: Sequence[int] = (),
    sign: float = 1,
    dimension: Optional[int] = None,
    dtype: Any = None
) -> Union[SimpleFilter, FilterSeq]:
    """
    Make a Scharr gradient filter along given axes.
    
    The averaging kernel is `{3, 10, 3}`; see `prewitt_gradient`.
    """
    return _gradient([3, 10, 3], derivation_axis, averaging_axes, sign, dimension, dtype)


def laplace_operator(
    axes: Sequence[int],
    sign: float = 1,
    dimension: Optional[int] = None,
    dtype: Any = None
) -> FilterAgg:
    """
    Make a Laplace operator along given axes.
    
    The operator is the sum of the 1D convolutions by `{sign, -2 * sign, sign}`
    along each axis.
    """
    axes = list(axes)
    if dimension is None:
        dimension = max(axes) + 1
    kernels = [convolution_along([sign, -2 * sign, sign], [axis], dimension, dtype) for axis in axes]
    return FilterAgg(operator.add, *kernels)


def mean_filter(window, dtype: Any = None) -> SimpleFilter:
    """Make a mean filter with a given structuring element."""
    return SimpleFilter(MeanFilter(window, dtype))


def median_filter(window, dtype: Any = None) -> SimpleFilter:
    """Make a median filter with a given structuring element."""
    return SimpleFilter(MedianFilter(window, dtype))


def minimum_filter(window, dtype: Any = None) -> SimpleFilter:
    """Make a minimum filter with a given structuring element."""
    return SimpleFilter(MinimumFilter(window, dtype))


def maximum_filter(window, dtype: Any = None) -> SimpleFilter:
    """Make a maximum filter with a given structuring element."""
    return SimpleFilter(MaximumFilter(window, dtype))


def erosion(window, dtype: Any = bool) -> SimpleFilter:
    """Make a binary erosion filter with a given structuring element."""
    return SimpleFilter(BinaryErosion(window, dtype))


def dilation(window, dtype: Any = bool) -> SimpleFilter:
    """Make a binary dilation filter with a given structuring element."""
    return SimpleFilter(BinaryDilation(window, dtype))


def generic_filter(window, function: Callable, dtype: Any = None) -> SimpleFilter:
    """Make a filter which applies a function to each neighborhood."""
    return SimpleFilter(GenericFilter(window, function, dtype))
