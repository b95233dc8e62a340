#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Neighborhood kernels.

A kernel is the per-window function of a filter. It is built by composition
from a window (any region of offsets) and, for weighted kernels, one value per
window position. Every kernel satisfies the `Kernel` protocol:

- `window`: the region of offsets, iterated in row-major ordering;
- `values`: the weights in window ordering, or None for structuring elements;
- `output_dtype(input_dtype)`: the type of the filtered values;
- `evaluate(neighbors)`: the function applied to an array of shape
  (window size, count), one column per output position;
- `__call__(neighbors)`: the same function applied to a single neighborhood.

Kernels which set `shifts_window` also implement `shortcut(centers)`, which
decides the output of some positions from the center value alone, without
reading their neighborhood.
"""
import copy
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple

import numpy as np

from raster_filters.core.exceptions import ShapeMismatchError


class Kernel(Protocol):
    window: Any
    values: Optional[np.ndarray]
    shifts_window: bool

    def output_dtype(self, input_dtype: np.dtype) -> np.dtype:
        ...

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        ...

    def __call__(self, neighbors: Sequence) -> Any:
        ...


class StructuringElement:
    """
    A window without weights.
    
    Parameters
    ----------
    window : Box, Mask or Grid
        The region of offsets.
    """

    def __init__(self, window):
        self.window = window

    def size(self) -> int:
        return self.window.size()


class WeightedElement(StructuringElement):
    """
    A window with one weight per position.
    
    Parameters
    ----------
    window : Box, Mask or Grid
        The region of offsets.
    values : array-like
        The weights, one per window position.
    natural : bool, optional
        If True (default), `values[i]` applies to the i-th window position in
        row-major ordering; otherwise values are stored in reverse ordering.
    """

    def __init__(self, window, values, natural: bool = True):
        super().__init__(window)
        self.values = np.ravel(np.asarray(values)).copy()
        self.natural = natural
        if self.values.size != self.size():
            raise ShapeMismatchError(window.size(), self.values.size, "kernel value count")

    def weights(self) -> np.ndarray:
        """Get the weights in window ordering."""
        return self.values if self.natural else self.values[::-1]


class _KernelBase:
    """Shared plumbing of the concrete kernels."""

    shifts_window = False

    def __init__(self, element: StructuringElement, dtype: Any = None):
        self.element = element
        self.dtype = None if dtype is None else np.dtype(dtype)

    @property
    def window(self):
        return self.element.window

    @property
    def values(self) -> Optional[np.ndarray]:
        return getattr(self.element, "values", None)

    def output_dtype(self, input_dtype) -> np.dtype:
        return np.dtype(input_dtype) if self.dtype is None else self.dtype

    def with_window(self, window) -> "_KernelBase":
        """Copy the kernel with another window of the same size."""
        if window.size() != self.window.size():
            raise ShapeMismatchError(self.window.size(), window.size(), "window size")
        out = copy.copy(self)
        out.element = copy.copy(self.element)
        out.element.window = window
        return out

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def __call__(self, neighbors: Sequence):
        column = np.asarray(neighbors).reshape(-1, 1)
        return self.evaluate(column)[0]

    def __repr__(self):
        return f"{type(self).__name__}({self.window!r})"


class _WeightedKernel(_KernelBase):

    def output_dtype(self, input_dtype) -> np.dtype:
        if self.dtype is not None:
            return self.dtype
        return np.result_type(self.element.values.dtype, input_dtype)

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return self.element.weights() @ neighbors


class Correlation(_WeightedKernel):
    """
    Correlation kernel: inner product of the weights and the neighbors.
    
    Complex weights are conjugated.
    """

    def __init__(self, window, values, dtype: Any = None):
        values = np.asarray(values)
        if np.iscomplexobj(values):
            values = np.conj(values)
        super().__init__(WeightedElement(window, values, natural=True), dtype)


class Convolution(_WeightedKernel):
    """
    Convolution kernel: inner product of the reversed weights and the neighbors.
    """

    def __init__(self, window, values, dtype: Any = None):
        super().__init__(WeightedElement(window, values, natural=False), dtype)


class MeanFilter(_KernelBase):
    """Mean filtering kernel."""

    def __init__(self, window, dtype: Any = None):
        super().__init__(StructuringElement(window), dtype)

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return neighbors.sum(axis=0) / neighbors.shape[0]


class MedianFilter(_KernelBase):
    """
    Median filtering kernel.
    
    The middle order statistic is selected by partial partitioning. For an
    even neighbor count, the two middle order statistics are averaged.
    """

    def __init__(self, window, dtype: Any = None):
        super().__init__(StructuringElement(window), dtype)

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        size = neighbors.shape[0]
        middle = size // 2
        if size % 2 == 1:
            return np.partition(neighbors, middle, axis=0)[middle]
        selected = np.partition(neighbors, (middle - 1, middle), axis=0)
        return (selected[middle - 1] + selected[middle]) * .5


class MinimumFilter(_KernelBase):
    """Minimum filtering kernel."""

    def __init__(self, window, dtype: Any = None):
        super().__init__(StructuringElement(window), dtype)

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return neighbors.min(axis=0)


class MaximumFilter(_KernelBase):
    """Maximum filtering kernel."""

    def __init__(self, window, dtype: Any = None):
        super().__init__(StructuringElement(window), dtype)

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return neighbors.max(axis=0)


class BinaryErosion(_KernelBase):
    """
    Binary erosion kernel.
    
    This is an optimization of the minimum filter for Booleans: the output is
    false wherever the center is false, and the neighborhood is read only
    around true centers.
    """

    shifts_window = True

    def __init__(self, window, dtype: Any = bool):
        super().__init__(StructuringElement(window), dtype)

    def shortcut(self, centers: np.ndarray) -> Tuple[np.ndarray, bool]:
        return ~centers.astype(bool), False

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return np.all(neighbors.astype(bool), axis=0)


class BinaryDilation(_KernelBase):
    """
    Binary dilation kernel.
    
    This is an optimization of the maximum filter for Booleans: the output is
    true wherever the center is true, and the neighborhood is read only
    around false centers.
    """

    shifts_window = True

    def __init__(self, window, dtype: Any = bool):
        super().__init__(StructuringElement(window), dtype)

    def shortcut(self, centers: np.ndarray) -> Tuple[np.ndarray, bool]:
        return centers.astype(bool), True

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return np.any(neighbors.astype(bool), axis=0)


class GenericFilter(_KernelBase):
    """
    Kernel which applies an arbitrary function to each neighborhood.
    
    Parameters
    ----------
    window : Box, Mask or Grid
        The region of offsets.
    function : Callable
        Function of a 1D array of neighbors, in window ordering, which returns
        a scalar.
    dtype : numpy dtype, optional
        The output type, by default that of the input.
    """

    def __init__(self, window, function: Callable, dtype: Any = None):
        super().__init__(StructuringElement(window), dtype)
        self.function = function

    def evaluate(self, neighbors: np.ndarray) -> np.ndarray:
        return np.array([self.function(column) for column in neighbors.T])
