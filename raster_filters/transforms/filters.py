#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Filters: kernels applied at every position of an output domain.

- `SimpleFilter` evaluates one kernel at each output position from the
  neighbors found at `position + offset` for each window offset;
- `FilterSeq` chains filters, each one reading the output of the previous one,
  which implements separable filtering;
- `FilterAgg` applies filters to the same input and reduces their outputs
  position-wise.

Filters read their input through `at_many()`, so that the input can be a
raster or an extrapolator. Reading outside the domain of a plain raster is
undefined: the input must be extrapolated unless the output domain is shrunk
by the window extent (see `Box.erode`).

The output raster stores the value at `domain.front()` at index 0. Boxes and
masks produce a raster shaped like their bounding box (masked-out positions
are left to zero), grids a raster shaped like their nodes.
"""
import functools
from typing import Any, Callable

import numpy as np

from raster_filters.core.config import FILTER_CONFIG
from raster_filters.core.exceptions import ShapeMismatchError
from raster_filters.core.logging_config import get_module_logger
from raster_filters.data.box import Box
from raster_filters.data.mask import Mask
from raster_filters.data.raster import Raster
from raster_filters.data.region import extend, region_shape
from raster_filters.utils.utils import parallel_apply, split_batches, timer

# Initialize logger
logger = get_module_logger(__name__)


def _allocate_output(domain, values: np.ndarray, dtype) -> Raster:
    shape = tuple(max(length, 0) for length in region_shape(domain))
    if isinstance(domain, Mask):
        out = Raster(shape, dtype=dtype)
        local = domain.positions() - domain.front().to_array()
        out.array[tuple(local.T)] = values
        return out
    return Raster.from_array(values.astype(dtype, copy=False).reshape(shape), copy=False)


def _is_filter(obj) -> bool:
    return isinstance(obj, (SimpleFilter, FilterSeq, FilterAgg))


class _ShiftedReader:
    """Intermediate buffer of a filter sequence, whose index 0 lies at `front`."""

    def __init__(self, raster: Raster, domain: Box):
        self._raster = raster
        self._domain = domain
        self._front = domain.front().to_array()

    @property
    def dtype(self):
        return self._raster.dtype

    def domain(self) -> Box:
        return self._domain

    def dimension(self) -> int:
        return self._domain.dimension()

    def at_many(self, positions: np.ndarray) -> np.ndarray:
        return self._raster.at_many(np.asarray(positions) - self._front)


class SimpleFilter:
    """
    A filter made of a single kernel.
    
    Parameters
    ----------
    kernel : Kernel
        The per-window function, e.g. `Correlation` or `MedianFilter`.
    
    Examples
    --------
    >>> smooth = SimpleFilter(MeanFilter(Box.from_center(1, (0, 0))))
    >>> out = smooth * extrapolation(raster, 0)
    """

    def __init__(self, kernel):
        self.kernel = kernel

    def window(self):
        return self.kernel.window

    def dimension(self) -> int:
        return self.kernel.window.dimension()

    def extend(self, dimension: int, padding=0) -> "SimpleFilter":
        """Get the same filter with a window of higher dimension."""
        return SimpleFilter(self.kernel.with_window(extend(self.kernel.window, dimension, padding)))

    def output_dtype(self, input_dtype) -> np.dtype:
        return self.kernel.output_dtype(input_dtype)

    def _gather(self, source, offsets: np.ndarray, positions: np.ndarray) -> np.ndarray:
        neighbors = positions[np.newaxis, :, :] + offsets[:, np.newaxis, :]
        values = source.at_many(neighbors.reshape(-1, positions.shape[1]))
        return values.reshape(len(offsets), len(positions))

    def _evaluate(self, positions: np.ndarray, source, offsets: np.ndarray, dtype) -> np.ndarray:
        kernel = self.kernel
        if not kernel.shifts_window:
            return np.asarray(kernel.evaluate(self._gather(source, offsets, positions))).astype(dtype, copy=False)
        decided, value = kernel.shortcut(source.at_many(positions))
        out = np.empty(len(positions), dtype=dtype)
        out[decided] = value
        pending = ~decided
        if np.any(pending):
            out[pending] = kernel.evaluate(self._gather(source, offsets, positions[pending]))
        return out

    @timer
    def transform(self, source, domain=None, dtype: Any = None) -> Raster:
        """
        Apply the filter.
        
        Parameters
        ----------
        source : Raster or Extrapolator
            The input, read at `position + offset` for each output position
            and window offset.
        domain : Box, Mask or Grid, optional
            The output positions, by default the domain of the input.
        dtype : numpy dtype, optional
            The output type, by default given by the kernel.
            
        Returns
        -------
        Raster
            The filtered values.
        """
        if domain is None:
            domain = source.domain()
        if domain.dimension() != self.dimension():
            raise ShapeMismatchError(domain.dimension(), self.dimension(), "window dimension")
        dtype = self.output_dtype(source.dtype) if dtype is None else np.dtype(dtype)
        offsets = self.kernel.window.positions()
        positions = domain.positions()
        chunk_size = max(FILTER_CONFIG.get("chunk_size", 1 << 20) // max(len(offsets), 1), 1)
        batches = split_batches(positions, chunk_size)
        logger.debug(f"Applying {self.kernel!r} at {len(positions)} positions in {len(batches)} batches")
        results = parallel_apply(self._evaluate, batches, source=source, offsets=offsets, dtype=dtype)
        values = np.concatenate(results) if results else np.empty(0, dtype=dtype)
        return _allocate_output(domain, values, dtype)

    __call__ = transform

    def __mul__(self, other):
        if _is_filter(other):
            return FilterSeq(self, other)
        return self.transform(other)

    def __repr__(self):
        return f"SimpleFilter({self.kernel!r})"


class FilterSeq:
    """
    A sequence of filters applied one after the other.
    
    Typically used for separable filters, where an ND kernel is the
    composition of 1D kernels along distinct axes. The first filter is
    applied to the input over the output domain grown by the windows of the
    following filters, and so on, such that the result equals that of the
    composed kernel applied to the same input.
    
    Parameters
    ----------
    *filters : SimpleFilter, FilterSeq or FilterAgg
        The filters, in order of application. Nested sequences are flattened.
    """

    def __init__(self, *filters):
        self.filters = []
        for f in filters:
            self.filters.extend(f.filters if isinstance(f, FilterSeq) else [f])
        if not self.filters:
            raise ValueError("A filter sequence requires at least one filter")
        dimensions = {f.dimension() for f in self.filters}
        if len(dimensions) != 1:
            raise ShapeMismatchError(1, sorted(dimensions), "number of distinct window dimensions")

    def dimension(self) -> int:
        return self.filters[0].dimension()

    def window(self) -> Box:
        """Get the bounding box of the composed window."""
        out = self.filters[0].window().box()
        for f in self.filters[1:]:
            out = out.dilate(f.window().box())
        return out

    def output_dtype(self, input_dtype) -> np.dtype:
        for f in self.filters:
            input_dtype = f.output_dtype(input_dtype)
        return input_dtype

    def transform(self, source, domain=None, dtype: Any = None) -> Raster:
        """
        Apply the filters in sequence.
        
        Each intermediate buffer is fully computed before the next filter
        starts. Parameters are those of `SimpleFilter.transform`; `dtype`
        applies to the last filter.
        """
        if domain is None:
            domain = source.domain()
        reader = source
        for i, f in enumerate(self.filters[:-1]):
            stage = domain.box()
            for g in self.filters[i + 1:]:
                stage = stage.dilate(g.window().box())
            logger.debug(f"Filter sequence stage {i} over {stage!r}")
            reader = _ShiftedReader(f.transform(reader, stage), stage)
        return self.filters[-1].transform(reader, domain, dtype)

    __call__ = transform

    def __mul__(self, other):
        if _is_filter(other):
            return FilterSeq(self, other)
        return self.transform(other)

    def __repr__(self):
        return f"FilterSeq({', '.join(repr(f) for f in self.filters)})"


class FilterAgg:
    """
    Filters applied in parallel to the same input, whose outputs are reduced.
    
    Parameters
    ----------
    reducer : Callable
        Binary function of two arrays, e.g. `operator.add`.
    *filters : SimpleFilter, FilterSeq or FilterAgg
        The filters.
    
    Examples
    --------
    >>> laplacian = FilterAgg(operator.add, d2x, d2y)
    """

    def __init__(self, reducer: Callable, *filters):
        if not filters:
            raise ValueError("A filter aggregate requires at least one filter")
        self.reducer = reducer
        self.filters = list(filters)
        dimensions = {f.dimension() for f in self.filters}
        if len(dimensions) != 1:
            raise ShapeMismatchError(1, sorted(dimensions), "number of distinct window dimensions")

    def dimension(self) -> int:
        return self.filters[0].dimension()

    def window(self) -> Box:
        """Get the bounding box of the union of the windows."""
        out = self.filters[0].window().box()
        for f in self.filters[1:]:
            out = out.union_box(f.window().box())
        return out

    def output_dtype(self, input_dtype) -> np.dtype:
        return np.result_type(*[f.output_dtype(input_dtype) for f in self.filters])

    def transform(self, source, domain=None, dtype: Any = None) -> Raster:
        """
        Apply each filter to the input and reduce the outputs.
        
        Parameters are those of `SimpleFilter.transform`.
        """
        if domain is None:
            domain = source.domain()
        outputs = [f.transform(source, domain).array for f in self.filters]
        reduced = functools.reduce(self.reducer, outputs)
        if dtype is not None:
            reduced = reduced.astype(dtype)
        return Raster.from_array(reduced, copy=False)

    __call__ = transform

    def __mul__(self, other):
        if _is_filter(other):
            return FilterSeq(self, other)
        return self.transform(other)

    def __repr__(self):
        return f"FilterAgg({getattr(self.reducer, '__name__', self.reducer)!r}, {', '.join(repr(f) for f in self.filters)})"
