#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dense ND rasters and borrowed patches.

A `Raster` owns a contiguous, row-major numpy buffer addressed by integer
positions. Its domain is the box from the origin to `shape - 1`.

A `Patch` is a non-owning view of a raster over a region. It refers to its
owner weakly, and is invalidated when the owner's buffer is reallocated, when
the owner is destroyed, or when the `Raster.borrow` scope which created it
ends. Using an invalidated patch raises `ExpiredViewError`.
"""
import contextlib
import weakref
from typing import Any, Iterator, Sequence, Union

import numpy as np

from raster_filters.core.config import FILTER_CONFIG
from raster_filters.core.exceptions import ExpiredViewError, ShapeMismatchError
from raster_filters.data.box import Box
from raster_filters.data.grid import Grid
from raster_filters.data.mask import Mask
from raster_filters.data.position import Position
from raster_filters.data.region import region_shape


class Raster:
    """
    A dense ND array addressed by positions.
    
    Parameters
    ----------
    shape : sequence of int
        The length along each axis.
    dtype : numpy dtype, optional
        The value type. If None, uses FILTER_CONFIG["default_dtype"].
    fill : scalar, optional
        The initial value, by default 0.
    """

    def __init__(self, shape: Sequence[int], dtype: Any = None, fill: Any = 0):
        if dtype is None:
            dtype = FILTER_CONFIG.get("default_dtype", "float64")
        self._array = np.full(tuple(Position(shape)), fill, dtype=dtype)
        self._generation = 0

    @classmethod
    def from_array(cls, array: Union[np.ndarray, Sequence], dtype: Any = None, copy: bool = True) -> "Raster":
        """
        Create a raster from an array-like.
        
        With `copy=False`, the raster adopts the given buffer if it is already
        C-contiguous and of the requested type.
        """
        array = np.array(array, dtype=dtype, copy=True) if copy else np.ascontiguousarray(array, dtype=dtype)
        out = cls.__new__(cls)
        out._array = np.ascontiguousarray(array)
        out._generation = 0
        return out

    # Properties

    @property
    def array(self) -> np.ndarray:
        """The owned numpy buffer, shaped like the raster."""
        return self._array

    @property
    def dtype(self) -> np.dtype:
        return self._array.dtype

    def shape(self) -> Position:
        return Position(self._array.shape)

    def dimension(self) -> int:
        return self._array.ndim

    def size(self) -> int:
        return self._array.size

    def domain(self) -> Box:
        return Box.from_shape(self._array.shape)

    def data(self) -> np.ndarray:
        """Get the flat, row-major buffer, which shares memory with the raster."""
        return self._array.reshape(-1)

    def strides(self) -> Position:
        """Get the row-major strides, in number of elements."""
        return Position(s // self._array.itemsize for s in self._array.strides)

    def offset(self, position: Sequence[int]) -> int:
        """Get the index of a position in the flat buffer."""
        return sum(p * s for p, s in zip(position, self.strides()))

    def generation(self) -> int:
        """Get the buffer generation, incremented at each reallocation."""
        return self._generation

    # Elements

    def contains(self, position: Sequence[int]) -> bool:
        return all(0 <= p < s for p, s in zip(position, self._array.shape))

    def __getitem__(self, position: Sequence[int]):
        return self._array[tuple(position)]

    def __setitem__(self, position: Sequence[int], value):
        self._array[tuple(position)] = value

    def at_many(self, positions: np.ndarray) -> np.ndarray:
        """
        Read the values at an array of positions of shape (count, dimension).
        
        Positions are not checked: reading outside the domain is undefined.
        """
        return self._array[tuple(np.asarray(positions).T)]

    def __iter__(self) -> Iterator:
        return iter(self._array.ravel())

    def __len__(self) -> int:
        return self._array.size

    # Modifiers

    def fill(self, value) -> "Raster":
        self._array.fill(value)
        return self

    def range(self, start=0, step=1) -> "Raster":
        """Fill the raster with evenly spaced values in row-major ordering."""
        self._array[...] = (start + step * np.arange(self._array.size)).reshape(self._array.shape)
        return self

    def resize(self, shape: Sequence[int]) -> "Raster":
        """Reallocate the buffer with a new shape, invalidating patches."""
        self._array = np.zeros(tuple(Position(shape)), dtype=self._array.dtype)
        self._generation += 1
        return self

    def copy(self) -> "Raster":
        return Raster.from_array(self._array)

    def astype(self, dtype) -> "Raster":
        return Raster.from_array(self._array, dtype=dtype)

    # Views

    def patch(self, region) -> "Patch":
        """
        Get a view of the raster over a region.
        
        The patch does not own the data and must not outlive the raster.
        """
        return Patch(self, region)

    @contextlib.contextmanager
    def borrow(self, region):
        """
        Borrow a patch for the duration of a `with` block.
        
        Examples
        --------
        >>> with raster.borrow(Box((1, 1), (2, 2))) as patch:
        ...     patch.fill(0)
        """
        patch = Patch(self, region)
        try:
            yield patch
        finally:
            patch.release()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self._array.shape == other._array.shape and np.array_equal(self._array, other._array)

    __hash__ = None

    def __repr__(self):
        return f"Raster(shape={tuple(self._array.shape)}, dtype={self._array.dtype})"


class Patch:
    """
    A non-owning view of a raster over a region.
    
    Positions are expressed in the coordinates of the owner raster.
    
    Parameters
    ----------
    raster : Raster
        The owner raster.
    region : Box, Grid or Mask
        The viewed region, which must lie inside the raster domain.
    """

    def __init__(self, raster: Raster, region):
        self._owner = weakref.ref(raster)
        self._generation = raster.generation()
        self._region = region
        self._released = False

    # Validity

    def is_valid(self) -> bool:
        raster = self._owner()
        return raster is not None and not self._released and raster.generation() == self._generation

    def release(self):
        """End the borrow: the patch can no longer be used."""
        self._released = True

    def owner(self) -> Raster:
        raster = self._owner()
        if raster is None:
            raise ExpiredViewError("The owner raster was destroyed")
        if self._released:
            raise ExpiredViewError("The patch was used outside of its borrow scope")
        if raster.generation() != self._generation:
            raise ExpiredViewError("The owner raster was reallocated")
        return raster

    # Properties

    def region(self):
        return self._region

    def domain(self):
        return self._region

    def shape(self) -> Position:
        return region_shape(self._region)

    def dimension(self) -> int:
        return self._region.dimension()

    def size(self) -> int:
        return self._region.size()

    def _slices(self):
        box = self._region.box()
        step = self._region.step() if isinstance(self._region, Grid) else Position.one(box.dimension())
        return tuple(slice(f, b + 1, s) for f, b, s in zip(box.front(), box.back(), step))

    def values(self) -> np.ndarray:
        """
        Get the viewed values.
        
        For boxes and grids, this is a numpy view shaped like the region; for
        masks, a copy of the flagged values in row-major ordering.
        """
        array = self.owner().array
        if isinstance(self._region, Mask):
            return array[tuple(self._region.positions().T)]
        return array[self._slices()]

    # Elements

    def __getitem__(self, position: Sequence[int]):
        return self.owner()[position]

    def __setitem__(self, position: Sequence[int], value):
        self.owner()[position] = value

    def at_many(self, positions: np.ndarray) -> np.ndarray:
        return self.owner().at_many(positions)

    def __iter__(self) -> Iterator:
        return iter(np.ravel(self.values()))

    def __len__(self) -> int:
        return self.size()

    # Modifiers

    def fill(self, value) -> "Patch":
        array = self.owner().array
        if isinstance(self._region, Mask):
            array[tuple(self._region.positions().T)] = value
        else:
            array[self._slices()] = value
        return self

    def assign(self, values) -> "Patch":
        """Write values, given in the patch ordering, into the owner raster."""
        array = self.owner().array
        values = np.asarray(values)
        if isinstance(self._region, Mask):
            if values.size != self._region.size():
                raise ShapeMismatchError(self._region.size(), values.size, "value count")
            array[tuple(self._region.positions().T)] = values.ravel()
        else:
            array[self._slices()] = values.reshape(tuple(self.shape()))
        return self

    def shift(self, vector: Sequence[int]) -> "Patch":
        """Translate the viewed region in place."""
        self._region = self._region.translate(vector)
        return self

    def copy(self) -> Raster:
        """Copy the viewed values into a new raster."""
        return Raster.from_array(self.values())

    def __repr__(self):
        state = "valid" if self.is_valid() else "expired"
        return f"Patch({self._region!r}, {state})"
