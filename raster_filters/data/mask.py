#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Masked ND bounding boxes.

A `Mask` is a `Box` with a boolean flag associated to each position. Only the
flagged positions belong to the region, which makes masks suitable for
non-rectangular structuring elements such as balls or sparse kernels.
"""
import numbers
from typing import Iterator, Sequence, Union

import numpy as np

from raster_filters.core.exceptions import ShapeMismatchError
from raster_filters.data.box import Box, extend_box
from raster_filters.data.position import Position


class Mask:
    """
    A masked ND bounding box.
    
    Parameters
    ----------
    box : Box
        The bounding box.
    flags : bool or array-like of bool, optional
        Either a single flag for every position, or one flag per position of
        the box, in row-major ordering or already shaped like the box.
    """

    __slots__ = ("_box", "_flags")

    def __init__(self, box: Box, flags: Union[bool, Sequence[bool], np.ndarray] = True):
        self._box = box.box()
        shape = tuple(max(length, 0) for length in self._box.shape())
        if isinstance(flags, (bool, np.bool_, numbers.Number)):
            self._flags = np.full(shape, bool(flags))
        else:
            array = np.asarray(flags, dtype=bool)
            if array.shape != shape:
                if array.ndim != 1 or array.size != int(np.prod(shape, dtype=np.int64)):
                    raise ShapeMismatchError(shape, array.shape, "flags shape")
                array = array.reshape(shape)
            self._flags = array.copy()

    @classmethod
    def from_center(cls, radius: int = 1, center: Sequence[int] = (0, 0), flag: bool = True) -> "Mask":
        """Create a mask from a radius and center position."""
        return cls(Box.from_center(int(radius), center), flag)

    @classmethod
    def ball(cls, radius: float = 1, center: Sequence[int] = (0, 0), power: int = 2) -> "Mask":
        """
        Create a mask from a ball with (pseudo-)norm L0, L1 or L2.
        
        Parameters
        ----------
        radius : float, optional
            The ball radius, by default 1.
        center : sequence of int, optional
            The ball center, by default the origin in 2D.
        power : int, optional
            The norm power: 0, 1 or 2, by default 2.
            
        Returns
        -------
        Mask
            The bounding box of radius `int(radius)` with flags set inside
            the ball.
        """
        out = cls.from_center(radius, center, False)
        offsets = out._box.positions() - Position(center).to_array()
        if power == 0:
            distances = np.count_nonzero(offsets, axis=1)
        elif power == 1:
            distances = np.abs(offsets).sum(axis=1)
        elif power == 2:
            distances = (offsets * offsets).sum(axis=1)
        else:
            raise ValueError(f"Unsupported norm power: {power}")
        out._flags = (distances <= radius ** power).reshape(out._flags.shape)
        return out

    # Properties

    def box(self) -> Box:
        return self._box

    def front(self) -> Position:
        return self._box.front()

    def back(self) -> Position:
        return self._box.back()

    def dimension(self) -> int:
        return self._box.dimension()

    def shape(self) -> Position:
        return self._box.shape()

    def length(self, axis: int) -> int:
        return self._box.length(axis)

    def size(self) -> int:
        """Count the flagged positions."""
        return int(np.count_nonzero(self._flags))

    def flags(self) -> np.ndarray:
        return self._flags

    def is_empty(self) -> bool:
        return self.size() == 0

    # Elements

    def contains(self, position: Sequence[int]) -> bool:
        if not self._box.contains(position):
            return False
        return bool(self._flags[tuple(Position(position) - self._box.front())])

    def __contains__(self, position) -> bool:
        return self.contains(position)

    def __getitem__(self, position) -> bool:
        return self.contains(position)

    def __setitem__(self, position, flag: bool):
        self._flags[tuple(Position(position) - self._box.front())] = flag

    def __iter__(self) -> Iterator[Position]:
        for position, flag in zip(self._box, self._flags.ravel()):
            if flag:
                yield position

    def __len__(self) -> int:
        return self.size()

    def positions(self) -> np.ndarray:
        """Get the flagged positions in row-major ordering."""
        return self._box.positions()[self._flags.ravel()]

    def contains_many(self, positions: np.ndarray) -> np.ndarray:
        positions = np.asarray(positions)
        inside = self._box.contains_many(positions)
        out = np.zeros(len(positions), dtype=bool)
        local = positions[inside] - self._box.front().to_array()
        out[inside] = self._flags[tuple(local.T)]
        return out

    # Operations

    def copy(self) -> "Mask":
        return Mask(self._box, self._flags)

    def translate(self, vector: Union[int, Sequence[int]]) -> "Mask":
        """Shift the mask by a given vector or scalar; flags move with the box."""
        return Mask(self._box.translate(vector), self._flags)

    def negate(self) -> "Mask":
        """Invert the sign of each coordinate; flags are reversed accordingly."""
        return Mask(self._box.negate(), self._flags[(slice(None, None, -1),) * self._flags.ndim])

    def intersect(self, bounds: Box) -> "Mask":
        """Clamp the mask inside a box, keeping the flags of the retained positions."""
        box = self._box.intersect(bounds)
        if box.is_empty():
            return Mask(box, False)
        local = box - self._box.front()
        slices = tuple(slice(f, b + 1) for f, b in zip(local.front(), local.back()))
        return Mask(box, self._flags[slices])

    def __add__(self, other) -> "Mask":
        return self.translate(other)

    def __sub__(self, other) -> "Mask":
        return self.translate(-other if isinstance(other, numbers.Number) else -Position(other))

    def __neg__(self) -> "Mask":
        return self.negate()

    def __pos__(self) -> "Mask":
        return self.copy()

    def __and__(self, bounds: Box) -> "Mask":
        return self.intersect(bounds)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mask):
            return NotImplemented
        return self._box == other._box and np.array_equal(self._flags, other._flags)

    def __hash__(self):
        return hash((self._box, self._flags.tobytes()))

    def __repr__(self):
        return f"Mask({self._box!r}, size={self.size()})"


def extend_mask(mask: Mask, dimension: int, padding: Union[int, Sequence[int]] = 0) -> Mask:
    """Create a mask of higher dimension, with degenerate new axes."""
    return Mask(extend_box(mask.box(), dimension, padding), mask.flags().ravel())
