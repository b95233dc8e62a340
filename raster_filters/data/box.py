#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Axis-aligned ND bounding boxes.

A `Box` is the dense Cartesian product of per-axis integer ranges, defined by
its front and back positions, both inclusive. Boxes are immutable values;
translation, negation and intersection return new boxes. A box with a
negative or null length along some axis is empty: it has size 0 and an
exhausted iteration.
"""
import itertools
import numbers
from typing import Iterator, Sequence, Union

import numpy as np

from raster_filters.core.exceptions import ShapeMismatchError
from raster_filters.data.position import Position


class Box:
    """
    An ND bounding box, defined by its front and back positions, both inclusive.
    
    Parameters
    ----------
    front : sequence of int
        The first position of the box.
    back : sequence of int
        The last position of the box.
    """

    __slots__ = ("_front", "_back")

    def __init__(self, front: Sequence[int], back: Sequence[int]):
        self._front = Position(front)
        self._back = Position(back)
        if len(self._front) != len(self._back):
            raise ShapeMismatchError(len(self._front), len(self._back), "dimension")

    @classmethod
    def from_shape(cls, shape: Sequence[int], front: Sequence[int] = None) -> "Box":
        """Create a box from its shape and front position (origin by default)."""
        shape = Position(shape)
        front = Position.zero(len(shape)) if front is None else Position(front)
        return cls(front, front + shape - 1)

    @classmethod
    def from_center(cls, radius: int = 1, center: Sequence[int] = (0, 0)) -> "Box":
        """Create a box from a radius and center position."""
        center = Position(center)
        return cls(center - radius, center + radius)

    # Properties

    def front(self) -> Position:
        return self._front

    def back(self) -> Position:
        return self._back

    def box(self) -> "Box":
        return self

    def dimension(self) -> int:
        return len(self._front)

    def shape(self) -> Position:
        return self._back - self._front + 1

    def length(self, axis: int) -> int:
        return self._back[axis] - self._front[axis] + 1

    def size(self) -> int:
        out = 1
        for length in self.shape():
            out *= max(length, 0)
        return out

    def is_empty(self) -> bool:
        return any(length <= 0 for length in self.shape())

    def center(self):
        """Get the (possibly half-integer) center vector."""
        return (self._front + self._back) / 2

    # Elements

    def contains(self, position: Sequence[int]) -> bool:
        return all(f <= p <= b for f, p, b in zip(self._front, position, self._back))

    def __contains__(self, position) -> bool:
        return self.contains(position)

    def __getitem__(self, position) -> bool:
        return self.contains(position)

    def __iter__(self) -> Iterator[Position]:
        ranges = [range(f, b + 1) for f, b in zip(self._front, self._back)]
        for coordinates in itertools.product(*ranges):
            yield Position(coordinates)

    def __len__(self) -> int:
        return self.size()

    def positions(self) -> np.ndarray:
        """
        Get all the positions in row-major ordering.
        
        Returns
        -------
        np.ndarray
            Integer array of shape (size, dimension).
        """
        if self.is_empty():
            return np.empty((0, self.dimension()), dtype=np.int64)
        grid = np.indices(tuple(self.shape()), dtype=np.int64)
        return grid.reshape(self.dimension(), -1).T + self._front.to_array()

    def contains_many(self, positions: np.ndarray) -> np.ndarray:
        """Vectorized membership test of an array of positions."""
        positions = np.asarray(positions)
        return np.all((positions >= self._front.to_array()) & (positions <= self._back.to_array()), axis=-1)

    # Operations

    def translate(self, vector: Union[int, Sequence[int]]) -> "Box":
        """Shift the box by a given vector or scalar."""
        return Box(self._front + vector, self._back + vector)

    def negate(self) -> "Box":
        """Invert the sign of each coordinate."""
        return Box(-self._back, -self._front)

    def intersect(self, other: "Box") -> "Box":
        """Clamp the box inside another one."""
        other = other.box()
        return Box(self._front.max(other.front()), self._back.min(other.back()))

    def union_box(self, other: "Box") -> "Box":
        """Get the smallest box which contains both boxes."""
        other = other.box()
        return Box(self._front.min(other.front()), self._back.max(other.back()))

    def dilate(self, window: "Box") -> "Box":
        """
        Grow the box by the extent of a window (Minkowski sum of boxes).
        
        This is the domain read by a filter with the given window when
        evaluated over this box.
        """
        window = window.box()
        return Box(self._front + window.front(), self._back + window.back())

    def erode(self, window: "Box") -> "Box":
        """
        Shrink the box by the extent of a window.
        
        This is the set of positions at which the window lies entirely inside
        the box, i.e. the inner domain of a filter.
        """
        window = window.box()
        return Box(self._front - window.front(), self._back - window.back())

    def __add__(self, other) -> "Box":
        return self.translate(other)

    def __sub__(self, other) -> "Box":
        return self.translate(-Position(other) if not isinstance(other, numbers.Number) else -other)

    def __neg__(self) -> "Box":
        return self.negate()

    def __pos__(self) -> "Box":
        return self

    def __and__(self, other: "Box") -> "Box":
        return self.intersect(other)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return self._front == other._front and self._back == other._back

    def __hash__(self):
        return hash((self._front, self._back))

    def __repr__(self):
        return f"Box({tuple(self._front)}, {tuple(self._back)})"


def extend_box(box: Box, dimension: int, padding: Union[int, Sequence[int]] = 0) -> Box:
    """
    Create a box of higher dimension.
    
    The new axes are degenerate: their front and back are both taken from
    `padding`.
    """
    return Box(box.front().extend(dimension, padding), box.back().extend(dimension, padding))
