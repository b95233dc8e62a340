#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Strided ND regions.

A `Grid` is the sublattice of a `Box` made of the positions congruent to the
box front modulo a per-axis step. The back position is trimmed at
construction so that it always lies on a grid node.
"""
import itertools
import numbers
from typing import Iterator, Sequence, Union

import numpy as np

from raster_filters.core.exceptions import ShapeMismatchError
from raster_filters.data.box import Box, extend_box
from raster_filters.data.position import Position


class Grid:
    """
    A regular grid of positions inside a box.
    
    Parameters
    ----------
    box : Box
        The bounding box. Its back is moved down to the last grid node.
    step : sequence of int
        The strictly positive step along each axis.
    """

    __slots__ = ("_box", "_step")

    def __init__(self, box: Box, step: Union[int, Sequence[int]]):
        box = box.box()
        if isinstance(step, numbers.Number):
            step = [step] * box.dimension()
        self._step = Position(step)
        if len(self._step) != box.dimension():
            raise ShapeMismatchError(box.dimension(), len(self._step), "step dimension")
        if any(s <= 0 for s in self._step):
            raise ValueError(f"Grid step must be strictly positive, got {tuple(self._step)}")
        back = Position(
            b - (box.length(i) - 1) % s if box.length(i) > 0 else b
            for i, (b, s) in enumerate(zip(box.back(), self._step))
        )
        self._box = Box(box.front(), back)

    # Properties

    def box(self) -> Box:
        return self._box

    def front(self) -> Position:
        return self._box.front()

    def back(self) -> Position:
        return self._box.back()

    def step(self) -> Position:
        return self._step

    def dimension(self) -> int:
        return self._box.dimension()

    def length(self, axis: int) -> int:
        """Get the number of grid nodes along given axis."""
        length = self._box.length(axis)
        if length <= 0:
            return 0
        return (length - 1) // self._step[axis] + 1

    def shape(self) -> Position:
        """Get the number of grid nodes along each axis."""
        return Position(self.length(i) for i in range(self.dimension()))

    def size(self) -> int:
        out = 1
        for length in self.shape():
            out *= length
        return out

    def is_empty(self) -> bool:
        return self.size() == 0

    # Elements

    def contains(self, position: Sequence[int]) -> bool:
        if not self._box.contains(position):
            return False
        return all((p - f) % s == 0 for p, f, s in zip(position, self._box.front(), self._step))

    def __contains__(self, position) -> bool:
        return self.contains(position)

    def __getitem__(self, position) -> bool:
        return self.contains(position)

    def __iter__(self) -> Iterator[Position]:
        ranges = [range(f, b + 1, s) for f, b, s in zip(self._box.front(), self._box.back(), self._step)]
        for coordinates in itertools.product(*ranges):
            yield Position(coordinates)

    def __len__(self) -> int:
        return self.size()

    def positions(self) -> np.ndarray:
        """Get the grid nodes in row-major ordering, as an array of shape (size, dimension)."""
        if self.is_empty():
            return np.empty((0, self.dimension()), dtype=np.int64)
        nodes = np.indices(tuple(self.shape()), dtype=np.int64).reshape(self.dimension(), -1).T
        return nodes * self._step.to_array() + self._box.front().to_array()

    def contains_many(self, positions: np.ndarray) -> np.ndarray:
        positions = np.asarray(positions)
        offsets = positions - self._box.front().to_array()
        on_grid = np.all(offsets % self._step.to_array() == 0, axis=-1)
        return self._box.contains_many(positions) & on_grid

    # Operations

    def translate(self, vector: Union[int, Sequence[int]]) -> "Grid":
        return Grid(self._box.translate(vector), self._step)

    def negate(self) -> "Grid":
        """Invert the sign of each coordinate, keeping the step."""
        return Grid(self._box.negate(), self._step)

    def intersect(self, bounds: Box) -> "Grid":
        """Clamp the grid inside a box, keeping the nodes of the original lattice."""
        bounds = bounds.box()
        front = Position(
            f + -(-(max(bf - f, 0)) // s) * s
            for f, bf, s in zip(self._box.front(), bounds.front(), self._step)
        )
        back = self._box.back().min(bounds.back())
        return Grid(Box(front, back), self._step)

    def __add__(self, other) -> "Grid":
        return self.translate(other)

    def __sub__(self, other) -> "Grid":
        return self.translate(-other if isinstance(other, numbers.Number) else -Position(other))

    def __neg__(self) -> "Grid":
        return self.negate()

    def __pos__(self) -> "Grid":
        return self

    def __and__(self, bounds: Box) -> "Grid":
        return self.intersect(bounds)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._box == other._box and self._step == other._step

    def __hash__(self):
        return hash((self._box, self._step))

    def __repr__(self):
        return f"Grid({self._box!r}, step={tuple(self._step)})"


def extend_grid(grid: Grid, dimension: int, padding: Union[int, Sequence[int]] = 0) -> Grid:
    """Create a grid of higher dimension, with degenerate new axes of unit step."""
    return Grid(extend_box(grid.box(), dimension, padding), grid.step().extend(dimension, 1))