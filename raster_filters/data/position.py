#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Positions and vectors of the ND lattice.

A `Position` is an immutable tuple of integer coordinates and a `Vector` an
immutable tuple of real coordinates. Both support element-wise arithmetic with
scalars and other coordinate tuples. The dimension is dynamic by default;
`Position.of_dimension(n)` returns a subclass which checks the coordinate
count at construction, and arithmetic preserves it.
"""
import numbers
from typing import Callable, Dict, Sequence, Tuple, Union

import numpy as np

from raster_filters.core.exceptions import ShapeMismatchError

Scalar = Union[int, float]


class _Coordinates(tuple):
    """Common implementation of positions and vectors."""

    _dimension = None
    _cast: Callable = int
    _fixed: Dict[Tuple[type, int], type] = {}

    def __new__(cls, *coordinates):
        if len(coordinates) == 1 and not isinstance(coordinates[0], numbers.Number):
            coordinates = tuple(coordinates[0])
        values = tuple(cls._cast(c) for c in coordinates)
        if cls._dimension is not None and len(values) != cls._dimension:
            raise ShapeMismatchError(cls._dimension, len(values), "dimension")
        return super().__new__(cls, values)

    @classmethod
    def of_dimension(cls, dimension: int) -> type:
        """
        Get the subclass with fixed dimension.
        
        Parameters
        ----------
        dimension : int
            The number of coordinates.
            
        Returns
        -------
        type
            A cached subclass whose instances must have `dimension` coordinates.
        """
        base = cls._base()
        key = (base, int(dimension))
        if key not in _Coordinates._fixed:
            name = f"{base.__name__}{dimension}"
            _Coordinates._fixed[key] = type(name, (base,), {"_dimension": int(dimension)})
        return _Coordinates._fixed[key]

    @classmethod
    def _base(cls) -> type:
        return cls if cls._dimension is None else cls.__mro__[1]

    @classmethod
    def zero(cls, dimension: int):
        """Create a position or vector filled with zeros."""
        return cls([0] * dimension)

    @classmethod
    def one(cls, dimension: int):
        """Create a position or vector filled with ones."""
        return cls([1] * dimension)

    @property
    def dimension(self) -> int:
        return len(self)

    def to_array(self) -> np.ndarray:
        return np.array(self, dtype=np.int64 if isinstance(self, Position) else np.float64)

    def slice(self, dimension: int):
        """Get the first `dimension` coordinates."""
        return self._base()(self[:dimension])

    def extend(self, dimension: int, padding: Union[Scalar, Sequence[Scalar]] = 0):
        """
        Append coordinates up to `dimension`, taken from `padding`.

        `padding` is a scalar, the `dimension - len(self)` new coordinates, or
        a full `dimension`-long position whose leading coordinates are
        replaced by those of `self`.
        """
        if dimension < len(self):
            raise ShapeMismatchError(f">= {len(self)}", dimension, "dimension")
        count = dimension - len(self)
        if isinstance(padding, numbers.Number):
            padding = [padding] * count
        else:
            padding = tuple(padding)
            if len(padding) == dimension:
                padding = padding[len(self):]
            elif len(padding) != count:
                raise ShapeMismatchError(f"{count} or {dimension}", len(padding), "padding length")
        return self._base()(tuple(self) + tuple(padding))

    def apply(self, func: Callable, *others):
        """Apply an element-wise function with optional other coordinate tuples."""
        others = [self._broadcast(o) for o in others]
        return self._result_type(*others)(func(*values) for values in zip(self, *others))

    def min(self, other):
        """Element-wise minimum."""
        return self.apply(min, other)

    def max(self, other):
        """Element-wise maximum."""
        return self.apply(max, other)

    def _broadcast(self, other):
        if isinstance(other, numbers.Number):
            return [other] * len(self)
        if len(other) != len(self):
            raise ShapeMismatchError(len(self), len(other), "dimension")
        return other

    def _result_type(self, *others) -> type:
        is_real = isinstance(self, Vector) or any(
            isinstance(o, Vector) or isinstance(o, (float, np.floating))
            or any(isinstance(e, (float, np.floating)) for e in o)
            for o in others
        )
        if not is_real:
            return type(self)
        if self._dimension is None:
            return Vector
        return Vector.of_dimension(self._dimension)

    # Arithmetic

    def __add__(self, other):
        return self.apply(lambda a, b: a + b, other)

    __radd__ = __add__

    def __sub__(self, other):
        return self.apply(lambda a, b: a - b, other)

    def __rsub__(self, other):
        return self.apply(lambda a, b: b - a, other)

    def __mul__(self, other):
        return self.apply(lambda a, b: a * b, other)

    __rmul__ = __mul__

    def __floordiv__(self, other):
        return self.apply(lambda a, b: a // b, other)

    def __mod__(self, other):
        return self.apply(lambda a, b: a % b, other)

    def __truediv__(self, other):
        others = self._broadcast(other)
        out_type = Vector if self._dimension is None else Vector.of_dimension(self._dimension)
        return out_type(a / b for a, b in zip(self, others))

    def __neg__(self):
        return type(self)(-c for c in self)

    def __pos__(self):
        return self

    def __abs__(self):
        return type(self)(abs(c) for c in self)

    def __repr__(self):
        return f"{type(self).__name__}{tuple.__repr__(tuple(self))}"


class Position(_Coordinates):
    """
    An integer position (or integer displacement) of the ND lattice.
    """

    _cast = int


class Vector(_Coordinates):
    """
    A real-valued position (or displacement).
    """

    _cast = float


def norm(position: Sequence[Scalar], power: int = 2) -> Scalar:
    """
    Compute the L0, L1 or L2 (pseudo-)norm of a position, raised to the power.
    
    The L0 pseudo-norm counts the nonzero coordinates; the L1 norm sums the
    absolute values; the squared L2 norm sums the squares.
    """
    if power == 0:
        return sum(1 for c in position if c != 0)
    if power == 1:
        return sum(abs(c) for c in position)
    if power == 2:
        return sum(c * c for c in position)
    raise ValueError(f"Unsupported norm power: {power}")


def clamp(position: Sequence[int], shape: Sequence[int]) -> Position:
    """Clamp a position inside the domain [0, shape) along each axis."""
    return Position(min(max(p, 0), s - 1) for p, s in zip(position, shape))

