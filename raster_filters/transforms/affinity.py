#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Geometrical affine transforms (translation, scaling, rotation).

An affinity transforms an input vector `x` into an output vector `y` by
applying a linear map `a` (square matrix) and a translation vector `b`
relative to a fixed center `c`:

    y = a * (x - c) + b + c

The affinity is built up by composition: each builder call multiplies the map
on the right or accumulates into the translation, in the order of the calls.

Applying an affinity to a raster walks the output domain and samples the input
at the inverse-mapped positions, so that every output value is computed
exactly once. The input must therefore be an interpolator, which must also be
extrapolated if the inverse-mapped positions may fall outside its domain.
"""
import copy
import math
import numbers
from typing import Optional, Sequence, Union

import numpy as np
from scipy import linalg

from raster_filters.core.exceptions import ShapeMismatchError, SingularMatrixError
from raster_filters.core.logging_config import get_module_logger
from raster_filters.data.mask import Mask
from raster_filters.data.position import Position, Vector
from raster_filters.data.raster import Patch, Raster
from raster_filters.data.region import region_shape
from raster_filters.utils.utils import parallel_apply, split_batches, timer

# Initialize logger
logger = get_module_logger(__name__)

VectorLike = Union[float, Sequence[float]]


class Affinity:
    """
    Affine transform around a center.
    
    Parameters
    ----------
    center : sequence of float, optional
        The center of the linear map, by default the origin.
    dimension : int, optional
        The dimension, required if `center` is None, by default 2.
    
    Examples
    --------
    A 30 degrees-rotation centered in (100, 50), from axis 1 to axis 0:
    
    >>> affinity = Affinity((100, 50))
    >>> affinity.rotate_degrees(30, 1, 0)
    >>> y = affinity(x)
    
    Scaling of an interpolator by a factor 3 around its center:
    
    >>> affinity = Affinity(source.domain().center())
    >>> affinity *= 3
    >>> out = affinity * source
    """

    def __init__(self, center: Optional[Sequence[float]] = None, dimension: Optional[int] = None):
        if center is None:
            center = np.zeros(2 if dimension is None else dimension)
        self._center = np.asarray(center, dtype=np.float64).copy()
        n = len(self._center)
        if dimension is not None and dimension != n:
            raise ShapeMismatchError(dimension, n, "dimension")
        self._map = np.eye(n)
        self._translation = np.zeros(n)

    @classmethod
    def translation(cls, vector: Sequence[float]) -> "Affinity":
        """Create a translation."""
        out = cls(dimension=len(vector))
        out.translate(vector)
        return out

    @classmethod
    def scaling(cls, factor: VectorLike, center: Optional[Sequence[float]] = None, dimension: Optional[int] = None) -> "Affinity":
        """Create an isotropic or per-axis scaling."""
        if center is None and dimension is None and not isinstance(factor, numbers.Number):
            dimension = len(factor)
        out = cls(center, dimension)
        out.scale(factor)
        return out

    @classmethod
    def rotation_radians(
        cls,
        angle: float,
        from_axis: int = 0,
        to_axis: int = 1,
        center: Optional[Sequence[float]] = None,
        dimension: Optional[int] = None
    ) -> "Affinity":
        """Create a rotation by an angle given in radians."""
        out = cls(center, dimension)
        out.rotate_radians(angle, from_axis, to_axis)
        return out

    @classmethod
    def rotation_degrees(
        cls,
        angle: float,
        from_axis: int = 0,
        to_axis: int = 1,
        center: Optional[Sequence[float]] = None,
        dimension: Optional[int] = None
    ) -> "Affinity":
        """Create a rotation by an angle given in degrees."""
        out = cls(center, dimension)
        out.rotate_degrees(angle, from_axis, to_axis)
        return out

    # Properties

    def dimension(self) -> int:
        return len(self._center)

    def map(self) -> np.ndarray:
        return self._map.copy()

    def translation_vector(self) -> np.ndarray:
        return self._translation.copy()

    def center(self) -> Vector:
        return Vector(self._center)

    def copy(self) -> "Affinity":
        return copy.deepcopy(self)

    # Builders

    def _vector(self, value: VectorLike) -> np.ndarray:
        if isinstance(value, numbers.Number):
            return np.full(self.dimension(), float(value))
        array = np.asarray(value, dtype=np.float64)
        if array.shape != (self.dimension(),):
            raise ShapeMismatchError(self.dimension(), len(array), "dimension")
        return array

    def translate(self, vector: VectorLike) -> "Affinity":
        """Translate by a given vector, or by a given value along all axes."""
        self._translation = self._translation + self._vector(vector)
        return self

    def scale(self, factor: VectorLike) -> "Affinity":
        """Scale isotropically by a factor, or by a vector of per-axis factors."""
        self._map = self._map @ np.diag(self._vector(factor))
        return self

    def scale_inverse(self, factor: VectorLike) -> "Affinity":
        """Scale by the inverse of a factor or vector of factors."""
        self._map = self._map @ np.diag(1. / self._vector(factor))
        return self

    def rotate_radians(self, angle: float, from_axis: int = 0, to_axis: int = 1) -> "Affinity":
        """Rotate by an angle given in radians from a given axis to a given axis."""
        if angle != 0:
            rotation = np.eye(self.dimension())
            sin = math.sin(angle)
            cos = math.cos(angle)
            rotation[from_axis, from_axis] = cos
            rotation[from_axis, to_axis] = -sin
            rotation[to_axis, from_axis] = sin
            rotation[to_axis, to_axis] = cos
            self._map = self._map @ rotation
        return self

    def rotate_degrees(self, angle: float, from_axis: int = 0, to_axis: int = 1) -> "Affinity":
        """Rotate by an angle given in degrees from a given axis to a given axis."""
        return self.rotate_radians(math.pi / 180. * angle, from_axis, to_axis)

    def inverse(self) -> "Affinity":
        """
        Invert the transform in place.
        
        Raises
        ------
        SingularMatrixError
            If the linear map is not invertible.
        """
        try:
            self._map = linalg.inv(self._map)
        except (linalg.LinAlgError, ValueError) as e:
            raise SingularMatrixError(f"Cannot invert the linear map: {e}") from e
        if not np.all(np.isfinite(self._map)):
            raise SingularMatrixError("Cannot invert the linear map: non-finite inverse")
        self._translation = -self._map @ self._translation
        return self

    def __iadd__(self, vector: VectorLike) -> "Affinity":
        return self.translate(vector)

    def __isub__(self, vector: VectorLike) -> "Affinity":
        return self.translate(-self._vector(vector))

    def __imul__(self, factor: VectorLike) -> "Affinity":
        return self.scale(factor)

    def __itruediv__(self, factor: VectorLike) -> "Affinity":
        return self.scale_inverse(factor)

    # Application

    def __call__(self, point: Sequence[float]) -> Vector:
        """Apply the transform to a point."""
        return Vector(self.apply_many(np.asarray([point], dtype=np.float64))[0])

    def apply_many(self, points: np.ndarray) -> np.ndarray:
        """Apply the transform to an array of points of shape (count, dimension)."""
        points = np.asarray(points, dtype=np.float64)
        return (points - self._center) @ self._map.T + self._translation + self._center

    def _sample(self, positions: np.ndarray, source, inv: "Affinity") -> np.ndarray:
        return source.sample(inv.apply_many(positions))

    @timer
    def transform(self, source, out=None) -> Union[Raster, Patch]:
        """
        Apply the transform to an interpolator.
        
        Parameters
        ----------
        source : Interpolator
            The input, extrapolated if needed.
        out : Raster, Patch, Box, Grid or Mask, optional
            The output raster or patch, filled in place over its domain, or
            the output region, whose values are stored as by filters: boxes
            and grids densely, masks over their bounding box with unflagged
            positions left at 0. By default, a raster of the shape of the
            input.

        Returns
        -------
        Raster or Patch
            The output raster, or the patch if one was given.
        """
        if not hasattr(source, "sample"):
            raise TypeError(f"Affinities require an interpolator, got {type(source).__name__}")
        if out is None:
            out = Raster(source.shape(), dtype=source.dtype)
        if isinstance(out, Raster):
            domain, dtype = out.domain(), out.dtype
        elif isinstance(out, Patch):
            domain, dtype = out.region(), out.owner().dtype
        else:
            domain, dtype = out, source.dtype
        inv = inverse(self)
        batches = split_batches(domain.positions())
        logger.debug(f"Resampling {domain!r} in {len(batches)} batches")
        results = parallel_apply(self._sample, batches, source=source, inv=inv)
        values = np.concatenate(results) if results else np.empty(0)
        if np.issubdtype(dtype, np.integer):
            values = np.rint(values)
        values = values.astype(dtype)

        if isinstance(out, Raster):
            out.array[...] = values.reshape(out.array.shape)
            return out
        if isinstance(out, Patch):
            return out.assign(values)
        raster = Raster(tuple(max(length, 0) for length in region_shape(domain)), dtype=dtype)
        if isinstance(domain, Mask):
            local = domain.positions() - domain.front().to_array()
            raster.array[tuple(local.T)] = values
        else:
            raster.array[...] = values.reshape(raster.array.shape)
        return raster

    def __mul__(self, source) -> Raster:
        """Apply the transform to an interpolator, with output of the same shape."""
        return self.transform(source)

    def __repr__(self):
        return (f"Affinity(map={self._map.tolist()}, translation={self._translation.tolist()}, "
                f"center={self._center.tolist()})")


def inverse(affinity: Affinity) -> Affinity:
    """Create the inverse transform of a given affinity."""
    return affinity.copy().inverse()


def _domain_center(source) -> Vector:
    domain = source.domain()
    return (domain.front() + domain.back()) / 2


def translate(source, vector: Sequence[float]) -> Raster:
    """Translate an input interpolator."""
    return Affinity.translation(vector) * source


def scale(source, factor: VectorLike) -> Raster:
    """Scale an input interpolator from its center."""
    return Affinity.scaling(factor, _domain_center(source)) * source


def rotate_radians(source, angle: float, from_axis: int = 0, to_axis: int = 1) -> Raster:
    """Rotate an input interpolator around its center."""
    return Affinity.rotation_radians(angle, from_axis, to_axis, _domain_center(source)) * source


def rotate_degrees(source, angle: float, from_axis: int = 0, to_axis: int = 1) -> Raster:
    """Rotate an input interpolator around its center."""
    return Affinity.rotation_degrees(angle, from_axis, to_axis, _domain_center(source)) * source


def upsample(source, factor: float) -> Raster:
    """
    Upsample an input interpolator.
    
    The output shape is the input shape times the factor, rounded down.
    """
    shape = Position(int(math.floor(s * factor)) for s in source.shape())
    out = Raster(shape, dtype=source.dtype)
    return Affinity.scaling(factor, dimension=source.dimension()).transform(source, out)


def downsample(source, factor: float) -> Raster:
    """Downsample an input interpolator."""
    return upsample(source, 1. / factor)
