#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Boundary extrapolation and interpolation policies.

A policy answers "what value lives at position p" where p is an integer
position possibly outside the raster domain (extrapolation: `Constant`,
`Nearest`, `Periodic`), or a real-valued position (interpolation: `Nearest`,
`Linear`, `Cubic`). Policies are attached to a raster with `extrapolation()`
and `interpolation()`, which return wrappers exposing the reading interface
consumed by filters and affinities:

- `domain()`, `shape()`, `dimension()`, `dtype`
- `at_many(positions)` for integer positions of shape (count, dimension)
- `sample(positions)` for real positions (interpolators only)

Interpolators read their taps through their source, which is either a raster
(taps must then lie inside the domain) or an extrapolator.
"""
import numbers
from typing import Any, Optional, Sequence, Union

import numpy as np

from raster_filters.core.config import RESAMPLING_CONFIG
from raster_filters.core.exceptions import ConfigError
from raster_filters.core.logging_config import get_module_logger
from raster_filters.data.position import Position, Vector

# Initialize logger
logger = get_module_logger(__name__)


class Constant:
    """
    Constant, a.k.a. Dirichlet, boundary conditions.
    
    Parameters
    ----------
    value : scalar, optional
        The value returned outside the domain, by default 0.
    """

    def __init__(self, value: Any = 0):
        self.value = value

    def at(self, raster, position: Sequence[int]):
        return raster[position] if raster.contains(position) else raster.dtype.type(self.value)

    def at_many(self, raster, positions: np.ndarray) -> np.ndarray:
        positions = np.asarray(positions, dtype=np.int64)
        out = np.empty(len(positions), dtype=raster.dtype)
        out.fill(self.value)
        inside = raster.domain().contains_many(positions)
        out[inside] = raster.at_many(positions[inside])
        return out

    def __repr__(self):
        return f"Constant({self.value!r})"


class Nearest:
    """
    Nearest-neighbor extrapolation (zero-flux Neumann boundary conditions)
    or interpolation.
    """

    def at(self, raster, position: Sequence[int]):
        shape = raster.shape()
        return raster[[min(max(p, 0), s - 1) for p, s in zip(position, shape)]]

    def at_many(self, raster, positions: np.ndarray) -> np.ndarray:
        shape = raster.shape().to_array()
        clamped = np.clip(np.asarray(positions, dtype=np.int64), 0, shape - 1)
        return raster.at_many(clamped)

    def sample(self, source, positions: np.ndarray) -> np.ndarray:
        """Read the values at the nearest integer positions, rounding halves away from zero."""
        positions = np.asarray(positions, dtype=np.float64)
        rounded = np.sign(positions) * np.floor(np.abs(positions) + 0.5)
        return source.at_many(rounded.astype(np.int64))

    def __repr__(self):
        return "Nearest()"


class Periodic:
    """
    Periodic, a.k.a. wrap-around, boundary conditions.
    """

    def at(self, raster, position: Sequence[int]):
        return raster[[p % s for p, s in zip(position, raster.shape())]]

    def at_many(self, raster, positions: np.ndarray) -> np.ndarray:
        # numpy's modulo has the sign of the divisor: results lie in [0, shape)
        wrapped = np.mod(np.asarray(positions, dtype=np.int64), raster.shape().to_array())
        return raster.at_many(wrapped)

    def __repr__(self):
        return "Periodic()"


class _SeparableInterpolation:
    """
    Interpolation computed axis by axis.
    
    The last axis is interpolated first, with the other coordinates held
    fixed, and the interpolated values are then combined along the preceding
    axes recursively.
    """

    taps: Sequence[int] = ()

    def combine(self, values: Sequence[np.ndarray], d: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def sample(self, source, positions: np.ndarray) -> np.ndarray:
        positions = np.asarray(positions, dtype=np.float64)
        if positions.ndim == 1:
            positions = positions.reshape(1, -1)
        return self._collapse(source, positions.copy(), positions.shape[1] - 1)

    def _collapse(self, source, positions: np.ndarray, axis: int) -> np.ndarray:
        if axis < 0:
            return source.at_many(positions.astype(np.int64))
        f = np.floor(positions[:, axis])
        d = positions[:, axis] - f
        values = []
        for tap in self.taps:
            shifted = positions.copy()
            shifted[:, axis] = f + tap
            values.append(self._collapse(source, shifted, axis - 1).astype(np.float64))
        return self.combine(values, d)

    def at(self, source, position: Sequence[float]) -> float:
        return float(self.sample(source, np.asarray([position], dtype=np.float64))[0])


class Linear(_SeparableInterpolation):
    """
    Linear interpolation.
    
    Requires the two neighboring integer taps along each axis to be readable.
    """

    taps = (0, 1)

    def combine(self, values, d):
        p, n = values
        return d * (n - p) + p

    def __repr__(self):
        return "Linear()"


class Cubic(_SeparableInterpolation):
    """
    Cubic (Catmull-Rom) interpolation.
    
    Requires two integer taps on each side along each axis to be readable.
    """

    taps = (-1, 0, 1, 2)

    def combine(self, values, d):
        pp, p, n, nn = values
        return p + 0.5 * (
            d * (-pp + n)
            + d * d * (2 * pp - 5 * p + 4 * n - nn)
            + d * d * d * (-pp + 3 * p - 3 * n + nn)
        )

    def __repr__(self):
        return "Cubic()"


EXTRAPOLATION_POLICIES = {"constant": Constant, "nearest": Nearest, "periodic": Periodic}
INTERPOLATION_POLICIES = {"nearest": Nearest, "linear": Linear, "cubic": Cubic}


def make_policy(name: str, **kwargs):
    """
    Create a boundary policy from its name.
    
    Parameters
    ----------
    name : str
        One of 'constant', 'nearest', 'periodic', 'linear' or 'cubic'.
    **kwargs
        Arguments of the policy constructor, e.g. `value` for 'constant'.
    """
    key = name.lower()
    policies = {**EXTRAPOLATION_POLICIES, **INTERPOLATION_POLICIES}
    if key not in policies:
        raise ConfigError(f"Unknown boundary policy: {name}; expected one of {sorted(policies)}")
    return policies[key](**kwargs)


class Extrapolator:
    """
    A raster which can be read outside its domain.
    
    Parameters
    ----------
    raster : Raster
        The decorated raster.
    policy : Constant, Nearest or Periodic
        The extrapolation policy.
    """

    def __init__(self, raster, policy):
        self._raster = raster
        self.policy = policy

    def raster(self):
        return self._raster

    @property
    def dtype(self) -> np.dtype:
        return self._raster.dtype

    def domain(self):
        return self._raster.domain()

    def shape(self) -> Position:
        return self._raster.shape()

    def dimension(self) -> int:
        return self._raster.dimension()

    def contains(self, position) -> bool:
        return self._raster.contains(position)

    def __getitem__(self, position):
        return self.policy.at(self._raster, position)

    def at_many(self, positions: np.ndarray) -> np.ndarray:
        return self.policy.at_many(self._raster, positions)

    def __repr__(self):
        return f"Extrapolator({self._raster!r}, {self.policy!r})"


class Interpolator:
    """
    A raster which can be read at real positions.
    
    Parameters
    ----------
    source : Raster or Extrapolator
        The decorated raster, extrapolated if taps may fall outside the domain.
    policy : Nearest, Linear or Cubic
        The interpolation policy.
    """

    def __init__(self, source, policy):
        self._source = source
        self.policy = policy

    def source(self):
        return self._source

    @property
    def dtype(self) -> np.dtype:
        return self._source.dtype

    def domain(self):
        return self._source.domain()

    def shape(self) -> Position:
        return self._source.shape()

    def dimension(self) -> int:
        return self._source.dimension()

    def contains(self, position) -> bool:
        return self._source.contains(position)

    def __getitem__(self, position):
        return self._source[position]

    def at_many(self, positions: np.ndarray) -> np.ndarray:
        return self._source.at_many(positions)

    def __call__(self, position: Sequence[float]):
        """Interpolate the value at a real position."""
        return self.sample(np.asarray([Vector(position)], dtype=np.float64))[0]

    def sample(self, positions: np.ndarray) -> np.ndarray:
        """Interpolate the values at an array of real positions of shape (count, dimension)."""
        return self.policy.sample(self._source, positions)

    def __repr__(self):
        return f"Interpolator({self._source!r}, {self.policy!r})"


def extrapolation(raster, policy: Optional[Union[Constant, Nearest, Periodic, str, numbers.Number]] = None) -> Extrapolator:
    """
    Make a raster extrapolable.
    
    Parameters
    ----------
    raster : Raster
        The input raster.
    policy : policy, str or scalar, optional
        An extrapolation policy, its name, or a value for constant
        extrapolation. If None, uses RESAMPLING_CONFIG.
    """
    if policy is None:
        policy = RESAMPLING_CONFIG.get("default_extrapolation", "nearest")
    if isinstance(policy, str):
        kwargs = {"value": RESAMPLING_CONFIG.get("constant_value", 0)} if policy.lower() == "constant" else {}
        policy = make_policy(policy, **kwargs)
    elif isinstance(policy, (numbers.Number, np.bool_)):
        policy = Constant(policy)
    logger.debug(f"Extrapolating {raster!r} with {policy!r}")
    return Extrapolator(raster, policy)


def interpolation(source, policy: Optional[Union[Nearest, Linear, Cubic, str]] = None) -> Interpolator:
    """
    Make a raster or extrapolator interpolable.
    
    Parameters
    ----------
    source : Raster or Extrapolator
        The input.
    policy : policy or str, optional
        An interpolation policy or its name. If None, uses RESAMPLING_CONFIG.
    """
    if policy is None:
        policy = RESAMPLING_CONFIG.get("default_interpolation", "linear")
    if isinstance(policy, str):
        policy = make_policy(policy)
    logger.debug(f"Interpolating {source!r} with {policy!r}")
    return Interpolator(source, policy)
