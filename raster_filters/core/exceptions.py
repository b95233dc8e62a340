#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions raised by the raster filtering package.

Every error detected by the package derives from `RasterFiltersError`, whose
message is prefixed with the package name. Concrete errors also derive from
the matching builtin exception so that callers can catch either.
"""

PREFIX = "raster_filters"


class RasterFiltersError(Exception):
    """Base class of the package errors."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(f"{PREFIX}: {message}")


class ShapeMismatchError(RasterFiltersError, ValueError):
    """Raised when two shapes or dimensions which must agree differ."""

    def __init__(self, expected, actual, what: str = "shape"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what} mismatch: expected {expected}, got {actual}")


class SingularMatrixError(RasterFiltersError, ValueError):
    """Raised when a linear map cannot be inverted."""


class ExpiredViewError(RasterFiltersError, RuntimeError):
    """Raised when a patch is used after its borrow scope ended."""


class ConfigError(RasterFiltersError, KeyError):
    """Raised for unknown configuration sections or policy names."""

    def __str__(self):
        # KeyError would quote the message otherwise
        return Exception.__str__(self)
