#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Raster Filters Package.

An N-dimensional raster processing toolbox: regions over the integer lattice
(boxes, masks, grids), neighborhood filtering (correlation, convolution, rank
filters, binary morphology), boundary extrapolation, interpolation and affine
resampling.
"""

__version__ = "0.1.0"
__author__ = "Elena Project Team"
__email__ = "user@example.com"

from raster_filters.data.position import Position, Vector
from raster_filters.data.box import Box
from raster_filters.data.mask import Mask
from raster_filters.data.grid import Grid
from raster_filters.data.region import extend
from raster_filters.data.raster import Raster, Patch
from raster_filters.transforms.extrapolation import (
    Constant, Nearest, Periodic, Linear, Cubic, extrapolation, interpolation
)
from raster_filters.transforms.affinity import Affinity, inverse
from raster_filters.transforms.filters import SimpleFilter, FilterSeq, FilterAgg
from raster_filters.transforms.builders import (
    correlation, convolution, sparse_correlation, sparse_convolution,
    correlation_along, convolution_along, prewitt_gradient, sobel_gradient,
    scharr_gradient, laplace_operator, mean_filter, median_filter,
    minimum_filter, maximum_filter, erosion, dilation, generic_filter
)
