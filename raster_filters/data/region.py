#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Functions common to the region family (`Box`, `Mask` and `Grid`).

All regions share the same contract: `front()`, `back()`, `shape()`,
`size()`, `dimension()`, `contains()`, row-major iteration and `positions()`,
translation, negation and intersection with a bounding box.
"""
from typing import Sequence, Union

from raster_filters.data.box import Box, extend_box
from raster_filters.data.grid import Grid, extend_grid
from raster_filters.data.mask import Mask, extend_mask

Region = Union[Box, Mask, Grid]


def extend(region: Region, dimension: int, padding: Union[int, Sequence[int]] = 0) -> Region:
    """
    Create a region of higher dimension.
    
    The `dimension - region.dimension()` appended axes are degenerate, at the
    coordinates given by `padding`, so that an ND structuring element can be
    applied to (N+k)D rasters, e.g. a 2D kernel slice-wise over a 3D cube.
    
    Parameters
    ----------
    region : Box, Mask or Grid
        The input region.
    dimension : int
        The output dimension, greater than or equal to the input one.
    padding : int or sequence of int, optional
        Coordinates of the new axes, by default 0.
        
    Returns
    -------
    Box, Mask or Grid
        A region of the same kind as the input.
    """
    if isinstance(region, Mask):
        return extend_mask(region, dimension, padding)
    if isinstance(region, Grid):
        return extend_grid(region, dimension, padding)
    return extend_box(region.box(), dimension, padding)


def region_shape(region: Region):
    """
    Get the shape of the array which stores one value per region position.
    
    Boxes and masks are stored densely over their bounding box, grids over
    their nodes.
    """
    if isinstance(region, Grid):
        return region.shape()
    return region.box().shape()
