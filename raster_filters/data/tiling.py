#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Decomposition of regions and rasters into lines and blocks.
"""
from typing import List, Sequence, Union

from raster_filters.data.box import Box
from raster_filters.data.grid import Grid
from raster_filters.data.position import Position
from raster_filters.data.raster import Raster


def tile_region_along(region: Union[Box, Grid], axis: int) -> Raster:
    """
    Split a region into lines parallel to a given axis.
    
    Parameters
    ----------
    region : Box or Grid
        The region to be split.
    axis : int
        The axis of the lines.
        
    Returns
    -------
    Raster
        A raster of regions (object dtype) whose shape is that of the region
        (in nodes for a grid) with length 1 along `axis`. The line at index
        `p` starts at `region.front() + p * step`.
    """
    step = region.step() if isinstance(region, Grid) else Position.one(region.dimension())
    shape = list(region.shape() if isinstance(region, Grid) else region.box().shape())
    shape[axis] = 1
    tiles = Raster(shape, dtype=object, fill=None)
    back_along = region.box().back()[axis]
    for index in tiles.domain():
        front = region.front() + index * step
        back = list(front)
        back[axis] = back_along
        line = Box(front, back)
        tiles[index] = Grid(line, step) if isinstance(region, Grid) else line
    return tiles


def tile_raster_along(raster: Raster, axis: int) -> Raster:
    """
    Split a raster into lines parallel to a given axis.
    
    Returns
    -------
    Raster
        A raster of patches (object dtype) indexed like `tile_region_along`.
    """
    lines = tile_region_along(raster.domain(), axis)
    tiles = Raster(lines.shape(), dtype=object, fill=None)
    for index in lines.domain():
        tiles[index] = raster.patch(lines[index])
    return tiles


def tile_region(box: Box, tile_shape: Union[int, Sequence[int]]) -> List[Box]:
    """
    Split a box into blocks of given shape.
    
    Block fronts are the nodes of a grid whose step is the tile shape; the
    last block along each axis is clamped to the box.
    
    Parameters
    ----------
    box : Box
        The box to be split.
    tile_shape : int or sequence of int
        The block shape.
        
    Returns
    -------
    list of Box
        The blocks, in row-major ordering of their fronts.
    """
    box = box.box()
    fronts = Grid(box, tile_shape)
    extent = fronts.step() - 1
    return [Box(front, (front + extent).min(box.back())) for front in fronts]
