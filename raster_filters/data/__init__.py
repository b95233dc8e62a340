#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data types for ND raster processing.

This package contains positions and vectors, the region family (boxes, masks
and grids), rasters with their borrowed patches, and region tiling.
"""
