#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Transforms of ND rasters.

This package contains boundary extrapolation and interpolation policies,
neighborhood kernels and filters, and affine resampling.
"""
