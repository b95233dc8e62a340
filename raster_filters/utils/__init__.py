#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for raster filtering.

This package contains general-purpose helpers for timing and batched
evaluation.
"""
