#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality for raster filtering.

This module contains the core components for configuration management,
logging setup and error reporting.
"""
