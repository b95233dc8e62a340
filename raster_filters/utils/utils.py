#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for the raster filtering engine.

This module provides common utility functions used across the filtering
modules, including timing and batched, optionally parallel, evaluation.
"""
import numpy as np
import time
import functools
from typing import Callable, Any, List, Optional
from tqdm import tqdm
from joblib import Parallel, delayed

from raster_filters.core.config import PERFORMANCE_CONFIG, FILTER_CONFIG
from raster_filters.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.
    
    Parameters
    ----------
    func : Callable
        Function to time.
        
    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug(f"Function {func.__qualname__} took {elapsed:.4f} seconds to run")
        return result
    return wrapper


def split_batches(positions: np.ndarray, chunk_size: Optional[int] = None) -> List[np.ndarray]:
    """
    Split an array of positions into consecutive batches.
    
    Parameters
    ----------
    positions : np.ndarray
        Array of shape (count, dimension).
    chunk_size : int, optional
        Maximum number of positions per batch. If None, uses the value
        from FILTER_CONFIG.
        
    Returns
    -------
    list of np.ndarray
        Views of the input, in order. Empty input yields no batch.
    """
    if chunk_size is None:
        chunk_size = FILTER_CONFIG.get("chunk_size", 65536)
    chunk_size = max(int(chunk_size), 1)
    return [positions[i:i + chunk_size] for i in range(0, len(positions), chunk_size)]


def parallel_apply(
    func: Callable, 
    iterable: List[Any], 
    n_jobs: Optional[int] = None, 
    prefer: Optional[str] = None, 
    progress: Optional[bool] = None,
    **kwargs
) -> List[Any]:
    """
    Apply a function to an iterable, in parallel if enabled.
    
    Parameters
    ----------
    func : Callable
        Function to apply.
    iterable : List[Any]
        Items to process.
    n_jobs : int, optional
        Number of jobs. If None, uses the value from FILTER_CONFIG.
    prefer : str, optional
        'processes' or 'threads'. If None, uses PERFORMANCE_CONFIG.
    progress : bool, optional
        Whether to show a progress bar. If None, uses FILTER_CONFIG.
    **kwargs
        Additional arguments to pass to the function.
        
    Returns
    -------
    List[Any]
        Results of applying the function to each item, in order.
    """
    if n_jobs is None:
        n_jobs = FILTER_CONFIG.get("n_jobs", 1)
    if prefer is None:
        prefer = PERFORMANCE_CONFIG.get("parallel_prefer", "threads")
    if progress is None:
        progress = FILTER_CONFIG.get("progress", False)
    
    name = getattr(func, "__name__", type(func).__name__)
    
    if not PERFORMANCE_CONFIG.get("use_parallel", True) or n_jobs == 1 or len(iterable) <= 1:
        logger.debug(f"Running {len(iterable)} tasks sequentially")
        if progress:
            iterable = tqdm(iterable, desc=f"Running {name}")
        return [func(item, **kwargs) for item in iterable]
    
    logger.debug(f"Running {len(iterable)} tasks in parallel with {n_jobs} jobs")
    return Parallel(n_jobs=n_jobs, prefer=prefer, verbose=10 if progress else 0)(
        delayed(func)(item, **kwargs) for item in iterable
    )
