"""Domain Utilities - Helper functions for performance optimization.

This module provides utility functions for determining optimal processing strategies
based on batch characteristics and system resources.
"""

import os
from typing import Optional

DEFAULT_PARALLEL_THRESHOLD = 50000
MIN_PARALLEL_CPUS = 2


def should_use_parallel(
    row_count: int,
    max_workers: Optional[int] = None,
    threshold: int = DEFAULT_PARALLEL_THRESHOLD,
) -> bool:
    """Determine if record normalization should run on a thread pool.

    Decision logic:
    - Sequential if: fewer than 2 workers requested or fewer than 2 CPU cores
    - Sequential if: row_count <= threshold (pool overhead outweighs the gain)
    - Parallel otherwise

    Parameters:
        row_count: Number of records in the batch
        max_workers: Requested worker count (None means CPU count)
        threshold: Batch size above which parallelism is considered

    Returns:
        bool: True if a thread pool should be used, False otherwise
    """
    if row_count <= 0:
        return False

    cpu_count = os.cpu_count() or 1
    workers = max_workers if max_workers is not None else cpu_count
    if workers < 2 or cpu_count < MIN_PARALLEL_CPUS:
        return False

    return row_count > threshold


def resolve_worker_count(max_workers: Optional[int] = None) -> int:
    """Return a usable worker count (at least 1)."""
    if max_workers is None:
        return os.cpu_count() or 1
    return max(1, max_workers)
