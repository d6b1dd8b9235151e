"""Parallel execution utilities for the pipeline.

Carrier buckets are independent after partitioning, so per-carrier work can be
fanned out with joblib. Results always come back in input order.
"""

import os
from typing import Any, Callable, List, Optional, Union

from joblib import Parallel, delayed

from src.utils.logging_utils import get_logger

logger = get_logger(__name__)

SUPPORTED_BACKENDS = ("threading", "loky")


def get_optimal_workers() -> int:
    """Get optimal number of workers based on system resources."""
    cpu_count = os.cpu_count() or 1
    # Cap for stability on large machines
    return min(8, cpu_count)


def resolve_workers(workers: Union[int, str, None]) -> int:
    """Turn a workers setting into a concrete worker count.

    Args:
        workers: Positive int, "auto", or None (sequential)

    Returns:
        Worker count, at least 1

    """
    if workers is None:
        return 1
    if workers == "auto":
        return get_optimal_workers()
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise ValueError(f"workers must be a positive int or 'auto', got {workers!r}")
    cpu_count = os.cpu_count() or 1
    return max(1, min(workers, cpu_count))


def parallel_map(
    func: Callable[[Any], Any],
    items: List[Any],
    workers: Optional[int] = None,
    backend: str = "threading",
) -> List[Any]:
    """Parallel map using joblib with deterministic ordering.

    Args:
        func: Function to apply to each item
        items: List of items to process
        workers: Number of workers (None or 1 runs sequentially)
        backend: Backend to use ('threading' or 'loky')

    Returns:
        List of results in the same order as input items

    """
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(f"Unsupported parallel backend: {backend}")

    if workers is None or workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]

    n_jobs = min(workers, len(items))
    logger.debug(f"parallel_map | items={len(items)} | n_jobs={n_jobs} | backend={backend}")

    # Parallel only returns once every task has finished
    results = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(func)(item) for item in items
    )
    return list(results)
