"""Parallelization utilities for txrepair.

Genes are independent, so per-gene extension can run on several
workers. Results are always returned in gene order.

Example:
    >>> from txrepair.parallel import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=8, backend="processes")
    >>> results, stats = executor.map_items(func, items)
"""

from txrepair.parallel.executor import (
    ExecutionStats,
    ExecutorBackend,
    ParallelExecutor,
    TaskError,
    TaskResult,
    create_progress_bar,
    get_optimal_workers,
)

__all__ = [
    "ExecutionStats",
    "ExecutorBackend",
    "ParallelExecutor",
    "TaskError",
    "TaskResult",
    "create_progress_bar",
    "get_optimal_workers",
]
