"""Local parallel execution of per-gene work.

Genes are independent of each other, so gene-level batches can run in
any order. This module runs a function over a list of items using a
serial loop, a thread pool or a process pool, and returns the results
in input order.

Features:
    - Multiple execution backends (serial, threads, processes)
    - Progress callbacks (used with rich progress bars)
    - Per-task timing and error capture

Example:
    >>> from txrepair.parallel.executor import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=4, backend="processes")
    >>> results, stats = executor.map_items(process_gene, genes)
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import (
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from enum import Enum
from typing import Any, Callable, TypeVar

import attrs

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# Enums
# =============================================================================


class ExecutorBackend(Enum):
    """Available execution backends."""

    SERIAL = "serial"
    THREADS = "threads"
    PROCESSES = "processes"


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(slots=True)
class TaskResult:
    """Result from a parallel task."""

    task_id: str
    success: bool
    result: Any | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "task_id": self.task_id,
            "success": self.success,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@attrs.define(slots=True)
class ExecutionStats:
    """Statistics from parallel execution."""

    total_tasks: int
    successful: int
    failed: int
    total_duration: float
    mean_task_duration: float
    max_task_duration: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_tasks": self.total_tasks,
            "successful": self.successful,
            "failed": self.failed,
            "total_duration": round(self.total_duration, 3),
            "mean_task_duration": round(self.mean_task_duration, 3),
            "max_task_duration": round(self.max_task_duration, 3),
        }


class TaskError(RuntimeError):
    """A task failed and execution was stopped."""

    def __init__(self, task_id: str, error: BaseException | str) -> None:
        super().__init__(f"Task {task_id} failed: {error}")
        self.task_id = task_id
        self.error = error


def _timed_call(func: Callable[[T], R], task_id: str, item: T) -> TaskResult:
    """Run ``func(item)`` and capture timing.

    Module level so that the process backend can pickle it.
    """
    start_time = time.time()
    try:
        result = func(item)
        return TaskResult(
            task_id=task_id,
            success=True,
            result=result,
            duration_seconds=time.time() - start_time,
        )
    except Exception as e:
        return TaskResult(
            task_id=task_id,
            success=False,
            error=f"{type(e).__name__}: {e}",
            duration_seconds=time.time() - start_time,
        )


# =============================================================================
# Parallel Executor
# =============================================================================


class ParallelExecutor:
    """Execute a function over items in parallel.

    Features:
    - Multiple backends (serial, threads, processes)
    - Progress tracking with callbacks
    - Fail-fast or continue-on-error handling
    - Results returned in input order

    Example:
        >>> executor = ParallelExecutor(n_workers=4, backend="threads")
        >>> results, stats = executor.map_items(func, items)
        >>> print(f"Processed {stats.successful}/{stats.total_tasks} items")
    """

    def __init__(
        self,
        n_workers: int = 1,
        backend: ExecutorBackend | str = ExecutorBackend.PROCESSES,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            n_workers: Number of parallel workers (1 = serial).
            backend: Execution backend.
            progress_callback: Called with (completed, total, task_id).
        """
        self.n_workers = max(1, n_workers)
        self.backend = (
            ExecutorBackend(backend) if isinstance(backend, str) else backend
        )
        self.progress_callback = progress_callback

        # Auto-select serial if n_workers=1
        if self.n_workers == 1:
            self.backend = ExecutorBackend.SERIAL

    def map_items(
        self,
        func: Callable[[T], R],
        items: list[T],
        task_ids: list[str] | None = None,
        continue_on_error: bool = True,
    ) -> tuple[list[TaskResult], ExecutionStats]:
        """Apply function to each item.

        Args:
            func: Function to apply to each item. Must be picklable for
                the process backend.
            items: Items to process.
            task_ids: Labels for the items (defaults to item_000000...).
            continue_on_error: If False, raise TaskError on the first failure.

        Returns:
            Tuple of (results in input order, execution stats).

        Raises:
            TaskError: If a task fails and continue_on_error is False.
        """
        if task_ids is None:
            task_ids = [f"item_{i:06d}" for i in range(len(items))]
        if len(task_ids) != len(items):
            raise ValueError("task_ids and items must have the same length")

        if not items:
            return [], ExecutionStats(
                total_tasks=0,
                successful=0,
                failed=0,
                total_duration=0.0,
                mean_task_duration=0.0,
                max_task_duration=0.0,
            )

        logger.debug(
            f"Processing {len(items)} tasks with {self.n_workers} workers "
            f"(backend={self.backend.value})"
        )

        start_time = time.time()

        if self.backend == ExecutorBackend.SERIAL:
            results = self._execute_serial(func, items, task_ids, continue_on_error)
        else:
            pool_cls = (
                ThreadPoolExecutor
                if self.backend == ExecutorBackend.THREADS
                else ProcessPoolExecutor
            )
            results = self._execute_pool(pool_cls, func, items, task_ids, continue_on_error)

        total_duration = time.time() - start_time
        successful = sum(1 for r in results if r.success)
        durations = [r.duration_seconds for r in results]

        stats = ExecutionStats(
            total_tasks=len(results),
            successful=successful,
            failed=len(results) - successful,
            total_duration=total_duration,
            mean_task_duration=sum(durations) / len(durations) if durations else 0,
            max_task_duration=max(durations) if durations else 0,
        )

        logger.debug(
            f"Completed: {successful}/{len(items)} tasks, "
            f"duration={total_duration:.1f}s"
        )

        return results, stats

    def _execute_serial(
        self,
        func: Callable,
        items: list,
        task_ids: list[str],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Serial execution with progress tracking."""
        results = []
        total = len(items)

        for i, (task_id, item) in enumerate(zip(task_ids, items)):
            task_result = _timed_call(func, task_id, item)
            results.append(task_result)

            if self.progress_callback:
                self.progress_callback(i + 1, total, task_id)

            if not task_result.success and not continue_on_error:
                logger.error(f"Task {task_id} failed: {task_result.error}")
                raise TaskError(task_id, task_result.error or "unknown error")

        return results

    def _execute_pool(
        self,
        pool_cls: type[ThreadPoolExecutor] | type[ProcessPoolExecutor],
        func: Callable,
        items: list,
        task_ids: list[str],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Pooled execution; results are re-ordered to match the input."""
        results: list[TaskResult | None] = [None] * len(items)
        total = len(items)
        completed = 0

        with pool_cls(max_workers=self.n_workers) as executor:
            futures: dict[Future, int] = {
                executor.submit(_timed_call, func, task_id, item): i
                for i, (task_id, item) in enumerate(zip(task_ids, items))
            }

            for future in as_completed(futures):
                completed += 1
                task_result = future.result()
                results[futures[future]] = task_result

                if self.progress_callback:
                    self.progress_callback(completed, total, task_result.task_id)

                if not task_result.success and not continue_on_error:
                    logger.error(f"Task {task_result.task_id} failed: {task_result.error}")
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise TaskError(task_result.task_id, task_result.error or "unknown error")

        return [r for r in results if r is not None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_optimal_workers(max_workers: int | None = None) -> int:
    """Determine number of workers from the CPU count.

    Args:
        max_workers: Maximum workers (defaults to CPU count).

    Returns:
        Number of workers, at least 1.
    """
    cpu_count = os.cpu_count() or 1
    if max_workers is None or max_workers < 1:
        return cpu_count
    return min(max_workers, cpu_count)


def create_progress_bar() -> Any:
    """Create rich progress bar for parallel execution.

    Returns:
        Rich Progress object.
    """
    from rich.progress import (
        BarColumn,
        MofNCompleteColumn,
        Progress,
        SpinnerColumn,
        TextColumn,
        TimeRemainingColumn,
    )

    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        transient=True,
    )
