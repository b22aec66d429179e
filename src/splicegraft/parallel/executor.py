"""Local parallel execution of independent work items.

Event classes share no mutable state, so the pipeline can hand each class
to its own worker thread. The reference annotation is shared read-only.

Features:
    - Serial and thread backends
    - Per-task timing and error capture
    - Results returned in input order regardless of completion order

Example:
    >>> from splicegraft.parallel.executor import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=4, backend="threads")
    >>> results, stats = executor.map_items(process_class, classes)
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Any, Callable, Sequence, TypeVar

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


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(slots=True)
class TaskResult:
    """Result from one task."""

    task_id: str
    success: bool
    result: Any | None = None
    error: str | None = None
    exception: BaseException | None = attrs.field(default=None, repr=False)
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
    """Statistics from a batch of tasks."""

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


# =============================================================================
# Executor
# =============================================================================


class ParallelExecutor:
    """Execute independent tasks serially or in worker threads.

    Example:
        >>> executor = ParallelExecutor(n_workers=2, backend="threads")
        >>> results, stats = executor.map_items(str.upper, ["a", "b"])
        >>> [r.result for r in results]
        ['A', 'B']
    """

    def __init__(
        self,
        n_workers: int = 1,
        backend: ExecutorBackend | str = ExecutorBackend.THREADS,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            n_workers: Number of workers (1 = serial).
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
        items: Sequence[T],
        task_ids: Sequence[str] | None = None,
        continue_on_error: bool = True,
    ) -> tuple[list[TaskResult], ExecutionStats]:
        """Apply a function to each item.

        Args:
            func: Function to apply to each item.
            items: Items to process.
            task_ids: Optional ids for the tasks (default: item_000000, ...).
            continue_on_error: If False, raise RuntimeError (chained to the
                original exception) on the first failure.

        Returns:
            Tuple of (results in input order, execution stats).
        """
        if task_ids is None:
            task_ids = [f"item_{i:06d}" for i in range(len(items))]
        if len(task_ids) != len(items):
            raise ValueError("task_ids must match items in length")

        start_time = time.time()
        if self.backend == ExecutorBackend.SERIAL:
            results = self._execute_serial(func, items, task_ids, continue_on_error)
        else:
            results = self._execute_threaded(func, items, task_ids, continue_on_error)

        total_duration = time.time() - start_time
        successful = sum(1 for r in results if r.success)
        durations = [r.duration_seconds for r in results]
        stats = ExecutionStats(
            total_tasks=len(results),
            successful=successful,
            failed=len(results) - successful,
            total_duration=total_duration,
            mean_task_duration=sum(durations) / len(durations) if durations else 0.0,
            max_task_duration=max(durations) if durations else 0.0,
        )
        logger.debug(
            f"Completed {successful}/{len(items)} tasks "
            f"(backend={self.backend.value}, duration={total_duration:.2f}s)"
        )
        return results, stats

    def _run(self, func: Callable, item: Any, task_id: str) -> TaskResult:
        start_time = time.time()
        try:
            result = func(item)
        except Exception as e:
            logger.error(f"Task {task_id} failed: {e}")
            return TaskResult(
                task_id=task_id,
                success=False,
                error=str(e),
                exception=e,
                duration_seconds=time.time() - start_time,
            )
        return TaskResult(
            task_id=task_id,
            success=True,
            result=result,
            duration_seconds=time.time() - start_time,
        )

    def _execute_serial(
        self,
        func: Callable,
        items: Sequence,
        task_ids: Sequence[str],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Serial execution with progress tracking."""
        results = []
        total = len(items)
        for i, (item, task_id) in enumerate(zip(items, task_ids)):
            task_result = self._run(func, item, task_id)
            results.append(task_result)
            if not task_result.success and not continue_on_error:
                raise RuntimeError(
                    f"Task {task_result.task_id} failed: {task_result.error}"
                ) from task_result.exception
            if self.progress_callback:
                self.progress_callback(i + 1, total, task_id)
        return results

    def _execute_threaded(
        self,
        func: Callable,
        items: Sequence,
        task_ids: Sequence[str],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Threaded execution; results are put back in input order."""
        results: list[TaskResult | None] = [None] * len(items)
        total = len(items)
        completed = 0

        with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
            futures: dict[Future, int] = {
                executor.submit(self._run, func, item, task_id): i
                for i, (item, task_id) in enumerate(zip(items, task_ids))
            }
            for future in as_completed(futures):
                completed += 1
                task_result = future.result()
                results[futures[future]] = task_result
                if self.progress_callback:
                    self.progress_callback(completed, total, task_result.task_id)
                if not task_result.success and not continue_on_error:
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise RuntimeError(
                        f"Task {task_result.task_id} failed: {task_result.error}"
                    ) from task_result.exception

        return [r for r in results if r is not None]
