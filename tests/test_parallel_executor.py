"""Tests for splicegraft.parallel.executor module.

Tests cover:
- TaskResult data structure
- ExecutionStats data structure
- ParallelExecutor with serial and thread backends
"""

import threading
import time

import pytest

from splicegraft.parallel.executor import (
    ExecutionStats,
    ExecutorBackend,
    ParallelExecutor,
    TaskResult,
)


# =============================================================================
# Data Structure Tests
# =============================================================================


class TestTaskResult:
    """Tests for TaskResult data structure."""

    def test_create_successful_result(self):
        """Test creating successful TaskResult."""
        result = TaskResult(
            task_id="AA",
            success=True,
            result={"transcripts": 10},
            duration_seconds=1.5,
        )
        assert result.task_id == "AA"
        assert result.success is True
        assert result.result == {"transcripts": 10}
        assert result.error is None

    def test_create_failed_result(self):
        """Test creating failed TaskResult."""
        result = TaskResult(task_id="AD", success=False, error="Boom")
        assert result.success is False
        assert result.result is None
        assert result.error == "Boom"
        assert result.exception is None

    def test_task_result_to_dict(self):
        """Test serialization to dict."""
        result = TaskResult(task_id="AF", success=True, duration_seconds=1.23456)
        d = result.to_dict()
        assert d["task_id"] == "AF"
        assert d["success"] is True
        assert d["error"] is None
        assert d["duration_seconds"] == 1.235


class TestExecutionStats:
    """Tests for ExecutionStats data structure."""

    def test_execution_stats_to_dict(self):
        """Test serialization to dict."""
        stats = ExecutionStats(
            total_tasks=4,
            successful=3,
            failed=1,
            total_duration=10.12345,
            mean_task_duration=2.5,
            max_task_duration=4.0004,
        )
        d = stats.to_dict()
        assert d["total_tasks"] == 4
        assert d["successful"] == 3
        assert d["failed"] == 1
        assert d["total_duration"] == 10.123
        assert d["max_task_duration"] == 4.0


# =============================================================================
# Executor Tests
# =============================================================================


class TestParallelExecutor:
    """Tests for ParallelExecutor class."""

    @pytest.fixture
    def sample_items(self) -> list[str]:
        """Event class codes as work items."""
        return ["AA", "AD", "AF", "AL"]

    def test_executor_creation(self):
        """Test executor initialization."""
        executor = ParallelExecutor(n_workers=4, backend=ExecutorBackend.THREADS)
        assert executor.n_workers == 4
        assert executor.backend == ExecutorBackend.THREADS

    def test_executor_single_worker_uses_serial(self):
        """Test that single worker uses serial backend."""
        executor = ParallelExecutor(n_workers=1, backend="threads")
        assert executor.backend == ExecutorBackend.SERIAL

    def test_executor_string_backend(self):
        """Test using string for backend."""
        executor = ParallelExecutor(n_workers=2, backend="threads")
        assert executor.backend == ExecutorBackend.THREADS

    def test_executor_invalid_backend(self):
        """Test that unknown backends are rejected."""
        with pytest.raises(ValueError):
            ParallelExecutor(n_workers=2, backend="processes")

    def test_executor_serial_success(self, sample_items):
        """Test serial execution with successful tasks."""
        executor = ParallelExecutor(n_workers=1)
        results, stats = executor.map_items(str.lower, sample_items)

        assert stats.total_tasks == 4
        assert stats.successful == 4
        assert stats.failed == 0
        assert [r.result for r in results] == ["aa", "ad", "af", "al"]

    def test_executor_serial_with_errors(self, sample_items):
        """Test serial execution with errors."""

        def failing_func(item):
            if item == "AF":
                raise ValueError("Simulated error")
            return item

        executor = ParallelExecutor(n_workers=1)
        results, stats = executor.map_items(failing_func, sample_items)

        assert stats.successful == 3
        assert stats.failed == 1
        failed = [r for r in results if not r.success]
        assert len(failed) == 1
        assert "Simulated error" in failed[0].error
        assert isinstance(failed[0].exception, ValueError)
        assert "exception" not in failed[0].to_dict()

    def test_executor_stop_on_error(self, sample_items):
        """Test stopping execution on error."""
        seen = []

        def failing_func(item):
            seen.append(item)
            if item == "AD":
                raise ValueError("Stop here")
            return item

        executor = ParallelExecutor(n_workers=1)
        with pytest.raises(RuntimeError, match="Stop here") as excinfo:
            executor.map_items(failing_func, sample_items, continue_on_error=False)
        assert seen == ["AA", "AD"]
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert "item_000001" in str(excinfo.value)

    def test_executor_empty_items(self):
        """Test execution with empty item list."""
        executor = ParallelExecutor(n_workers=1)
        results, stats = executor.map_items(lambda x: x, [])

        assert stats.total_tasks == 0
        assert stats.mean_task_duration == 0.0
        assert results == []

    def test_executor_task_ids(self, sample_items):
        """Test custom and default task ids."""
        executor = ParallelExecutor(n_workers=1)
        results, _ = executor.map_items(str.lower, sample_items, task_ids=sample_items)
        assert [r.task_id for r in results] == sample_items

        results, _ = executor.map_items(str.lower, sample_items[:2])
        assert [r.task_id for r in results] == ["item_000000", "item_000001"]

    def test_executor_task_ids_length_mismatch(self, sample_items):
        """Test that task ids must match items."""
        executor = ParallelExecutor(n_workers=1)
        with pytest.raises(ValueError):
            executor.map_items(str.lower, sample_items, task_ids=["AA"])

    def test_executor_progress_callback(self, sample_items):
        """Test progress callback."""
        progress_log = []

        def callback(completed, total, task_id):
            progress_log.append((completed, total, task_id))

        executor = ParallelExecutor(n_workers=1, progress_callback=callback)
        executor.map_items(str.lower, sample_items)

        assert len(progress_log) == 4
        assert progress_log[-1][0] == 4
        assert progress_log[-1][1] == 4

    def test_executor_threads_backend(self, sample_items):
        """Test threaded execution keeps input order."""

        def slow_func(item):
            # Earlier items finish last
            time.sleep(0.01 * (4 - sample_items.index(item)))
            return item.lower()

        executor = ParallelExecutor(n_workers=4, backend=ExecutorBackend.THREADS)
        results, stats = executor.map_items(slow_func, sample_items)

        assert stats.successful == 4
        assert [r.result for r in results] == ["aa", "ad", "af", "al"]

    def test_executor_threads_use_workers(self, sample_items):
        """Test threaded execution runs off the calling thread."""
        main = threading.get_ident()
        executor = ParallelExecutor(n_workers=2, backend="threads")
        results, _ = executor.map_items(lambda _: threading.get_ident(), sample_items)
        assert all(r.result != main for r in results)

    def test_executor_threads_stop_on_error(self, sample_items):
        """Test threaded execution re-raises failures when asked."""

        def failing_func(item):
            raise ValueError(f"bad {item}")

        executor = ParallelExecutor(n_workers=2, backend="threads")
        with pytest.raises(RuntimeError, match="bad") as excinfo:
            executor.map_items(failing_func, sample_items, continue_on_error=False)
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert str(excinfo.value.__cause__).startswith("bad ")


class TestExecutorBackend:
    """Tests for ExecutorBackend enum."""

    def test_backend_values(self):
        """Test backend enum values."""
        assert ExecutorBackend.SERIAL.value == "serial"
        assert ExecutorBackend.THREADS.value == "threads"

    def test_backend_from_string(self):
        """Test creating backend from string."""
        assert ExecutorBackend("threads") == ExecutorBackend.THREADS
