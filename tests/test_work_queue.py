"""Tests for the concurrent work queue."""

from __future__ import annotations

import threading
import time
from collections import Counter
from unittest.mock import patch

import pytest

from project_cleanup.work_queue import WorkQueue, default_worker_count


class TestDrain:
    """Tests for draining the queue."""

    @pytest.mark.parametrize("workers", [1, 2, 4, 16])
    def test_every_item_processed_once(self, workers: int) -> None:
        """Each pushed item is handled exactly once across all workers."""
        queue: WorkQueue[int] = WorkQueue(range(1, 20), retry_sleep=0.005)
        seen: Counter[int] = Counter()
        lock = threading.Lock()

        def on_item(item: int) -> None:
            with lock:
                seen[item] += 1

        queue.drain(workers, on_item)

        assert sum(seen.values()) == 19
        assert set(seen) == set(range(1, 20))
        assert all(count == 1 for count in seen.values())
        assert len(queue) == 0

    def test_items_pushed_while_draining(self) -> None:
        """Items pushed by callbacks are processed before drain returns."""
        queue: WorkQueue[int] = WorkQueue([0], retry_sleep=0.005)
        processed: list[int] = []
        lock = threading.Lock()

        # Each item below depth 4 produces two children: a binary tree of 31 nodes
        def on_item(depth: int) -> None:
            with lock:
                processed.append(depth)
            if depth < 4:
                queue.push(depth + 1)
                queue.push(depth + 1)

        queue.drain(4, on_item)

        assert len(processed) == 31
        assert Counter(processed) == {0: 1, 1: 2, 2: 4, 3: 8, 4: 16}

    def test_slow_producer_does_not_strand_work(self) -> None:
        """Idle workers wait for a slow item instead of giving up."""
        queue: WorkQueue[str] = WorkQueue(["slow"], retry_sleep=0.001)
        processed: list[str] = []
        lock = threading.Lock()

        def on_item(item: str) -> None:
            if item == "slow":
                # Much longer than many idle retries of the other workers
                time.sleep(0.2)
                queue.push("late")
            with lock:
                processed.append(item)

        queue.drain(4, on_item)

        assert sorted(processed) == ["late", "slow"]

    def test_on_idle_receives_consecutive_counts(self) -> None:
        """Idle callbacks count consecutive empty pops per worker."""
        queue: WorkQueue[str] = WorkQueue(["slow"], retry_sleep=0.005)
        idle_counts: list[int] = []
        lock = threading.Lock()

        def on_idle(tries: int) -> None:
            with lock:
                idle_counts.append(tries)

        queue.drain(2, lambda _item: time.sleep(0.1), on_idle)

        assert idle_counts
        assert idle_counts[0] == 1
        assert all(tries >= 1 for tries in idle_counts)

    def test_empty_queue_returns_without_workers(self) -> None:
        """Draining an empty queue does not start a worker pool."""
        queue: WorkQueue[int] = WorkQueue()

        with patch("project_cleanup.work_queue.ThreadPoolExecutor") as executor:
            queue.drain(8, lambda _item: None)

        executor.assert_not_called()

    def test_invalid_worker_count(self) -> None:
        """At least one worker is required."""
        queue: WorkQueue[int] = WorkQueue([1])
        with pytest.raises(ValueError, match="worker_count"):
            queue.drain(0, lambda _item: None)

    def test_callback_error_propagates(self) -> None:
        """The first callback error stops the queue and is re-raised."""
        queue: WorkQueue[int] = WorkQueue(range(5), retry_sleep=0.005)

        def on_item(item: int) -> None:
            if item == 2:
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            queue.drain(1, on_item)


class TestPush:
    """Tests for pushing items."""

    def test_len_tracks_pending_items(self) -> None:
        """len() reports items not yet popped."""
        queue: WorkQueue[str] = WorkQueue()
        queue.push("a")
        queue.push("b")
        assert len(queue) == 2

    def test_concurrent_pushes(self) -> None:
        """Pushes from many threads are all kept."""
        queue: WorkQueue[int] = WorkQueue()

        def producer(offset: int) -> None:
            for i in range(100):
                queue.push(offset + i)

        threads = [threading.Thread(target=producer, args=(n * 100,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(queue) == 800


class TestDefaultWorkerCount:
    """Tests for the default worker count."""

    def test_minimum_applies(self) -> None:
        """Small machines still get the minimum worker count."""
        with patch("project_cleanup.work_queue.os.cpu_count", return_value=1):
            assert default_worker_count() == 8

    def test_scales_with_cpus(self) -> None:
        """Larger machines get a multiple of the CPU count."""
        with patch("project_cleanup.work_queue.os.cpu_count", return_value=16):
            assert default_worker_count() == 32
            assert default_worker_count(multiplier=1, minimum=2) == 16

    def test_unknown_cpu_count(self) -> None:
        """An unknown CPU count falls back to the minimum."""
        with patch("project_cleanup.work_queue.os.cpu_count", return_value=None):
            assert default_worker_count(minimum=4) == 4
