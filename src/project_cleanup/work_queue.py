"""Concurrent work queue drained by a pool of worker threads.

Processing an item may push new items onto the same queue, so the total
amount of work is not known up front. Completion is detected with an
outstanding-items counter: it is incremented on every push and decremented
only after the item's callback has returned, including any pushes that
callback made. Workers exit once the counter reaches zero, so a worker can
never give up while another worker is still producing work.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Generic, Iterable, TypeVar

T = TypeVar("T")

# Time an idle worker waits for new work before checking the queue again
RETRY_SLEEP_MS = 50

logger = logging.getLogger("project-cleanup")


def default_worker_count(multiplier: int = 2, minimum: int = 8) -> int:
    """Number of workers for I/O-bound traversal.

    Directory reads spend most of their time waiting on the filesystem, so
    this deliberately exceeds the number of CPU cores.
    """
    return max(minimum, (os.cpu_count() or 1) * multiplier)


class WorkQueue(Generic[T]):
    """Unordered multi-producer, multi-consumer queue with completion detection."""

    def __init__(self, items: Iterable[T] = (), *, retry_sleep: float = RETRY_SLEEP_MS / 1000) -> None:
        """Initialize the queue.

        Args:
            items: Initial items.
            retry_sleep: Seconds an idle worker waits before retrying.

        """
        self.retry_sleep = retry_sleep
        self._items: deque[T] = deque()
        self._outstanding = 0
        self._condition = threading.Condition()
        self._error: Exception | None = None

        for item in items:
            self.push(item)

    def __len__(self) -> int:
        with self._condition:
            return len(self._items)

    def push(self, item: T) -> None:
        """Add an item. Safe to call from any worker."""
        with self._condition:
            self._items.append(item)
            self._outstanding += 1
            self._condition.notify()

    def _pop(self) -> tuple[bool, T | None]:
        """Pop an item if one is available.

        Returns:
            (found, item). ``found`` is False when the queue is empty.

        """
        with self._condition:
            if self._items:
                return True, self._items.popleft()
            return False, None

    def _task_done(self) -> None:
        with self._condition:
            self._outstanding -= 1
            if self._outstanding == 0:
                self._condition.notify_all()

    def _finished(self) -> bool:
        with self._condition:
            return self._outstanding == 0 or self._error is not None

    def _fail(self, error: Exception) -> None:
        with self._condition:
            if self._error is None:
                self._error = error
            self._condition.notify_all()

    def _wait_for_work(self) -> None:
        with self._condition:
            if not self._items and self._outstanding and self._error is None:
                self._condition.wait(self.retry_sleep)

    def _worker(self, on_item: Callable[[T], None], on_idle: Callable[[int], None]) -> None:
        tries = 0

        while not self._finished():
            found, item = self._pop()

            if found:
                tries = 0
                try:
                    on_item(item)  # type: ignore[arg-type]
                except Exception as e:
                    self._fail(e)
                finally:
                    self._task_done()
                continue

            tries += 1
            on_idle(tries)
            self._wait_for_work()

    def drain(
        self,
        worker_count: int,
        on_item: Callable[[T], None],
        on_idle: Callable[[int], None] = lambda _tries: None,
    ) -> None:
        """Process every item, including items pushed while draining.

        Blocks until all items have been handled. No ordering is guaranteed
        between items.

        Args:
            worker_count: Number of worker threads.
            on_item: Called once per item, on some worker thread.
            on_idle: Called with the worker's consecutive empty-pop count
                each time it finds the queue empty.

        Raises:
            ValueError: If ``worker_count`` is less than 1.
            Exception: The first exception raised by ``on_item``; remaining
                items are left unprocessed.

        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")

        # No use in spawning workers for an empty queue
        if self._finished():
            return

        with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="work-queue") as executor:
            futures = [executor.submit(self._worker, on_item, on_idle) for _ in range(worker_count)]
            for future in futures:
                future.result()

        if self._error is not None:
            error, self._error = self._error, None
            logger.debug("Work queue stopped after error: %s", error)
            raise error
