"""Ahead-of-time resource batches joined before the layout pass."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from unitext2path.exceptions import RenderTimeoutError

logger = logging.getLogger(__name__)

K = TypeVar("K")


class CancelToken:
    """Deadline plus a cancelled flag, threaded through every batch task."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    def remaining(self) -> float | None:
        """Seconds left before the deadline (None when unbounded)."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def cancel(self) -> None:
        self._cancelled.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RenderTimeoutError(self.timeout)


def run_batch(
    tasks: Mapping[K, Callable[[], Any]],
    token: CancelToken,
    max_workers: int = 8,
) -> dict[K, concurrent.futures.Future]:
    """Run every task concurrently and wait until all have settled.

    Returns the finished futures keyed like ``tasks``; each holds either a
    result or the task's own exception. If the token's deadline passes
    first, outstanding work is cancelled and RenderTimeoutError is raised.
    """
    if not tasks:
        return {}

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(tasks))),
        thread_name_prefix="ut2p-batch",
    )
    futures = {key: executor.submit(task) for key, task in tasks.items()}
    _done, pending = concurrent.futures.wait(futures.values(), timeout=token.remaining())
    if pending:
        token.cancel()
        for future in pending:
            future.cancel()
        executor.shutdown(wait=False, cancel_futures=True)
        logger.warning("Resource batch timed out with %d of %d tasks pending", len(pending), len(futures))
        raise RenderTimeoutError(token.timeout)

    executor.shutdown(wait=False)
    return futures
