"""Unit tests for unitext2path.concurrency."""

import threading
import time

import pytest

from unitext2path.concurrency import CancelToken, run_batch
from unitext2path.exceptions import FontLoadError, RenderTimeoutError


class TestCancelToken:
    """Tests for CancelToken."""

    def test_unbounded_token(self) -> None:
        token = CancelToken()
        assert token.remaining() is None
        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel(self) -> None:
        token = CancelToken(timeout=60)
        token.cancel()
        assert token.cancelled
        with pytest.raises(RenderTimeoutError):
            token.raise_if_cancelled()

    def test_deadline_expires(self) -> None:
        token = CancelToken(timeout=0.01)
        time.sleep(0.05)
        assert token.remaining() == 0.0
        assert token.cancelled


class TestRunBatch:
    """Tests for run_batch()."""

    def test_results_and_errors_are_kept_per_task(self) -> None:
        def failing() -> bytes:
            raise FontLoadError("Noto+Sans", 400, "offline")

        futures = run_batch({"ok": lambda: 42, "bad": failing}, CancelToken(timeout=5))

        assert futures["ok"].result() == 42
        with pytest.raises(FontLoadError):
            futures["bad"].result()

    def test_tasks_run_concurrently(self) -> None:
        barrier = threading.Barrier(3, timeout=5)
        futures = run_batch({i: barrier.wait for i in range(3)}, CancelToken(timeout=5), max_workers=3)
        assert sorted(f.result() for f in futures.values()) == [0, 1, 2]

    def test_empty_batch(self) -> None:
        assert run_batch({}, CancelToken(timeout=1)) == {}

    def test_timeout_cancels_token(self) -> None:
        release = threading.Event()
        token = CancelToken(timeout=0.1)
        try:
            with pytest.raises(RenderTimeoutError) as exc_info:
                run_batch({"slow": lambda: release.wait(5)}, token)
        finally:
            release.set()
        assert token.cancelled
        assert exc_info.value.timeout == 0.1
