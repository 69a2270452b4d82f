"""Process-lifetime font cache with coalesced loads."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING, Protocol

from unitext2path.exceptions import FontLoadError, RenderTimeoutError
from unitext2path.fonts.handle import FontHandle

if TYPE_CHECKING:
    from unitext2path.concurrency import CancelToken

logger = logging.getLogger(__name__)


class FontBytesLoader(Protocol):
    """Font-acquisition collaborator: returns raw font bytes or raises FontLoadError."""

    def __call__(self, family: str, weight: int) -> bytes: ...


class FontCache:
    """Cache of loaded fonts keyed by (family, weight).

    The cache lives as long as the renderer that owns it. Entries are only
    ever added: the first successful load for a key wins and is never
    replaced. Concurrent requests for a key that is still loading wait on
    the same future, so each key is loaded at most once at a time. Failed
    loads are not stored; a later request retries them.
    """

    def __init__(self, loader: FontBytesLoader) -> None:
        self._loader = loader
        self._fonts: dict[tuple[str, int], FontHandle] = {}
        self._inflight: dict[tuple[str, int], Future[FontHandle]] = {}
        self._lock = threading.Lock()
        self._load_count = 0

    @property
    def load_count(self) -> int:
        """Number of underlying loader invocations so far."""
        return self._load_count

    def __contains__(self, key: tuple[str, int]) -> bool:
        with self._lock:
            return key in self._fonts

    def __len__(self) -> int:
        with self._lock:
            return len(self._fonts)

    def get(self, family: str, weight: int = 400, token: CancelToken | None = None) -> FontHandle:
        """Return the handle for (family, weight), loading it if needed.

        Raises:
            FontLoadError: the loader or the font parser failed.
            RenderTimeoutError: the token expired before the load started or
                while waiting on another loader.
        """
        key = (family, weight)
        with self._lock:
            handle = self._fonts.get(key)
            if handle is not None:
                return handle
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                # an expired render never becomes the owner other renders wait on
                if token:
                    token.raise_if_cancelled()
                future = Future()
                future.set_running_or_notify_cancel()
                self._inflight[key] = future

        if not owner:
            timeout = token.remaining() if token else None
            try:
                return future.result(timeout=timeout)
            except FutureTimeoutError as e:
                raise RenderTimeoutError(token.timeout if token else None) from e

        try:
            with self._lock:
                self._load_count += 1
            data = self._loader(family, weight)
            handle = FontHandle.from_bytes(data, family, weight)
        except FontLoadError as e:
            self._abandon(key, future, e)
            raise
        except RenderTimeoutError:
            # waiters have deadlines of their own and retry on the next request
            self._abandon(key, future, FontLoadError(family, weight, "load abandoned by a cancelled render"))
            raise
        except Exception as e:
            error = FontLoadError(family, weight, str(e))
            self._abandon(key, future, error)
            raise error from e

        with self._lock:
            handle = self._fonts.setdefault(key, handle)
            self._inflight.pop(key, None)
        future.set_result(handle)
        logger.debug("Loaded font %s w=%d (upem=%d)", family, weight, handle.units_per_em)
        return handle

    def _abandon(self, key: tuple[str, int], future: Future[FontHandle], error: Exception) -> None:
        with self._lock:
            self._inflight.pop(key, None)
        future.set_exception(error)
