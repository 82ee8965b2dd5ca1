"""
Cancellable background rendering/decoding.

A :class:`RenderSurface` owns at most one in-flight :class:`RenderTask`.
Starting a new task cancels the previous one first; the cancelled task's
result is dropped and its cancellation error never reaches the caller.
Jobs poll ``token.raise_if_cancelled()`` at convenient points.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

from documents.exceptions.errors import RenderCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RenderCancelledError()


class RenderTask(Generic[T]):
    """Runs ``job(token)`` on a daemon thread and reports back unless cancelled."""

    def __init__(self, job: Callable[[CancelToken], T],
                 on_done: Optional[Callable[[T], None]] = None,
                 on_error: Optional[Callable[[BaseException], None]] = None) -> None:
        self._job = job
        self._on_done = on_done
        self._on_error = on_error
        self.token = CancelToken()
        self._thread = threading.Thread(target=self._run, daemon=True)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def start(self) -> "RenderTask[T]":
        self._thread.start()
        return self

    def cancel(self) -> None:
        self.token.cancel()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker; returns False if it is still running."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            result = self._job(self.token)
        except RenderCancelledError:
            logger.debug("Render task cancelled")
            return
        except Exception as ex:
            if self.token.cancelled:
                return
            logger.error(f"Render task failed: {ex}")
            if self._on_error is not None:
                self._on_error(ex)
            return
        if self.token.cancelled:
            return
        if self._on_done is not None:
            self._on_done(result)


class RenderSurface:
    """One display area; only the most recently started task may deliver."""

    def __init__(self, on_error: Optional[Callable[[BaseException], None]] = None) -> None:
        self._on_error = on_error
        self._current: Optional[RenderTask[Any]] = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[RenderTask[Any]]:
        return self._current

    def render(self, job: Callable[[CancelToken], T],
               on_done: Optional[Callable[[T], None]] = None) -> RenderTask[T]:
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            task: RenderTask[T] = RenderTask(job, on_done, self._on_error)
            self._current = task
        return task.start()

    def cancel(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.cancel()
                self._current = None
