from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CallTimeout(Exception):
    """Raised when a collaborator call does not finish within the time limit."""


class BoundedCaller:
    """Runs blocking collaborator calls on a worker pool with a time limit.

    On timeout the pending future is cancelled and ``CallTimeout`` is raised;
    a call already running keeps its worker until it returns, but the caller
    is released immediately.
    """

    def __init__(self, timeout: float, *, max_workers: int = 4, name: str = "collaborator"):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = float(timeout)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)

    @property
    def timeout(self) -> float:
        return self._timeout

    def call(self, fn: Callable[[], T]) -> T:
        future = self._executor.submit(fn)
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as exc:
            future.cancel()
            logger.warning("%r did not finish within %.1fs", fn, self._timeout)
            raise CallTimeout(f"No answer within {self._timeout:g}s") from exc

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
