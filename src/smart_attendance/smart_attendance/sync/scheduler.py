from __future__ import annotations

import logging
import threading
from typing import Optional

from .service import SyncReconciler

logger = logging.getLogger(__name__)


class PeriodicSync:
    """Runs ``sync_all`` on a background thread until stopped.

    Correctness never depends on the cadence; a failed cycle is logged and the
    next one simply tries again.
    """

    def __init__(self, reconciler: SyncReconciler, *, interval_seconds: float, run_immediately: bool = True):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._reconciler = reconciler
        self._interval = float(interval_seconds)
        self._run_immediately = run_immediately
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._loop, name="periodic-sync", daemon=True)
        self._thread.start()
        logger.info("Periodic sync started (every %.0fs)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stopping.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("Periodic sync stopped")

    def _loop(self) -> None:
        if not self._run_immediately and self._stopping.wait(self._interval):
            return
        while not self._stopping.is_set():
            try:
                self._reconciler.sync_all()
            except Exception:
                logger.exception("Sync cycle crashed")
            self.cycles += 1
            if self._stopping.wait(self._interval):
                break
