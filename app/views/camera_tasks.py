from __future__ import annotations

from collections.abc import Callable
import threading

from PySide6.QtCore import QRunnable, QThreadPool
from loguru import logger

from core.services.interfaces import IExecutor


class _CameraTask(QRunnable):
    """QRunnable wrapping one unit of camera work (crop, cleanup).

    Work that finishes after the executor was shut down is still allowed to
    complete; the pipeline decides whether its result is delivered.
    """

    def __init__(self, fn: Callable[[], None]) -> None:
        super().__init__()
        self._fn = fn

    def run(self) -> None:  # type: ignore[override]
        try:
            self._fn()
        except Exception as ex:  # pragma: no cover - background task
            logger.exception("Camera task failed: {}", ex)


class CameraExecutor(IExecutor):
    """Single-thread executor owned by the camera screen.

    Created when the screen is shown and shut down when it is hidden. Uses a
    private pool so camera work never competes with other background tasks.
    """

    def __init__(self) -> None:
        self._pool = QThreadPool()
        self._pool.setMaxThreadCount(1)
        self._lock = threading.Lock()
        self._shutdown = False

    @property
    def is_shutdown(self) -> bool:
        with self._lock:
            return self._shutdown

    def submit(self, fn: Callable[[], None]) -> bool:
        with self._lock:
            if self._shutdown:
                return False
            self._pool.start(_CameraTask(fn))
            return True

    def shutdown(self, wait_ms: int = -1) -> None:
        """Reject new work and wait for queued and running tasks to finish."""
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        self._pool.waitForDone(wait_ms)
        logger.debug("Camera executor shut down")
