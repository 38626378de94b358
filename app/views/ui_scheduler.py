from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, Qt, Signal, Slot
from loguru import logger

from core.services.interfaces import IScheduler


class QtUiScheduler(QObject, IScheduler):
    """Marshals callables onto the thread that owns this object (the GUI thread).

    `post` may be called from any thread; the callable runs later from the
    owning thread's event loop through a queued signal.
    """

    _posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._posted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    def post(self, fn: Callable[[], None]) -> None:
        self._posted.emit(fn)

    @Slot(object)
    def _run(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception as ex:  # pragma: no cover - UI callback
            logger.exception("UI callback failed: {}", ex)
