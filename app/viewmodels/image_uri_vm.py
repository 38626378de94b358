"""ViewModel holding the most recently captured image."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from PySide6.QtCore import QObject, Signal


class ImageUriVM(QObject):
    """Single-slot observable cell for the cropped image path.

    Writes happen on the GUI thread (the capture pipeline delivers its result
    there). Every write notifies observers, even when the value is unchanged.
    """

    imageUriChanged = Signal(object)  # Path | None

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._image_uri: Path | None = None

    @property
    def image_uri(self) -> Path | None:
        return self._image_uri

    def set_image_uri(self, uri: str | Path) -> None:
        """Store `uri`; the previous image file is left on disk."""
        self._image_uri = Path(uri)
        self.imageUriChanged.emit(self._image_uri)

    def observe(self, callback: Callable[[Path | None], None]) -> Callable[[], None]:
        """Deliver the current value now and every later write.

        Returns a function that unsubscribes `callback`.
        """
        self.imageUriChanged.connect(callback)
        callback(self._image_uri)
        connected = True

        def _unsubscribe() -> None:
            nonlocal connected
            if connected:
                self.imageUriChanged.disconnect(callback)
                connected = False

        return _unsubscribe
