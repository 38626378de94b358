from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget
from loguru import logger

from app.viewmodels.image_uri_vm import ImageUriVM
from app.views.constants import TEXT_NO_IMAGE


class PreviewScreen(QWidget):
    """Shows the last captured image, or a placeholder text when there is none.

    Subscribes to `ImageUriVM` while visible and re-subscribes on show, which
    immediately delivers the current value.
    """

    def __init__(self, image_vm: ImageUriVM, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._image_vm = image_vm
        self._unsubscribe = None

        root = QVBoxLayout(self)
        self._label = QLabel(TEXT_NO_IMAGE)
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._label)

    def showEvent(self, event) -> None:  # noqa: N802
        super().showEvent(event)
        if self._unsubscribe is None:
            self._unsubscribe = self._image_vm.observe(self._render)

    def hideEvent(self, event) -> None:  # noqa: N802
        super().hideEvent(event)
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _render(self, path: Path | None) -> None:
        if path is None:
            self._label.setPixmap(QPixmap())
            self._label.setText(TEXT_NO_IMAGE)
            return
        pm = QPixmap(str(path))
        if pm.isNull():
            logger.error("Preview could not load {}", path)
            self._label.setText(TEXT_NO_IMAGE)
            return
        self._label.setPixmap(pm)
