"""Camera screen: live preview, scanner-frame overlay and the capture button."""

from __future__ import annotations

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QPainter, QPainterPath, QPaintEvent, QPen
from PySide6.QtMultimediaWidgets import QVideoWidget
from PySide6.QtWidgets import QGridLayout, QPushButton, QWidget
from loguru import logger

from app.viewmodels.main_vm import MainVM
from app.views.camera_tasks import CameraExecutor
from app.views.constants import (
    ARC_COLORS,
    FRAME_ARC_SIZE_PX,
    FRAME_ARC_THICKNESS_PX,
    FRAME_CORNER_RADIUS_PX,
    FRAME_PADDING_PX,
    FRAME_SIZE_PX,
    OVERLAY_COLOR,
    TEXT_CAPTURE,
)
from core.errors import CameraUnavailable
from infrastructure.qt_camera import QtStillCamera


class ScannerOverlay(QWidget):
    """Dims the preview except for a centered square and draws colored corner arcs."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground)

    def frame_rect(self) -> QRectF:
        left = (self.width() - FRAME_SIZE_PX) / 2
        top = (self.height() - FRAME_SIZE_PX) / 2
        return QRectF(left, top, FRAME_SIZE_PX, FRAME_SIZE_PX)

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        frame = self.frame_rect()

        dim = QPainterPath()
        dim.addRect(QRectF(self.rect()))
        hole = QPainterPath()
        hole.addRoundedRect(frame, FRAME_CORNER_RADIUS_PX, FRAME_CORNER_RADIUS_PX)
        painter.fillPath(dim.subtracted(hole), OVERLAY_COLOR)

        pad = FRAME_PADDING_PX
        inner = frame.adjusted(pad, pad, -pad, -pad)
        a = FRAME_ARC_SIZE_PX
        # (x, y, start angle) per corner; Qt angles are counter-clockwise in 1/16 degree
        corners = (
            (inner.left(), inner.top(), 90),
            (inner.right() - a, inner.top(), 0),
            (inner.left(), inner.bottom() - a, 180),
            (inner.right() - a, inner.bottom() - a, 270),
        )
        for color, (x, y, start) in zip(ARC_COLORS, corners):
            pen = QPen(color, FRAME_ARC_THICKNESS_PX)
            painter.setPen(pen)
            painter.drawArc(QRectF(x, y, a, a), start * 16, 90 * 16)
        painter.end()


class CameraScreen(QWidget):
    """Binds the camera while visible and releases it when hidden."""

    def __init__(self, vm: MainVM, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._vm = vm
        self._camera = QtStillCamera(self)
        self._video = QVideoWidget(self)
        self._overlay = ScannerOverlay(self)
        self.btn_capture = QPushButton(TEXT_CAPTURE, self)

        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._video, 0, 0)
        layout.addWidget(self._overlay, 0, 0)
        layout.addWidget(
            self.btn_capture, 0, 0, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignBottom
        )
        self.btn_capture.clicked.connect(self._on_capture_clicked)

    def showEvent(self, event) -> None:  # noqa: N802
        super().showEvent(event)
        self.mount()

    def hideEvent(self, event) -> None:  # noqa: N802
        super().hideEvent(event)
        self.unmount()

    def mount(self) -> None:
        try:
            self._camera.bind(self._video)
        except CameraUnavailable as ex:
            logger.error("Camera bind failed: {}", ex)
            self._vm.report_error(ex)
        self._vm.attach_camera(self._camera, CameraExecutor())

    def unmount(self) -> None:
        self._vm.detach_camera()
        self._camera.unbind()

    def _on_capture_clicked(self) -> None:
        self._vm.capture()
