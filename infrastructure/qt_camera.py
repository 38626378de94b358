"""Qt Multimedia camera adapter: preview binding and still capture to file."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from PySide6.QtCore import QObject
from PySide6.QtMultimedia import QCamera, QImageCapture, QMediaCaptureSession, QMediaDevices
from loguru import logger

from core.errors import CameraUnavailable, CaptureFailed
from core.services.interfaces import IStillCamera

_Pending = tuple[Callable[[Path], None], Callable[[Exception], None]]


class QtStillCamera(QObject, IStillCamera):
    """Default camera bound to a preview surface with a JPEG still capture use case."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._session = QMediaCaptureSession(self)
        self._camera: QCamera | None = None
        self._capture: QImageCapture | None = None
        self._pending: dict[int, _Pending] = {}

    def bind(self, video_output: QObject) -> None:
        """Bind the default camera to `video_output` and start the preview.

        Raises:
            CameraUnavailable: no camera device exists.
        """
        self.unbind()
        device = QMediaDevices.defaultVideoInput()
        if device.isNull():
            raise CameraUnavailable("No camera device found")

        camera = QCamera(device, self)
        camera.errorOccurred.connect(self._on_camera_error)
        capture = QImageCapture(self)
        capture.setFileFormat(QImageCapture.FileFormat.JPEG)
        capture.setQuality(QImageCapture.Quality.VeryHighQuality)
        capture.imageSaved.connect(self._on_image_saved)
        capture.errorOccurred.connect(self._on_capture_error)

        self._session.setCamera(camera)
        self._session.setImageCapture(capture)
        self._session.setVideoOutput(video_output)
        self._camera = camera
        self._capture = capture
        camera.start()
        logger.info("Camera bound: {}", device.description())

    def unbind(self) -> None:
        """Stop the preview and fail any capture still waiting for the camera."""
        if self._camera is not None:
            self._camera.stop()
            self._camera.deleteLater()
        if self._capture is not None:
            self._capture.deleteLater()
        self._camera = None
        self._capture = None
        pending, self._pending = self._pending, {}
        for _, on_error in pending.values():
            on_error(CaptureFailed("Camera unbound before the still was saved"))

    def is_ready(self) -> bool:
        return (
            self._camera is not None
            and self._camera.isActive()
            and self._capture is not None
            and self._capture.isReadyForCapture()
        )

    def take_picture(
        self,
        output_path: Path,
        on_saved: Callable[[Path], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        if self._capture is None:
            raise CameraUnavailable("Camera is not bound")
        request_id = self._capture.captureToFile(str(output_path))
        if request_id < 0:
            raise CaptureFailed(self._capture.errorString() or "Capture request refused")
        self._pending[request_id] = (on_saved, on_error)

    def _on_image_saved(self, request_id: int, file_name: str) -> None:
        callbacks = self._pending.pop(request_id, None)
        if callbacks is not None:
            callbacks[0](Path(file_name))

    def _on_capture_error(
        self, request_id: int, error: QImageCapture.Error, error_string: str
    ) -> None:
        logger.error("Image capture error {}: {}", error, error_string)
        callbacks = self._pending.pop(request_id, None)
        if callbacks is not None:
            callbacks[1](CaptureFailed(error_string or str(error)))

    def _on_camera_error(self, error: QCamera.Error, error_string: str) -> None:
        logger.error("Camera error {}: {}", error, error_string)
