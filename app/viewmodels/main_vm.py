"""ViewModel coordinating the capture pipeline, navigation and status messages."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, Signal
from loguru import logger

from app.viewmodels.image_uri_vm import ImageUriVM
from core.errors import (
    CameraUnavailable,
    CaptureFailed,
    CaptureInProgress,
    GpsDisabled,
    ImageTooSmall,
    PermissionDenied,
    StorageFailure,
)
from core.models import CapturedArtifact
from core.services.interfaces import (
    ICropService,
    IExecutor,
    IPermissionChecker,
    IPositionSource,
    IScheduler,
    IStillCamera,
)
from infrastructure.capture_service import CapturePipeline
from infrastructure.logging import open_file_in_default_app
from infrastructure.storage import StorageLayout

SCREEN_HOME = "home"
SCREEN_CAMERA = "camera"
SCREEN_PREVIEW = "preview"


def describe_error(ex: Exception) -> str:
    """User-facing status text for an error kind."""
    if isinstance(ex, PermissionDenied):
        return f"Permission required: {getattr(ex.permission, 'value', ex.permission)}"
    if isinstance(ex, CameraUnavailable):
        return "Camera unavailable, try again"
    if isinstance(ex, CaptureInProgress):
        return "Capture already in progress"
    if isinstance(ex, ImageTooSmall):
        return f"Image too small to crop ({ex.width}x{ex.height})"
    if isinstance(ex, CaptureFailed):
        return "Capture failed, try again"
    if isinstance(ex, StorageFailure):
        return "Could not save the image"
    if isinstance(ex, GpsDisabled):
        return "Location is turned off"
    return f"Unexpected error: {ex}"


class MainVM(QObject):
    """Main application view-model.

    Owns the capture pipeline while the camera screen is mounted and routes its
    results to `ImageUriVM` and the status bar.
    """

    statusMessage = Signal(str, int)  # text, timeout ms
    navigateRequested = Signal(str)

    def __init__(
        self,
        image_vm: ImageUriVM,
        storage: StorageLayout,
        cropper: ICropService,
        permissions: IPermissionChecker,
        ui_scheduler: IScheduler,
        position_source: IPositionSource | None = None,
        open_location_settings: Callable[[], bool] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._image_vm = image_vm
        self._storage = storage
        self._cropper = cropper
        self._permissions = permissions
        self._ui = ui_scheduler
        self._position_source = position_source
        self._open_location_settings = open_location_settings
        self._pipeline: CapturePipeline | None = None
        self._executor: IExecutor | None = None

    @property
    def image_vm(self) -> ImageUriVM:
        return self._image_vm

    @property
    def pipeline(self) -> CapturePipeline | None:
        return self._pipeline

    # Camera screen lifecycle
    def attach_camera(self, camera: IStillCamera, executor: IExecutor) -> CapturePipeline:
        """Build the pipeline for a freshly mounted camera screen."""
        self.detach_camera()
        self._executor = executor
        self._pipeline = CapturePipeline(
            camera=camera,
            cropper=self._cropper,
            storage=self._storage,
            permissions=self._permissions,
            executor=executor,
            ui_scheduler=self._ui,
        )
        return self._pipeline

    def detach_camera(self) -> None:
        """Shut the camera executor down; late completions are discarded."""
        if self._executor is not None:
            self._executor.shutdown()
        self._executor = None
        self._pipeline = None

    # Actions
    def capture(self) -> bool:
        if self._pipeline is None:
            self.report_error(CameraUnavailable("Camera screen is not open"))
            return False
        return self._pipeline.capture(self._on_capture_ready, self.report_error)

    def _on_capture_ready(self, artifact: CapturedArtifact) -> None:
        self._image_vm.set_image_uri(artifact.path)
        self.navigateRequested.emit(SCREEN_PREVIEW)

    def report_error(self, ex: Exception) -> None:
        logger.warning("Reported to UI: {}: {}", type(ex).__name__, ex)
        self.statusMessage.emit(describe_error(ex), 4000)

    def check_location_ready(self) -> bool:
        """Return True if a positioning source is on; otherwise open OS settings."""
        if self._position_source is None or self._position_source.is_provider_enabled():
            return True
        self.report_error(GpsDisabled("No positioning source enabled"))
        if self._open_location_settings is not None:
            self._open_location_settings()
        return False

    def open_latest_location_log(self) -> bool:
        latest = self._storage.latest_location_log()
        if latest is None:
            self.statusMessage.emit("No location log yet", 3000)
            return False
        return open_file_in_default_app(latest)
