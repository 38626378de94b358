"""Capture pipeline: still capture into a temporary file, crop, clean up.

State machine::

    IDLE -> CAPTURING -> SAVED -> CROPPING -> DONE -> IDLE
                      \\-> ERROR -> IDLE

Only one capture may be outstanding; a second request while the pipeline is
not IDLE is rejected with `CaptureInProgress`. Camera completions are moved
onto the camera executor, and results reach the caller through the UI
scheduler, so no error raised during capture or crop escapes to the camera
thread.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import threading

from loguru import logger

from core.errors import (
    CameraUnavailable,
    CaptureFailed,
    CaptureInProgress,
    PermissionDenied,
    SnapError,
)
from core.models import CapturedArtifact, CaptureState, Permission
from core.services.interfaces import (
    ICropService,
    IExecutor,
    IPermissionChecker,
    IScheduler,
    IStillCamera,
)
from infrastructure.storage import StorageLayout, delete_quietly

OnReady = Callable[[CapturedArtifact], None]
OnError = Callable[[Exception], None]


class CapturePipeline:
    """Runs a single capture-and-crop at a time."""

    def __init__(
        self,
        camera: IStillCamera,
        cropper: ICropService,
        storage: StorageLayout,
        permissions: IPermissionChecker,
        executor: IExecutor,
        ui_scheduler: IScheduler,
    ) -> None:
        self._camera = camera
        self._cropper = cropper
        self._storage = storage
        self._permissions = permissions
        self._executor = executor
        self._ui = ui_scheduler
        self._lock = threading.Lock()
        self._state = CaptureState.IDLE

    @property
    def state(self) -> CaptureState:
        with self._lock:
            return self._state

    @property
    def is_busy(self) -> bool:
        return self.state is not CaptureState.IDLE

    def _set_state(self, state: CaptureState) -> None:
        with self._lock:
            self._state = state
        logger.debug("Capture state -> {}", state.value)

    def capture(self, on_ready: OnReady, on_error: OnError) -> bool:
        """Start a capture. Returns False when the request was rejected."""
        with self._lock:
            if self._state is not CaptureState.IDLE:
                busy = self._state
            else:
                busy = None
                self._state = CaptureState.CAPTURING
        if busy is not None:
            logger.warning("Capture rejected, pipeline is {}", busy.value)
            self._ui.post(lambda: on_error(CaptureInProgress(f"Capture already {busy.value}")))
            return False

        if not self._permissions.has_permission(Permission.CAMERA):
            self._fail(PermissionDenied(Permission.CAMERA), on_error)
            return False
        if not self._camera.is_ready():
            self._fail(CameraUnavailable("Camera is not bound"), on_error)
            return False

        try:
            temp_path = self._storage.new_temp_still_path()
        except SnapError as ex:
            self._fail(ex, on_error)
            return False

        logger.info("Capturing still into {}", temp_path)

        def _saved(saved_path: Path) -> None:
            self._dispatch(
                temp_path, lambda: self._on_saved(temp_path, saved_path, on_ready, on_error)
            )

        def _failed(ex: Exception) -> None:
            self._dispatch(temp_path, lambda: self._on_capture_error(temp_path, ex, on_error))

        try:
            self._camera.take_picture(temp_path, _saved, _failed)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            self._on_capture_error(temp_path, ex, on_error)
            return False
        return True

    def _dispatch(self, temp_path: Path, work: Callable[[], None]) -> None:
        """Run `work` on the camera executor, or discard if it has shut down."""
        if self._executor.submit(work):
            return
        logger.info("Camera executor is shut down, discarding capture result")
        delete_quietly(temp_path)
        self._set_state(CaptureState.IDLE)

    def _on_saved(
        self, temp_path: Path, saved_path: Path, on_ready: OnReady, on_error: OnError
    ) -> None:
        if self._executor.is_shutdown:
            logger.info("Camera closed before crop, discarding {}", saved_path)
            self._cleanup(temp_path, saved_path)
            self._set_state(CaptureState.IDLE)
            return
        self._set_state(CaptureState.SAVED)
        self._set_state(CaptureState.CROPPING)
        try:
            artifact = self._cropper.crop_center(Path(saved_path))
        except SnapError as ex:
            logger.error("Crop failed for {}: {}", saved_path, ex)
            self._cleanup(temp_path, saved_path)
            self._fail(ex, on_error)
            return
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected crop error for {}", saved_path)
            self._cleanup(temp_path, saved_path)
            self._fail(CaptureFailed(str(ex)), on_error)
            return

        self._cleanup(temp_path, saved_path)
        self._set_state(CaptureState.DONE)
        self._set_state(CaptureState.IDLE)
        logger.info("Capture ready: {}", artifact.path)
        self._ui.post(lambda: on_ready(artifact))

    def _on_capture_error(self, temp_path: Path, ex: Exception, on_error: OnError) -> None:
        logger.error("Still capture failed: {}", ex)
        self._cleanup(temp_path, None)
        err = ex if isinstance(ex, SnapError) else CaptureFailed(str(ex))
        if err is not ex:
            err.__cause__ = ex
        self._fail(err, on_error)

    def _cleanup(self, temp_path: Path, saved_path: Path | None) -> None:
        delete_quietly(temp_path)
        if saved_path is not None and Path(saved_path) != temp_path:
            delete_quietly(Path(saved_path))

    def _fail(self, ex: Exception, on_error: OnError) -> None:
        self._set_state(CaptureState.ERROR)
        self._set_state(CaptureState.IDLE)
        self._ui.post(lambda: on_error(ex))
