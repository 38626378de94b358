"""Error kinds shared by the capture pipeline and the location logging service.

Every error raised by the core derives from `SnapError` so the UI layer can
surface any failure with a single handler while still branching on kind.
"""

from __future__ import annotations

from pathlib import Path


class SnapError(Exception):
    """Base class for all application errors."""


class PermissionDenied(SnapError):
    """A required runtime permission is not granted."""

    def __init__(self, permission: object) -> None:
        super().__init__(f"Permission not granted: {permission}")
        self.permission = permission


class CameraUnavailable(SnapError):
    """The camera could not be bound or is not ready for capture."""


class CaptureFailed(SnapError):
    """The still capture failed or produced an unreadable image."""


class CaptureInProgress(SnapError):
    """A capture was requested while another one is still outstanding."""


class ImageTooSmall(SnapError):
    """The captured still is smaller than the crop square on some axis."""

    def __init__(self, width: int, height: int, required: int) -> None:
        super().__init__(f"Image {width}x{height} is smaller than the {required}px crop square")
        self.width = width
        self.height = height
        self.required = required


class StorageFailure(SnapError):
    """A file operation (create, write, flush, delete) failed."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message if path is None else f"{message}: {path}")
        self.path = str(path) if path is not None else None


class GpsDisabled(SnapError):
    """No positioning source is available or it is switched off."""
