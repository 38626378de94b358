"""Core service interfaces.

The capture pipeline and the location service depend only on these seams.
Qt-backed implementations live under `infrastructure/` and `app/views/`;
tests provide synchronous fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from core.models import CapturedArtifact, LocationFix, LocationRequest, Permission


class IStillCamera:
    """A bound camera able to write a single still to a file."""

    def is_ready(self) -> bool:
        """True when a preview is bound and a still can be requested."""
        raise NotImplementedError

    def take_picture(
        self,
        output_path: Path,
        on_saved: Callable[[Path], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Capture a still into `output_path`.

        Exactly one of the callbacks is invoked, possibly from another thread.
        """
        raise NotImplementedError


class ICropService:
    """Crops a captured still into a persisted artifact."""

    def crop_center(self, source: Path) -> CapturedArtifact:
        """Crop the central square of `source` and persist it."""
        raise NotImplementedError


class IPositionSource:
    """Source of periodic position fixes."""

    def is_provider_enabled(self) -> bool:
        """True when a positioning backend is available."""
        raise NotImplementedError

    def request_updates(
        self, request: LocationRequest, callback: Callable[[list[LocationFix]], None]
    ) -> None:
        """Subscribe `callback`; it receives non-empty batches on the UI thread."""
        raise NotImplementedError

    def remove_updates(self) -> None:
        """Cancel the subscription. Calling it again is a no-op."""
        raise NotImplementedError


class IForegroundPresence:
    """User-visible indicator that keeps a background worker alive."""

    def start(self, title: str, text: str) -> None:
        raise NotImplementedError

    def update(self, text: str) -> None:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


class IPermissionChecker:
    """Answers whether a runtime permission is currently granted."""

    def has_permission(self, permission: Permission) -> bool:
        raise NotImplementedError


class IScheduler:
    """Runs callables on the UI thread."""

    def post(self, fn: Callable[[], None]) -> None:
        raise NotImplementedError


class IExecutor:
    """Single-worker executor owned by the camera screen."""

    def submit(self, fn: Callable[[], None]) -> bool:
        """Queue `fn`; return False if the executor has been shut down."""
        raise NotImplementedError

    def shutdown(self) -> None:
        raise NotImplementedError

    @property
    def is_shutdown(self) -> bool:
        raise NotImplementedError
