"""Core domain models for captured images and location logging."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

CROP_SIZE_PX = 250


class Permission(str, Enum):
    """Runtime permissions the application relies on."""

    CAMERA = "camera"
    FINE_LOCATION = "fine_location"
    POST_NOTIFICATIONS = "post_notifications"


class CaptureState(str, Enum):
    """States of the capture pipeline."""

    IDLE = "idle"
    CAPTURING = "capturing"
    SAVED = "saved"
    CROPPING = "cropping"
    DONE = "done"
    ERROR = "error"


class ServiceState(str, Enum):
    """Lifecycle states of a background service."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class Priority(str, Enum):
    """Requested accuracy for position updates."""

    HIGH_ACCURACY = "high_accuracy"
    BALANCED_POWER_ACCURACY = "balanced_power_accuracy"


@dataclass(frozen=True)
class CapturedArtifact:
    """A cropped JPEG persisted by the capture pipeline."""

    path: Path
    created_at_ms: int
    side_px: int = CROP_SIZE_PX

    @property
    def uri(self) -> str:
        """`file://` URI of the artifact."""
        return self.path.resolve().as_uri()


@dataclass(frozen=True)
class LocationFix:
    """A single geolocation sample."""

    latitude: float
    longitude: float
    time_ms: int | None = None


@dataclass(frozen=True)
class LocationRecord:
    """One row of a location log file."""

    timestamp: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationRequest:
    """Parameters for a position update subscription."""

    priority: Priority = Priority.HIGH_ACCURACY
    interval_ms: int = 2000


@dataclass(frozen=True)
class RunningServiceInfo:
    """Entry of the runtime's running-services list."""

    class_name: str
    started_at_ms: int
