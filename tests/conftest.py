"""Shared fixtures and synchronous fakes for the Qt-facing seams."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

from PIL import Image
from PySide6.QtCore import QCoreApplication
import pytest

from core.models import LocationFix, LocationRequest, Permission
from core.services.interfaces import (
    IExecutor,
    IForegroundPresence,
    IPermissionChecker,
    IPositionSource,
    IScheduler,
    IStillCamera,
)
from infrastructure.image_service import CropService
from infrastructure.storage import StorageLayout
from infrastructure.utils import Clock, format_timestamp


class FakeClock(Clock):
    def __init__(self, start: datetime | None = None, millis: int = 1_704_110_400_000) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, 0)
        self.ms = millis
        self.auto_tick_ms = 0

    def now(self) -> str:
        return format_timestamp(self.current)

    def millis(self) -> int:
        value = self.ms
        self.ms += self.auto_tick_ms
        return value

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)
        self.ms += int(seconds * 1000)


class ImmediateScheduler(IScheduler):
    def __init__(self) -> None:
        self.posted = 0

    def post(self, fn: Callable[[], None]) -> None:
        self.posted += 1
        fn()


class InlineExecutor(IExecutor):
    def __init__(self) -> None:
        self._shutdown = False
        self.submitted = 0

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def submit(self, fn: Callable[[], None]) -> bool:
        if self._shutdown:
            return False
        self.submitted += 1
        fn()
        return True

    def shutdown(self) -> None:
        self._shutdown = True


class FakePermissions(IPermissionChecker):
    def __init__(self, granted: set[Permission] | None = None) -> None:
        self.granted = set(Permission) if granted is None else set(granted)

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.granted

    def revoke(self, permission: Permission) -> None:
        self.granted.discard(permission)


class FakeCamera(IStillCamera):
    """Writes a generated JPEG to the requested path.

    With `hold=True` the request is parked until `complete()` or `fail()`.
    """

    def __init__(self, size: tuple[int, int] = (640, 480), hold: bool = False) -> None:
        self.size = size
        self.hold = hold
        self.ready = True
        self.error: Exception | None = None
        self.requests: list[Path] = []
        self._parked: list[tuple[Path, Callable, Callable]] = []

    def is_ready(self) -> bool:
        return self.ready

    def take_picture(self, output_path, on_saved, on_error) -> None:
        self.requests.append(Path(output_path))
        if self.hold:
            self._parked.append((Path(output_path), on_saved, on_error))
            return
        self._finish(Path(output_path), on_saved, on_error)

    def complete(self) -> None:
        path, on_saved, on_error = self._parked.pop(0)
        self._finish(path, on_saved, on_error)

    def fail(self, ex: Exception) -> None:
        _path, _on_saved, on_error = self._parked.pop(0)
        on_error(ex)

    def _finish(self, path: Path, on_saved, on_error) -> None:
        if self.error is not None:
            on_error(self.error)
            return
        write_gradient_jpeg(path, self.size)
        on_saved(path)


class FakePositionSource(IPositionSource):
    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.request: LocationRequest | None = None
        self.callback: Callable[[list[LocationFix]], None] | None = None
        self.request_count = 0
        self.remove_count = 0

    def is_provider_enabled(self) -> bool:
        return self.enabled

    def request_updates(self, request, callback) -> None:
        self.request = request
        self.callback = callback
        self.request_count += 1

    def remove_updates(self) -> None:
        self.callback = None
        self.remove_count += 1

    def emit(self, *points: tuple[float, float]) -> None:
        assert self.callback is not None, "no active subscription"
        self.callback([LocationFix(lat, lng) for lat, lng in points])


class FakePresence(IForegroundPresence):
    def __init__(self) -> None:
        self.active = False
        self.title = ""
        self.texts: list[str] = []

    def start(self, title: str, text: str) -> None:
        self.active = True
        self.title = title
        self.texts.append(text)

    def update(self, text: str) -> None:
        self.texts.append(text)

    def release(self) -> None:
        self.active = False


def write_gradient_jpeg(path: Path, size: tuple[int, int]) -> Path:
    """Write an RGB image whose pixel (x, y) encodes its coordinates."""
    w, h = size
    img = Image.new("RGB", size)
    sx, sy = max(1, w - 1), max(1, h - 1)
    img.putdata([(x * 255 // sx, y * 255 // sy, 128) for y in range(h) for x in range(w)])
    img.save(path, "JPEG", quality=95)
    return path


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage(tmp_path, clock) -> StorageLayout:
    return StorageLayout(tmp_path / "files", tmp_path / "cache", clock)


@pytest.fixture
def cropper(storage) -> CropService:
    return CropService(storage)


@pytest.fixture
def scheduler() -> ImmediateScheduler:
    return ImmediateScheduler()


@pytest.fixture
def executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def permissions() -> FakePermissions:
    return FakePermissions()


@pytest.fixture
def camera() -> FakeCamera:
    return FakeCamera()


@pytest.fixture
def position_source() -> FakePositionSource:
    return FakePositionSource()


@pytest.fixture
def presence() -> FakePresence:
    return FakePresence()


@pytest.fixture
def make_image(tmp_path) -> Callable[..., Path]:
    def _make(size: tuple[int, int], name: str = "src.jpg", mode: str = "RGB") -> Path:
        path = tmp_path / name
        if mode == "RGB":
            return write_gradient_jpeg(path, size)
        img = Image.new(mode, size)
        img.save(path)
        return path

    return _make
