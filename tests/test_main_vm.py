import pytest

from app.viewmodels.image_uri_vm import ImageUriVM
from app.viewmodels.main_vm import SCREEN_PREVIEW, MainVM, describe_error
from core.errors import (
    CameraUnavailable,
    CaptureInProgress,
    GpsDisabled,
    ImageTooSmall,
    PermissionDenied,
)
from core.models import Permission


@pytest.fixture
def make_vm(storage, cropper, permissions, scheduler, position_source):
    def _make(**overrides):
        kwargs = dict(
            image_vm=ImageUriVM(),
            storage=storage,
            cropper=cropper,
            permissions=permissions,
            ui_scheduler=scheduler,
            position_source=position_source,
        )
        kwargs.update(overrides)
        return MainVM(**kwargs)

    return _make


def _collect(signal):
    seen = []
    signal.connect(lambda *args: seen.append(args))
    return seen


@pytest.mark.parametrize(
    "ex, text",
    [
        (PermissionDenied(Permission.CAMERA), "Permission required: camera"),
        (CameraUnavailable("x"), "Camera unavailable, try again"),
        (CaptureInProgress("x"), "Capture already in progress"),
        (ImageTooSmall(100, 80, 250), "Image too small to crop (100x80)"),
        (GpsDisabled("x"), "Location is turned off"),
    ],
)
def test_describe_error(ex, text):
    assert describe_error(ex) == text


def test_capture_updates_image_and_navigates(make_vm, camera, executor):
    vm = make_vm()
    screens = _collect(vm.navigateRequested)
    vm.attach_camera(camera, executor)

    assert vm.capture() is True
    assert vm.image_vm.image_uri is not None
    assert vm.image_vm.image_uri.exists()
    assert screens == [(SCREEN_PREVIEW,)]


def test_capture_without_camera_reports_error(make_vm):
    vm = make_vm()
    messages = _collect(vm.statusMessage)
    assert vm.capture() is False
    assert messages[0][0] == "Camera unavailable, try again"


def test_detach_shuts_executor_down(make_vm, camera, executor):
    vm = make_vm()
    vm.attach_camera(camera, executor)
    vm.detach_camera()
    assert executor.is_shutdown
    assert vm.pipeline is None


def test_gps_off_opens_location_settings(make_vm, position_source):
    opened = []
    vm = make_vm(open_location_settings=lambda: opened.append(True) or True)
    messages = _collect(vm.statusMessage)
    position_source.enabled = False

    assert vm.check_location_ready() is False
    assert opened == [True]
    assert messages[0][0] == "Location is turned off"


def test_gps_on_is_ready(make_vm):
    opened = []
    vm = make_vm(open_location_settings=lambda: opened.append(True))
    assert vm.check_location_ready() is True
    assert opened == []


def test_open_latest_log_without_logs(make_vm):
    vm = make_vm()
    messages = _collect(vm.statusMessage)
    assert vm.open_latest_location_log() is False
    assert messages == [("No location log yet", 3000)]
