from __future__ import annotations

import argparse
from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication
from loguru import logger

from app.actions.toggle_location import ToggleLocationServiceAction
from app.viewmodels.image_uri_vm import ImageUriVM
from app.viewmodels.main_vm import MainVM
from app.views.location_widget import LocationWidget
from app.views.main_window import MainWindow
from app.views.ui_scheduler import QtUiScheduler
from core.models import Permission
from infrastructure.csv_repository import CsvLocationRepository
from infrastructure.image_service import CropService
from infrastructure.location_service import LocationService
from infrastructure.logging import init_logging, open_location_settings
from infrastructure.permissions import QtPermissionChecker
from infrastructure.qt_positioning import QtPositionSource
from infrastructure.service_runtime import ServiceRuntime
from infrastructure.settings import AppConfig, JsonSettings, load_app_config
from infrastructure.storage import StorageLayout
from infrastructure.tray_presence import TrayForegroundPresence
from infrastructure.utils import Clock

BASE_DIR = Path(__file__).parent


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="snaplog", description="Capture-and-crop camera and location logger"
    )
    parser.add_argument(
        "--settings", default=str(BASE_DIR / "settings.json"), help="settings.json path"
    )
    args, _unknown = parser.parse_known_args(argv)
    return args


def _build_runtime(
    config: AppConfig,
    storage: StorageLayout,
    position_source: QtPositionSource,
    permissions: QtPermissionChecker,
    clock: Clock,
) -> ServiceRuntime:
    runtime = ServiceRuntime(clock)
    repo = CsvLocationRepository()
    runtime.register(
        LocationService,
        lambda: LocationService(
            storage=storage,
            position_source=position_source,
            presence=TrayForegroundPresence(),
            permissions=permissions,
            repository=repo,
            clock=clock,
            interval_ms=config.interval_ms,
        ),
    )
    return runtime


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings = JsonSettings(args.settings)
    config = load_app_config(settings)
    init_logging(config.log_dir, level=config.log_level)
    logger.info("Starting with files_dir={} cache_dir={}", config.files_dir, config.cache_dir)

    app = QApplication(sys.argv[:1])

    clock = Clock()
    storage = StorageLayout(config.files_dir, config.cache_dir, clock)
    storage.purge_temp_stills()
    cropper = CropService(storage, jpeg_quality=config.jpeg_quality)
    permissions = QtPermissionChecker()
    scheduler = QtUiScheduler()
    position_source = QtPositionSource()
    runtime = _build_runtime(config, storage, position_source, permissions, clock)

    image_vm = ImageUriVM()
    vm = MainVM(
        image_vm=image_vm,
        storage=storage,
        cropper=cropper,
        permissions=permissions,
        ui_scheduler=scheduler,
        position_source=position_source,
        open_location_settings=open_location_settings,
    )
    win = MainWindow(vm=vm)

    widget = LocationWidget(widget_id=1)
    widget.set_action(ToggleLocationServiceAction(runtime, host=widget))
    widget.openCameraRequested.connect(win.open_camera)
    runtime.add_listener(lambda _name, _running: scheduler.post(lambda: widget.update_widget(1)))

    def _on_permission(permission: Permission, granted: bool) -> None:
        if permission is Permission.FINE_LOCATION and granted:
            vm.check_location_ready()
        elif not granted:
            win.show_status(f"Permission denied: {permission.value}", 4000)

    for permission in permissions.missing([Permission.CAMERA, Permission.FINE_LOCATION]):
        permissions.request(permission, win, _on_permission)
    if permissions.has_permission(Permission.FINE_LOCATION):
        vm.check_location_ready()

    app.aboutToQuit.connect(runtime.stop_all)

    win.show()
    widget.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
