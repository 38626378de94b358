"""Runtime permission checks backed by Qt's permission API."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import (
    QCameraPermission,
    QCoreApplication,
    QLocationPermission,
    QObject,
    Qt,
)
from loguru import logger

from core.models import Permission
from core.services.interfaces import IPermissionChecker


def _qt_permission(permission: Permission) -> object | None:
    if permission is Permission.CAMERA:
        return QCameraPermission()
    if permission is Permission.FINE_LOCATION:
        perm = QLocationPermission()
        perm.setAccuracy(QLocationPermission.Accuracy.Precise)
        return perm
    # Desktop platforms have no notification permission.
    return None


class QtPermissionChecker(IPermissionChecker):
    """Checks permissions against the running `QCoreApplication`."""

    def has_permission(self, permission: Permission) -> bool:
        qt_perm = _qt_permission(permission)
        if qt_perm is None:
            return True
        app = QCoreApplication.instance()
        if app is None:
            return False
        return app.checkPermission(qt_perm) == Qt.PermissionStatus.Granted

    def missing(self, permissions: list[Permission]) -> list[Permission]:
        return [p for p in permissions if not self.has_permission(p)]

    def request(
        self,
        permission: Permission,
        context: QObject,
        on_result: Callable[[Permission, bool], None],
    ) -> None:
        """Ask the user for `permission`; `on_result` runs on the UI thread."""
        qt_perm = _qt_permission(permission)
        app = QCoreApplication.instance()
        if qt_perm is None or app is None:
            on_result(permission, qt_perm is None)
            return

        def _done(result: object) -> None:
            granted = app.checkPermission(result) == Qt.PermissionStatus.Granted
            logger.info("Permission {} granted={}", permission.value, granted)
            on_result(permission, granted)

        app.requestPermission(qt_perm, context, _done)
