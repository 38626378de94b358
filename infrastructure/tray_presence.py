"""System tray icon used as the location service's ongoing notification."""

from __future__ import annotations

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication, QStyle, QSystemTrayIcon
from loguru import logger

from core.services.interfaces import IForegroundPresence


class TrayForegroundPresence(IForegroundPresence):
    """Shows a tray icon whose tooltip carries the latest status text."""

    def __init__(self, icon: QIcon | None = None) -> None:
        self._icon = icon
        self._tray: QSystemTrayIcon | None = None
        self._title = ""

    def start(self, title: str, text: str) -> None:
        if not QSystemTrayIcon.isSystemTrayAvailable():
            logger.warning("System tray unavailable; location status shown in log only")
        if self._tray is None:
            icon = self._icon
            if icon is None:
                icon = QApplication.style().standardIcon(QStyle.StandardPixmap.SP_DriveNetIcon)
            self._tray = QSystemTrayIcon(icon)
        self._title = title
        self._tray.setToolTip(f"{title}\n{text}")
        self._tray.show()
        if QSystemTrayIcon.supportsMessages():
            self._tray.showMessage(title, text, QSystemTrayIcon.MessageIcon.Information, 3000)
        logger.info("{}: {}", title, text)

    def update(self, text: str) -> None:
        if self._tray is None:
            return
        self._tray.setToolTip(f"{self._title}\n{text}")
        logger.debug("{}: {}", self._title, text)

    def release(self) -> None:
        if self._tray is None:
            return
        self._tray.hide()
        self._tray.deleteLater()
        self._tray = None
