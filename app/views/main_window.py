"""Main window: home, camera and preview screens in a stack."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from app.viewmodels.main_vm import SCREEN_CAMERA, SCREEN_HOME, SCREEN_PREVIEW, MainVM
from app.views.camera_screen import CameraScreen
from app.views.constants import TEXT_OPEN_CAMERA, TEXT_OPEN_LATEST_LOG, WINDOW_TITLE
from app.views.preview_screen import PreviewScreen


class HomeScreen(QWidget):
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.addStretch(1)
        self.btn_open_camera = QPushButton(TEXT_OPEN_CAMERA)
        self.btn_open_log = QPushButton(TEXT_OPEN_LATEST_LOG)
        root.addWidget(self.btn_open_camera)
        root.addWidget(self.btn_open_log)
        root.addStretch(1)


class MainWindow(QMainWindow):
    """Hosts the screens and routes navigation requests from `MainVM`."""

    def __init__(self, vm: MainVM) -> None:
        super().__init__()
        self._vm = vm
        self.setWindowTitle(WINDOW_TITLE)

        self._stack = QStackedWidget()
        self.home = HomeScreen()
        self.camera = CameraScreen(vm)
        self.preview = PreviewScreen(vm.image_vm)
        self._screens: dict[str, QWidget] = {
            SCREEN_HOME: self.home,
            SCREEN_CAMERA: self.camera,
            SCREEN_PREVIEW: self.preview,
        }
        for w in self._screens.values():
            self._stack.addWidget(w)
        self.setCentralWidget(self._stack)

        self.home.btn_open_camera.clicked.connect(lambda: self.navigate(SCREEN_CAMERA))
        self.home.btn_open_log.clicked.connect(self._vm.open_latest_location_log)
        self._vm.navigateRequested.connect(self.navigate)
        self._vm.statusMessage.connect(self.show_status)

        self.resize(480, 720)
        self.statusBar().showMessage("Ready", 3000)

    def navigate(self, screen: str) -> None:
        widget = self._screens.get(screen)
        if widget is not None:
            self._stack.setCurrentWidget(widget)

    def show_status(self, message: str, timeout: int = 3000) -> None:
        self.statusBar().showMessage(message, timeout)

    def open_camera(self) -> None:
        """Bring the window up directly on the camera screen."""
        self.navigate(SCREEN_CAMERA)
        self.show()
        self.raise_()
        self.activateWindow()

    def closeEvent(self, event) -> None:  # noqa: N802
        self.camera.unmount()
        super().closeEvent(event)
