"""Desktop stand-in for the home-screen widget: capture shortcut and logging switch."""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QCheckBox, QPushButton, QVBoxLayout, QWidget
from loguru import logger

from app.actions.toggle_location import ToggleLocationServiceAction
from app.views.constants import TEXT_CLICK_IMAGE, TEXT_LOCATION_SWITCH, WINDOW_TITLE
from core.errors import SnapError


class LocationWidget(QWidget):
    """Small always-on-top tool window.

    The switch never stores its own state: it is re-rendered from the service
    runtime after every toggle.
    """

    openCameraRequested = Signal()

    def __init__(self, widget_id: int = 0, parent: QWidget | None = None) -> None:
        super().__init__(parent, Qt.WindowType.Tool | Qt.WindowType.WindowStaysOnTopHint)
        self.setWindowTitle(WINDOW_TITLE)
        self._widget_id = widget_id
        self._action: ToggleLocationServiceAction | None = None

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        self.btn_click_image = QPushButton(TEXT_CLICK_IMAGE)
        root.addWidget(self.btn_click_image)
        root.addSpacing(16)
        self.switch = QCheckBox(TEXT_LOCATION_SWITCH)
        root.addWidget(self.switch)

        self.btn_click_image.clicked.connect(self.openCameraRequested.emit)
        self.switch.clicked.connect(self._on_switch_clicked)

    @property
    def widget_id(self) -> int:
        return self._widget_id

    def set_action(self, action: ToggleLocationServiceAction) -> None:
        self._action = action
        self.update_widget(self._widget_id)

    def update_widget(self, widget_id: int) -> None:
        if widget_id != self._widget_id or self._action is None:
            return
        running = self._action.is_running()
        self.switch.blockSignals(True)
        self.switch.setChecked(running)
        self.switch.blockSignals(False)

    def _on_switch_clicked(self, _checked: bool) -> None:
        if self._action is not None:
            try:
                self._action.on_action(self._widget_id)
            except SnapError as ex:
                logger.error("Location service toggle failed: {}", ex)
