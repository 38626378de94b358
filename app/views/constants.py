"""
UI/view constants centralized for reuse across view modules.
"""

from __future__ import annotations

from PySide6.QtGui import QColor

# Scanner frame overlay on the camera preview
FRAME_SIZE_PX: int = 250
FRAME_CORNER_RADIUS_PX: int = 32
FRAME_ARC_SIZE_PX: int = 60
FRAME_ARC_THICKNESS_PX: int = 8
FRAME_PADDING_PX: int = 16
OVERLAY_COLOR: QColor = QColor(0, 0, 0, 0x80)

# Corner arcs: top-left, top-right, bottom-left, bottom-right
ARC_COLORS: tuple[QColor, QColor, QColor, QColor] = (
    QColor(0xD3, 0x70, 0x6B),
    QColor(0xD8, 0x85, 0x01),
    QColor(0x21, 0xA2, 0x48),
    QColor(0x4E, 0x8F, 0xF7),
)

# Texts
WINDOW_TITLE: str = "SnapLog"
TEXT_OPEN_CAMERA: str = "Open Camera"
TEXT_CAPTURE: str = "Capture"
TEXT_NO_IMAGE: str = "No Image Captured"
TEXT_CLICK_IMAGE: str = "Click Image"
TEXT_LOCATION_SWITCH: str = "Location logging"
TEXT_OPEN_LATEST_LOG: str = "Open latest location log"
