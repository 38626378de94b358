"""Logging initialization and OS helpers using loguru."""

from __future__ import annotations

import os
from pathlib import Path
import subprocess
import sys

from loguru import logger

DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "snaplog" / "logs"

# Location privacy panels per platform, opened when no positioning source is on.
_LOCATION_SETTINGS_COMMANDS: dict[str, list[str]] = {
    "win32": ["cmd", "/c", "start", "", "ms-settings:privacy-location"],
    "darwin": [
        "open",
        "x-apple.systempreferences:com.apple.preference.security?Privacy_LocationServices",
    ],
    "linux": ["gnome-control-center", "location"],
}


def init_logging(log_dir: str | Path | None = None, level: str = "INFO") -> Path:
    """Initialize rotating file logging under the given directory."""
    log_path = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    return log_path


def open_file_in_default_app(file_path: str | Path) -> bool:
    """Open a file in the default application for its type."""
    try:
        if os.name == "nt":  # Windows
            os.startfile(str(file_path))  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.run(["open", str(file_path)], check=True)
        else:
            subprocess.run(["xdg-open", str(file_path)], check=True)
        return True
    except (OSError, subprocess.CalledProcessError) as ex:
        logger.warning("Open failed for {}: {}", file_path, ex)
        return False


def open_location_settings() -> bool:
    """Open the OS location settings panel. Returns False when unsupported."""
    key = "linux" if sys.platform.startswith("linux") else sys.platform
    cmd = _LOCATION_SETTINGS_COMMANDS.get(key)
    if cmd is None:
        logger.warning("No location settings panel known for platform {}", sys.platform)
        return False
    try:
        subprocess.Popen(cmd)  # pylint: disable=consider-using-with
        return True
    except OSError as ex:
        logger.warning("Opening location settings failed: {}", ex)
        return False
