"""On-disk layout for captured pictures and location logs.

Owns three directories:

- ``<cache_dir>/Pictures``: transient stills written by the camera
- ``<files_dir>/Pictures``: cropped artifacts
- ``<files_dir>/location``: one CSV per location-logging run

Image paths are reserved by exclusive creation so two captures within the same
millisecond still get distinct names.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from core.errors import StorageFailure
from infrastructure.utils import Clock

PICTURES_DIR = "Pictures"
LOCATION_DIR = "location"
TEMP_IMAGE_PREFIX = "temp_image_"
IMAGE_PREFIX = "image_"
LOCATION_PREFIX = "location_"
MAX_NAME_ATTEMPTS = 1000


def _ensure_dir(p: Path) -> Path:
    """Create directory `p` if missing (including parents)."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as ex:
        raise StorageFailure(f"Cannot create directory ({ex})", p) from ex
    return p


def _reserve(directory: Path, stem: str, suffix: str) -> Path:
    """Create an empty file named `stem[_n]suffix` that did not exist before."""
    for attempt in range(MAX_NAME_ATTEMPTS):
        name = f"{stem}{suffix}" if attempt == 0 else f"{stem}_{attempt}{suffix}"
        candidate = directory / name
        try:
            with candidate.open("xb"):
                pass
        except FileExistsError:
            continue
        except OSError as ex:
            raise StorageFailure(f"Cannot create file ({ex})", candidate) from ex
        if attempt:
            logger.debug("Name collision resolved with suffix: {}", candidate.name)
        return candidate
    raise StorageFailure("No free file name", directory / f"{stem}{suffix}")


class StorageLayout:
    """Produces unique artifact paths under the app's files and cache dirs."""

    def __init__(
        self, files_dir: str | Path, cache_dir: str | Path, clock: Clock | None = None
    ) -> None:
        self._files_dir = Path(files_dir)
        self._cache_dir = Path(cache_dir)
        self._clock = clock or Clock()

    @property
    def files_dir(self) -> Path:
        return self._files_dir

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def ensure_pictures_cache(self) -> Path:
        return _ensure_dir(self._cache_dir / PICTURES_DIR)

    def ensure_pictures_persistent(self) -> Path:
        return _ensure_dir(self._files_dir / PICTURES_DIR)

    def ensure_location_dir(self) -> Path:
        return _ensure_dir(self._files_dir / LOCATION_DIR)

    def new_temp_still_path(self) -> Path:
        """Reserve `Pictures/temp_image_<millis>.jpg` in the cache dir."""
        directory = self.ensure_pictures_cache()
        return _reserve(directory, f"{TEMP_IMAGE_PREFIX}{self._clock.millis()}", ".jpg")

    def new_cropped_path(self) -> Path:
        """Reserve `Pictures/image_<millis>.jpg` in the files dir."""
        directory = self.ensure_pictures_persistent()
        return _reserve(directory, f"{IMAGE_PREFIX}{self._clock.millis()}", ".jpg")

    def new_location_log_path(self, timestamp: str | None = None) -> Path:
        """Return `location/location_<timestamp>.csv`.

        The file is not created here. If a log with the same timestamp already
        exists a numeric suffix is added so a new run never reopens an old file.
        """
        directory = self.ensure_location_dir()
        stem = f"{LOCATION_PREFIX}{timestamp or self._clock.now()}"
        candidate = directory / f"{stem}.csv"
        n = 1
        while candidate.exists():
            candidate = directory / f"{stem}_{n}.csv"
            n += 1
        return candidate

    def list_location_logs(self) -> list[Path]:
        """Existing location logs, newest first."""
        directory = self._files_dir / LOCATION_DIR
        if not directory.exists():
            return []
        try:
            files = list(directory.glob(f"{LOCATION_PREFIX}*.csv"))
            return sorted(files, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)
        except OSError as ex:
            logger.warning("Listing location logs failed: {}", ex)
            return []

    def latest_location_log(self) -> Path | None:
        logs = self.list_location_logs()
        return logs[0] if logs else None

    def list_temp_stills(self) -> list[Path]:
        """Temporary stills currently present in the cache dir."""
        directory = self._cache_dir / PICTURES_DIR
        if not directory.exists():
            return []
        return sorted(directory.glob(f"{TEMP_IMAGE_PREFIX}*.jpg"))

    def purge_temp_stills(self) -> int:
        """Delete stills left behind by a crashed process; return the count removed."""
        removed = 0
        for p in self.list_temp_stills():
            try:
                p.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as ex:
                logger.warning("Could not delete stale temp still {}: {}", p, ex)
        if removed:
            logger.info("Removed {} stale temp still(s)", removed)
        return removed


def delete_quietly(path: Path | None) -> bool:
    """Best-effort unlink; a missing file is not an error. Returns True if removed."""
    if path is None:
        return False
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as ex:
        logger.warning("Delete failed for {}: {}", path, ex)
        return False
