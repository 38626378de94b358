"""Background service that logs position fixes to a per-run CSV file.

The service runs while the application is alive, shows a foreground presence
(tray icon) summarizing the last fix, and writes one log file per run under
``<files_dir>/location``. Instances are created and destroyed by
`ServiceRuntime`, which guarantees at most one instance exists.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from core.errors import GpsDisabled, SnapError, StorageFailure
from core.models import (
    LocationFix,
    LocationRecord,
    LocationRequest,
    Permission,
    Priority,
    ServiceState,
)
from core.services.interfaces import IForegroundPresence, IPermissionChecker, IPositionSource
from infrastructure.csv_repository import CsvLocationRepository
from infrastructure.settings import DEFAULT_INTERVAL_MS
from infrastructure.storage import StorageLayout
from infrastructure.utils import Clock, format_coordinate

NOTIFICATION_TITLE = "Live Location Service"
WAITING_TEXT = "Waiting for location updates..."


def format_fix_text(latitude: float, longitude: float) -> str:
    """Presence text for the last fix."""
    return f"Lat: {format_coordinate(latitude)}, Lng: {format_coordinate(longitude)}"


class LocationService:
    """Location logging service.

    Lifecycle hooks mirror a platform service: `on_create` once per instance,
    `on_start_command` for every start request, `on_destroy` once on stop.
    """

    def __init__(
        self,
        *,
        storage: StorageLayout,
        position_source: IPositionSource,
        presence: IForegroundPresence,
        permissions: IPermissionChecker,
        repository: CsvLocationRepository | None = None,
        clock: Clock | None = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        self._storage = storage
        self._source = position_source
        self._presence = presence
        self._permissions = permissions
        self._repo = repository or CsvLocationRepository()
        self._clock = clock or Clock()
        self._request = LocationRequest(priority=Priority.HIGH_ACCURACY, interval_ms=interval_ms)
        self._state = ServiceState.STOPPED
        self._csv_path: Path | None = None
        self._subscribed = False
        self._last_text = WAITING_TEXT
        self._last_stamp: str | None = None
        self.records_written = 0
        self.records_failed = 0

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def csv_path(self) -> Path | None:
        """The log file of the current (or last) run."""
        return self._csv_path

    @property
    def status_text(self) -> str:
        return self._last_text

    # Lifecycle
    def on_create(self) -> None:
        """Acquire the foreground presence and create this run's log file."""
        self._state = ServiceState.STARTING
        self._last_text = WAITING_TEXT
        self._presence.start(NOTIFICATION_TITLE, WAITING_TEXT)
        try:
            path = self._storage.new_location_log_path(self._clock.now())
            self._csv_path = self._repo.create(path)
            logger.info("Location log created: {}", self._csv_path)
        except SnapError as ex:
            self._csv_path = None
            logger.error("Location log could not be created: {}", ex)

    def on_start_command(self) -> None:
        """Subscribe to position updates; repeated starts are absorbed."""
        if self._state is ServiceState.RUNNING:
            logger.debug("Location service already running, start absorbed")
            return
        if self._state is not ServiceState.STARTING:
            logger.warning("Start command in state {}, ignored", self._state.value)
            return
        self._start_location_updates()
        self._state = ServiceState.RUNNING
        logger.info("Location service running (interval {} ms)", self._request.interval_ms)

    def on_destroy(self) -> None:
        """Cancel updates and release the presence. The log file is kept."""
        if self._state is ServiceState.STOPPED:
            return
        self._state = ServiceState.STOPPING
        self._stop_location_updates()
        self._presence.release()
        self._state = ServiceState.STOPPED
        logger.info(
            "Location service stopped: {} record(s) written, {} failed, file={}",
            self.records_written,
            self.records_failed,
            self._csv_path,
        )

    # Updates
    def _start_location_updates(self) -> None:
        if not self._permissions.has_permission(Permission.FINE_LOCATION):
            logger.warning("Location permission missing, not subscribing to updates")
            return
        try:
            self._source.request_updates(self._request, self.on_location_result)
        except GpsDisabled as ex:
            logger.warning("No positioning source, not subscribing to updates: {}", ex)
            return
        self._subscribed = True

    def _stop_location_updates(self) -> None:
        if not self._subscribed:
            return
        try:
            self._source.remove_updates()
        finally:
            self._subscribed = False

    def on_location_result(self, fixes: list[LocationFix]) -> None:
        """Position callback: append the last fix and refresh the presence."""
        if self._state is not ServiceState.RUNNING or not fixes:
            return
        if not self._permissions.has_permission(Permission.FINE_LOCATION):
            logger.debug("Location permission revoked, dropping update")
            return

        fix = fixes[-1]
        try:
            text = format_fix_text(fix.latitude, fix.longitude)
        except ValueError as ex:
            logger.warning("Dropping invalid fix {}: {}", fix, ex)
            return

        self._save_record(LocationRecord(self._next_timestamp(), fix.latitude, fix.longitude))
        self._last_text = text
        self._presence.update(text)

    def _next_timestamp(self) -> str:
        """Wall-clock stamp, held at the previous value if the clock stepped back."""
        stamp = self._clock.now()
        if self._last_stamp is not None and stamp < self._last_stamp:
            logger.debug("Clock went back ({} < {}), reusing last stamp", stamp, self._last_stamp)
            stamp = self._last_stamp
        self._last_stamp = stamp
        return stamp

    def _save_record(self, record: LocationRecord) -> None:
        if self._csv_path is None:
            self.records_failed += 1
            logger.error("No location log file, dropping record {}", record)
            return
        try:
            self._repo.append(self._csv_path, record)
            self.records_written += 1
        except StorageFailure as ex:
            self.records_failed += 1
            logger.error("Location record append failed: {}", ex)
