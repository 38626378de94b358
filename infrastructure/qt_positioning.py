"""Qt Positioning adapter delivering fixes on the main thread."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject
from PySide6.QtPositioning import QGeoPositionInfo, QGeoPositionInfoSource
from loguru import logger

from core.errors import GpsDisabled
from core.models import LocationFix, LocationRequest, Priority
from core.services.interfaces import IPositionSource


class QtPositionSource(IPositionSource):
    """Wraps the platform default `QGeoPositionInfoSource`."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent
        self._source: QGeoPositionInfoSource | None = None
        self._callback: Callable[[list[LocationFix]], None] | None = None

    def is_provider_enabled(self) -> bool:
        return bool(QGeoPositionInfoSource.availableSources())

    def _ensure_source(self) -> QGeoPositionInfoSource:
        if self._source is None:
            source = QGeoPositionInfoSource.createDefaultSource(self._parent)
            if source is None:
                raise GpsDisabled("No positioning source available")
            source.positionUpdated.connect(self._on_position_updated)
            source.errorOccurred.connect(self._on_error)
            self._source = source
            logger.info("Positioning source: {}", source.sourceName())
        return self._source

    def request_updates(
        self, request: LocationRequest, callback: Callable[[list[LocationFix]], None]
    ) -> None:
        source = self._ensure_source()
        if request.priority is Priority.HIGH_ACCURACY:
            source.setPreferredPositioningMethods(
                QGeoPositionInfoSource.PositioningMethod.SatellitePositioningMethods
            )
        else:
            source.setPreferredPositioningMethods(
                QGeoPositionInfoSource.PositioningMethod.AllPositioningMethods
            )
        interval = max(int(request.interval_ms), source.minimumUpdateInterval())
        source.setUpdateInterval(interval)
        self._callback = callback
        source.startUpdates()

    def remove_updates(self) -> None:
        self._callback = None
        if self._source is not None:
            self._source.stopUpdates()

    def _on_position_updated(self, info: QGeoPositionInfo) -> None:
        callback = self._callback
        if callback is None or not info.isValid():
            return
        coord = info.coordinate()
        ts = info.timestamp()
        fix = LocationFix(
            latitude=coord.latitude(),
            longitude=coord.longitude(),
            time_ms=ts.toMSecsSinceEpoch() if ts.isValid() else None,
        )
        callback([fix])

    def _on_error(self, error: QGeoPositionInfoSource.Error) -> None:
        logger.warning("Positioning error: {}", error)
