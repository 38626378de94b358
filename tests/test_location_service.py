"""Location logging service lifecycle and record writing."""

import re

import pytest

from core.errors import GpsDisabled, StorageFailure
from core.models import LocationFix, Permission, Priority, ServiceState
from infrastructure.csv_repository import CsvLocationRepository
from infrastructure.location_service import (
    NOTIFICATION_TITLE,
    WAITING_TEXT,
    LocationService,
    format_fix_text,
)

LINE_RE = re.compile(r"\d{8}_\d{6},-?\d+(\.\d+)?,-?\d+(\.\d+)?\n")


class FlakyRepository(CsvLocationRepository):
    """Fails the n-th append (1-based)."""

    def __init__(self, fail_on: int) -> None:
        self.fail_on = fail_on
        self.calls = 0

    def append(self, csv_path, record) -> None:
        self.calls += 1
        if self.calls == self.fail_on:
            raise StorageFailure("disk full", csv_path)
        super().append(csv_path, record)


@pytest.fixture
def make_service(storage, position_source, presence, permissions, clock):
    def _make(**overrides):
        kwargs = dict(
            storage=storage,
            position_source=position_source,
            presence=presence,
            permissions=permissions,
            clock=clock,
        )
        kwargs.update(overrides)
        return LocationService(**kwargs)

    return _make


def _start(service):
    service.on_create()
    service.on_start_command()
    return service


def _lines(path):
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.readlines()


def test_start_creates_log_and_subscribes(make_service, position_source, presence, storage):
    service = _start(make_service())

    assert service.state is ServiceState.RUNNING
    assert service.csv_path == storage.files_dir / "location" / "location_20240101_120000.csv"
    assert service.csv_path.exists()
    assert presence.active
    assert presence.title == NOTIFICATION_TITLE
    assert presence.texts == [WAITING_TEXT]
    assert position_source.request.priority is Priority.HIGH_ACCURACY
    assert position_source.request.interval_ms == 2000


def test_three_samples_then_stop(make_service, position_source, clock, presence):
    service = _start(make_service())
    for lat, lng in [(1.0, 2.0), (1.5, 2.5), (2.0, 3.0)]:
        clock.advance(2)
        position_source.emit((lat, lng))
    service.on_destroy()

    assert _lines(service.csv_path) == [
        "20240101_120002,1.0,2.0\n",
        "20240101_120004,1.5,2.5\n",
        "20240101_120006,2.0,3.0\n",
    ]
    assert all(LINE_RE.fullmatch(line) for line in _lines(service.csv_path))
    assert presence.texts[-1] == "Lat: 2.0, Lng: 3.0"
    assert service.status_text == "Lat: 2.0, Lng: 3.0"
    assert service.records_written == 3
    assert not presence.active
    assert service.state is ServiceState.STOPPED
    assert position_source.remove_count == 1


def test_last_fix_of_a_batch_is_used(make_service, position_source):
    service = _start(make_service())
    position_source.emit((1.0, 1.0), (5.0, 6.0))
    assert _lines(service.csv_path) == ["20240101_120000,5.0,6.0\n"]


def test_append_failure_is_not_fatal(make_service, position_source, clock, presence):
    service = _start(make_service(repository=FlakyRepository(fail_on=2)))
    for lat, lng in [(1.0, 2.0), (1.5, 2.5), (2.0, 3.0)]:
        clock.advance(2)
        position_source.emit((lat, lng))

    lines = _lines(service.csv_path)
    assert [line.split(",", 1)[1] for line in lines] == ["1.0,2.0\n", "2.0,3.0\n"]
    assert service.state is ServiceState.RUNNING
    assert service.records_failed == 1
    # the indicator still followed every fix
    assert presence.texts[1:] == [format_fix_text(*p) for p in [(1.0, 2.0), (1.5, 2.5), (2.0, 3.0)]]


def test_revoked_permission_drops_updates_silently(make_service, position_source, permissions):
    service = _start(make_service())
    permissions.revoke(Permission.FINE_LOCATION)
    position_source.emit((1.0, 2.0))
    assert _lines(service.csv_path) == []
    assert service.state is ServiceState.RUNNING


def test_missing_permission_at_start_skips_subscription(make_service, position_source, permissions):
    permissions.revoke(Permission.FINE_LOCATION)
    service = _start(make_service())
    assert service.state is ServiceState.RUNNING
    assert position_source.request_count == 0
    service.on_destroy()
    assert position_source.remove_count == 0


def test_repeated_start_is_absorbed(make_service, position_source):
    service = _start(make_service())
    service.on_start_command()
    assert position_source.request_count == 1


def test_destroy_is_idempotent_and_drops_late_updates(make_service, position_source, presence):
    service = _start(make_service())
    callback = position_source.callback
    service.on_destroy()
    service.on_destroy()
    assert position_source.remove_count == 1

    callback([])
    callback([LocationFix(9.0, 9.0)])
    assert _lines(service.csv_path) == []


def test_restart_creates_a_new_file(make_service, clock):
    first = _start(make_service())
    first.on_destroy()
    second = _start(make_service())
    assert second.csv_path != first.csv_path
    assert first.csv_path.exists()

    clock.advance(5)
    third = _start(make_service())
    assert third.csv_path.name == "location_20240101_120005.csv"


def test_invalid_fix_is_dropped(make_service, position_source):
    service = _start(make_service())
    position_source.emit((float("nan"), 2.0))
    assert _lines(service.csv_path) == []


def test_no_positioning_source_idles_without_subscription(
    make_service, position_source, presence, monkeypatch
):
    def _no_source(request, callback):
        raise GpsDisabled("No positioning source available")

    monkeypatch.setattr(position_source, "request_updates", _no_source)
    service = _start(make_service())

    assert service.state is ServiceState.RUNNING
    assert presence.active
    service.on_destroy()
    assert service.state is ServiceState.STOPPED
    assert position_source.remove_count == 0
    assert not presence.active


def test_timestamps_never_go_backwards(make_service, position_source, clock):
    service = _start(make_service())
    clock.advance(10)
    position_source.emit((1.0, 2.0))
    # wall clock falls back one hour
    clock.advance(-3600)
    position_source.emit((1.5, 2.5))
    clock.advance(3600 + 5)
    position_source.emit((2.0, 3.0))

    stamps = [line.split(",", 1)[0] for line in _lines(service.csv_path)]
    assert stamps == ["20240101_120010", "20240101_120010", "20240101_120015"]
