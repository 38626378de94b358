"""Process-wide registry of running background services.

Plays the role of the platform's service manager: it creates a service on the
first start request, forwards every start request to the live instance, and
destroys it on stop. At most one instance per service class exists.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import threading
from typing import Any

from loguru import logger

from core.models import RunningServiceInfo
from infrastructure.utils import Clock


def service_class_name(service_cls: type) -> str:
    """Fully qualified class identifier used in the running-services list."""
    return f"{service_cls.__module__}.{service_cls.__qualname__}"


@dataclass
class _ServiceRecord:
    instance: Any
    info: RunningServiceInfo


class ServiceRuntime:
    """Creates, tracks and destroys service instances."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or Clock()
        self._lock = threading.RLock()
        self._factories: dict[str, Callable[[], Any]] = {}
        self._running: dict[str, _ServiceRecord] = {}
        self._listeners: list[Callable[[str, bool], None]] = []

    def register(self, service_cls: type, factory: Callable[[], Any]) -> None:
        """Register the factory used to build `service_cls` instances."""
        with self._lock:
            self._factories[service_class_name(service_cls)] = factory

    def add_listener(self, listener: Callable[[str, bool], None]) -> None:
        """Call `listener(class_name, running)` after each create/destroy."""
        with self._lock:
            self._listeners.append(listener)

    def start_foreground_service(self, service_cls: type) -> Any:
        """Start `service_cls`, creating it only if no instance exists."""
        name = service_class_name(service_cls)
        created = False
        with self._lock:
            record = self._running.get(name)
            if record is None:
                factory = self._factories.get(name)
                if factory is None:
                    raise KeyError(f"Service not registered: {name}")
                instance = factory()
                try:
                    instance.on_create()
                    instance.on_start_command()
                except Exception:
                    logger.exception("Service failed to start, rolling back: {}", name)
                    self._destroy_quietly(name, instance)
                    raise
                record = _ServiceRecord(instance, RunningServiceInfo(name, self._clock.millis()))
                self._running[name] = record
                created = True
                logger.info("Service created: {}", name)
            else:
                record.instance.on_start_command()
        if created:
            self._notify(name, True)
        return record.instance

    def stop_service(self, service_cls: type) -> bool:
        """Destroy the running instance of `service_cls`. False if none was running."""
        name = service_class_name(service_cls)
        with self._lock:
            record = self._running.pop(name, None)
            if record is None:
                return False
            try:
                record.instance.on_destroy()
            finally:
                logger.info("Service destroyed: {}", name)
        self._notify(name, False)
        return True

    def stop_all(self) -> None:
        with self._lock:
            names = list(self._running)
        for name in names:
            with self._lock:
                record = self._running.pop(name, None)
            if record is None:
                continue
            self._destroy_quietly(name, record.instance)
            logger.info("Service destroyed: {}", name)
            self._notify(name, False)

    def get_running_services(self) -> list[RunningServiceInfo]:
        with self._lock:
            return [r.info for r in self._running.values()]

    def get_instance(self, service_cls: type) -> Any | None:
        with self._lock:
            record = self._running.get(service_class_name(service_cls))
            return record.instance if record else None

    def _destroy_quietly(self, name: str, instance: Any) -> None:
        try:
            instance.on_destroy()
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("Service {} failed to shut down cleanly: {}", name, ex)

    def _notify(self, name: str, running: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(name, running)
            except Exception as ex:  # pylint: disable=broad-exception-caught
                logger.error("Service listener failed: {}", ex)


def is_service_running(runtime: ServiceRuntime, service_cls: type) -> bool:
    """Return True if `service_cls` appears in the runtime's running services.

    The answer is a hint: it can race with concurrent start/stop requests.
    """
    name = service_class_name(service_cls)
    for info in runtime.get_running_services():
        if info.class_name == name:
            return True
    return False
