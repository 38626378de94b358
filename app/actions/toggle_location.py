"""Widget action that starts or stops the location logging service."""

from __future__ import annotations

from typing import Protocol

from loguru import logger

from infrastructure.location_service import LocationService
from infrastructure.service_runtime import ServiceRuntime, is_service_running


class WidgetHost(Protocol):
    """Anything that can redraw a widget instance."""

    def update_widget(self, widget_id: int) -> None:
        """Re-render widget `widget_id` from current service state."""
        ...


class ToggleLocationServiceAction:
    """Stateless toggle: probe the runtime first, then act on the answer."""

    def __init__(
        self,
        runtime: ServiceRuntime,
        host: WidgetHost | None = None,
        service_cls: type = LocationService,
    ) -> None:
        self._runtime = runtime
        self._host = host
        self._service_cls = service_cls

    def is_running(self) -> bool:
        return is_service_running(self._runtime, self._service_cls)

    def on_action(self, widget_id: int = 0) -> bool:
        """Flip the service and refresh the widget. Returns the requested state.

        The widget is refreshed even when the start or stop raised, so the
        switch always shows what the runtime reports.
        """
        running = self.is_running()
        try:
            if running:
                logger.info("Widget {}: stopping location service", widget_id)
                self._runtime.stop_service(self._service_cls)
            else:
                logger.info("Widget {}: starting location service", widget_id)
                self._runtime.start_foreground_service(self._service_cls)
        finally:
            if self._host is not None:
                self._host.update_widget(widget_id)
        return not running
