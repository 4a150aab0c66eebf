import logging
from abc import ABC, abstractmethod

log = logging.getLogger("nuimo_bridge.devices")


class NuimoError(Exception):
    """Raised by drivers when a device operation fails."""


class EventEmitter:
    """Minimal named-event dispatcher used by device drivers.

    Listeners run in registration order. A failing listener is logged and
    does not stop the remaining listeners.
    """

    def __init__(self):
        self._listeners = {}

    def on(self, event, callback):
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event, callback):
        callbacks = self._listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def remove_all_listeners(self, event=None):
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def listener_count(self, event) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event, *args):
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(*args)
            except Exception:
                log.exception("Error in %s listener", event)


class NuimoDevice(EventEmitter, ABC):
    """Driver contract for one Nuimo Control.

    Events emitted (arguments in brackets):
        touchTop, touchBottom, touchLeft, touchRight,
        longTouchTop, longTouchBottom, longTouchLeft, longTouchRight,
        swipeUp, swipeDown, swipeLeft [hover_swipe], swipeRight [hover_swipe],
        select, selectDown, selectUp, rotate [delta],
        batteryLevel [level], rssi [rssi], hover [proximity], disconnect
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable identifier, also used in MQTT topics."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @property
    @abstractmethod
    def battery_level(self) -> int | None:
        ...

    @property
    @abstractmethod
    def rssi(self) -> int | None:
        ...

    @property
    @abstractmethod
    def brightness(self) -> float:
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Connect and start notifications. Raises on failure."""

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def set_rotation_range(self, minimum: float, maximum: float) -> None:
        """Scale rotate deltas so one full turn spans maximum - minimum."""

    @abstractmethod
    async def display_glyph(self, glyph, brightness: float | None = None, timeout: float = 2.0) -> None:
        ...

    @abstractmethod
    async def set_brightness(self, value: float) -> None:
        """Set display brightness (0..1), redrawing the current glyph if any."""
