import logging

log = logging.getLogger("nuimo_bridge.events")

# Device events forwarded with an empty payload on a topic of the same name
SIMPLE_EVENTS = (
    "touchTop",
    "touchBottom",
    "touchLeft",
    "touchRight",
    "longTouchTop",
    "longTouchBottom",
    "longTouchLeft",
    "longTouchRight",
    "swipeUp",
    "swipeDown",
    "select",
)


class EventRouter:
    """Publishes a device's events to MQTT and tracks its telemetry."""

    def __init__(self, device, state, mqtt, topics, publisher):
        self.device = device
        self.state = state
        self.mqtt = mqtt
        self.topics = topics
        self.publisher = publisher
        self._handlers = []

    @property
    def armed(self):
        return bool(self._handlers)

    def arm(self):
        """Attach one listener per device event. Safe to call on every reconnect."""
        self.disarm()
        handlers = [(event, self._simple(event)) for event in SIMPLE_EVENTS]
        handlers += [
            ("swipeLeft", lambda hover_swipe=False: self._swipe("swipeLeft", hover_swipe)),
            ("swipeRight", lambda hover_swipe=False: self._swipe("swipeRight", hover_swipe)),
            ("selectDown", lambda: self._publish("button", {"state": "pressed"})),
            ("selectUp", lambda: self._publish("button", {"state": "released"})),
            ("rotate", lambda delta: self._publish("rotate", {"delta": delta})),
            ("batteryLevel", self._on_battery),
            ("rssi", self._on_rssi),
            ("hover", self._on_hover),
        ]
        for event, handler in handlers:
            self.device.on(event, handler)
        self._handlers = handlers

    def disarm(self):
        for event, handler in self._handlers:
            self.device.off(event, handler)
        self._handlers = []

    def _simple(self, event):
        return lambda *_args: self._publish(event)

    def _publish(self, channel, payload=None):
        payload = payload if payload is not None else {}
        log.debug("Event: %s %s %s", self.state.id, channel, payload)
        self.mqtt.publish(self.topics.event_topic(self.state.id, channel), payload, retain=False)

    def _swipe(self, event, hover_swipe):
        self._publish(event, {"hoverSwipe": bool(hover_swipe)})

    def _on_battery(self, level):
        self.state.battery_level = level
        self._publish("battery", {"level": level})
        self.publisher.publish_details(self.state)

    def _on_rssi(self, rssi):
        self.state.rssi = rssi
        self._publish("rssi", {"rssi": rssi})
        self.publisher.publish_details(self.state)

    def _on_hover(self, proximity):
        self._publish("hover", {"proximity": f"{proximity:.4f}"})
