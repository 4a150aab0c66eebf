import json
import logging
import math

from .glyph import Glyph, GlyphError

log = logging.getLogger("nuimo_bridge.commands")

COMMANDS = ("display", "brightness")


def parse_brightness(raw):
    """Return a brightness in [0, 1], or None if the value is unusable."""
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        return None
    return value


class CommandRouter:
    """Applies MQTT display/brightness commands to one device."""

    def __init__(self, device, state, mqtt, topics):
        self.device = device
        self.state = state
        self.mqtt = mqtt
        self.topics = topics

    def arm(self):
        for command in COMMANDS:
            self.mqtt.subscribe(self.topics.command_topic(self.state.id, command), self.handle)

    def disarm(self):
        for command in COMMANDS:
            self.mqtt.unsubscribe(self.topics.command_topic(self.state.id, command))

    async def handle(self, topic, payload):
        parsed = self.topics.parse(topic)
        if parsed is None:
            return
        device_id, command = parsed
        # Shared subscriptions may deliver other devices' commands
        if device_id != self.state.id:
            return

        if command == "display":
            await self._on_display(payload)
        elif command == "brightness":
            await self._on_brightness(payload)

    async def _on_display(self, payload):
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, TypeError):
            log.warning("Invalid display payload for %s: %s", self.state.id, payload)
            return

        if not isinstance(data, dict) or "rows" not in data:
            log.warning("Display payload for %s has no rows: %s", self.state.id, payload)
            return

        try:
            glyph = Glyph.from_rows(data["rows"])
        except GlyphError as exc:
            log.warning("Error parsing glyph for %s: %s", self.state.id, exc)
            return

        brightness = None
        if data.get("brightness") is not None:
            brightness = parse_brightness(data["brightness"])
            if brightness is None:
                log.warning(
                    "Invalid display brightness for %s: %s", self.state.id, data["brightness"]
                )
                return

        log.debug("Displaying glyph on %s:\n%s", self.state.id, glyph)
        try:
            await self.device.display_glyph(glyph, brightness=brightness)
        except Exception as exc:
            log.warning("Error displaying glyph on %s: %s", self.state.id, exc)

    async def _on_brightness(self, payload):
        brightness = parse_brightness(payload)
        if brightness is None:
            log.warning("Invalid brightness value for %s: %s", self.state.id, payload)
            return

        self.state.brightness = brightness
        try:
            await self.device.set_brightness(brightness)
        except Exception as exc:
            log.warning("Error setting brightness on %s: %s", self.state.id, exc)
