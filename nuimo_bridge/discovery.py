import logging
from collections import namedtuple

from .const import DEVICE_MANUFACTURER, DEVICE_MODEL

log = logging.getLogger("nuimo_bridge.discovery")

# One Home Assistant entity per entry. Config values are templates filled with
# the device's state/command topics ({state} / {command} placeholders below).
DiscoveryEntry = namedtuple("DiscoveryEntry", ["category", "component", "config"])

_LAST_SWIPE_TEMPLATE = (
    "{% if topic.endswith('swipeLeft') %}Left"
    "{% elif topic.endswith('swipeRight') %}Right"
    "{% elif topic.endswith('swipeUp') %}Up"
    "{% elif topic.endswith('swipeDown') %}Down"
    "{% else %}Unknown{% endif %}"
)

_TOUCH_TEMPLATE = "{% if 'touch' in topic %}ON{% else %}OFF{% endif %}"

CATALOG = (
    DiscoveryEntry("sensor", "battery", {
        "device_class": "battery",
        "state_topic": "battery",
        "unit_of_measurement": "%",
        "value_template": "{{ value_json.level }}",
    }),
    DiscoveryEntry("sensor", "rssi", {
        "device_class": "signal_strength",
        "state_topic": "rssi",
        "unit_of_measurement": "dBm",
        "value_template": "{{ value_json.rssi }}",
    }),
    DiscoveryEntry("binary_sensor", "connection", {
        "device_class": "connectivity",
        "state_topic": "details",
        "value_template": "{{ 'true' if value_json.isConnected else 'false' }}",
        "payload_on": "true",
        "payload_off": "false",
    }),
    DiscoveryEntry("sensor", "rotation", {
        "state_topic": "rotate",
        "value_template": "{{ value_json.delta }}",
    }),
    DiscoveryEntry("button", "select", {
        "command_topic": "button/select",
        "payload_press": "PRESS",
        "state_topic": "button",
        "value_template": "{{ value_json.state }}",
    }),
    DiscoveryEntry("binary_sensor", "hover", {
        "device_class": "motion",
        "state_topic": "hover",
        "value_template": "{{ 'true' if value_json.proximity | float > 0 else 'false' }}",
        "payload_on": "true",
        "payload_off": "false",
    }),
    DiscoveryEntry("sensor", "hover_proximity", {
        "state_topic": "hover",
        "value_template": "{{ value_json.proximity }}",
        "unit_of_measurement": "",
    }),
    DiscoveryEntry("sensor", "last_swipe", {
        "state_topic": "+",
        "value_template": _LAST_SWIPE_TEMPLATE,
    }),
    DiscoveryEntry("binary_sensor", "touch", {
        "device_class": "occupancy",
        "state_topic": "+",
        "value_template": _TOUCH_TEMPLATE,
        "payload_on": "ON",
        "payload_off": "OFF",
    }),
)

# Config keys whose catalog value is a channel name to expand into a topic
_TOPIC_KEYS = ("state_topic", "command_topic")


class DiscoveryPublisher:
    """Publishes the details snapshot and Home Assistant discovery configs."""

    def __init__(self, mqtt, topics):
        self.mqtt = mqtt
        self.topics = topics

    def device_info(self, device_id):
        return {
            "identifiers": [device_id],
            "name": f"{DEVICE_MODEL} {device_id}",
            "model": DEVICE_MODEL,
            "manufacturer": DEVICE_MANUFACTURER,
        }

    def build_discovery(self, device_id):
        """Yield (topic, payload) for every catalog entry of a device."""
        device_info = self.device_info(device_id)
        for entry in CATALOG:
            config = dict(entry.config)
            for key in _TOPIC_KEYS:
                if key in config:
                    config[key] = self.topics.event_topic(device_id, config[key])
            config["name"] = f"{device_info['name']} {entry.component}"
            config["unique_id"] = f"{device_id}_{entry.component}"
            config["device"] = device_info
            topic = self.topics.discovery_topic(entry.category, device_id, entry.component)
            yield topic, config

    def publish_discovery(self, state):
        # Always a full republish; broker-side discovery state is not trusted
        # to have survived the device being away.
        for topic, config in self.build_discovery(state.id):
            self.mqtt.publish(topic, config, retain=True)
            log.debug("Published discovery for %s: %s", state.id, topic)
        log.info("Published %d discovery configs for %s", len(CATALOG), state.id)

    def publish_details(self, state):
        details = state.details()
        self.mqtt.publish(self.topics.details_topic(state.id), details, retain=False)
        log.debug("Published device details: %s", details)
