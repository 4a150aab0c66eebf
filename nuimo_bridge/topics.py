from .const import DEFAULT_TOPIC_PREFIX, HA_DISCOVERY_PREFIX, TOPIC_DISCOVERY

SEPARATOR = "/"


class TopicScheme:
    """Maps device ids and channel names to broker topics.

    Topics are "{prefix}/{device_id}/{channel}". Device ids are opaque driver
    tokens and must not contain the separator.
    """

    def __init__(self, prefix=DEFAULT_TOPIC_PREFIX, discovery_prefix=HA_DISCOVERY_PREFIX):
        self.prefix = prefix
        self.discovery_prefix = discovery_prefix

    def event_topic(self, device_id: str, event_name: str) -> str:
        return SEPARATOR.join((self.prefix, device_id, event_name))

    def command_topic(self, device_id: str, command_name: str) -> str:
        return SEPARATOR.join((self.prefix, device_id, command_name))

    def details_topic(self, device_id: str) -> str:
        return self.event_topic(device_id, "details")

    def discovery_topic(self, category: str, device_id: str, component: str) -> str:
        return TOPIC_DISCOVERY.format(
            discovery_prefix=self.discovery_prefix,
            category=category,
            device_id=device_id,
            component=component,
        )

    def command_filter(self) -> str:
        return SEPARATOR.join((self.prefix, "+", "+"))

    def parse(self, topic: str):
        """Return (device_id, channel) for a device topic, or None."""
        parts = topic.split(SEPARATOR)
        if len(parts) != 3 or parts[0] != self.prefix:
            return None
        return parts[1], parts[2]
