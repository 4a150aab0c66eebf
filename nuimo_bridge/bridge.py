import logging
from dataclasses import dataclass

from .commands import CommandRouter
from .const import DEFAULT_ROTATION_RANGE, DEFAULT_TOPIC_PREFIX, RECONNECT_DELAY
from .discovery import DiscoveryPublisher
from .events import EventRouter
from .state import DeviceState
from .supervisor import ReconnectSupervisor
from .topics import TopicScheme

log = logging.getLogger("nuimo_bridge.bridge")


@dataclass
class DeviceEntry:
    device: object
    state: DeviceState
    events: EventRouter
    commands: CommandRouter
    supervisor: ReconnectSupervisor


class Bridge:
    """Owns the device registry and wires each discovered device to MQTT."""

    def __init__(self, config, mqtt, scanner, sleep=None):
        self.config = config
        self.mqtt = mqtt
        self.scanner = scanner
        self.topics = TopicScheme(config.get("mqtt_topic_prefix", DEFAULT_TOPIC_PREFIX))
        self.publisher = DiscoveryPublisher(mqtt, self.topics)
        self.devices = {}  # device id -> DeviceEntry

        self._rotation_range = (
            config.get("rotation_min", DEFAULT_ROTATION_RANGE[0]),
            config.get("rotation_max", DEFAULT_ROTATION_RANGE[1]),
        )
        self._retry_delay = float(config.get("reconnect_delay", RECONNECT_DELAY))
        self._sleep = sleep

    async def start(self):
        await self.scanner.start(self.on_device)

    async def stop(self):
        await self.scanner.stop()
        for entry in self.devices.values():
            await entry.supervisor.stop()
            entry.events.disarm()
            entry.commands.disarm()
            try:
                await entry.device.disconnect()
            except Exception as exc:
                log.debug("Error disconnecting %s: %s", entry.state.id, exc)

    def on_device(self, device):
        """Register a newly discovered device and start its lifecycle."""
        if device.id in self.devices:
            return self.devices[device.id]

        state = DeviceState(id=device.id, rotation_range=self._rotation_range)
        events = EventRouter(device, state, self.mqtt, self.topics, self.publisher)
        commands = CommandRouter(device, state, self.mqtt, self.topics)

        async def on_connected():
            await self._announce(entry)

        kwargs = {"retry_delay": self._retry_delay}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        supervisor = ReconnectSupervisor(device, state, on_connected, **kwargs)

        entry = DeviceEntry(device, state, events, commands, supervisor)
        # Registered before the first connect so a repeated discovery is ignored
        self.devices[device.id] = entry
        log.info("Found Nuimo device: %s", device.id)
        supervisor.start()
        return entry

    async def _announce(self, entry):
        state = entry.state
        if entry.device.battery_level is not None:
            state.battery_level = entry.device.battery_level
        if entry.device.rssi is not None:
            state.rssi = entry.device.rssi

        self.publisher.publish_details(state)
        self.publisher.publish_discovery(state)
        entry.events.arm()
        entry.commands.arm()
