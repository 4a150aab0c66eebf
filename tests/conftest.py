"""Shared fakes for bridge tests."""

import asyncio
from collections import namedtuple

import pytest

from nuimo_bridge.devices.base import NuimoDevice, NuimoError
from nuimo_bridge.discovery import DiscoveryPublisher
from nuimo_bridge.state import DeviceState
from nuimo_bridge.topics import TopicScheme

Published = namedtuple("Published", ["topic", "payload", "retain"])


class FakeMqtt:
    """Records publishes and subscriptions instead of talking to a broker."""

    def __init__(self):
        self.published = []
        self.subscriptions = {}

    def publish(self, topic, payload, qos=0, retain=False):
        self.published.append(Published(topic, payload, retain))

    def subscribe(self, topic_filter, callback, qos=0):
        self.subscriptions[topic_filter] = callback

    def unsubscribe(self, topic_filter):
        self.subscriptions.pop(topic_filter, None)

    def topics(self):
        return [p.topic for p in self.published]

    def payloads(self, topic):
        return [p.payload for p in self.published if p.topic == topic]


class FakeDevice(NuimoDevice):
    """In-memory NuimoDevice; connect fails ``connect_failures`` times first."""

    def __init__(self, device_id="c5f2a1b3d4e6", connect_failures=0):
        super().__init__()
        self._id = device_id
        self._connected = False
        self._brightness = 1.0
        self.connect_failures = connect_failures
        self.connect_calls = 0
        self.rotation_ranges = []
        self.glyphs = []
        self.brightness_calls = []
        self.battery = None
        self.signal = None

    @property
    def id(self):
        return self._id

    @property
    def is_connected(self):
        return self._connected

    @property
    def battery_level(self):
        return self.battery

    @property
    def rssi(self):
        return self.signal

    @property
    def brightness(self):
        return self._brightness

    async def connect(self):
        self.connect_calls += 1
        if self.connect_failures:
            self.connect_failures -= 1
            raise NuimoError("device unreachable")
        self._connected = True

    async def disconnect(self):
        self._connected = False

    async def set_rotation_range(self, minimum, maximum):
        self.rotation_ranges.append((minimum, maximum))

    async def display_glyph(self, glyph, brightness=None, timeout=2.0):
        self.glyphs.append((glyph, brightness))

    async def set_brightness(self, value):
        self._brightness = value
        self.brightness_calls.append(value)

    def drop(self):
        """Simulate the BLE link going away."""
        self._connected = False
        self.emit("disconnect")


async def settle(rounds=20):
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def mqtt():
    return FakeMqtt()


@pytest.fixture
def topics():
    return TopicScheme()


@pytest.fixture
def publisher(mqtt, topics):
    return DiscoveryPublisher(mqtt, topics)


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def state(device):
    return DeviceState(id=device.id)
