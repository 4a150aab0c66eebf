import asyncio
import logging
import struct

from bleak import BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from .base import NuimoDevice, NuimoError

log = logging.getLogger("nuimo_bridge.devices.nuimo")

UUIDS = {
    "battery": "00002a19-0000-1000-8000-00805f9b34fb",
    "ledMatrix": "f29b1524-cb19-40f3-be5c-7241ecb82fd1",
    "fly": "f29b1526-cb19-40f3-be5c-7241ecb82fd2",
    "touch": "f29b1527-cb19-40f3-be5c-7241ecb82fd2",
    "rotation": "f29b1528-cb19-40f3-be5c-7241ecb82fd2",
    "button": "f29b1529-cb19-40f3-be5c-7241ecb82fd2",
}

NAME_PREFIX = "Nuimo"
CONNECT_TIMEOUT = 20.0

# Raw rotation points reported for one full turn of the ring
POINTS_PER_ROTATION = 2650
# Fly (hover) distance reported at the far edge of the sensor's range
MAX_FLY_DISTANCE = 250

# touch characteristic value -> (event, args)
TOUCH_EVENTS = {
    0: ("swipeLeft", (False,)),
    1: ("swipeRight", (False,)),
    2: ("swipeUp", ()),
    3: ("swipeDown", ()),
    4: ("touchLeft", ()),
    5: ("touchRight", ()),
    6: ("touchTop", ()),
    7: ("touchBottom", ()),
    8: ("longTouchLeft", ()),
    9: ("longTouchRight", ()),
    10: ("longTouchTop", ()),
    11: ("longTouchBottom", ()),
}

FLY_LEFT = 0
FLY_RIGHT = 1
FLY_UP_DOWN = 4


def device_id_from_address(address: str) -> str:
    """MAC address as an MQTT/Home Assistant safe id, e.g. 'c5f2a1b3d4e6'."""
    return address.replace(":", "").replace("-", "").lower()


def decode_touch(data):
    """Return (event, args) for a touch/swipe notification, or None."""
    if not data:
        return None
    return TOUCH_EVENTS.get(data[0])


def decode_fly(data):
    """Return (event, args) for a fly notification, or None.

    Left/right fly gestures are hover swipes; up/down carries the hand's
    proximity normalised to 0..1 (1 = closest).
    """
    if not data:
        return None
    gesture = data[0]
    if gesture == FLY_LEFT:
        return "swipeLeft", (True,)
    if gesture == FLY_RIGHT:
        return "swipeRight", (True,)
    if gesture == FLY_UP_DOWN and len(data) > 1:
        return "hover", (min(data[1], MAX_FLY_DISTANCE) / MAX_FLY_DISTANCE,)
    return None


def decode_rotation(data, rotation_range):
    """Convert raw rotation points into range units."""
    (points,) = struct.unpack("<h", bytes(data[:2]))
    minimum, maximum = rotation_range
    return points / POINTS_PER_ROTATION * (maximum - minimum)


def encode_matrix(glyph, brightness, timeout):
    """13-byte LED matrix write: bitmap, brightness (0-255), time in 1/10 s."""
    level = max(0, min(255, round(brightness * 255)))
    ticks = max(0, min(255, round(timeout * 10)))
    return glyph.to_bytes() + bytes((level, ticks))


class NuimoControlDevice(NuimoDevice):
    """Nuimo Control driven over BLE GATT with bleak."""

    def __init__(self, ble_device, rssi=None):
        super().__init__()
        self._ble_device = ble_device
        self._id = device_id_from_address(ble_device.address)
        self._client = None
        self._battery_level = None
        self._rssi = rssi
        self._brightness = 1.0
        self._rotation_range = (0, 10)
        self._glyph = None
        self._glyph_timeout = 2.0

    @property
    def id(self):
        return self._id

    @property
    def is_connected(self):
        return self._client is not None and self._client.is_connected

    @property
    def battery_level(self):
        return self._battery_level

    @property
    def rssi(self):
        return self._rssi

    @property
    def brightness(self):
        return self._brightness

    def update_ble_device(self, ble_device, rssi=None):
        """Refresh the advertisement data seen by the scanner."""
        self._ble_device = ble_device
        if rssi is not None and rssi != self._rssi:
            self._rssi = rssi
            self.emit("rssi", rssi)

    # --- Connection Management ---

    async def connect(self):
        if self.is_connected:
            return
        log.debug("Establishing connection to %s", self._ble_device.address)
        client = await establish_connection(
            BleakClientWithServiceCache,
            self._ble_device,
            self._id,
            disconnected_callback=self._on_disconnected,
            timeout=CONNECT_TIMEOUT,
        )
        try:
            battery = await client.read_gatt_char(UUIDS["battery"])
            if battery:
                self._battery_level = battery[0]
            await client.start_notify(UUIDS["battery"], self._on_battery)
            await client.start_notify(UUIDS["fly"], self._on_fly)
            await client.start_notify(UUIDS["touch"], self._on_touch)
            await client.start_notify(UUIDS["rotation"], self._on_rotation)
            await client.start_notify(UUIDS["button"], self._on_button)
        except (BleakError, OSError, asyncio.TimeoutError):
            await client.disconnect()
            raise
        self._client = client
        log.debug("Connected to %s", self._id)

    async def disconnect(self):
        client, self._client = self._client, None
        if client is None:
            return
        try:
            if client.is_connected:
                await client.disconnect()
        except (BleakError, OSError) as exc:
            log.debug("Error during disconnect for %s: %s", self._id, exc)

    def _on_disconnected(self, client):
        if client is not self._client and self._client is not None:
            return
        self._client = None
        log.debug("BLE link to %s dropped", self._id)
        self.emit("disconnect")

    # --- Commands ---

    async def set_rotation_range(self, minimum, maximum):
        self._rotation_range = (minimum, maximum)

    async def display_glyph(self, glyph, brightness=None, timeout=2.0):
        if brightness is None:
            brightness = self._brightness
        self._glyph = glyph
        self._glyph_timeout = timeout
        await self._write_matrix(glyph, brightness, timeout)

    async def set_brightness(self, value):
        self._brightness = value
        if self._glyph is not None:
            await self._write_matrix(self._glyph, value, self._glyph_timeout)

    async def _write_matrix(self, glyph, brightness, timeout):
        if not self.is_connected:
            raise NuimoError(f"Nuimo {self._id} is not connected")
        await self._client.write_gatt_char(
            UUIDS["ledMatrix"], encode_matrix(glyph, brightness, timeout), response=True
        )

    # --- Notifications ---

    def _on_battery(self, _sender, data):
        if data:
            self._battery_level = data[0]
            self.emit("batteryLevel", data[0])

    def _on_fly(self, _sender, data):
        decoded = decode_fly(data)
        if decoded:
            self.emit(decoded[0], *decoded[1])

    def _on_touch(self, _sender, data):
        decoded = decode_touch(data)
        if decoded:
            self.emit(decoded[0], *decoded[1])

    def _on_rotation(self, _sender, data):
        if len(data) >= 2:
            self.emit("rotate", decode_rotation(data, self._rotation_range))

    def _on_button(self, _sender, data):
        if not data:
            return
        if data[0]:
            self.emit("selectDown")
        else:
            self.emit("selectUp")
            self.emit("select")


class NuimoScanner:
    """Scans for Nuimo advertisements and reports each device once."""

    def __init__(self):
        self._scanner = None
        self._devices = {}
        self._on_device = None

    async def start(self, on_device):
        self._on_device = on_device
        self._scanner = BleakScanner(detection_callback=self._on_advertisement)
        await self._scanner.start()
        log.info("Waiting for Nuimo devices...")

    async def stop(self):
        if self._scanner:
            await self._scanner.stop()
            self._scanner = None

    def _on_advertisement(self, ble_device, advertisement):
        name = advertisement.local_name or ble_device.name or ""
        if not name.startswith(NAME_PREFIX):
            return

        address = ble_device.address.lower()
        known = self._devices.get(address)
        if known is not None:
            known.update_ble_device(ble_device, advertisement.rssi)
            return

        log.info("Found Nuimo device: %s (%s)", address, name)
        device = NuimoControlDevice(ble_device, advertisement.rssi)
        self._devices[address] = device
        self._on_device(device)
