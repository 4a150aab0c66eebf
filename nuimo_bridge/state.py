from dataclasses import dataclass
from enum import Enum

from .const import DEFAULT_ROTATION_RANGE


class ConnectionStatus(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass
class DeviceState:
    """What the bridge knows about one device.

    Writes have no side effects; publishing is left to the routers.
    """

    id: str
    connection_status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    battery_level: int | None = None
    rssi: int | None = None
    brightness: float = 1.0
    rotation_range: tuple = DEFAULT_ROTATION_RANGE

    @property
    def is_connected(self) -> bool:
        return self.connection_status is ConnectionStatus.CONNECTED

    def details(self) -> dict:
        """Snapshot published on the details topic."""
        return {
            "id": self.id,
            "batteryLevel": self.battery_level,
            "rssi": self.rssi,
            "isConnected": self.is_connected,
            "brightness": self.brightness,
        }
