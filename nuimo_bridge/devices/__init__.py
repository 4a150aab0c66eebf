"""Device drivers.

NuimoDevice is the contract the bridge relies on; NuimoControlDevice is the
BLE implementation and NuimoScanner its discovery session.
"""
from .base import EventEmitter, NuimoDevice, NuimoError
from .nuimo import NuimoControlDevice, NuimoScanner

__all__ = [
    "EventEmitter",
    "NuimoDevice",
    "NuimoError",
    "NuimoControlDevice",
    "NuimoScanner",
]
