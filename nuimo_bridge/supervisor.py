import asyncio
import logging
from enum import Enum

from .const import RECONNECT_DELAY
from .state import ConnectionStatus

log = logging.getLogger("nuimo_bridge.supervisor")


class SupervisorState(Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class ReconnectSupervisor:
    """Keeps one device connected for the life of the process.

    CONNECTING -> CONNECTED -> DISCONNECTED -> CONNECTING -> ...

    Connect failures (first connect included) are retried every
    ``retry_delay`` seconds with no upper bound. ``on_connected`` runs after
    every successful connect and re-announces the device.
    """

    def __init__(self, device, state, on_connected, retry_delay=RECONNECT_DELAY, sleep=asyncio.sleep):
        self.device = device
        self.state = state
        self._on_connected = on_connected
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._status = SupervisorState.CONNECTING
        self._lost = asyncio.Event()
        self._task = None
        self.attempts = 0
        self.consecutive_failures = 0

    @property
    def status(self):
        return self._status

    def start(self):
        if self._task and not self._task.done():
            return self._task
        self.device.on("disconnect", self._on_disconnect)
        self._task = asyncio.create_task(self._run())
        return self._task

    async def stop(self):
        self.device.off("disconnect", self._on_disconnect)
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def _on_disconnect(self):
        if self._status is SupervisorState.CONNECTED:
            self._lost.set()

    async def _run(self):
        while True:
            await self._connect_until_up()

            self._status = SupervisorState.CONNECTED
            if not self.device.is_connected:
                # Link dropped while the device was being announced
                self._lost.set()
            await self._lost.wait()
            self._lost.clear()

            self._status = SupervisorState.DISCONNECTED
            self.state.connection_status = ConnectionStatus.DISCONNECTED
            log.info("Nuimo device disconnected: %s. Attempting to reconnect...", self.state.id)

    async def _connect_until_up(self):
        self._status = SupervisorState.CONNECTING
        while True:
            self.attempts += 1
            try:
                await self.device.connect()
                await self.device.set_rotation_range(*self.state.rotation_range)
                self.state.connection_status = ConnectionStatus.CONNECTED
                await self._on_connected()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.consecutive_failures += 1
                self.state.connection_status = ConnectionStatus.DISCONNECTED
                log.warning(
                    "Failed to connect to Nuimo device %s (attempt %d): %s, retrying in %ss",
                    self.state.id, self.consecutive_failures, exc, self._retry_delay,
                )
                await self._sleep(self._retry_delay)
                continue

            self.consecutive_failures = 0
            log.info("Connected to Nuimo device: %s", self.state.id)
            return
