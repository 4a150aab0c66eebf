import asyncio
import logging
import signal
import sys

from .bridge import Bridge
from .config import load_config
from .devices import NuimoScanner
from .mqtt_client import MqttClient


def _configure_logging(config):
    level = logging.DEBUG if config.get("debug_logging") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


async def main():
    """Run the bridge until a signal arrives (0) or the broker is lost (1)."""
    config = load_config()
    _configure_logging(config)
    log = logging.getLogger("nuimo_bridge")

    mqtt = MqttClient(config)
    try:
        await mqtt.connect()
    except Exception:
        log.exception("Error connecting to MQTT broker")
        return 1

    bridge = Bridge(config, mqtt, NuimoScanner())
    await bridge.start()
    mqtt.publish(mqtt.status_topic, "online", retain=True)
    log.info("Nuimo MQTT bridge is running")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass

    stop_wait = asyncio.create_task(stop_event.wait())
    closed_wait = asyncio.create_task(mqtt.closed.wait())
    await asyncio.wait({stop_wait, closed_wait}, return_when=asyncio.FIRST_COMPLETED)
    stop_wait.cancel()
    closed_wait.cancel()

    if mqtt.closed.is_set():
        # Broker gone: exit now and let the process supervisor restart us
        return 1

    try:
        await bridge.stop()
    except Exception:
        log.exception("Error stopping bridge")
    mqtt.publish(mqtt.status_topic, "offline", retain=True)
    await mqtt.disconnect()
    return 0


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
