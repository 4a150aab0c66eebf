import asyncio
import json
import logging
from urllib.parse import urlparse

import paho.mqtt.client as mqtt

from .const import DEFAULT_MQTT_URL, DEFAULT_TOPIC_PREFIX, TOPIC_BRIDGE_STATUS

log = logging.getLogger("nuimo_bridge.mqtt")

DEFAULT_PORTS = {"mqtt": 1883, "tcp": 1883, "mqtts": 8883, "ssl": 8883}


def parse_broker_url(url):
    """Return (host, port, tls) for an mqtt://, mqtts:// or bare host URL."""
    if "://" not in url:
        url = f"mqtt://{url}"
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise ValueError(f"Unsupported MQTT URL scheme: {parsed.scheme}")
    host = parsed.hostname or "localhost"
    port = parsed.port or DEFAULT_PORTS[scheme]
    return host, port, scheme in ("mqtts", "ssl")


class MqttClient:
    """paho-mqtt wrapper bridging its network thread to asyncio callbacks.

    Losing the broker after the initial connect sets ``closed``; the process
    treats that as fatal.
    """

    def __init__(self, config):
        self.config = config
        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id="nuimo_bridge",
        )
        self._subscriptions = {}
        self._loop = None
        self._connected = False
        self.closed = asyncio.Event()

        self.status_topic = TOPIC_BRIDGE_STATUS.format(
            prefix=config.get("mqtt_topic_prefix", DEFAULT_TOPIC_PREFIX)
        )

        user = config.get("mqtt_username")
        password = config.get("mqtt_password")
        if user:
            self.client.username_pw_set(user, password)

        self.client.will_set(self.status_topic, "offline", qos=1, retain=True)

        self.client.on_message = self._on_message
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._host, self._port, tls = parse_broker_url(config.get("mqtt_url", DEFAULT_MQTT_URL))
        if tls:
            self.client.tls_set()

    async def connect(self):
        """Connect once; failure propagates to the caller."""
        self._loop = asyncio.get_running_loop()
        await self._loop.run_in_executor(
            None, self.client.connect, self._host, self._port, 60
        )
        self.client.loop_start()
        log.info("Connected to MQTT broker at %s:%s", self._host, self._port)

    def publish(self, topic, payload, qos=0, retain=False):
        if isinstance(payload, dict):
            payload = json.dumps(payload)
        self.client.publish(topic, payload, qos=qos, retain=retain)

    def subscribe(self, topic_filter, callback, qos=0):
        self._subscriptions[topic_filter] = callback
        if self._connected:
            self.client.subscribe(topic_filter, qos=qos)

    def unsubscribe(self, topic_filter):
        self._subscriptions.pop(topic_filter, None)
        if self._connected:
            self.client.unsubscribe(topic_filter)

    def _on_message(self, client, userdata, msg):
        payload = msg.payload.decode("utf-8", errors="replace")
        if not self._loop:
            return
        for topic_filter, callback in list(self._subscriptions.items()):
            if mqtt.topic_matches_sub(topic_filter, msg.topic):
                asyncio.run_coroutine_threadsafe(
                    self._safe_callback(callback, msg.topic, payload),
                    self._loop,
                )

    @staticmethod
    async def _safe_callback(callback, topic, payload):
        try:
            await callback(topic, payload)
        except Exception:
            log.exception("Error in MQTT callback for %s", topic)

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code == 0:
            self._connected = True
            log.info("MQTT connected")
            for topic_filter in self._subscriptions:
                self.client.subscribe(topic_filter)
        else:
            log.error("MQTT connect failed with reason code %s", reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        if reason_code != 0:
            log.error("MQTT connection closed (rc=%s). Exiting...", reason_code)
            if self._loop:
                self._loop.call_soon_threadsafe(self.closed.set)

    async def disconnect(self):
        # Allow pending publishes to drain
        await asyncio.sleep(0.5)
        self.client.disconnect()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.client.loop_stop)
