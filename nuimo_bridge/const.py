OPTIONS_PATH = "/data/options.json"

# Base MQTT topic prefix; device topics are "{prefix}/{device_id}/{channel}"
DEFAULT_TOPIC_PREFIX = "nuimo"
DEFAULT_MQTT_URL = "mqtt://localhost"

# Home Assistant MQTT discovery
#   e.g. "homeassistant/sensor/c5f2a1b3d4e6/battery/config"
HA_DISCOVERY_PREFIX = "homeassistant"
TOPIC_DISCOVERY = "{discovery_prefix}/{category}/{device_id}/{component}/config"
TOPIC_BRIDGE_STATUS = "{prefix}/bridge/status"

DEVICE_MODEL = "Nuimo Control"
DEVICE_MANUFACTURER = "Senic"

# Seconds between reconnect attempts; retries never give up
RECONNECT_DELAY = 5.0

DEFAULT_ROTATION_RANGE = (0, 10)
