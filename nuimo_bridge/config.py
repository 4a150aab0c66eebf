import json
import logging
import os

from dotenv import load_dotenv

from .const import DEFAULT_MQTT_URL, DEFAULT_TOPIC_PREFIX, OPTIONS_PATH, RECONNECT_DELAY

log = logging.getLogger("nuimo_bridge.config")

DEFAULTS = {
    "mqtt_url": DEFAULT_MQTT_URL,
    "mqtt_username": None,
    "mqtt_password": None,
    "mqtt_topic_prefix": DEFAULT_TOPIC_PREFIX,
    "rotation_min": 0,
    "rotation_max": 10,
    "reconnect_delay": RECONNECT_DELAY,
    "debug_logging": False,
}

# environment variable -> config key
ENV_KEYS = {
    "MQTT_URL": "mqtt_url",
    "MQTT_USERNAME": "mqtt_username",
    "MQTT_PASSWORD": "mqtt_password",
    "MQTT_TOPIC_PREFIX": "mqtt_topic_prefix",
    "NUIMO_RECONNECT_DELAY": "reconnect_delay",
    "NUIMO_DEBUG": "debug_logging",
}


def _coerce(key, value):
    default = DEFAULTS[key]
    if value is None or default is None:
        return value
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    try:
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except (ValueError, TypeError):
        log.warning("Invalid value for %s: %r, using %r", key, value, default)
        return default
    return str(value)


def _read_options(path):
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        log.warning("Failed to read options from %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring options file %s: expected a JSON object", path)
        return {}
    return data


def load_config(environ=None, load_env_file=True):
    """Defaults, overridden by the options file, overridden by environment."""
    if load_env_file:
        load_dotenv()
    environ = os.environ if environ is None else environ

    config = dict(DEFAULTS)
    options = _read_options(environ.get("NUIMO_BRIDGE_OPTIONS", OPTIONS_PATH))
    for key, value in options.items():
        if key in DEFAULTS:
            config[key] = _coerce(key, value)

    for env_key, key in ENV_KEYS.items():
        if environ.get(env_key):
            config[key] = _coerce(key, environ[env_key])

    return config
