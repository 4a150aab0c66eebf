import json

from nuimo_bridge.config import DEFAULTS, load_config


def test_defaults_without_sources(tmp_path):
    environ = {"NUIMO_BRIDGE_OPTIONS": str(tmp_path / "missing.json")}
    assert load_config(environ, load_env_file=False) == DEFAULTS


def test_options_file_overrides_defaults(tmp_path):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({
        "mqtt_url": "mqtt://broker:1884",
        "rotation_max": "20",
        "debug_logging": "true",
        "unknown_key": 1,
    }))
    config = load_config({"NUIMO_BRIDGE_OPTIONS": str(options)}, load_env_file=False)

    assert config["mqtt_url"] == "mqtt://broker:1884"
    assert config["rotation_max"] == 20
    assert config["debug_logging"] is True
    assert "unknown_key" not in config


def test_environment_overrides_options_file(tmp_path):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"mqtt_topic_prefix": "from_file", "reconnect_delay": 3}))
    environ = {
        "NUIMO_BRIDGE_OPTIONS": str(options),
        "MQTT_TOPIC_PREFIX": "from_env",
        "MQTT_USERNAME": "bridge",
        "MQTT_PASSWORD": "hunter2",
        "NUIMO_RECONNECT_DELAY": "7.5",
    }
    config = load_config(environ, load_env_file=False)

    assert config["mqtt_topic_prefix"] == "from_env"
    assert config["mqtt_username"] == "bridge"
    assert config["mqtt_password"] == "hunter2"
    assert config["reconnect_delay"] == 7.5


def test_invalid_options_file_is_ignored(tmp_path):
    options = tmp_path / "options.json"
    options.write_text("{not json")
    config = load_config({"NUIMO_BRIDGE_OPTIONS": str(options)}, load_env_file=False)
    assert config == DEFAULTS


def test_invalid_number_falls_back_to_default(tmp_path):
    environ = {
        "NUIMO_BRIDGE_OPTIONS": str(tmp_path / "missing.json"),
        "NUIMO_RECONNECT_DELAY": "soon",
    }
    assert load_config(environ, load_env_file=False)["reconnect_delay"] == DEFAULTS["reconnect_delay"]
