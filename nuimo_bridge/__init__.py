"""Nuimo MQTT Bridge: Senic Nuimo Control devices on an MQTT broker, with Home Assistant discovery."""

__version__ = "0.1.0"
