"""Settings declarations consumed by the host's configuration UI."""

from __future__ import annotations

from typing import Any, Dict

from .runtime import DEFAULT_MOTION_PERIOD_MS

PLUGIN_ID = "sk-imu"
PLUGIN_NAME = "IMU Source"
PLUGIN_DESCRIPTION = "Plugin that reads IMU data"

PLUGIN_SCHEMA: Dict[str, Any] = {
    "title": PLUGIN_NAME,
    "description": (
        "This plugin reads data from a I2C attached BNO055 device. The device "
        "should be set up so that the BNO055 on the chip is towards the bow."
    ),
    "type": "object",
    "properties": {
        "motionPeriod": {
            "title": "Period of motion readings in ms",
            "type": "integer",
            "default": DEFAULT_MOTION_PERIOD_MS,
        },
    },
}

UI_SCHEMA: Dict[str, Any] = {
    "ui:order": ["motionPeriod"],
}

