"""Runtime configuration for the IMU plugin and the standalone runner."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

logger = logging.getLogger(__name__)

DEFAULT_MOTION_PERIOD_MS = 1000
DEFAULT_I2C_BUS = 1
DEFAULT_I2C_ADDRESS = 0x28

# Host (camelCase) option names -> dataclass fields
_ALIASES = {
    "motionPeriod": "motion_period_ms",
    "motion_period": "motion_period_ms",
    "selfId": "self_id",
    "i2cBus": "i2c_bus",
    "i2cAddress": "i2c_address",
    "fake": "force_fake",
}


@dataclass(slots=True)
class ImuConfig:
    """
    Options for one plugin instance.

    Only ``motion_period_ms`` is exposed in the host's settings UI; the rest
    are for running on a bench or with a non-default wiring.
    """

    motion_period_ms: int = DEFAULT_MOTION_PERIOD_MS
    self_id: str = "self"
    i2c_bus: int = DEFAULT_I2C_BUS
    i2c_address: int = DEFAULT_I2C_ADDRESS
    force_fake: bool = False

    def sanitized(self) -> ImuConfig:
        """Return a copy with types coerced and invalid values replaced by defaults."""
        return ImuConfig(
            motion_period_ms=_positive_int(self.motion_period_ms, DEFAULT_MOTION_PERIOD_MS, "motionPeriod"),
            self_id=str(self.self_id or "self"),
            i2c_bus=_bus_number(self.i2c_bus),
            i2c_address=_parse_address(self.i2c_address),
            force_fake=bool(self.force_fake),
        )

    def to_mapping(self) -> dict:
        return {
            "motionPeriod": self.motion_period_ms,
            "selfId": self.self_id,
            "i2cBus": self.i2c_bus,
            "i2cAddress": f"0x{self.i2c_address:02X}",
            "fake": self.force_fake,
        }


def _positive_int(value: Any, fallback: int, name: str) -> int:
    if isinstance(value, bool):
        number = None
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value)
    else:
        number = None
    if number is None or number <= 0:
        logger.warning("Invalid %s %r, using %d", name, value, fallback)
        return fallback
    return number


def _bus_number(value: Any, fallback: int = DEFAULT_I2C_BUS) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    logger.warning("Invalid i2cBus %r, using %d", value, fallback)
    return fallback


def _parse_address(value: Any, fallback: int = DEFAULT_I2C_ADDRESS) -> int:
    """Accept ``0x28``, ``40`` or the string ``"0x28"``."""
    address = None
    if isinstance(value, int) and not isinstance(value, bool):
        address = value
    elif isinstance(value, str):
        try:
            address = int(value.strip(), 0)
        except ValueError:
            address = None
    if address is None or not 0x03 <= address <= 0x77:
        logger.warning("Invalid i2cAddress %r, using 0x%02X", value, fallback)
        return fallback
    return address


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`ImuConfig`."""
    return {f.name for f in fields(ImuConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten an ``imu`` section and translate host option names."""
    merged: MutableMapping[str, Any] = {}
    for key, value in data.items():
        if key == "imu" and isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                merged[_ALIASES.get(sub_key, sub_key)] = sub_value
        else:
            merged[_ALIASES.get(key, key)] = value
    return merged


def config_from_mapping(data: Mapping[str, Any] | None) -> ImuConfig:
    """Build :class:`ImuConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return ImuConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return ImuConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> ImuConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`ImuConfig`.
    """
    if path is None:
        return ImuConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return ImuConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["ImuConfig", "config_from_mapping", "load_config", "DEFAULT_MOTION_PERIOD_MS"]
