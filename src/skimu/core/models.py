"""Measurement record and the delta envelope delivered to the host."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from ..sensors.base import EulerAngles, Vector3
from .calibration import CalibrationStatus

KELVIN_OFFSET = 273.15
SOURCE_SRC = "BNO055"

PathValue = Tuple[str, float]


def celsius_to_kelvin(value: float) -> float:
    return value + KELVIN_OFFSET


def iso_timestamp(when: datetime) -> str:
    """Format *when* as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Measurement:
    temperature_k: float
    euler: EulerAngles
    gyro: Vector3
    linear_accel: Vector3
    # Not part of the published delta.
    calibration: CalibrationStatus

    @classmethod
    def from_readings(
        cls,
        calibration: CalibrationStatus,
        temperature_c: float,
        euler: EulerAngles,
        linear_accel: Vector3,
        gyro: Vector3,
    ) -> "Measurement":
        return cls(
            temperature_k=celsius_to_kelvin(temperature_c),
            euler=euler,
            gyro=gyro,
            linear_accel=linear_accel,
            calibration=calibration,
        )

    def path_values(self) -> List[PathValue]:
        # Rate of turn and gyro yaw are both the raw z rate.
        return [
            ("environment.inside.temperature", self.temperature_k),
            ("navigation.rateOfTurn", self.gyro.z),
            ("navigation.gyro.roll", self.gyro.x),
            ("navigation.gyro.pitch", self.gyro.y),
            ("navigation.gyro.yaw", self.gyro.z),
            ("navigation.accel.x", self.linear_accel.x),
            ("navigation.accel.y", self.linear_accel.y),
            ("navigation.accel.z", self.linear_accel.z),
            ("navigation.headingMagnetic", self.euler.heading),
            ("navigation.attitude.roll", self.euler.roll),
            ("navigation.attitude.pitch", self.euler.pitch),
        ]


@dataclass
class Delta:
    """One timestamped, source-tagged update for a single vessel context."""

    context: str
    label: str
    timestamp: datetime
    values: List[PathValue] = field(default_factory=list)
    src: str = SOURCE_SRC

    @classmethod
    def for_measurement(
        cls,
        measurement: Measurement,
        *,
        self_id: str,
        label: str,
        timestamp: datetime | None = None,
    ) -> "Delta":
        return cls(
            context=f"vessels.{self_id}",
            label=label,
            timestamp=timestamp or datetime.now(timezone.utc),
            values=measurement.path_values(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "context": self.context,
            "updates": [
                {
                    "source": {"label": self.label, "src": self.src},
                    "timestamp": iso_timestamp(self.timestamp),
                    "values": [{"path": path, "value": value} for path, value in self.values],
                }
            ],
        }
