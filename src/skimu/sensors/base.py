"""
Reading types and the device interface shared by every IMU backend.

Backends return plain dataclasses so the poller never sees register values:

  - temperature()          : float        degrees Celsius
  - euler()                : EulerAngles  heading, roll, pitch
  - linear_acceleration()  : Vector3      gravity removed
  - gyroscope()            : Vector3      angular rate
  - calibration_status()   : RawCalibration, one 0..3 code per subsystem

Any failure surfaces as :class:`SensorError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class SensorError(Exception):
    """Raised when the device cannot be initialised or read."""


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class EulerAngles:
    heading: float
    roll: float
    pitch: float


@dataclass(frozen=True)
class RawCalibration:
    # 0 = uncalibrated .. 3 = fully calibrated
    system: int
    gyro: int
    accel: int
    mag: int


class ImuDevice(Protocol):
    """Capabilities the poller needs from a fusion IMU."""

    def begin_ndof(self) -> None:  # pragma: no cover - protocol
        ...

    def calibration_status(self) -> RawCalibration:  # pragma: no cover - protocol
        ...

    def temperature(self) -> float:  # pragma: no cover - protocol
        ...

    def euler(self) -> EulerAngles:  # pragma: no cover - protocol
        ...

    def linear_acceleration(self) -> Vector3:  # pragma: no cover - protocol
        ...

    def gyroscope(self) -> Vector3:  # pragma: no cover - protocol
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...
