"""Fixed-value stand-in used when no I²C adapter is present."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .base import EulerAngles, RawCalibration, Vector3

logger = logging.getLogger(__name__)


@dataclass
class FakeBno055:
    """Returns the same reading on every call; fully calibrated by default."""

    temperature_c: float = 20.0
    angles: EulerAngles = field(default_factory=lambda: EulerAngles(heading=1.5708, roll=0.0175, pitch=-0.0087))
    linear_accel: Vector3 = field(default_factory=lambda: Vector3(0.01, -0.02, 0.05))
    gyro: Vector3 = field(default_factory=lambda: Vector3(0.001, -0.002, 0.0125))
    calibration: RawCalibration = field(default_factory=lambda: RawCalibration(3, 3, 3, 3))
    started: bool = False

    def begin_ndof(self) -> None:
        self.started = True
        logger.info("Fake BNO055 started")

    def calibration_status(self) -> RawCalibration:
        return self.calibration

    def temperature(self) -> float:
        return self.temperature_c

    def euler(self) -> EulerAngles:
        return self.angles

    def linear_acceleration(self) -> Vector3:
        return self.linear_accel

    def gyroscope(self) -> Vector3:
        return self.gyro

    def close(self) -> None:
        self.started = False
