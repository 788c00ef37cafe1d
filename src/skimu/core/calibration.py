"""
Calibration state of the fusion IMU.

The BNO055 reports a 0..3 code for each of its four subsystems; only ``3``
counts as calibrated. :func:`classify` turns the codes into per-axis hints and
a bitmask of the axes still needing work:

  0x01 system | 0x02 gyro | 0x04 accel | 0x08 mag

:class:`CalibrationMonitor` keeps the per-session state. Once every axis has
been reported calibrated the sensor is not asked again; calibration is not
expected to regress while the plugin runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..sensors.base import ImuDevice, RawCalibration

logger = logging.getLogger(__name__)

CALIBRATED = 0x03
OK = "Ok"

SYSTEM_BIT = 0x01
GYRO_BIT = 0x02
ACCEL_BIT = 0x04
MAG_BIT = 0x08

SYSTEM_HINT = "Needs calibration."
GYRO_HINT = "Gyro needs calibrating, keep sensor still for a few seconds."
ACCEL_HINT = (
    "Accelerometer needs calibrating, Slowly move between 6 stable positions, "
    "and hold for > 2s in each."
)
MAG_HINT = "Magnetometer needs calibrating, Perform figure of 8 movements."


@dataclass(frozen=True)
class CalibrationStatus:
    raw: RawCalibration
    system: str
    gyro: str
    accel: str
    mag: str
    mask: int

    @property
    def calibrated(self) -> bool:
        return self.mask == 0


def classify(raw: RawCalibration) -> CalibrationStatus:
    mask = 0

    def _axis(code: int, bit: int, hint: str) -> str:
        nonlocal mask
        if code == CALIBRATED:
            return OK
        mask |= bit
        return hint

    system = _axis(raw.system, SYSTEM_BIT, SYSTEM_HINT)
    gyro = _axis(raw.gyro, GYRO_BIT, GYRO_HINT)
    accel = _axis(raw.accel, ACCEL_BIT, ACCEL_HINT)
    mag = _axis(raw.mag, MAG_BIT, MAG_HINT)
    return CalibrationStatus(raw=raw, system=system, gyro=gyro, accel=accel, mag=mag, mask=mask)


class CalibrationMonitor:
    """Per-session calibration cache with de-duplicated notices."""

    def __init__(self) -> None:
        self.calibrated = False
        self.latest: Optional[CalibrationStatus] = None

    def check(self, device: ImuDevice) -> CalibrationStatus:
        """Return the current status, reading the device only until calibrated.

        Raises whatever the device raises; the cache is left untouched then.
        """
        if self.calibrated and self.latest is not None:
            return self.latest

        status = classify(device.calibration_status())
        if status.calibrated:
            self.calibrated = True
            logger.info("BNO055 calibration OK")
        elif self.latest is None or self.latest.mask != status.mask:
            logger.warning(
                "BNO055 calibration may be required (mask=0x%02X): system=%s gyro=%s accel=%s mag=%s",
                status.mask,
                status.system,
                status.gyro,
                status.accel,
                status.mag,
            )
        self.latest = status
        return status
