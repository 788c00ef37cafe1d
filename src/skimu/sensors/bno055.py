"""
Minimal BNO055 driver using smbus2.

Only the fusion outputs the poller needs are exposed. Units are selected at
start-up so that the values are already SI where the host expects them:

  Euler angles  → radians   (900 LSB/rad)
  Gyroscope     → rad/s     (900 LSB/(rad/s))
  Linear accel  → m/s²      (100 LSB/(m/s²))
  Temperature   → °C        (1 LSB/°C, signed byte)

Install (on Raspberry Pi OS)
----------------------------
sudo apt-get install -y i2c-tools
pip3 install smbus2 numpy
sudo raspi-config nonint do_i2c 0   # ensure I2C enabled
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from smbus2 import SMBus

from .base import EulerAngles, RawCalibration, SensorError, Vector3

logger = logging.getLogger(__name__)

# ---------------------------
# BNO055 register constants
# ---------------------------
CHIP_ID        = 0x00
PAGE_ID        = 0x07
GYR_DATA_X_LSB = 0x14
EUL_HEADING_LSB = 0x1A
LIA_DATA_X_LSB = 0x28
TEMP           = 0x34
CALIB_STAT     = 0x35
UNIT_SEL       = 0x3B
OPR_MODE       = 0x3D
PWR_MODE       = 0x3E
SYS_TRIGGER    = 0x3F

CHIP_ID_VALUE = 0xA0
ADDRESSES = (0x28, 0x29)
DEFAULT_ADDRESS = 0x28

OPR_MODE_CONFIG = 0x00
OPR_MODE_NDOF = 0x0C
PWR_MODE_NORMAL = 0x00

# UNIT_SEL: accel m/s² (bit0=0), gyro rad/s (bit1=1), euler rad (bit2=1),
# temperature °C (bit4=0), Windows orientation (bit7=0)
UNIT_SEL_SI = 0x06

EULER_LSB_PER_RAD = 900.0
GYRO_LSB_PER_RADS = 900.0
LIA_LSB_PER_MS2 = 100.0


def decode_vector(block: Sequence[int], scale: float) -> np.ndarray:
    """Decode consecutive little-endian int16 registers and divide by *scale*."""
    raw = np.frombuffer(bytes(block), dtype="<i2")
    return raw.astype(np.float64) / scale


def decode_calibration(value: int) -> RawCalibration:
    """Split CALIB_STAT into its four 2-bit fields (sys|gyro|accel|mag)."""
    return RawCalibration(
        system=(value >> 6) & 0x03,
        gyro=(value >> 4) & 0x03,
        accel=(value >> 2) & 0x03,
        mag=value & 0x03,
    )


class Bno055:
    """BNO055 on a Linux I²C bus, running its on-chip NDOF fusion."""

    def __init__(self, bus_id: int = 1, address: int = DEFAULT_ADDRESS, *, bus: Optional[SMBus] = None):
        self.bus_id = bus_id
        self.address = address
        self._bus = bus

    def __repr__(self) -> str:
        return f"Bno055(bus={self.bus_id}, address=0x{self.address:02X})"

    # ------------------------------------------------------------------ raw access
    @contextmanager
    def _io(self, what: str) -> Iterator[None]:
        try:
            yield
        except OSError as exc:
            raise SensorError(f"{what} failed on bus {self.bus_id} @0x{self.address:02X}: {exc}") from exc

    def _ensure_bus(self) -> SMBus:
        if self._bus is None:
            self._bus = SMBus(self.bus_id)
        return self._bus

    def _write_u8(self, reg: int, val: int) -> None:
        self._ensure_bus().write_byte_data(self.address, reg, val & 0xFF)

    def _read_u8(self, reg: int) -> int:
        return self._ensure_bus().read_byte_data(self.address, reg)

    def _read_block(self, reg: int, length: int) -> List[int]:
        return self._ensure_bus().read_i2c_block_data(self.address, reg, length)

    def _set_mode(self, mode: int) -> None:
        self._write_u8(OPR_MODE, mode)
        # Mode switches take 7 ms (any → config) or 19 ms (config → fusion)
        time.sleep(0.03)

    # ------------------------------------------------------------------ public API
    def begin_ndof(self) -> None:
        """Reset the chip and switch it into 9-DOF continuous fusion mode."""
        with self._io("BNO055 initialisation"):
            chip = self._read_u8(CHIP_ID)
            if chip != CHIP_ID_VALUE:
                raise SensorError(
                    f"Unexpected CHIP_ID=0x{chip:02X} on bus {self.bus_id} @0x{self.address:02X} "
                    f"(expected 0x{CHIP_ID_VALUE:02X})"
                )
            self._set_mode(OPR_MODE_CONFIG)
            self._write_u8(SYS_TRIGGER, 0x20)
            time.sleep(0.65)
            self._wait_for_chip()
            self._write_u8(PWR_MODE, PWR_MODE_NORMAL)
            time.sleep(0.01)
            self._write_u8(PAGE_ID, 0)
            self._write_u8(UNIT_SEL, UNIT_SEL_SI)
            self._write_u8(SYS_TRIGGER, 0x00)
            time.sleep(0.01)
            self._set_mode(OPR_MODE_NDOF)
        logger.info("%r running in NDOF fusion mode", self)

    def _wait_for_chip(self, attempts: int = 10) -> None:
        for _ in range(attempts):
            try:
                if self._read_u8(CHIP_ID) == CHIP_ID_VALUE:
                    return
            except OSError:
                # The chip NACKs while it reboots after a reset.
                pass
            time.sleep(0.1)
        raise SensorError(f"{self!r} did not come back after reset")

    def calibration_status(self) -> RawCalibration:
        with self._io("calibration status read"):
            return decode_calibration(self._read_u8(CALIB_STAT))

    def temperature(self) -> float:
        with self._io("temperature read"):
            raw = self._read_u8(TEMP)
        if raw & 0x80:
            raw -= 0x100
        return float(raw)

    def euler(self) -> EulerAngles:
        with self._io("euler read"):
            block = self._read_block(EUL_HEADING_LSB, 6)
        heading, roll, pitch = decode_vector(block, EULER_LSB_PER_RAD)
        return EulerAngles(heading=float(heading), roll=float(roll), pitch=float(pitch))

    def linear_acceleration(self) -> Vector3:
        with self._io("linear acceleration read"):
            block = self._read_block(LIA_DATA_X_LSB, 6)
        x, y, z = decode_vector(block, LIA_LSB_PER_MS2)
        return Vector3(float(x), float(y), float(z))

    def gyroscope(self) -> Vector3:
        with self._io("gyroscope read"):
            block = self._read_block(GYR_DATA_X_LSB, 6)
        x, y, z = decode_vector(block, GYRO_LSB_PER_RADS)
        return Vector3(float(x), float(y), float(z))

    def close(self) -> None:
        if self._bus is not None:
            bus, self._bus = self._bus, None
            try:
                bus.close()
            except OSError as exc:
                logger.warning("Error closing I2C bus %d: %s", self.bus_id, exc)


def scan_buses(bus_ids: Sequence[int] = (0, 1)) -> List[Tuple[int, int, int]]:
    """Return ``(bus, address, chip_id)`` for every device answering at 0x28/0x29."""
    found: List[Tuple[int, int, int]] = []
    for bus_id in bus_ids:
        try:
            with SMBus(bus_id) as bus:
                for addr in ADDRESSES:
                    try:
                        found.append((bus_id, addr, bus.read_byte_data(addr, CHIP_ID)))
                    except OSError:
                        continue
        except FileNotFoundError:
            logger.info("Bus %d not available (skip)", bus_id)
    return found
