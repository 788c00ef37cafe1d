"""IMU backends and the factory that picks one for the current platform.

:func:`open_device` returns the smbus2-backed :class:`~skimu.sensors.bno055.Bno055`
when the kernel exposes an I²C adapter and :class:`~skimu.sensors.fake.FakeBno055`
otherwise, so the plugin also runs on a desktop without hardware.
"""

from __future__ import annotations

import logging
import os

from .base import EulerAngles, ImuDevice, RawCalibration, SensorError, Vector3
from .fake import FakeBno055

logger = logging.getLogger(__name__)

I2C_ADAPTER_PATH = "/sys/class/i2c-adapter"


def i2c_available(path: str = I2C_ADAPTER_PATH) -> bool:
    return os.path.exists(path)


def open_device(
    bus_id: int = 1,
    address: int = 0x28,
    *,
    force_fake: bool = False,
    adapter_path: str = I2C_ADAPTER_PATH,
) -> ImuDevice:
    """Create the device handle the poller will own."""
    if not force_fake and i2c_available(adapter_path):
        # Imported lazily: smbus2 needs a Linux host.
        from .bno055 import Bno055

        logger.info("BNO055 available on I2C bus %d @0x%02X", bus_id, address)
        return Bno055(bus_id, address)
    logger.info("BNO055 not available, created fake sensor")
    return FakeBno055()


__all__ = [
    "EulerAngles",
    "FakeBno055",
    "ImuDevice",
    "RawCalibration",
    "SensorError",
    "Vector3",
    "i2c_available",
    "open_device",
]
