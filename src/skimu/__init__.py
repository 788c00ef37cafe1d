"""skimu: BNO055 IMU source for a Signal K style boat-data host."""

from .plugin import HostApp, ImuPlugin

__all__ = ["HostApp", "ImuPlugin"]
