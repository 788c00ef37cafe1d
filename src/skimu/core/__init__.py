"""Polling core: calibration tracking, measurement records and the poller loop."""

from .calibration import CalibrationMonitor, CalibrationStatus, classify
from .models import Delta, Measurement, celsius_to_kelvin
from .poller import MessageSink, SensorPoller, monotonic_controller

__all__ = [
    "CalibrationMonitor",
    "CalibrationStatus",
    "classify",
    "Delta",
    "Measurement",
    "celsius_to_kelvin",
    "MessageSink",
    "SensorPoller",
    "monotonic_controller",
]
