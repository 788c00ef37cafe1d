import logging

import pytest

from conftest import ScriptedDevice
from skimu.core.calibration import (
    ACCEL_HINT,
    GYRO_HINT,
    MAG_HINT,
    OK,
    SYSTEM_HINT,
    CalibrationMonitor,
    classify,
)
from skimu.sensors import RawCalibration, SensorError


def test_fully_calibrated_has_empty_mask() -> None:
    status = classify(RawCalibration(3, 3, 3, 3))
    assert status.mask == 0
    assert status.calibrated
    assert (status.system, status.gyro, status.accel, status.mag) == (OK, OK, OK, OK)


@pytest.mark.parametrize(
    "raw, field, hint, bit",
    [
        (RawCalibration(2, 3, 3, 3), "system", SYSTEM_HINT, 0x01),
        (RawCalibration(3, 0, 3, 3), "gyro", GYRO_HINT, 0x02),
        (RawCalibration(3, 3, 1, 3), "accel", ACCEL_HINT, 0x04),
        (RawCalibration(3, 3, 3, 2), "mag", MAG_HINT, 0x08),
    ],
)
def test_single_uncalibrated_axis(raw, field, hint, bit) -> None:
    status = classify(raw)
    assert getattr(status, field) == hint
    assert status.mask == bit
    assert not status.calibrated
    for other in {"system", "gyro", "accel", "mag"} - {field}:
        assert getattr(status, other) == OK


def test_all_axes_uncalibrated() -> None:
    status = classify(RawCalibration(0, 0, 0, 0))
    assert status.mask == 0x0F


def test_monitor_stops_reading_once_calibrated() -> None:
    device = ScriptedDevice(calibrations=[RawCalibration(3, 3, 3, 3)])
    monitor = CalibrationMonitor()

    first = monitor.check(device)
    second = monitor.check(device)

    assert device.calls.count("calibration_status") == 1
    assert monitor.calibrated
    assert second is first


def test_monitor_keeps_reading_until_calibrated() -> None:
    device = ScriptedDevice(
        calibrations=[RawCalibration(0, 3, 3, 3), RawCalibration(3, 3, 3, 3)]
    )
    monitor = CalibrationMonitor()

    assert monitor.check(device).mask == 0x01
    assert monitor.latest.mask == 0x01
    assert monitor.check(device).calibrated
    monitor.check(device)

    assert device.calls.count("calibration_status") == 2


def test_calibration_ok_logged_once(caplog) -> None:
    monitor = CalibrationMonitor()
    device = ScriptedDevice()
    with caplog.at_level(logging.INFO, logger="skimu.core.calibration"):
        for _ in range(3):
            monitor.check(device)
    ok = [r for r in caplog.records if "calibration OK" in r.getMessage()]
    assert len(ok) == 1


def test_repeated_mask_is_reported_once(caplog) -> None:
    device = ScriptedDevice(
        calibrations=[
            RawCalibration(3, 2, 3, 3),
            RawCalibration(3, 2, 3, 3),
            RawCalibration(3, 2, 3, 1),
            RawCalibration(3, 2, 3, 1),
        ]
    )
    monitor = CalibrationMonitor()
    with caplog.at_level(logging.WARNING, logger="skimu.core.calibration"):
        for _ in range(4):
            monitor.check(device)

    notices = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(notices) == 2
    assert "mask=0x02" in notices[0].getMessage()
    assert "mask=0x0A" in notices[1].getMessage()


def test_failed_read_leaves_cache_untouched() -> None:
    device = ScriptedDevice(calibrations=[RawCalibration(1, 3, 3, 3)])
    monitor = CalibrationMonitor()
    monitor.check(device)

    device.fail_on = "calibration_status"
    with pytest.raises(SensorError):
        monitor.check(device)
    assert monitor.latest.mask == 0x01
    assert not monitor.calibrated
