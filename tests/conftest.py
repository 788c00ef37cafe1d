from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from skimu.sensors import EulerAngles, RawCalibration, SensorError, Vector3


class ScriptedDevice:
    """Device whose readings and failures are set per test."""

    def __init__(
        self,
        *,
        calibrations: Sequence[RawCalibration] = (RawCalibration(3, 3, 3, 3),),
        temperature_c: float = 20.0,
        euler: EulerAngles = EulerAngles(heading=1.0, roll=0.1, pitch=-0.2),
        laccel: Vector3 = Vector3(0.5, -0.5, 0.25),
        gyro: Vector3 = Vector3(0.01, 0.02, 0.03),
        fail_on: Optional[str] = None,
        fail_begin: bool = False,
    ) -> None:
        self.calibrations = list(calibrations)
        self.temperature_c = temperature_c
        self.angles = euler
        self.laccel = laccel
        self.gyro = gyro
        self.fail_on = fail_on
        self.fail_begin = fail_begin
        self.calls: List[str] = []
        self.closed = 0

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise SensorError(f"{name} timed out")

    def begin_ndof(self) -> None:
        self.calls.append("begin_ndof")
        if self.fail_begin:
            raise SensorError("no ack from 0x28")

    def calibration_status(self) -> RawCalibration:
        self._call("calibration_status")
        if len(self.calibrations) > 1:
            return self.calibrations.pop(0)
        return self.calibrations[0]

    def temperature(self) -> float:
        self._call("temperature")
        return self.temperature_c

    def euler(self) -> EulerAngles:
        self._call("euler")
        return self.angles

    def linear_acceleration(self) -> Vector3:
        self._call("linear_acceleration")
        return self.laccel

    def gyroscope(self) -> Vector3:
        self._call("gyroscope")
        return self.gyro

    def close(self) -> None:
        self.closed += 1


class RecordingSink:
    def __init__(self, self_id: str = "urn:mrn:imo:mmsi:230099999") -> None:
        self.self_id = self_id
        self.messages: List[Tuple[str, Dict[str, Any]]] = []

    def handle_message(self, plugin_id: str, delta: Dict[str, Any]) -> None:
        self.messages.append((plugin_id, delta))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def device() -> ScriptedDevice:
    return ScriptedDevice()
