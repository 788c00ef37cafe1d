from __future__ import annotations

import time

from conftest import RecordingSink, ScriptedDevice
from skimu import ImuPlugin
from skimu.sensors import FakeBno055


def _factory(device):
    calls = []

    def factory(bus_id, address, *, force_fake=False):
        calls.append((bus_id, address, force_fake))
        return device

    factory.calls = calls
    return factory


def test_plugin_metadata() -> None:
    plugin = ImuPlugin(RecordingSink())
    assert plugin.id == "sk-imu"
    assert plugin.name == "IMU Source"
    assert plugin.description == "Plugin that reads IMU data"
    assert "motionPeriod" in plugin.schema["properties"]
    assert plugin.ui_schema["ui:order"] == ["motionPeriod"]


def test_start_publishes_with_host_self_id() -> None:
    sink = RecordingSink(self_id="urn:mrn:imo:mmsi:230099999")
    device = ScriptedDevice()
    factory = _factory(device)
    plugin = ImuPlugin(sink, device_factory=factory)

    assert plugin.start({"motionPeriod": 20, "i2cAddress": "0x29"}) is True
    deadline = time.time() + 2.0
    while time.time() < deadline and not sink.messages:
        time.sleep(0.01)
    plugin.stop()

    assert factory.calls == [(1, 0x29, False)]
    assert sink.messages
    plugin_id, delta = sink.messages[0]
    assert plugin_id == "sk-imu"
    assert delta["context"] == "vessels.urn:mrn:imo:mmsi:230099999"
    assert plugin.poller is None
    assert device.closed == 1


def test_start_failure_returns_false() -> None:
    sink = RecordingSink()
    device = ScriptedDevice(fail_begin=True)
    plugin = ImuPlugin(sink, device_factory=_factory(device))

    assert plugin.start({}) is False
    plugin.stop()
    assert sink.messages == []
    assert device.closed == 1


def test_stop_is_idempotent() -> None:
    plugin = ImuPlugin(RecordingSink(), device_factory=_factory(FakeBno055()))
    plugin.stop()
    plugin.start({"motionPeriod": 50})
    plugin.stop()
    plugin.stop()
    assert plugin.poller is None


def test_restart_resets_calibration_state() -> None:
    sink = RecordingSink()
    plugin = ImuPlugin(sink, device_factory=lambda *a, **kw: ScriptedDevice())
    plugin.start({"motionPeriod": 1000})
    first = plugin.poller
    first.tick()
    assert first.calibration.calibrated

    plugin.start({"motionPeriod": 1000})
    assert plugin.poller is not first
    assert not plugin.poller.calibration.calibrated
    plugin.stop()


def test_start_with_null_address_uses_default() -> None:
    device = ScriptedDevice()
    factory = _factory(device)
    plugin = ImuPlugin(RecordingSink(), device_factory=factory)

    assert plugin.start({"motionPeriod": 100, "i2cAddress": None, "i2cBus": None}) is True
    plugin.stop()

    assert factory.calls == [(1, 0x28, False)]
