"""
Fixed-period IMU polling loop.

Each tick reads calibration (until calibrated), temperature, euler angles,
linear acceleration and gyroscope from the device, one after another, and
forwards a single delta to the sink. A failed read discards the whole tick.

Ticks run on one background thread, so they never overlap: when a tick takes
longer than the period, the slots it ran over are skipped and counted in
:attr:`SensorPoller.overruns`.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, Iterator, Optional, Protocol

from ..sensors.base import ImuDevice, SensorError
from ..tools.debug import TickTimer
from .calibration import CalibrationMonitor
from .models import Delta, Measurement

logger = logging.getLogger(__name__)


class MessageSink(Protocol):
    """Host side of the message bus."""

    def handle_message(self, plugin_id: str, delta: Dict[str, Any]) -> None:  # pragma: no cover - protocol
        ...


def monotonic_controller(period_ms: float, start_ns: Optional[int] = None) -> Iterator[int]:
    """Yield target monotonic_ns timestamps for a fixed period.

    Each step adds a fixed period to the *previous target* time, which keeps the
    long-term rate stable and avoids drift from small wait() errors.
    """
    period = int(period_ms * 1_000_000)
    next_t = time.monotonic_ns() if start_ns is None else start_ns
    while True:
        next_t += period
        yield next_t


class SensorPoller:
    """Owns one device handle and polls it every ``period_ms`` milliseconds."""

    def __init__(
        self,
        device: ImuDevice,
        sink: MessageSink,
        *,
        plugin_id: str,
        self_id: str = "self",
        period_ms: int = 1000,
    ) -> None:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive.")
        self.device = device
        self.sink = sink
        self.plugin_id = plugin_id
        self.self_id = self_id
        self.period_ms = period_ms
        self.calibration = CalibrationMonitor()
        self.ticks = 0
        self.overruns = 0
        self.last_measurement: Optional[Measurement] = None
        self.timer = TickTimer("IMU tick")
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._close_on_exit = False
        self._run_finished = True
        self._close_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Put the device into fusion mode and start the timer thread.

        Returns False, without starting anything, when the device cannot be
        initialised.
        """
        if self.is_running:
            return True
        try:
            self.device.begin_ndof()
        except (SensorError, OSError) as exc:
            logger.error("IMU failed to start: %s", exc)
            return False

        self._stop_event = threading.Event()
        self._close_on_exit = False
        self._run_finished = False
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name=f"{self.plugin_id}-poller",
            daemon=True,
        )
        self._thread.start()
        logger.info("Polling IMU every %d ms", self.period_ms)
        return True

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the timer and release the device. Safe to call repeatedly."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        with self._close_lock:
            if not self._run_finished:
                # A tick is still using the device; the thread closes it on exit.
                logger.warning("IMU tick still running after stop, deferring device close")
                self._close_on_exit = True
                return
        self.device.close()

    def _run(self, stop_event: threading.Event) -> None:
        period_ns = int(self.period_ms * 1_000_000)
        controller = monotonic_controller(self.period_ms)
        target_next = next(controller)
        while True:
            wait_s = (target_next - time.monotonic_ns()) / 1e9
            if stop_event.wait(max(0.0, wait_s)):
                break
            try:
                self.tick()
            except Exception:
                logger.exception("Unexpected error while handling IMU tick")

            target_next = next(controller)
            behind_ns = time.monotonic_ns() - target_next
            if behind_ns >= 0:
                missed = behind_ns // period_ns + 1
                self.overruns += missed
                logger.debug("IMU tick overran, skipping %d slot(s) (total=%d)", missed, self.overruns)
                for _ in range(missed):
                    target_next = next(controller)
        with self._close_lock:
            self._run_finished = True
            close, self._close_on_exit = self._close_on_exit, False
        if close:
            self.device.close()

    def read_measurement(self) -> Measurement:
        """Run all five reads for one tick. Raises :class:`SensorError` on the first failure."""
        step = "calibration status"
        try:
            calibration = self.calibration.check(self.device)
            step = "temperature"
            temperature = self.device.temperature()
            step = "euler angles"
            euler = self.device.euler()
            step = "linear acceleration"
            laccel = self.device.linear_acceleration()
            step = "gyroscope"
            gyro = self.device.gyroscope()
        except (SensorError, OSError) as exc:
            raise SensorError(f"{step}: {exc}") from exc
        return Measurement.from_readings(calibration, temperature, euler, laccel, gyro)

    def tick(self) -> Optional[Delta]:
        """Read the sensor once and publish the result.

        Returns the published delta, or None when a read failed.
        """
        self.ticks += 1
        with self.timer.measure():
            try:
                measurement = self.read_measurement()
            except SensorError as exc:
                logger.error("Failed to read IMU (tick %d): %s", self.ticks, exc)
                return None
            self.last_measurement = measurement
            delta = Delta.for_measurement(measurement, self_id=self.self_id, label=self.plugin_id)
            self.sink.handle_message(self.plugin_id, delta.to_dict())
        return delta
