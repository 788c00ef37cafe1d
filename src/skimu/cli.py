"""
Standalone runner for the IMU plugin.

Runs the plugin outside a host: every delta is written to stdout as one JSON
line, logging goes to stderr.

Examples
--------
# List BNO055 devices on bus 0 and 1
skimu --list

# Poll every 200 ms for 10 s
skimu --motion-period 200 --duration 10

# Desktop without hardware
skimu --fake --self-id urn:mrn:imo:mmsi:230099999

Configuration via YAML
----------------------
Defaults are read from ``--config`` or, when omitted, from ``skimu.yaml`` in
the working directory if present. Keys use the host's option names, either at
the top level or under an ``imu:`` section::

    imu:
      motionPeriod: 500
      i2cBus: 1
      i2cAddress: "0x29"

Explicit command-line options override the file.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .config import ImuConfig, load_config
from .plugin import ImuPlugin

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "skimu.yaml"


class StdoutHost:
    """Minimal host that prints each delta as a JSON line."""

    def __init__(self, self_id: str, stream=None) -> None:
        self.self_id = self_id
        self.stream = stream or sys.stdout
        self.messages = 0

    def handle_message(self, plugin_id: str, delta: Dict[str, Any]) -> None:
        self.messages += 1
        print(json.dumps(delta, separators=(",", ":")), file=self.stream, flush=True)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="BNO055 IMU source printing Signal K deltas as JSON lines.")
    ap.add_argument("--list", action="store_true", help="List BNO055 devices (0x28/0x29) on bus 0 and 1 and exit")
    ap.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to YAML config file with defaults (falls back to '{DEFAULT_CONFIG_NAME}' in the working directory).",
    )
    ap.add_argument("--motion-period", type=int, default=None, help="Period of motion readings in ms (default 1000)")
    ap.add_argument("--self-id", type=str, default=None, help="Vessel id used in the delta context")
    ap.add_argument("--fake", action="store_true", help="Use the fixed-value fake sensor even if I2C is present")
    ap.add_argument("--i2c-bus", type=int, default=None, help="I2C bus number (default 1)")
    ap.add_argument("--i2c-address", type=lambda s: int(s, 0), default=None, help="I2C address, e.g. 0x28 or 0x29")
    ap.add_argument("--duration", type=float, default=None, help="Stop after this many seconds (optional)")
    ap.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for stderr output",
    )
    return ap


def resolve_config(args: argparse.Namespace, cwd: Optional[Path] = None) -> ImuConfig:
    """Merge YAML defaults with explicit command-line options (CLI wins)."""
    if args.config:
        cfg_path: Optional[Path] = Path(args.config)
    else:
        candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
        cfg_path = candidate if candidate.exists() else None

    cfg = load_config(cfg_path)

    overrides: Dict[str, Any] = {}
    if args.motion_period is not None:
        overrides["motion_period_ms"] = args.motion_period
    if args.self_id:
        overrides["self_id"] = args.self_id
    if args.i2c_bus is not None:
        overrides["i2c_bus"] = args.i2c_bus
    if args.i2c_address is not None:
        overrides["i2c_address"] = args.i2c_address
    if args.fake:
        overrides["force_fake"] = True
    return dataclasses.replace(cfg, **overrides).sanitized()


def list_devices() -> int:
    from .sensors.bno055 import CHIP_ID_VALUE, scan_buses

    print("Scanning I2C buses 0 and 1 for BNO055 (0x28/0x29)...")
    found = scan_buses()
    for bus_id, addr, chip in found:
        tag = "" if chip == CHIP_ID_VALUE else " (not a BNO055)"
        print(f"  Bus {bus_id}: addr 0x{addr:02X} CHIP_ID=0x{chip:02X}{tag}")
    if not found:
        print("  (no 0x28/0x29 detected)")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        return list_devices()

    try:
        cfg = resolve_config(args)
    except (OSError, ValueError) as exc:
        logger.error("Unusable configuration: %s", exc)
        return 2

    host = StdoutHost(cfg.self_id)
    plugin = ImuPlugin(host)

    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        stop_event.set()

    previous = {sig: signal.signal(sig, _handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        if not plugin.start(cfg.to_mapping()):
            return 1
        poller = plugin.poller
        stop_event.wait(args.duration)
    finally:
        plugin.stop()
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    logger.info(
        "Run summary: ticks=%d deltas=%d overruns=%d",
        poller.ticks,
        host.messages,
        poller.overruns,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
