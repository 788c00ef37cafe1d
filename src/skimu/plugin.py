"""
Host-facing plugin object.

The host creates one :class:`ImuPlugin` per app, reads ``id``, ``name``,
``schema`` and ``ui_schema`` to render its settings page, then calls
``start(options)`` with the saved options and ``stop()`` on shutdown or when
the options change.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from .config import PLUGIN_SCHEMA, UI_SCHEMA, config_from_mapping
from .config.schema import PLUGIN_DESCRIPTION, PLUGIN_ID, PLUGIN_NAME
from .core.poller import SensorPoller
from .sensors import ImuDevice, open_device

logger = logging.getLogger(__name__)

DeviceFactory = Callable[..., ImuDevice]


class HostApp(Protocol):
    self_id: str

    def handle_message(self, plugin_id: str, delta: Dict[str, Any]) -> None:  # pragma: no cover - protocol
        ...


class ImuPlugin:
    id = PLUGIN_ID
    name = PLUGIN_NAME
    description = PLUGIN_DESCRIPTION
    schema = PLUGIN_SCHEMA
    ui_schema = UI_SCHEMA

    def __init__(self, app: HostApp, *, device_factory: DeviceFactory = open_device) -> None:
        self.app = app
        self.device_factory = device_factory
        self.poller: Optional[SensorPoller] = None

    def start(self, options: Mapping[str, Any] | None = None) -> bool:
        """Open the sensor and begin polling. Returns False if the sensor failed to start."""
        if self.poller is not None:
            self.stop()

        config = config_from_mapping(options)
        self_id = getattr(self.app, "self_id", None) or config.self_id
        device = self.device_factory(
            config.i2c_bus,
            config.i2c_address,
            force_fake=config.force_fake,
        )
        self.poller = SensorPoller(
            device,
            self.app,
            plugin_id=self.id,
            self_id=self_id,
            period_ms=config.motion_period_ms,
        )
        return self.poller.start()

    def stop(self) -> None:
        poller, self.poller = self.poller, None
        if poller is not None:
            poller.stop()
