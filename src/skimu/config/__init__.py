"""Configuration objects and helpers for the IMU plugin.

:mod:`runtime` loads the YAML/host option mapping into a typed
:class:`ImuConfig`; :mod:`schema` holds the JSON schema and display order the
host uses to render the plugin's settings form.
"""

from .runtime import ImuConfig, config_from_mapping, load_config
from .schema import PLUGIN_SCHEMA, UI_SCHEMA

__all__ = [
    "ImuConfig",
    "config_from_mapping",
    "load_config",
    "PLUGIN_SCHEMA",
    "UI_SCHEMA",
]
