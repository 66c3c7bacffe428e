"""Trace demo services."""

from .config import Settings, Variant, load_settings
from .faults import FaultInjector
from .telemetry import Telemetry, TelemetryError, init_telemetry

__all__ = [
    # Configuration
    "Settings",
    "Variant",
    "load_settings",
    # Components
    "FaultInjector",
    "Telemetry",
    "TelemetryError",
    "init_telemetry",
]
