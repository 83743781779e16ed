"""
Configuration module.

Typed defaults, YAML overrides and validation for timings, remote endpoints,
platform metadata and storage location.
"""
from .defaults import (
    EndpointParams,
    LoggingParams,
    PlatformParams,
    Settings,
    StorageParams,
    TimingParams,
    get_default_settings,
)
from .loader import ConfigLoader, load_settings

__all__ = [
    "ConfigLoader",
    "EndpointParams",
    "LoggingParams",
    "PlatformParams",
    "Settings",
    "StorageParams",
    "TimingParams",
    "get_default_settings",
    "load_settings",
]
