"""Configuration management module.

This module provides the runtime configuration, default paths and result
data models for the application.

Submodules:
    manager: ConfigurationManager for loading/saving the XML settings file
    schema: Data classes and enums (AppConfig, OperationResult, Frequency, ...)
    paths: AppPaths with Jellyfin data candidates and program folders
    path_validator: Checks that guard the destructive restore step

Settings are stored as XML in <program dir>/configuration.xml.
"""

from .manager import ConfigurationManager
from .schema import (
    AppConfig,
    DestinationChoice,
    ErrorKind,
    Frequency,
    OperationResult,
    ScheduleResult,
    Settings,
    StartOutcome,
    StopOutcome,
    StrategyOutcome,
)
from .paths import AppPaths

__all__ = [
    "ConfigurationManager",
    "AppConfig",
    "DestinationChoice",
    "ErrorKind",
    "Frequency",
    "OperationResult",
    "ScheduleResult",
    "Settings",
    "StartOutcome",
    "StopOutcome",
    "StrategyOutcome",
    "AppPaths",
]
