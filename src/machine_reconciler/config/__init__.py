"""Configuration package - schemas, defaults and loading."""

from .manager import ConfigurationManager
from .schemas import AppConfig, AWSProviderConfig, LoggingConfig, ReconcilerConfig

__all__ = [
    "ConfigurationManager",
    "AppConfig",
    "AWSProviderConfig",
    "LoggingConfig",
    "ReconcilerConfig",
]
