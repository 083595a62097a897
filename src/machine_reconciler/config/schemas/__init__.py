"""Configuration schemas."""

from .app_schema import AppConfig
from .aws_schema import AWSProviderConfig
from .logging_schema import LoggingConfig
from .reconciler_schema import ReconcilerConfig

__all__ = ["AppConfig", "AWSProviderConfig", "LoggingConfig", "ReconcilerConfig"]
