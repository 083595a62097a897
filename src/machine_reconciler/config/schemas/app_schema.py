"""Main application configuration schema."""
from typing import Any, Dict

from pydantic import BaseModel, Field

from .aws_schema import AWSProviderConfig
from .logging_schema import LoggingConfig
from .reconciler_schema import ReconcilerConfig


class AppConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0.0", description="Configuration version")
    aws: AWSProviderConfig = Field(default_factory=AWSProviderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reconciler: ReconcilerConfig = Field(default_factory=ReconcilerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        return cls.model_validate(data)
