"""Logging configuration schema."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..defaults import LogDestination, LogLevel


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    destination: str = Field("stdout", description="Where to write logs: file, stdout or both")
    file_path: Optional[str] = Field(None, description="Log file path, required for file output")
    max_size_mb: int = Field(10, description="Rotate the log file at this size")
    backup_count: int = Field(5, description="Number of rotated files to keep")
    json_format: bool = Field(False, description="Render log lines as JSON instead of key=value pairs")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = [level.value for level in LogLevel]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        """Validate log destination."""
        valid_destinations = [destination.value for destination in LogDestination]
        if v not in valid_destinations:
            raise ValueError(f"Log destination must be one of {valid_destinations}")
        return v

    @field_validator("file_path")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def writes_file(self) -> bool:
        return self.destination in (LogDestination.FILE, LogDestination.BOTH) and self.file_path is not None

    @property
    def writes_stdout(self) -> bool:
        return self.destination in (LogDestination.STDOUT, LogDestination.BOTH)
