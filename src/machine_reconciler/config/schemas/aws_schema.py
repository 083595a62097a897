"""AWS provider configuration schema."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AWSProviderConfig(BaseModel):
    """Settings used to build the boto3 clients."""

    region: str = Field("us-east-1", description="AWS region")
    profile: Optional[str] = Field(None, description="Named profile from the shared credentials file")
    endpoint_url: Optional[str] = Field(None, description="Custom endpoint URL (e.g. a local stack)")
    request_retry_attempts: int = Field(3, description="Maximum attempts per API request")
    retry_mode: str = Field("standard", description="botocore retry mode")
    connect_timeout_ms: int = Field(10000, description="Connection timeout in milliseconds")
    read_timeout_ms: int = Field(60000, description="Read timeout in milliseconds")
    validate_credentials: bool = Field(
        True, description="Call STS GetCallerIdentity when the client is created"
    )

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate region."""
        if not v or not v.strip():
            raise ValueError("AWS region cannot be empty")
        return v.strip()

    @field_validator("endpoint_url", "profile")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("request_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Retry attempts cannot be negative")
        return v

    @field_validator("retry_mode")
    @classmethod
    def validate_retry_mode(cls, v: str) -> str:
        valid_modes = ["legacy", "standard", "adaptive"]
        if v not in valid_modes:
            raise ValueError(f"Retry mode must be one of {valid_modes}")
        return v

    @field_validator("connect_timeout_ms", "read_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Timeouts must be positive")
        return v
