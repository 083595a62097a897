# src/machine_reconciler/config/defaults.py
from enum import Enum
from typing import Any, Dict


class LogLevel(str, Enum):
    """Log level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogDestination(str, Enum):
    """Log destination enumeration."""
    FILE = "file"
    STDOUT = "stdout"
    BOTH = "both"


# Prefix of environment variables overriding single configuration keys,
# e.g. MACHINE_RECONCILER_AWS__REGION=eu-west-1
ENV_OVERRIDE_PREFIX = "MACHINE_RECONCILER_"

DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",

    # AWS client configuration
    "aws": {
        "region": "${AWS_REGION:us-east-1}",
        "profile": "${AWS_PROFILE:}",
        "endpoint_url": "${AWS_ENDPOINT_URL:}",
        "request_retry_attempts": 3,
        "retry_mode": "standard",
        "connect_timeout_ms": 10000,
        "read_timeout_ms": 60000,
        "validate_credentials": True,
    },

    # Logging configuration
    "logging": {
        "level": "${LOG_LEVEL:INFO}",
        "destination": "${LOG_DESTINATION:stdout}",
        "file_path": "${LOG_FILE:}",
        "max_size_mb": 10,
        "backup_count": 5,
        "json_format": "${LOG_JSON:false}",
    },

    # Reconciliation helpers
    "reconciler": {
        "node_dns_domains": "${NODE_DNS_DOMAINS:}",
    },
}
