"""Machine domain exceptions."""

from machine_reconciler.domain.core.exceptions import DomainException, ValidationError


class MachineException(DomainException):
    """Base exception for machine domain errors."""


class MachineValidationError(ValidationError):
    """Raised when a Machine is not configured well enough to be reconciled."""

    def __init__(self, machine_name: str, message: str):
        super().__init__(f"{machine_name}: {message}", {"machine": machine_name})
        self.machine_name = machine_name


class InvalidTagError(ValidationError):
    """Raised when a user-supplied tag fails validation."""

    def __init__(self, key: str, value: str, reason: str):
        super().__init__(f"invalid tag ({key}:{value}): {reason}", {"key": key, "value": value})
        self.key = key
        self.value = value
        self.reason = reason


class ProviderPayloadError(ValidationError):
    """Raised when a provider spec or status payload cannot be (de)serialized."""
