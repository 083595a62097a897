"""AWS provider exception hierarchy."""
from typing import List, Optional, Sequence, Tuple

from machine_reconciler.domain.core.exceptions import ValidationError
from machine_reconciler.infrastructure.exceptions import InfrastructureError


class AWSError(InfrastructureError):
    """Raised when an AWS operation fails.

    ``error_code`` holds the provider error code (e.g. ``TargetGroupNotFound``)
    when the failure came back from the API.
    """
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.error_code = error_code
        self.operation = operation


class AWSValidationError(AWSError):
    """Raised when AWS rejects request parameters."""
    pass


class AWSEntityNotFoundError(AWSError):
    """Raised when an AWS resource does not exist."""
    pass


class AWSRateLimitError(AWSError):
    """Raised when AWS throttles a request."""
    pass


class AWSPermissionError(AWSError):
    """Raised when the credentials are not allowed to perform an operation."""
    pass


class AWSInfrastructureError(AWSError):
    """Raised for any other AWS failure."""
    pass


class InstanceNotFoundError(AWSError):
    """Raised when a lookup by id does not return exactly one instance."""
    def __init__(self, message: str, instance_id: str):
        super().__init__(message, details={"instance_id": instance_id})
        self.instance_id = instance_id


class InstanceStateError(AWSError):
    """Raised when an instance exists but is not in an allowed lifecycle state."""
    def __init__(self, instance_id: str, actual_state: str, allowed_states: Sequence[str]):
        super().__init__(
            f"instance {instance_id} state {actual_state!r} is not in {', '.join(allowed_states)}",
            details={"instance_id": instance_id},
        )
        self.instance_id = instance_id
        self.actual_state = actual_state
        self.allowed_states = list(allowed_states)


class MalformedInstanceError(ValidationError):
    """Raised when an instance is missing or lacks fields required by an operation."""
    pass


class InvalidAddressError(ValidationError):
    """Raised when an instance reports an address that is not a valid IP literal."""
    def __init__(self, instance_id: Optional[str], kind: str, address: str):
        super().__init__(
            f"EC2 instance had invalid {kind} address: {instance_id} ({address!r})",
            {"instance_id": instance_id, "address": address},
        )
        self.instance_id = instance_id
        self.address = address


class AggregateError(AWSError):
    """Several independent operations failed; ``failures`` keeps them in order."""
    def __init__(self, failures: Sequence[Tuple[str, Exception]]):
        self.failures: List[Tuple[str, Exception]] = list(failures)
        messages = [f"{label}: {error}" for label, error in self.failures]
        if len(messages) == 1:
            message = messages[0]
        else:
            message = "[" + ", ".join(messages) + "]"
        super().__init__(message)

    @property
    def errors(self) -> List[Exception]:
        return [error for _, error in self.failures]

    def __len__(self) -> int:
        return len(self.failures)


class ErrorCollector:
    """Collects per-item failures of a batch and reports them together."""

    def __init__(self) -> None:
        self._failures: List[Tuple[str, Exception]] = []

    def add(self, label: str, error: Exception) -> None:
        self._failures.append((label, error))

    def __bool__(self) -> bool:
        return bool(self._failures)

    def __len__(self) -> int:
        return len(self._failures)

    def extend(self, error: "AggregateError") -> None:
        self._failures.extend(error.failures)

    def raise_if_any(self) -> None:
        """Raise an AggregateError when at least one failure was collected."""
        if self._failures:
            raise AggregateError(self._failures)
