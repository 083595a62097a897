"""AWS provider exceptions."""

from machine_reconciler.providers.aws.exceptions.aws_exceptions import *

__all__: list[str] = [
    "AWSEntityNotFoundError",
    "AWSError",
    "AWSInfrastructureError",
    "AWSPermissionError",
    "AWSRateLimitError",
    "AWSValidationError",
    "AggregateError",
    "ErrorCollector",
    "InstanceNotFoundError",
    "InstanceStateError",
    "InvalidAddressError",
    "MalformedInstanceError",
]
