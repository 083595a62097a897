"""Machine domain - aggregate, condition tracking and value objects."""

from .machine_aggregate import Machine, validate_machine
from .value_objects import (
    ConditionStatus,
    ConditionType,
    MachineProviderCondition,
    NodeAddress,
    NodeAddressType,
)
from .conditions import condition_failed, condition_success, set_provider_condition

__all__ = [
    "Machine",
    "validate_machine",
    "ConditionStatus",
    "ConditionType",
    "MachineProviderCondition",
    "NodeAddress",
    "NodeAddressType",
    "condition_failed",
    "condition_success",
    "set_provider_condition",
]
