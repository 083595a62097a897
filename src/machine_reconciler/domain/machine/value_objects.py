"""Machine value objects: provider conditions and node addresses."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConditionType(str, Enum):
    """Condition types tracked on the provider status."""
    MACHINE_CREATION = "MachineCreation"


class ConditionStatus(str, Enum):
    """Condition status values."""
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ConditionReason(str, Enum):
    """Reasons used by the canned machine-creation conditions."""
    MACHINE_CREATION_SUCCEEDED = "MachineCreationSucceeded"
    MACHINE_CREATION_FAILED = "MachineCreationFailed"


class MachineProviderCondition(BaseModel):
    """A timestamped outcome record kept in the provider status."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    type: ConditionType
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_probe_time: Optional[datetime] = Field(None, description="Last time the condition was probed")
    last_transition_time: Optional[datetime] = Field(
        None, description="Last time the condition status changed"
    )


class NodeAddressType(str, Enum):
    """Node address classification."""
    HOSTNAME = "Hostname"
    INTERNAL_IP = "InternalIP"
    EXTERNAL_IP = "ExternalIP"
    INTERNAL_DNS = "InternalDNS"
    EXTERNAL_DNS = "ExternalDNS"


@dataclass(frozen=True)
class NodeAddress:
    type: NodeAddressType
    address: str

    def __str__(self) -> str:
        return f"{self.type.value}={self.address}"

    def to_dict(self) -> dict:
        return {"type": self.type.value, "address": self.address}
