"""AWS machine provider spec and status payloads.

The Machine resource carries both as opaque JSON; these models give them a
shape and the helpers below convert between models and raw bytes.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from machine_reconciler.domain.machine.exceptions import ProviderPayloadError
from machine_reconciler.domain.machine.value_objects import MachineProviderCondition
from machine_reconciler.helpers.logger import get_logger

logger = get_logger(__name__)


class _ProviderModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class LoadBalancerType(str, Enum):
    """Load balancer generations a machine can be attached to."""
    CLASSIC = "classic"
    NETWORK = "network"


class LoadBalancerReference(_ProviderModel):
    name: str
    type: LoadBalancerType


class TagSpecification(_ProviderModel):
    name: str
    value: str = ""


class AWSResourceReference(_ProviderModel):
    id: Optional[str] = None
    arn: Optional[str] = None


class AWSMachineProviderConfig(_ProviderModel):
    """Desired configuration of the instance backing a machine."""
    ami: AWSResourceReference = Field(default_factory=AWSResourceReference)
    instance_type: str = ""
    tags: List[TagSpecification] = Field(default_factory=list)
    iam_instance_profile: Optional[AWSResourceReference] = None
    key_name: Optional[str] = None
    subnet: AWSResourceReference = Field(default_factory=AWSResourceReference)
    security_groups: List[AWSResourceReference] = Field(default_factory=list)
    placement_availability_zone: Optional[str] = None
    load_balancers: List[LoadBalancerReference] = Field(default_factory=list)
    user_data_secret: Optional[str] = None


class AWSMachineProviderStatus(_ProviderModel):
    """Observed state of the instance backing a machine."""
    instance_id: Optional[str] = None
    instance_state: Optional[str] = None
    conditions: List[MachineProviderCondition] = Field(default_factory=list)


def raw_extension_from_provider_spec(spec: Optional[AWSMachineProviderConfig]) -> bytes:
    """Marshal the machine provider spec; None yields an empty payload."""
    if spec is None:
        return b""
    return spec.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


def raw_extension_from_provider_status(status: Optional[AWSMachineProviderStatus]) -> bytes:
    """Marshal the machine provider status; None yields an empty payload."""
    if status is None:
        return b""
    return status.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


def provider_spec_from_raw_extension(raw: Optional[bytes]) -> AWSMachineProviderConfig:
    """Unmarshal a raw provider spec; a missing payload yields an empty spec."""
    if not raw:
        return AWSMachineProviderConfig()
    try:
        spec = AWSMachineProviderConfig.model_validate_json(raw)
    except PydanticValidationError as e:
        raise ProviderPayloadError(f"error unmarshalling providerSpec: {e}") from e
    logger.debug("Got provider spec from raw extension", spec=spec.model_dump(exclude_none=True))
    return spec


def provider_status_from_raw_extension(raw: Optional[bytes]) -> AWSMachineProviderStatus:
    """Unmarshal a raw provider status; a missing payload yields an empty status."""
    if not raw:
        return AWSMachineProviderStatus()
    try:
        status = AWSMachineProviderStatus.model_validate_json(raw)
    except PydanticValidationError as e:
        raise ProviderPayloadError(f"error unmarshalling providerStatus: {e}") from e
    logger.debug("Got provider status from raw extension", status=status.model_dump(exclude_none=True))
    return status
